"""
Data Models Package

This package contains all Pydantic models used in Carpool Ledger.
Everything read from or written to the ledger document goes through them.
"""

from carpool_ledger.models.ledger import (
    Adjustment,
    AdjustmentView,
    BalanceEntry,
    CalendarDay,
    Car,
    FuelType,
    LedgerState,
    Person,
    Trip,
    TripView,
    new_id,
    to_finite_number,
)
from carpool_ledger.models.events import (
    LedgerEvent,
    LedgerEventBuilder,
    LedgerEventType,
    LedgerSeverity,
)

__all__ = [
    # Ledger records
    "Adjustment",
    "Car",
    "FuelType",
    "LedgerState",
    "Person",
    "Trip",
    # Views
    "AdjustmentView",
    "BalanceEntry",
    "CalendarDay",
    "TripView",
    # Helpers
    "new_id",
    "to_finite_number",
    # Events
    "LedgerEvent",
    "LedgerEventBuilder",
    "LedgerEventType",
    "LedgerSeverity",
]
