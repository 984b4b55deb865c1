"""Query and view package."""

from carpool_ledger.queries.views import (
    calendar_month,
    describe_adjustments,
    describe_trips,
    format_currency,
    format_date,
    list_adjustments,
    list_balances,
    list_trips,
    trips_by_date,
)
from carpool_ledger.queries.executor import LedgerQueryExecutor

__all__ = [
    "LedgerQueryExecutor",
    "calendar_month",
    "describe_adjustments",
    "describe_trips",
    "format_currency",
    "format_date",
    "list_adjustments",
    "list_balances",
    "list_trips",
    "trips_by_date",
]
