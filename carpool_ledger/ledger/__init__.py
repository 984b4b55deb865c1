"""Ledger domain package: mutators and the balance engine."""

from carpool_ledger.ledger.balances import (
    Balances,
    compute_balances,
    empty_balances,
    rate_value,
)
from carpool_ledger.ledger.mutations import (
    LedgerError,
    ValidationError,
    add_adjustment,
    add_car,
    add_person,
    add_trip,
    delete_adjustment,
    delete_car,
    delete_trip,
    normalize_passengers,
    reset_state,
    set_rate,
)

__all__ = [
    # Balance engine
    "Balances",
    "compute_balances",
    "empty_balances",
    "rate_value",
    # Exceptions
    "LedgerError",
    "ValidationError",
    # Mutators
    "add_adjustment",
    "add_car",
    "add_person",
    "add_trip",
    "delete_adjustment",
    "delete_car",
    "delete_trip",
    "normalize_passengers",
    "reset_state",
    "set_rate",
]
