"""
Balance Engine

Turns the ledger state into a dense car -> person -> amount matrix.

A positive amount means the person owes that car's pool, a negative amount
means the pool owes them. The computation is a plain sum over trips and
adjustments: it is recomputed from scratch on every call, nothing is cached,
and the order in which trips and adjustments are stored does not matter.

GUARANTEES:
- every existing (car, person) pair has an entry, 0 when untouched
- records pointing at deleted cars or people contribute nothing
- a driver never pays for their own trip
- bad rate values (missing, negative, non-numeric) count as 0
"""

from typing import Any

from carpool_ledger.models.ledger import LedgerState, to_finite_number


Balances = dict[str, dict[str, float]]


def rate_value(raw: Any) -> float:
    """The amount a stored rate contributes per ride: finite and >= 0, else 0."""
    number = to_finite_number(raw)
    if number is None or number < 0:
        return 0.0
    return number


def empty_balances(state: LedgerState) -> Balances:
    """Every car x every person at 0, in state order (car-major)."""
    return {
        car.id: {person.id: 0.0 for person in state.people}
        for car in state.cars
    }


def compute_balances(state: LedgerState) -> Balances:
    """
    Compute the signed balance of every (car, person) pair.

    Args:
        state: The ledger to compute from. It is not modified.

    Returns:
        Mapping car_id -> person_id -> amount, dense over existing records
    """
    balances = empty_balances(state)
    people = {person.id: person for person in state.people}

    for trip in state.trips:
        row = balances.get(trip.car_id)
        if row is None:
            continue

        for pid in trip.passenger_ids:
            if pid == trip.driver_id:
                continue
            passenger = people.get(pid)
            if passenger is None:
                continue
            row[pid] += rate_value(passenger.rates.get(trip.car_id))

    for adjustment in state.adjustments:
        row = balances.get(adjustment.car_id)
        if row is None or adjustment.person_id not in row:
            continue
        row[adjustment.person_id] += to_finite_number(adjustment.amount) or 0.0

    return balances
