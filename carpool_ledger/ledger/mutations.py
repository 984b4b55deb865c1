"""
Ledger Mutators

Every change to the ledger goes through one of these functions. Each takes
the state handle explicitly, validates its input first and only then
touches the state, so a rejected call leaves the ledger exactly as it was.

Cascades:
- deleting a car removes its trips and its entry in every rate table
- adding a car or a person fills the missing rate entries with 0

IMPORTANT: Dangling references (trips or adjustments pointing at records
that no longer exist) are not repaired here. Read paths skip them.
"""

from datetime import date, datetime
from typing import Any, Iterable, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from carpool_ledger.models.ledger import (
    Adjustment,
    Car,
    FuelType,
    LedgerState,
    Person,
    Trip,
    to_finite_number,
)


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class ValidationError(LedgerError):
    """Malformed input to a mutator. The state is left unchanged."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


def _require_text(value: Any, field: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(field, f"{field} is required")
    return str(value).strip()


def _require_amount(value: Any, field: str) -> float:
    number = to_finite_number(value)
    if number is None:
        raise ValidationError(field, f"{field} must be a finite number, got {value!r}")
    return number


def _build(model: type, **fields: Any) -> Any:
    """Construct a record, translating pydantic errors into ValidationError."""
    try:
        return model(**fields)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or model.__name__
        raise ValidationError(field, first.get("msg", str(e)))


def normalize_passengers(
    passenger_ids: Optional[Iterable[str]],
    driver_id: str,
) -> list[str]:
    """Drop blanks, the driver and duplicates, keeping first-seen order."""
    normalized = []
    seen = set()
    for pid in passenger_ids or ():
        if pid is None:
            continue
        pid = str(pid).strip()
        if not pid or pid == driver_id or pid in seen:
            continue
        seen.add(pid)
        normalized.append(pid)
    return normalized


# =============================================================================
# CARS
# =============================================================================

def add_car(state: LedgerState, name: str, fuel_type: Union[FuelType, str]) -> Car:
    """Add a car and give every existing person a 0 rate for it."""
    name = _require_text(name, "name")
    try:
        fuel = FuelType(str(getattr(fuel_type, "value", fuel_type)).strip().lower())
    except ValueError:
        allowed = ", ".join(f.value for f in FuelType)
        raise ValidationError(
            "fuel_type",
            f"Unknown fuel type {fuel_type!r}. Allowed: {allowed}",
        )

    car = _build(Car, name=name, fuel_type=fuel)
    state.cars.append(car)

    for person in state.people:
        person.rates.setdefault(car.id, 0.0)

    return car


def delete_car(state: LedgerState, car_id: str) -> int:
    """
    Remove a car together with its trips and rate entries.

    Deleting an unknown car is a no-op apart from sweeping any stray trips
    or rates still carrying its id.

    Returns:
        Number of trips removed
    """
    state.cars = [car for car in state.cars if car.id != car_id]

    trips_before = len(state.trips)
    state.trips = [trip for trip in state.trips if trip.car_id != car_id]

    for person in state.people:
        person.rates.pop(car_id, None)

    return trips_before - len(state.trips)


# =============================================================================
# PEOPLE AND RATES
# =============================================================================

def add_person(state: LedgerState, name: str) -> Person:
    """Add a person with a 0 rate for every existing car."""
    name = _require_text(name, "name")
    person = _build(
        Person,
        name=name,
        rates={car.id: 0.0 for car in state.cars},
    )
    state.people.append(person)
    return person


def set_rate(state: LedgerState, person_id: str, car_id: str, amount: Any) -> float:
    """
    Set what a person pays per ride in a car.

    Negative values are stored as given; the balance engine counts them as 0.
    """
    value = _require_amount(amount, "amount")

    person = state.get_person(person_id)
    if person is None:
        raise ValidationError("person_id", f"Unknown person: {person_id!r}")
    if state.get_car(car_id) is None:
        raise ValidationError("car_id", f"Unknown car: {car_id!r}")

    person.rates[car_id] = value
    return value


# =============================================================================
# TRIPS
# =============================================================================

def add_trip(
    state: LedgerState,
    trip_date: Union[date, str],
    car_id: str,
    driver_id: str,
    passenger_ids: Optional[Iterable[str]] = None,
) -> Trip:
    """
    Record a trip.

    The date is stored as an ISO string. Car and driver must exist;
    passengers are normalized (driver and duplicates removed) but not
    checked for existence.
    """
    if isinstance(trip_date, datetime):
        date_str = trip_date.date().isoformat()
    elif isinstance(trip_date, date):
        date_str = trip_date.isoformat()
    else:
        raw = _require_text(trip_date, "date")
        try:
            date_str = date.fromisoformat(raw).isoformat()
        except ValueError:
            raise ValidationError("date", f"Not an ISO date: {raw!r}")

    car_id = _require_text(car_id, "car_id")
    driver_id = _require_text(driver_id, "driver_id")

    if state.get_car(car_id) is None:
        raise ValidationError("car_id", f"Unknown car: {car_id!r}")
    if state.get_person(driver_id) is None:
        raise ValidationError("driver_id", f"Unknown driver: {driver_id!r}")

    trip = _build(
        Trip,
        date=date_str,
        car_id=car_id,
        driver_id=driver_id,
        passenger_ids=normalize_passengers(passenger_ids, driver_id),
    )
    state.trips.append(trip)
    return trip


def delete_trip(state: LedgerState, trip_id: str) -> bool:
    """Remove a trip by id. Returns False if it did not exist."""
    before = len(state.trips)
    state.trips = [trip for trip in state.trips if trip.id != trip_id]
    return len(state.trips) != before


# =============================================================================
# ADJUSTMENTS
# =============================================================================

def add_adjustment(
    state: LedgerState,
    car_id: str,
    person_id: str,
    amount: Any,
    note: Optional[str] = "",
) -> Adjustment:
    """
    Record a manual correction, most recent first.

    An amount of 0 is accepted and simply has no effect on balances.
    """
    car_id = _require_text(car_id, "car_id")
    person_id = _require_text(person_id, "person_id")
    value = _require_amount(amount, "amount")

    if state.get_car(car_id) is None:
        raise ValidationError("car_id", f"Unknown car: {car_id!r}")
    if state.get_person(person_id) is None:
        raise ValidationError("person_id", f"Unknown person: {person_id!r}")

    adjustment = _build(
        Adjustment,
        car_id=car_id,
        person_id=person_id,
        amount=value,
        note=(note or "").strip(),
    )
    state.adjustments.insert(0, adjustment)
    return adjustment


def delete_adjustment(state: LedgerState, adjustment_id: str) -> bool:
    """Remove an adjustment by id. Returns False if it did not exist."""
    before = len(state.adjustments)
    state.adjustments = [adj for adj in state.adjustments if adj.id != adjustment_id]
    return len(state.adjustments) != before


def reset_state(state: LedgerState) -> None:
    """Remove every car, person, trip and adjustment."""
    state.cars = []
    state.people = []
    state.trips = []
    state.adjustments = []
