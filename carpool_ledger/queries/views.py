"""
Ledger Views

Read-only shapes of the ledger for display: filtered and sorted balances,
trips and adjustments, the per-day trip counts behind the calendar, and the
amount/date formatting used by the UI.

Nothing here modifies the state, and every function tolerates records that
point at deleted cars or people.
"""

from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Any, Optional, Union

from carpool_ledger.ledger.balances import compute_balances
from carpool_ledger.models.ledger import (
    Adjustment,
    AdjustmentView,
    BalanceEntry,
    CalendarDay,
    LedgerState,
    Trip,
    TripView,
    to_finite_number,
)


DEFAULT_BALANCE_THRESHOLD = 0.5
DEFAULT_ADJUSTMENTS_LIMIT = 20

CALENDAR_CELLS = 42

# Enough digits to hold any finite float as a whole number
_WHOLE_UNITS = Context(prec=400)

CURRENCY_SYMBOLS = {
    "INR": "₹",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
}


# =============================================================================
# BALANCES
# =============================================================================

def list_balances(
    state: LedgerState,
    person_id: Optional[str] = None,
    threshold: float = DEFAULT_BALANCE_THRESHOLD,
) -> list[BalanceEntry]:
    """
    Balances worth showing, largest first.

    Entries with |amount| below the threshold are dropped. Ties keep the
    car-major, then person, order of the state.

    Args:
        state: Ledger to read
        person_id: Only this person's balances (unknown person -> empty list)
        threshold: Smallest absolute amount to keep
    """
    if person_id is not None and state.get_person(person_id) is None:
        return []

    balances = compute_balances(state)
    entries = []

    for car in state.cars:
        row = balances[car.id]
        for person in state.people:
            if person_id is not None and person.id != person_id:
                continue
            amount = row[person.id]
            if abs(amount) < threshold:
                continue
            entries.append(BalanceEntry(
                car_id=car.id,
                person_id=person.id,
                amount=amount,
                car_name=car.name,
                person_name=person.name,
            ))

    # sorted() is stable, so equal magnitudes keep encounter order
    return sorted(entries, key=lambda entry: abs(entry.amount), reverse=True)


# =============================================================================
# TRIPS
# =============================================================================

def list_trips(state: LedgerState, car_id: Optional[str] = None) -> list[Trip]:
    """
    Trips newest first, optionally for one car.

    Trips on the same date come out latest-added first.
    """
    trips = [
        trip for trip in reversed(state.trips)
        if car_id is None or trip.car_id == car_id
    ]
    return sorted(trips, key=lambda trip: trip.date, reverse=True)


def describe_trips(state: LedgerState, car_id: Optional[str] = None) -> list[TripView]:
    """list_trips() with car, driver and passenger names resolved."""
    cars = {car.id: car for car in state.cars}
    people = {person.id: person for person in state.people}

    views = []
    for trip in list_trips(state, car_id):
        car = cars.get(trip.car_id)
        driver = people.get(trip.driver_id)
        views.append(TripView(
            trip_id=trip.id,
            date=trip.date,
            car_id=trip.car_id,
            car_name=car.name if car else "Unknown car",
            car_known=car is not None,
            driver_name=driver.name if driver else "Unknown",
            passenger_names=[
                people[pid].name for pid in trip.passenger_ids if pid in people
            ],
        ))
    return views


def trips_by_date(state: LedgerState) -> dict[str, int]:
    """Number of trips on each ISO date. Trips without a date are skipped."""
    counts: dict[str, int] = {}
    for trip in state.trips:
        if not trip.date:
            continue
        counts[trip.date] = counts.get(trip.date, 0) + 1
    return counts


def calendar_month(
    state: LedgerState,
    year: int,
    month: int,
    today: Optional[date] = None,
) -> list[CalendarDay]:
    """
    Six-week, Sunday-first grid for a month with trip counts per day.

    Leading and trailing days from the neighbouring months are included
    and flagged with other_month.
    """
    first = date(year, month, 1)
    today = today or date.today()
    counts = trips_by_date(state)

    # date.weekday(): Monday=0 ... Sunday=6
    grid_start = first - timedelta(days=(first.weekday() + 1) % 7)

    days = []
    for offset in range(CALENDAR_CELLS):
        day = grid_start + timedelta(days=offset)
        days.append(CalendarDay(
            calendar_date=day,
            day=day.day,
            other_month=day.month != month,
            is_today=day == today,
            trip_count=counts.get(day.isoformat(), 0),
        ))
    return days


# =============================================================================
# ADJUSTMENTS
# =============================================================================

def list_adjustments(
    state: LedgerState,
    limit: Optional[int] = DEFAULT_ADJUSTMENTS_LIMIT,
) -> list[Adjustment]:
    """The most recent adjustments. limit=None returns all of them."""
    if limit is None:
        return list(state.adjustments)
    return state.adjustments[:max(0, limit)]


def describe_adjustments(
    state: LedgerState,
    limit: Optional[int] = DEFAULT_ADJUSTMENTS_LIMIT,
) -> list[AdjustmentView]:
    """list_adjustments() with car and person names resolved."""
    cars = {car.id: car for car in state.cars}
    people = {person.id: person for person in state.people}

    views = []
    for adj in list_adjustments(state, limit):
        car = cars.get(adj.car_id)
        person = people.get(adj.person_id)
        views.append(AdjustmentView(
            adjustment_id=adj.id,
            car_name=car.name if car else None,
            person_name=person.name if person else "Unknown person",
            amount=adj.amount,
            note=adj.note,
            created_at=adj.created_at,
        ))
    return views


# =============================================================================
# FORMATTING
# =============================================================================

def format_currency(value: Any, currency: str = "INR") -> str:
    """
    Format an amount with no fraction digits, e.g. "₹1,500" or "-₹40".

    Non-numeric values format as 0.
    """
    number = to_finite_number(value) or 0.0
    rounded = Decimal(str(abs(number))).quantize(
        Decimal("1"), rounding=ROUND_HALF_UP, context=_WHOLE_UNITS
    )
    symbol = CURRENCY_SYMBOLS.get(currency.upper(), f"{currency.upper()} ")
    sign = "-" if number < 0 and rounded != 0 else ""
    return f"{sign}{symbol}{rounded:,}"


def format_date(value: Union[date, str, None]) -> str:
    """Format a date as "05 Jan 2024". Unparseable strings come back unchanged."""
    if not value:
        return ""
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return value.strftime("%d %b %Y")
    try:
        return date.fromisoformat(str(value)).strftime("%d %b %Y")
    except ValueError:
        return str(value)
