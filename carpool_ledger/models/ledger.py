"""
Core Data Models for Carpool Ledger

These models define the schemas of the four collections kept in the ledger
document (cars, people, trips, adjustments) and of the read-only views
derived from them.

DESIGN DECISION: Records are serialized with camelCase keys (fuelType,
driverId, passengerIds, createdAt ...) so the persisted document keeps the
same shape regardless of which client wrote it. Python code uses the
snake_case attribute names.

Models are deliberately lenient when loading: blank names or dangling ids
are accepted here and rejected only by the mutators, because a stored
document must always load.
"""

import math
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


def new_id() -> str:
    """Generate a fresh record identifier."""
    return uuid4().hex


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_finite_number(value: Any) -> Optional[float]:
    """
    Convert a loosely typed value to a finite float.

    Returns None for booleans, None, non-numeric strings, NaN and infinities.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(number):
        return None
    return number


# =============================================================================
# ENUMS
# =============================================================================

class FuelType(str, Enum):
    """Fuel a car runs on. Informational only, never used in pricing."""
    PETROL = "petrol"
    DIESEL = "diesel"
    CNG = "cng"
    ELECTRIC = "electric"
    HYBRID = "hybrid"


# =============================================================================
# LEDGER RECORDS
# =============================================================================

class LedgerRecord(BaseModel):
    """Base for every persisted record: camelCase on the wire, stripped strings."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    id: str = Field(
        default_factory=new_id,
        description="Unique, immutable identifier"
    )


class Car(LedgerRecord):
    """A shared car. Deleting one removes its trips and rate entries."""

    name: str = Field(
        ...,
        max_length=100,
        description="Display name of the car"
    )
    fuel_type: FuelType = Field(
        ...,
        description="Fuel type"
    )


class Person(LedgerRecord):
    """
    Someone who drives or rides.

    `rates` maps car id -> amount charged each time this person rides as a
    passenger in that car. The mutators keep one entry per existing car.
    """

    name: str = Field(
        ...,
        max_length=100,
        description="Display name of the person"
    )
    rates: dict[str, float] = Field(
        default_factory=dict,
        description="Per-car passenger rate"
    )

    @field_validator('rates', mode='before')
    @classmethod
    def coerce_rates(cls, v: Any) -> dict:
        """Non-numeric rate values load as 0 instead of failing the document."""
        if not isinstance(v, dict):
            return {}
        coerced = {}
        for car_id, raw in v.items():
            number = to_finite_number(raw)
            coerced[str(car_id)] = number if number is not None else 0.0
        return coerced


class Trip(LedgerRecord):
    """One drive: a car, its driver and the passengers who rode along."""

    date: str = Field(
        ...,
        description="ISO date (YYYY-MM-DD) of the trip"
    )
    car_id: str
    driver_id: str
    passenger_ids: list[str] = Field(
        default_factory=list,
        description="Passengers in selection order, driver excluded"
    )

    @field_validator('passenger_ids', mode='before')
    @classmethod
    def default_passengers(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, list):
            return [pid for pid in v if pid is not None]
        return v


class Adjustment(LedgerRecord):
    """
    A manual correction to one (car, person) balance.

    Positive amounts add to what the person owes, negative amounts are a
    credit. Adjustments are never edited, only added or removed.
    """

    car_id: str
    person_id: str
    amount: float = Field(
        ...,
        description="Signed amount"
    )
    note: str = Field(
        default="",
        max_length=500,
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        description="When the adjustment was recorded (UTC)"
    )

    @field_validator('note', mode='before')
    @classmethod
    def default_note(cls, v: Any) -> Any:
        return "" if v is None else v


class LedgerState(BaseModel):
    """
    The whole ledger document.

    This is the single state handle passed to every mutator, the balance
    engine and the query layer.
    """
    model_config = ConfigDict(populate_by_name=True)

    cars: list[Car] = Field(default_factory=list)
    people: list[Person] = Field(default_factory=list)
    trips: list[Trip] = Field(default_factory=list)
    adjustments: list[Adjustment] = Field(
        default_factory=list,
        description="Most recent first"
    )

    @model_validator(mode='before')
    @classmethod
    def default_collections(cls, data: Any) -> Any:
        """Missing, null or non-list collections become empty lists."""
        if not isinstance(data, dict):
            return data
        cleaned = dict(data)
        for key in ("cars", "people", "trips", "adjustments"):
            if not isinstance(cleaned.get(key), list):
                cleaned[key] = []
        return cleaned

    @classmethod
    def from_document(cls, document: dict) -> tuple["LedgerState", list[tuple[str, int, str]]]:
        """
        Build a ledger from a stored document one record at a time.

        A record that fails validation is dropped; the rest of the document
        still loads.

        Returns:
            The ledger and a (collection, index, error) entry per dropped record
        """
        models = {"cars": Car, "people": Person, "trips": Trip, "adjustments": Adjustment}
        collections = {}
        dropped = []

        for key, model in models.items():
            raw = document.get(key)
            records = []
            for index, item in enumerate(raw if isinstance(raw, list) else []):
                try:
                    records.append(model.model_validate(item))
                except ValueError as e:
                    dropped.append((key, index, str(e)))
            collections[key] = records

        return cls(**collections), dropped

    def get_car(self, car_id: Optional[str]) -> Optional[Car]:
        return next((car for car in self.cars if car.id == car_id), None)

    def get_person(self, person_id: Optional[str]) -> Optional[Person]:
        return next((p for p in self.people if p.id == person_id), None)

    def to_document(self) -> dict:
        """Serialize to the persisted JSON shape."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# VIEW MODELS (derived, never persisted)
# =============================================================================

class BalanceEntry(BaseModel):
    """One (car, person) balance as shown in listings."""

    car_id: str
    person_id: str
    amount: float = Field(
        ...,
        description="Positive = owes the car's pool, negative = is owed"
    )
    car_name: str
    person_name: str

    @property
    def owes(self) -> bool:
        return self.amount > 0


class TripView(BaseModel):
    """A trip with its references resolved to names."""

    trip_id: str
    date: str
    car_id: str
    car_name: str
    car_known: bool
    driver_name: str
    passenger_names: list[str] = Field(default_factory=list)


class AdjustmentView(BaseModel):
    """An adjustment with its references resolved to names."""

    adjustment_id: str
    car_name: Optional[str] = None
    person_name: str
    amount: float
    note: str = ""
    created_at: Optional[datetime] = None

    @property
    def direction(self) -> str:
        """'due' when the adjustment adds to the balance, 'credit' otherwise."""
        return "due" if self.amount > 0 else "credit"


class CalendarDay(BaseModel):
    """One cell of a six-week, Sunday-first month grid."""

    calendar_date: date
    day: int = Field(ge=1, le=31)
    other_month: bool = False
    is_today: bool = False
    trip_count: int = Field(default=0, ge=0)

    @property
    def has_trip(self) -> bool:
        return self.trip_count > 0
