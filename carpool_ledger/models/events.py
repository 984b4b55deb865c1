"""
Ledger Event Models

Every mutation, load and save produces a structured event so the local log
tells the whole story of a session.

DESIGN DECISION: Events are log records only. They are written through
structlog and never persisted next to the ledger document; the ledger keeps
no history beyond the adjustment records themselves.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from carpool_ledger.models.ledger import Adjustment, Car, Person, Trip


class LedgerEventType(str, Enum):
    """Types of events we log."""
    # Cars
    CAR_ADDED = "car_added"
    CAR_DELETED = "car_deleted"

    # People and rates
    PERSON_ADDED = "person_added"
    RATE_UPDATED = "rate_updated"

    # Trips
    TRIP_ADDED = "trip_added"
    TRIP_DELETED = "trip_deleted"

    # Adjustments
    ADJUSTMENT_ADDED = "adjustment_added"
    ADJUSTMENT_DELETED = "adjustment_deleted"

    # Whole document
    STATE_RESET = "state_reset"
    STATE_LOADED = "state_loaded"
    LOAD_FALLBACK = "load_fallback"
    RECORD_DROPPED = "record_dropped"
    STATE_SAVED = "state_saved"
    SAVE_FAILED = "save_failed"

    # Input and queries
    VALIDATION_REJECTED = "validation_rejected"
    QUERY_EXECUTED = "query_executed"


class LedgerSeverity(str, Enum):
    """Severity level for ledger events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LedgerEvent(BaseModel):
    """A single ledger event."""

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )
    event_type: LedgerEventType
    severity: LedgerSeverity = LedgerSeverity.INFO

    # What entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'car', 'trip', 'state')"
    )
    entity_id: Optional[str] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class LedgerEventBuilder:
    """
    Helper class to build ledger events with common patterns.

    Usage:
        event = LedgerEventBuilder.car_added(car)
        event = LedgerEventBuilder.save_failed(path, error)
    """

    @staticmethod
    def car_added(car: Car) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.CAR_ADDED,
            entity_type="car",
            entity_id=car.id,
            description=f"Car added: {car.name}",
            details={"fuel_type": car.fuel_type.value},
        )

    @staticmethod
    def car_deleted(car_id: str, trips_removed: int) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.CAR_DELETED,
            entity_type="car",
            entity_id=car_id,
            description=f"Car deleted with {trips_removed} trips",
            details={"trips_removed": trips_removed},
        )

    @staticmethod
    def person_added(person: Person) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.PERSON_ADDED,
            entity_type="person",
            entity_id=person.id,
            description=f"Person added: {person.name}",
        )

    @staticmethod
    def rate_updated(person_id: str, car_id: str, amount: float) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.RATE_UPDATED,
            entity_type="person",
            entity_id=person_id,
            description="Passenger rate updated",
            details={"car_id": car_id, "amount": amount},
        )

    @staticmethod
    def trip_added(trip: Trip) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.TRIP_ADDED,
            entity_type="trip",
            entity_id=trip.id,
            description=f"Trip added on {trip.date}",
            details={
                "car_id": trip.car_id,
                "driver_id": trip.driver_id,
                "passenger_count": len(trip.passenger_ids),
            },
        )

    @staticmethod
    def trip_deleted(trip_id: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.TRIP_DELETED,
            entity_type="trip",
            entity_id=trip_id,
            description="Trip deleted",
        )

    @staticmethod
    def adjustment_added(adjustment: Adjustment) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.ADJUSTMENT_ADDED,
            entity_type="adjustment",
            entity_id=adjustment.id,
            description=f"Adjustment of {adjustment.amount:g} recorded",
            details={
                "car_id": adjustment.car_id,
                "person_id": adjustment.person_id,
                "amount": adjustment.amount,
            },
        )

    @staticmethod
    def adjustment_deleted(adjustment_id: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.ADJUSTMENT_DELETED,
            entity_type="adjustment",
            entity_id=adjustment_id,
            description="Adjustment deleted",
        )

    @staticmethod
    def state_reset() -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.STATE_RESET,
            severity=LedgerSeverity.WARNING,
            entity_type="state",
            description="All cars, people, trips and adjustments removed",
        )

    @staticmethod
    def state_loaded(source: str, counts: dict[str, int]) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.STATE_LOADED,
            entity_type="state",
            description=f"Ledger loaded from {source}",
            details=counts,
        )

    @staticmethod
    def load_fallback(source: str, error_message: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.LOAD_FALLBACK,
            severity=LedgerSeverity.ERROR,
            entity_type="state",
            description=f"Could not load {source}, starting from an empty ledger",
            error_message=error_message,
        )

    @staticmethod
    def record_dropped(source: str, collection: str, index: int, error_message: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.RECORD_DROPPED,
            severity=LedgerSeverity.WARNING,
            entity_type=collection,
            description=f"Skipped invalid record {collection}[{index}] in {source}",
            details={"collection": collection, "index": index},
            error_message=error_message,
        )

    @staticmethod
    def state_saved(destination: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.STATE_SAVED,
            severity=LedgerSeverity.DEBUG,
            entity_type="state",
            description=f"Ledger saved to {destination}",
        )

    @staticmethod
    def save_failed(destination: str, error_message: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.SAVE_FAILED,
            severity=LedgerSeverity.ERROR,
            entity_type="state",
            description=f"Failed to save ledger to {destination}",
            error_message=error_message,
        )

    @staticmethod
    def validation_rejected(operation: str, field: str, message: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.VALIDATION_REJECTED,
            severity=LedgerSeverity.WARNING,
            description=f"{operation} rejected: {message}",
            details={"operation": operation, "field": field},
        )

    @staticmethod
    def query_executed(query: str, result_count: int) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.QUERY_EXECUTED,
            severity=LedgerSeverity.DEBUG,
            entity_type="query",
            description=f"Query {query} returned {result_count} results",
            details={"query": query, "result_count": result_count},
        )
