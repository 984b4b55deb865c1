"""
Ledger Session Orchestrator

Ties together the state, the mutators, the balance engine, the query
layer and the persistence gateway.

Flow of a mutation:
1. Validate and apply the change to the in-memory state
2. Log the event
3. Dispatch a save of a snapshot of the state, without waiting for it

DESIGN DECISION: The in-memory state is authoritative. A save that fails
is logged and otherwise ignored; nothing is rolled back and nothing is
retried, the next successful save simply catches up. Saves from one
session are written in the order they were dispatched; concurrent sessions
writing the same file overwrite each other (last write wins).

Inside a running event loop saves become background tasks; flush() waits
for them. Without a loop (plain scripts, Streamlit) the save runs inline,
still swallowing failures.
"""

import asyncio
from datetime import date
from typing import Any, Iterable, Optional, Union

from carpool_ledger.events import EventLogger
from carpool_ledger.ledger import mutations
from carpool_ledger.ledger.balances import Balances
from carpool_ledger.ledger.mutations import ValidationError
from carpool_ledger.models.events import LedgerEventBuilder
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
)
from carpool_ledger.queries import LedgerQueryExecutor
from carpool_ledger.storage import JsonFileStateStorage, StateStorageInterface


class LedgerSession:
    """
    One working copy of the ledger.

    Several sessions can live side by side (tests do this); they share
    nothing but, possibly, the file they save to.
    """

    def __init__(
        self,
        storage: Optional[StateStorageInterface] = None,
        state: Optional[LedgerState] = None,
        query_executor: Optional[LedgerQueryExecutor] = None,
        event_logger: Optional[EventLogger] = None,
    ):
        self._storage = storage
        self._events = event_logger or EventLogger()
        self._queries = query_executor or LedgerQueryExecutor(event_logger=self._events)
        self._pending: set[asyncio.Task] = set()
        self._last_save: Optional[asyncio.Task] = None
        self.state = state or LedgerState()

    @property
    def queries(self) -> LedgerQueryExecutor:
        return self._queries

    @property
    def pending_saves(self) -> int:
        return len(self._pending)

    async def load(self) -> LedgerState:
        """Replace the working copy with what storage holds."""
        if self._storage is not None:
            self.state = await self._storage.load()
        return self.state

    async def flush(self) -> None:
        """Wait for every dispatched save to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    async def _save_quietly(self, snapshot: LedgerState) -> bool:
        try:
            await self._storage.save(snapshot)
        except Exception as e:
            self._events.log(
                LedgerEventBuilder.save_failed(self._storage.location, str(e))
            )
            return False
        self._events.log(LedgerEventBuilder.state_saved(self._storage.location))
        return True

    async def _save_after(
        self,
        previous: Optional[asyncio.Task],
        snapshot: LedgerState,
    ) -> bool:
        # Saves land in dispatch order, so the newest snapshot is written last
        if previous is not None and previous.get_loop() is asyncio.get_running_loop():
            await previous
        return await self._save_quietly(snapshot)

    def _dispatch_save(self) -> None:
        if self._storage is None:
            return

        snapshot = self.state.model_copy(deep=True)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(self._save_quietly(snapshot))
            return

        task = loop.create_task(self._save_after(self._last_save, snapshot))
        self._last_save = task
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    def _apply(self, operation: str, func, *args: Any, **kwargs: Any) -> Any:
        try:
            return func(self.state, *args, **kwargs)
        except ValidationError as e:
            self._events.log(
                LedgerEventBuilder.validation_rejected(operation, e.field, e.message)
            )
            raise

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add_car(self, name: str, fuel_type: Union[FuelType, str]) -> Car:
        car = self._apply("add_car", mutations.add_car, name, fuel_type)
        self._events.log(LedgerEventBuilder.car_added(car))
        self._dispatch_save()
        return car

    def delete_car(self, car_id: str) -> int:
        removed = self._apply("delete_car", mutations.delete_car, car_id)
        self._events.log(LedgerEventBuilder.car_deleted(car_id, removed))
        self._dispatch_save()
        return removed

    def add_person(self, name: str) -> Person:
        person = self._apply("add_person", mutations.add_person, name)
        self._events.log(LedgerEventBuilder.person_added(person))
        self._dispatch_save()
        return person

    def set_rate(self, person_id: str, car_id: str, amount: Any) -> float:
        value = self._apply("set_rate", mutations.set_rate, person_id, car_id, amount)
        self._events.log(LedgerEventBuilder.rate_updated(person_id, car_id, value))
        self._dispatch_save()
        return value

    def add_trip(
        self,
        trip_date: Union[date, str],
        car_id: str,
        driver_id: str,
        passenger_ids: Optional[Iterable[str]] = None,
    ) -> Trip:
        trip = self._apply(
            "add_trip", mutations.add_trip, trip_date, car_id, driver_id, passenger_ids
        )
        self._events.log(LedgerEventBuilder.trip_added(trip))
        self._dispatch_save()
        return trip

    def delete_trip(self, trip_id: str) -> bool:
        removed = self._apply("delete_trip", mutations.delete_trip, trip_id)
        if removed:
            self._events.log(LedgerEventBuilder.trip_deleted(trip_id))
            self._dispatch_save()
        return removed

    def add_adjustment(
        self,
        car_id: str,
        person_id: str,
        amount: Any,
        note: Optional[str] = "",
    ) -> Adjustment:
        adjustment = self._apply(
            "add_adjustment", mutations.add_adjustment, car_id, person_id, amount, note
        )
        self._events.log(LedgerEventBuilder.adjustment_added(adjustment))
        self._dispatch_save()
        return adjustment

    def delete_adjustment(self, adjustment_id: str) -> bool:
        removed = self._apply(
            "delete_adjustment", mutations.delete_adjustment, adjustment_id
        )
        if removed:
            self._events.log(LedgerEventBuilder.adjustment_deleted(adjustment_id))
            self._dispatch_save()
        return removed

    def reset(self) -> None:
        self._apply("reset", mutations.reset_state)
        self._events.log(LedgerEventBuilder.state_reset())
        self._dispatch_save()

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def compute_balances(self) -> Balances:
        return self._queries.balances(self.state)

    def list_balances(self, person_id: Optional[str] = None) -> list[BalanceEntry]:
        return self._queries.list_balances(self.state, person_id)

    def list_trips(self, car_id: Optional[str] = None) -> list[Trip]:
        return self._queries.list_trips(self.state, car_id)

    def describe_trips(self, car_id: Optional[str] = None) -> list[TripView]:
        return self._queries.describe_trips(self.state, car_id)

    def list_adjustments(self, limit: Optional[int] = None) -> list[Adjustment]:
        return self._queries.list_adjustments(self.state, limit)

    def describe_adjustments(self, limit: Optional[int] = None) -> list[AdjustmentView]:
        return self._queries.describe_adjustments(self.state, limit)

    def trips_by_date(self) -> dict[str, int]:
        return self._queries.trips_by_date(self.state)

    def calendar_month(self, year: int, month: int) -> list[CalendarDay]:
        return self._queries.calendar_month(self.state, year, month)


async def open_session(
    data_path: Optional[str] = None,
    storage: Optional[StateStorageInterface] = None,
) -> LedgerSession:
    """
    Factory: create a session over the JSON file (or the given storage)
    and load it.

    Args:
        data_path: Ledger file; defaults to CARPOOL_STORAGE_DATA_PATH
        storage: Use this gateway instead of a JSON file
    """
    event_logger = EventLogger()
    storage = storage or JsonFileStateStorage(data_path, event_logger=event_logger)
    session = LedgerSession(storage=storage, event_logger=event_logger)
    await session.load()
    return session
