"""
JSON File Storage Implementation

DESIGN DECISION: The ledger lives in a single JSON file because:
1. The data is small (tens of cars and people)
2. Users can open and fix the file by hand
3. No database setup required

TRADEOFFS:
- No locking or transactions: the last writer wins
- Each save rewrites the whole file

File I/O runs in a worker thread so saves can be dispatched from the event
loop without blocking it.
"""

import asyncio
import json
from pathlib import Path
from typing import Optional, Union

from carpool_ledger.config import get_settings
from carpool_ledger.events import EventLogger
from carpool_ledger.models.events import LedgerEventBuilder
from carpool_ledger.models.ledger import LedgerState
from carpool_ledger.storage.interface import (
    PersistenceError,
    StateStorageInterface,
)


class JsonFileStateStorage(StateStorageInterface):
    """
    Stores the ledger document as indented UTF-8 JSON.

    A missing file is created holding the empty document on first load.
    Records that fail validation are skipped one by one and logged.
    """

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        event_logger: Optional[EventLogger] = None,
    ):
        self._path = Path(path or get_settings().storage.data_path)
        self._events = event_logger or EventLogger()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def location(self) -> str:
        return str(self._path)

    async def load(self) -> LedgerState:
        """Load the ledger; any failure yields an empty ledger."""
        return await asyncio.to_thread(self._read)

    async def save(self, state: LedgerState) -> bool:
        """Write the ledger, replacing the file contents."""
        await asyncio.to_thread(self._write, state)
        return True

    def _read(self) -> LedgerState:
        try:
            if not self._path.exists():
                state = LedgerState()
                self._write(state)
                return state

            raw = self._path.read_text(encoding="utf-8")
            document = json.loads(raw or "{}")
            if not isinstance(document, dict):
                raise ValueError(f"Expected a JSON object, got {type(document).__name__}")
            state, dropped = LedgerState.from_document(document)
        except Exception as e:
            # Unreadable file, invalid JSON or not a document: start empty
            self._events.log(LedgerEventBuilder.load_fallback(self.location, str(e)))
            return LedgerState()

        for collection, index, error in dropped:
            self._events.log(
                LedgerEventBuilder.record_dropped(self.location, collection, index, error)
            )

        self._events.log(LedgerEventBuilder.state_loaded(self.location, {
            "cars": len(state.cars),
            "people": len(state.people),
            "trips": len(state.trips),
            "adjustments": len(state.adjustments),
        }))
        return state

    def _write(self, state: LedgerState) -> None:
        try:
            payload = json.dumps(state.to_document(), indent=2, ensure_ascii=False)
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(payload, encoding="utf-8")
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(f"Failed to write {self._path}: {e}")
