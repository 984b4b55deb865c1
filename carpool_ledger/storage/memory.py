"""In-memory storage, used by tests and by sessions that should not touch disk."""

from typing import Optional

from carpool_ledger.models.ledger import LedgerState
from carpool_ledger.storage.interface import StateStorageInterface


class InMemoryStateStorage(StateStorageInterface):
    """
    Keeps the last saved document as a plain dict.

    Storing the serialized form means later edits to a saved state object
    never leak into what load() returns.
    """

    def __init__(self, document: Optional[dict] = None):
        self._document = document
        self.save_count = 0

    @property
    def location(self) -> str:
        return "memory"

    @property
    def document(self) -> Optional[dict]:
        return self._document

    async def load(self) -> LedgerState:
        if not isinstance(self._document, dict):
            return LedgerState()
        state, _ = LedgerState.from_document(self._document)
        return state

    async def save(self, state: LedgerState) -> bool:
        self._document = state.to_document()
        self.save_count += 1
        return True
