"""
Abstract Storage Interface

DESIGN DECISION: The ledger is persisted as one document holding the four
collections. The gateway only has to load and save that document whole,
which allows us to:
1. Keep the JSON file today and swap the backend later
2. Use in-memory storage for testing
3. Keep the engine free of any I/O

Loading never fails: any problem degrades to an empty ledger. Saving may
raise PersistenceError; callers treat saves as best-effort.
"""

from abc import ABC, abstractmethod

from carpool_ledger.models.ledger import LedgerState


class StateStorageInterface(ABC):
    """
    Abstract interface for ledger document storage.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    async def load(self) -> LedgerState:
        """
        Load the full ledger document.

        Returns:
            The stored ledger, or an empty one if nothing usable is stored.
            Never raises.
        """
        pass

    @abstractmethod
    async def save(self, state: LedgerState) -> bool:
        """
        Persist the full ledger document, replacing what was stored.

        Args:
            state: The ledger to write

        Returns:
            True once the document is written

        Raises:
            PersistenceError: If the write fails
        """
        pass

    @property
    @abstractmethod
    def location(self) -> str:
        """Human-readable description of where the document lives."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class PersistenceError(StorageError):
    """The ledger document could not be read or written."""
    pass
