"""
Storage Package

Provides the persistence gateway interface and its implementations.
The JSON file is the real backend; the in-memory one is for tests.
"""

from carpool_ledger.storage.interface import (
    PersistenceError,
    StateStorageInterface,
    StorageError,
)
from carpool_ledger.storage.json_file import JsonFileStateStorage
from carpool_ledger.storage.memory import InMemoryStateStorage

__all__ = [
    # Interface
    "StateStorageInterface",
    # Exceptions
    "PersistenceError",
    "StorageError",
    # Implementations
    "InMemoryStateStorage",
    "JsonFileStateStorage",
]
