"""Event logging package."""

from carpool_ledger.events.logger import EventLogger

__all__ = ["EventLogger"]
