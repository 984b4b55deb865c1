"""Shared fixtures for the Carpool Ledger tests."""

import pytest

from carpool_ledger.events import EventLogger
from carpool_ledger.ledger import add_car, add_person, add_trip, set_rate
from carpool_ledger.models import FuelType, LedgerState
from carpool_ledger.queries import LedgerQueryExecutor


@pytest.fixture
def state():
    """An empty ledger."""
    return LedgerState()


@pytest.fixture
def sedan_state():
    """
    One petrol Sedan, Alice (rate 100) and Bob (rate 150).
    Bob drove Alice on 2024-01-05.
    """
    ledger = LedgerState()
    sedan = add_car(ledger, "Sedan", FuelType.PETROL)
    alice = add_person(ledger, "Alice")
    bob = add_person(ledger, "Bob")
    set_rate(ledger, alice.id, sedan.id, 100)
    set_rate(ledger, bob.id, sedan.id, 150)
    add_trip(ledger, "2024-01-05", sedan.id, bob.id, [alice.id])
    return ledger


@pytest.fixture
def executor():
    """Query executor pinned to the default display settings."""
    return LedgerQueryExecutor(
        balance_threshold=0.5,
        adjustments_limit=20,
        currency="INR",
    )


class RecordingLogger(EventLogger):
    """EventLogger that keeps the events it was given."""

    def __init__(self):
        super().__init__()
        self.events = []

    def log(self, event):
        self.events.append(event)


@pytest.fixture
def recording_logger():
    """Event logger whose events can be inspected."""
    return RecordingLogger()
