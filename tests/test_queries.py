"""Tests for the ledger views and the query executor."""

import pytest
from datetime import date

from carpool_ledger.ledger import add_adjustment, add_car, add_person, add_trip, delete_car, set_rate
from carpool_ledger.models import LedgerEventType, Trip
from carpool_ledger.queries.views import CALENDAR_CELLS
from carpool_ledger.queries import (
    LedgerQueryExecutor,
    calendar_month,
    describe_adjustments,
    describe_trips,
    format_currency,
    format_date,
    list_adjustments,
    list_balances,
    list_trips,
    trips_by_date,
)


class TestListBalances:
    """Tests for list_balances."""

    def test_sedan_scenario(self, sedan_state):
        """Test that only Alice shows up, and zero balances are hidden."""
        entries = list_balances(sedan_state)
        assert len(entries) == 1
        assert entries[0].person_name == "Alice"
        assert entries[0].car_name == "Sedan"
        assert entries[0].amount == 100
        assert entries[0].owes is True

    def test_threshold_suppresses_small_amounts(self, sedan_state):
        """Test that |amount| below the threshold is hidden."""
        sedan = sedan_state.cars[0]
        bob = sedan_state.people[1]
        add_adjustment(sedan_state, sedan.id, bob.id, 0.4)
        assert [e.person_name for e in list_balances(sedan_state)] == ["Alice"]

        add_adjustment(sedan_state, sedan.id, bob.id, 0.1)
        names = [e.person_name for e in list_balances(sedan_state)]
        assert names == ["Alice", "Bob"]

    def test_credits_are_listed(self, sedan_state):
        """Test that negative balances are shown and sorted by magnitude."""
        sedan = sedan_state.cars[0]
        bob = sedan_state.people[1]
        add_adjustment(sedan_state, sedan.id, bob.id, -300)
        entries = list_balances(sedan_state)
        assert [(e.person_name, e.amount) for e in entries] == [("Bob", -300), ("Alice", 100)]
        assert entries[0].owes is False

    def test_ties_keep_car_then_person_order(self, sedan_state):
        """Test that equal magnitudes keep encounter order."""
        sedan = sedan_state.cars[0]
        alice, bob = sedan_state.people
        hatch = add_car(sedan_state, "Hatch", "cng")
        add_adjustment(sedan_state, sedan.id, bob.id, -100)
        add_adjustment(sedan_state, hatch.id, alice.id, 100)
        entries = list_balances(sedan_state)
        assert [(e.car_name, e.person_name) for e in entries] == [
            ("Sedan", "Alice"),
            ("Sedan", "Bob"),
            ("Hatch", "Alice"),
        ]

    def test_person_filter(self, sedan_state):
        """Test filtering by person."""
        sedan = sedan_state.cars[0]
        bob = sedan_state.people[1]
        add_adjustment(sedan_state, sedan.id, bob.id, 20)
        entries = list_balances(sedan_state, person_id=bob.id)
        assert [e.person_name for e in entries] == ["Bob"]

    def test_unknown_person_filter(self, sedan_state):
        """Test that an unknown person gets an empty list."""
        assert list_balances(sedan_state, person_id="missing") == []

    def test_custom_threshold(self, sedan_state):
        """Test a larger threshold."""
        assert list_balances(sedan_state, threshold=150) == []


class TestTrips:
    """Tests for trip listings."""

    def test_newest_first(self, sedan_state):
        """Test that trips come out by date, newest first."""
        sedan = sedan_state.cars[0]
        alice, bob = sedan_state.people
        add_trip(sedan_state, "2024-03-01", sedan.id, alice.id, [bob.id])
        add_trip(sedan_state, "2023-12-31", sedan.id, alice.id)
        dates = [trip.date for trip in list_trips(sedan_state)]
        assert dates == ["2024-03-01", "2024-01-05", "2023-12-31"]

    def test_same_date_latest_added_first(self, sedan_state):
        """Test the tie order for trips on the same date."""
        sedan = sedan_state.cars[0]
        alice, bob = sedan_state.people
        second = add_trip(sedan_state, "2024-01-05", sedan.id, alice.id, [bob.id])
        third = add_trip(sedan_state, "2024-01-05", sedan.id, bob.id)
        first = sedan_state.trips[0]
        assert [t.id for t in list_trips(sedan_state)] == [third.id, second.id, first.id]

    def test_car_filter(self, sedan_state):
        """Test filtering trips by car."""
        hatch = add_car(sedan_state, "Hatch", "diesel")
        alice = sedan_state.people[0]
        trip = add_trip(sedan_state, "2024-01-02", hatch.id, alice.id)
        assert list_trips(sedan_state, hatch.id) == [trip]
        assert list_trips(sedan_state, "missing") == []

    def test_describe_trips_resolves_names(self, sedan_state):
        """Test name resolution in trip views."""
        view = describe_trips(sedan_state)[0]
        assert view.car_name == "Sedan"
        assert view.car_known is True
        assert view.driver_name == "Bob"
        assert view.passenger_names == ["Alice"]

    def test_describe_trips_unknown_refs(self, sedan_state):
        """Test placeholders for deleted cars and people."""
        alice = sedan_state.people[0]
        sedan_state.trips.append(Trip(
            date="2024-02-01", car_id="gone", driver_id="ghost",
            passenger_ids=["ghost", alice.id],
        ))
        view = describe_trips(sedan_state)[0]
        assert view.car_name == "Unknown car"
        assert view.car_known is False
        assert view.driver_name == "Unknown"
        assert view.passenger_names == ["Alice"]

    def test_trips_by_date(self, sedan_state):
        """Test per-day trip counts."""
        sedan = sedan_state.cars[0]
        alice, bob = sedan_state.people
        add_trip(sedan_state, "2024-01-05", sedan.id, alice.id, [bob.id])
        add_trip(sedan_state, "2024-01-06", sedan.id, alice.id)
        assert trips_by_date(sedan_state) == {"2024-01-05": 2, "2024-01-06": 1}

    def test_trips_by_date_skips_missing_dates(self, state):
        """Test that trips without a date are not counted."""
        state.trips.append(Trip(date="", car_id="c", driver_id="p"))
        assert trips_by_date(state) == {}


class TestCalendarMonth:
    """Tests for the month grid."""

    def test_grid_shape(self, state):
        """Test that January 2024 starts on Sunday 31 Dec 2023."""
        days = calendar_month(state, 2024, 1, today=date(2024, 1, 10))
        assert len(days) == CALENDAR_CELLS
        assert days[0].calendar_date == date(2023, 12, 31)
        assert days[0].other_month is True
        assert days[1].calendar_date == date(2024, 1, 1)
        assert days[1].other_month is False
        assert days[-1].calendar_date == date(2024, 2, 10)
        assert all(day.calendar_date.weekday() == 6 for day in days[::7])

    def test_month_starting_on_sunday(self, state):
        """Test a month whose first day is a Sunday has no leading days."""
        days = calendar_month(state, 2023, 10, today=date(2000, 1, 1))
        assert days[0].calendar_date == date(2023, 10, 1)
        assert days[0].other_month is False

    def test_today_and_trip_counts(self, sedan_state):
        """Test is_today and trip markers."""
        days = calendar_month(sedan_state, 2024, 1, today=date(2024, 1, 10))
        by_date = {day.calendar_date: day for day in days}
        assert by_date[date(2024, 1, 5)].trip_count == 1
        assert by_date[date(2024, 1, 5)].has_trip is True
        assert by_date[date(2024, 1, 6)].has_trip is False
        assert [day.calendar_date for day in days if day.is_today] == [date(2024, 1, 10)]

    def test_december_rolls_into_january(self, state):
        """Test trailing days from the next year."""
        days = calendar_month(state, 2024, 12, today=date(2024, 12, 1))
        assert days[-1].calendar_date.year == 2025
        assert days[-1].other_month is True


class TestAdjustmentListings:
    """Tests for adjustment listings."""

    def test_limit(self, sedan_state):
        """Test that the listing is capped, newest first."""
        sedan = sedan_state.cars[0]
        alice = sedan_state.people[0]
        added = [add_adjustment(sedan_state, sedan.id, alice.id, i) for i in range(25)]
        recent = list_adjustments(sedan_state)
        assert len(recent) == 20
        assert recent[0] is added[-1]
        assert len(list_adjustments(sedan_state, limit=None)) == 25
        assert list_adjustments(sedan_state, limit=3) == sedan_state.adjustments[:3]

    def test_describe_adjustments_unknown_refs(self, sedan_state):
        """Test placeholders once the car is deleted."""
        sedan = sedan_state.cars[0]
        alice = sedan_state.people[0]
        add_adjustment(sedan_state, sedan.id, alice.id, -40, "cash")
        view = describe_adjustments(sedan_state)[0]
        assert view.car_name == "Sedan"
        assert view.person_name == "Alice"
        assert view.direction == "credit"

        delete_car(sedan_state, sedan.id)
        view = describe_adjustments(sedan_state)[0]
        assert view.car_name is None
        assert view.note == "cash"

    def test_describe_adjustments_unknown_person(self, sedan_state):
        """Test the placeholder for a missing person."""
        sedan = sedan_state.cars[0]
        alice = sedan_state.people[0]
        add_adjustment(sedan_state, sedan.id, alice.id, 10)
        sedan_state.people.remove(alice)
        assert describe_adjustments(sedan_state)[0].person_name == "Unknown person"


class TestFormatting:
    """Tests for amount and date formatting."""

    @pytest.mark.parametrize("value,expected", [
        (1500, "₹1,500"),
        (-40, "-₹40"),
        (0, "₹0"),
        (99.5, "₹100"),
        (1234567.4, "₹1,234,567"),
        (-0.4, "₹0"),
        (10**400, "₹0"),
        (1e30, "₹1,000,000,000,000,000,000,000,000,000,000"),
        ("abc", "₹0"),
        (None, "₹0"),
    ])
    def test_format_currency(self, value, expected):
        """Test rupee formatting with no fraction digits."""
        assert format_currency(value) == expected

    def test_format_currency_other_codes(self):
        """Test known and unknown currency codes."""
        assert format_currency(12, "usd") == "$12"
        assert format_currency(12, "CHF") == "CHF 12"

    @pytest.mark.parametrize("value,expected", [
        ("2024-01-05", "05 Jan 2024"),
        (date(2024, 12, 25), "25 Dec 2024"),
        ("", ""),
        (None, ""),
        ("someday", "someday"),
    ])
    def test_format_date(self, value, expected):
        """Test date formatting."""
        assert format_date(value) == expected


class TestQueryExecutor:
    """Tests for LedgerQueryExecutor."""

    def test_uses_pinned_settings(self, executor, sedan_state):
        """Test that explicit arguments are used."""
        assert executor.balance_threshold == 0.5
        assert executor.adjustments_limit == 20
        assert executor.format_amount(1500) == "₹1,500"

    def test_falls_back_to_settings(self):
        """Test that missing arguments come from settings."""
        executor = LedgerQueryExecutor(balance_threshold=2)
        assert executor.balance_threshold == 2
        assert executor.adjustments_limit == 20
        assert executor.currency == "INR"

    def test_queries_are_logged(self, sedan_state, recording_logger):
        """Test that list queries emit a query event with the result count."""
        executor = LedgerQueryExecutor(0.5, 20, "INR", event_logger=recording_logger)
        executor.list_balances(sedan_state)
        executor.describe_trips(sedan_state)
        events = recording_logger.events
        assert [e.event_type for e in events] == [LedgerEventType.QUERY_EXECUTED] * 2
        assert events[0].details["result_count"] == 1

    def test_adjustment_limit_from_executor(self, sedan_state):
        """Test that the configured limit applies."""
        executor = LedgerQueryExecutor(0.5, 2, "INR")
        sedan = sedan_state.cars[0]
        alice = sedan_state.people[0]
        for amount in (1, 2, 3):
            add_adjustment(sedan_state, sedan.id, alice.id, amount)
        assert len(executor.list_adjustments(sedan_state)) == 2
        assert len(executor.describe_adjustments(sedan_state, limit=3)) == 3

    def test_balances_and_calendar(self, executor, sedan_state):
        """Test the pass-through queries."""
        sedan = sedan_state.cars[0]
        alice = sedan_state.people[0]
        set_rate(sedan_state, alice.id, sedan.id, 120)
        assert executor.balances(sedan_state)[sedan.id][alice.id] == 120
        assert executor.trips_by_date(sedan_state) == {"2024-01-05": 1}
        assert len(executor.calendar_month(sedan_state, 2024, 1)) == CALENDAR_CELLS

    def test_new_person_not_listed(self, executor, sedan_state):
        """Test that a person with no activity has nothing to show."""
        add_person(sedan_state, "Carol")
        assert [e.person_name for e in executor.list_balances(sedan_state)] == ["Alice"]
