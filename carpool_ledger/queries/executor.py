"""
Query Executor

Runs the ledger views with the configured display settings (balance
threshold, how many adjustments to list, currency) and logs each query.

The views themselves stay pure functions of the state; this class only
supplies the defaults and the logging.
"""

from typing import Optional

from carpool_ledger.config import get_settings
from carpool_ledger.events import EventLogger
from carpool_ledger.ledger.balances import Balances, compute_balances
from carpool_ledger.models.events import LedgerEventBuilder
from carpool_ledger.models.ledger import (
    Adjustment,
    AdjustmentView,
    BalanceEntry,
    CalendarDay,
    LedgerState,
    Trip,
    TripView,
)
from carpool_ledger.queries import views


class LedgerQueryExecutor:
    """
    Executes read queries against a ledger state.

    Explicit arguments win over settings, which lets tests pin the
    threshold and limit without touching the environment.
    """

    def __init__(
        self,
        balance_threshold: Optional[float] = None,
        adjustments_limit: Optional[int] = None,
        currency: Optional[str] = None,
        event_logger: Optional[EventLogger] = None,
    ):
        if None in (balance_threshold, adjustments_limit, currency):
            ledger_settings = get_settings().ledger
            if balance_threshold is None:
                balance_threshold = ledger_settings.balance_threshold
            if adjustments_limit is None:
                adjustments_limit = ledger_settings.recent_adjustments_limit
            if currency is None:
                currency = ledger_settings.currency

        self.balance_threshold = balance_threshold
        self.adjustments_limit = adjustments_limit
        self.currency = currency
        self._events = event_logger or EventLogger()

    def _logged(self, query: str, results: list) -> list:
        self._events.log(LedgerEventBuilder.query_executed(query, len(results)))
        return results

    def balances(self, state: LedgerState) -> Balances:
        """The full dense balance matrix."""
        return compute_balances(state)

    def list_balances(
        self,
        state: LedgerState,
        person_id: Optional[str] = None,
    ) -> list[BalanceEntry]:
        return self._logged(
            "list_balances",
            views.list_balances(state, person_id, self.balance_threshold),
        )

    def list_trips(self, state: LedgerState, car_id: Optional[str] = None) -> list[Trip]:
        return self._logged("list_trips", views.list_trips(state, car_id))

    def describe_trips(
        self,
        state: LedgerState,
        car_id: Optional[str] = None,
    ) -> list[TripView]:
        return self._logged("describe_trips", views.describe_trips(state, car_id))

    def list_adjustments(
        self,
        state: LedgerState,
        limit: Optional[int] = None,
    ) -> list[Adjustment]:
        limit = self.adjustments_limit if limit is None else limit
        return self._logged("list_adjustments", views.list_adjustments(state, limit))

    def describe_adjustments(
        self,
        state: LedgerState,
        limit: Optional[int] = None,
    ) -> list[AdjustmentView]:
        limit = self.adjustments_limit if limit is None else limit
        return self._logged(
            "describe_adjustments",
            views.describe_adjustments(state, limit),
        )

    def trips_by_date(self, state: LedgerState) -> dict[str, int]:
        return views.trips_by_date(state)

    def calendar_month(self, state: LedgerState, year: int, month: int) -> list[CalendarDay]:
        return views.calendar_month(state, year, month)

    def format_amount(self, value: float) -> str:
        return views.format_currency(value, self.currency)
