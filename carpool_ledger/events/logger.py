"""
Event Logger

DESIGN DECISION: Every mutation, load and save is logged as a structured
event through structlog. Nothing is persisted; the log is the only record
of what happened in a session.
"""

import structlog

from carpool_ledger.models.events import LedgerEvent, LedgerSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class EventLogger:
    """Writes ledger events to the structured local log."""

    def __init__(self, logger_name: str = "carpool_ledger"):
        self._logger = structlog.get_logger(logger_name)

    def log(self, event: LedgerEvent) -> None:
        """Log an event at its own severity."""
        log_dict = event.to_log_dict()

        if event.severity == LedgerSeverity.ERROR:
            self._logger.error("ledger_event", **log_dict)
        elif event.severity == LedgerSeverity.WARNING:
            self._logger.warning("ledger_event", **log_dict)
        elif event.severity == LedgerSeverity.DEBUG:
            self._logger.debug("ledger_event", **log_dict)
        else:
            self._logger.info("ledger_event", **log_dict)
