"""
services/log_service.py

Responsibility: Records the run's activity stream: one entry per record
outcome plus free-form lines (domain and run summaries). Every entry is
mirrored to Python's standard logging.
Does NOT: count outcomes (see services/stats_service.py) or reconcile records.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from models import OutcomeKind, RecordOutcome

logger = logging.getLogger(__name__)

# Success is INFO, a missing record is a configuration issue (WARNING) and a
# failure is an ERROR, so the three stay distinguishable in the output.
_OUTCOME_LEVELS = {
    OutcomeKind.UPDATED: "INFO",
    OutcomeKind.ALREADY_CURRENT: "INFO",
    OutcomeKind.MISSING: "WARNING",
    OutcomeKind.FAILED: "ERROR",
}


@dataclass(frozen=True)
class LogEntry:
    timestamp: datetime
    level: str
    message: str
    outcome: RecordOutcome | None = None


class LogService:
    """
    In-memory activity log for one run.

    The CLI only needs the mirrored logging output; the retained entries let
    callers (and tests) inspect the event stream after the run.
    """

    def __init__(self) -> None:
        self._entries: list[LogEntry] = []

    # ---------------------------------------------------------------------------
    # Write operations
    # ---------------------------------------------------------------------------

    def log(self, message: str, level: str = "INFO") -> LogEntry:
        """
        Appends a free-form entry and emits it through standard logging.

        Args:
            message: The human-readable log message.
            level: Log severity string ("DEBUG", "INFO", "WARNING", "ERROR").
        """
        return self._append(LogEntry(self._now(), level.upper(), message))

    def outcome(self, outcome: RecordOutcome) -> LogEntry:
        """Appends the line describing one record outcome."""
        level = _OUTCOME_LEVELS[outcome.kind]
        return self._append(LogEntry(self._now(), level, outcome.describe(), outcome))

    # ---------------------------------------------------------------------------
    # Read operations
    # ---------------------------------------------------------------------------

    def outcomes(self) -> list[RecordOutcome]:
        """Returns every reported outcome in reporting order."""
        return [entry.outcome for entry in self._entries if entry.outcome is not None]

    # ---------------------------------------------------------------------------
    # Internal helpers
    # ---------------------------------------------------------------------------

    def _append(self, entry: LogEntry) -> LogEntry:
        self._entries.append(entry)
        logger.log(getattr(logging, entry.level, logging.INFO), entry.message)
        return entry

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)
