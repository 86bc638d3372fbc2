"""
services/stats_service.py

Responsibility: Aggregates record outcomes into per-run totals and produces
the immutable RunSummary.
Does NOT: make network calls, read configuration, or write log lines.
"""

from __future__ import annotations

from dataclasses import dataclass

from models import OutcomeKind, RecordOutcome


@dataclass(frozen=True)
class RunSummary:
    """Totals across every domain of one run."""

    updated: int = 0
    already_current: int = 0
    missing: int = 0
    failed: int = 0
    elapsed_ms: int = 0

    @property
    def total(self) -> int:
        return self.updated + self.already_current + self.missing + self.failed

    @property
    def has_failures(self) -> bool:
        return self.failed > 0

    def counts(self) -> str:
        """Short form used in per-domain and run summary lines."""
        return (
            f"updated: {self.updated}, already current: {self.already_current}, "
            f"missing: {self.missing}, failed: {self.failed}"
        )


class StatsService:
    """
    Counts outcomes by kind.

    Outcomes arrive from concurrently running domain reconciliations; each
    one is a single counter increment on the event loop thread, so the order
    of contributions does not matter.
    """

    def __init__(self) -> None:
        self._counts = {kind: 0 for kind in OutcomeKind}

    def record(self, outcome: RecordOutcome) -> None:
        """Counts one outcome."""
        self._counts[outcome.kind] += 1

    def record_all(self, outcomes: list[RecordOutcome]) -> None:
        for outcome in outcomes:
            self.record(outcome)

    def summary(self, elapsed_ms: int = 0) -> RunSummary:
        """Returns the totals recorded so far as an immutable RunSummary."""
        return RunSummary(
            updated=self._counts[OutcomeKind.UPDATED],
            already_current=self._counts[OutcomeKind.ALREADY_CURRENT],
            missing=self._counts[OutcomeKind.MISSING],
            failed=self._counts[OutcomeKind.FAILED],
            elapsed_ms=elapsed_ms,
        )

    @staticmethod
    def summarize(outcomes: list[RecordOutcome]) -> RunSummary:
        """Builds a RunSummary for a standalone list of outcomes (e.g. one domain)."""
        stats = StatsService()
        stats.record_all(outcomes)
        return stats.summary()
