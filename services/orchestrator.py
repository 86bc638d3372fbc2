"""
services/orchestrator.py

Responsibility: Runs one DomainReconciler pass per configured domain
concurrently, reports every outcome, and aggregates them into a RunSummary.
Does NOT: load configuration, build provider clients, or choose exit codes.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass

from config import DomainConfig
from models import RecordOutcome
from providers.dns_provider import DNSProvider
from services.log_service import LogService
from services.reconciler import DomainReconciler
from services.stats_service import RunSummary, StatsService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DomainJob:
    """A configured domain paired with the provider client built for it."""

    config: DomainConfig
    provider: DNSProvider


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


class Orchestrator:
    """
    Reconciles all domains of a run.

    Domains are independent: every failure a reconciler can meet is already
    converted into FAILED outcomes for that domain, so one domain's provider
    or resolver problems never stop the others.

    Collaborators:
        - DomainReconciler: per-domain fetch/diff/update
        - StatsService: aggregates outcome counts
        - LogService: receives one entry per outcome and per summary line
    """

    def __init__(
        self,
        reconciler: DomainReconciler,
        stats_service: StatsService,
        log_service: LogService,
    ) -> None:
        self._reconciler = reconciler
        self._stats = stats_service
        self._log = log_service

    async def run(self, jobs: list[DomainJob]) -> RunSummary:
        """
        Reconciles every job concurrently and returns the run's totals.

        Args:
            jobs: One entry per configured domain.

        Returns:
            The RunSummary including the elapsed wall time.
        """
        start = time.monotonic()
        await asyncio.gather(*(self._run_domain(job) for job in jobs))

        summary = self._stats.summary(elapsed_ms=_elapsed_ms(start))
        self._log.log(
            f"processed all: ({summary.counts()}) in {summary.elapsed_ms}ms",
            level="ERROR" if summary.has_failures else "INFO",
        )
        return summary

    async def _run_domain(self, job: DomainJob) -> list[RecordOutcome]:
        start = time.monotonic()
        outcomes = await self._reconciler.reconcile(job.config, job.provider)

        for outcome in outcomes:
            self._stats.record(outcome)
            self._log.outcome(outcome)

        domain_summary = StatsService.summarize(outcomes)
        self._log.log(
            f"processed {job.config.display_name}: ({domain_summary.counts()}) "
            f"in {_elapsed_ms(start)}ms"
        )
        return outcomes
