"""Reachability test use case: curated (+ blocklist) domains through the prober."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone

import structlog

from adornot.application.orchestrator import BatchProbeOrchestrator, ProgressCallback
from adornot.domain.entities.probing import Domain
from adornot.domain.entities.report import TestMode, TestReport, TestRun
from adornot.domain.ports.blocklist_fetcher import BlocklistFetcherPort

log = structlog.get_logger(__name__)


def unique_by_hostname(domains: Iterable[Domain]) -> list[Domain]:
    """Drop later duplicates of a hostname, keeping input order."""
    seen: dict[str, Domain] = {}
    for domain in domains:
        seen.setdefault(domain.hostname, domain)
    return list(seen.values())


class ReachabilityTestUseCase:
    """Runs one reachability test and produces a finalized report.

    Flow:
        1. (pihole mode) Fetch blocklist domains; failures propagate.
        2. Merge with curated domains, unique by hostname.
        3. Probe through the orchestrator.
        4. Finalize scores into a TestReport.
    """

    def __init__(
        self,
        orchestrator: BatchProbeOrchestrator,
        *,
        blocklist_fetcher: BlocklistFetcherPort | None = None,
    ) -> None:
        self.orchestrator = orchestrator
        self.blocklist_fetcher = blocklist_fetcher

    async def _collect_domains(
        self,
        curated: Sequence[Domain],
        mode: TestMode,
        sample_size: int | None,
    ) -> list[Domain]:
        if mode != "pihole":
            return unique_by_hostname(curated)
        if self.blocklist_fetcher is None:
            raise ValueError("pihole mode requires a blocklist fetcher")
        extra = await self.blocklist_fetcher.fetch_domains(sample_size)
        return unique_by_hostname([*curated, *extra])

    async def execute(
        self,
        curated: Sequence[Domain],
        *,
        mode: TestMode = "standard",
        sample_size: int | None = None,
        on_progress: ProgressCallback | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> TestReport:
        """Execute the test.

        Raises:
            BlocklistFetchError: Blocklist fetch failed (pihole mode only).
        """
        started_at = datetime.now(timezone.utc)
        t0 = time.monotonic()

        domains = await self._collect_domains(curated, mode, sample_size)

        cancelled = cancel_event is not None and cancel_event.is_set()
        outcomes = []
        if not cancelled:
            outcomes = await self.orchestrator.run(
                domains,
                on_progress=on_progress,
                cancel_event=cancel_event,
            )
            cancelled = cancel_event is not None and cancel_event.is_set()

        run = TestRun(outcomes=list(outcomes))
        run.finalize()
        duration = time.monotonic() - t0

        log.info(
            "reachability_test_finished",
            mode=mode,
            total=run.total,
            blocked=run.blocked_count,
            score=round(run.overall_score, 1),
            cancelled=cancelled,
            duration_s=round(duration, 2),
        )
        return TestReport(
            run=run,
            mode=mode,
            started_at=started_at,
            duration_seconds=duration,
            cancelled=cancelled,
        )
