"""Chunked, bounded-concurrency batch prober.

Chunks run strictly one after another; every probe inside a chunk runs
concurrently. The coordinating coroutine is the only writer of the
accumulator and the completion counter: child tasks hand their outcome
back through ``asyncio.as_completed``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from typing import TypeVar

import structlog

from adornot.domain.classification import FailureKind, is_blocked
from adornot.domain.entities.probing import Domain, ProbeOutcome, ProbeProgress
from adornot.domain.ports.domain_prober import DomainProberPort

log = structlog.get_logger(__name__)

T = TypeVar("T")

DEFAULT_MAX_CONCURRENCY = 8

ProgressCallback = Callable[[ProbeProgress], None]


def chunked(items: Sequence[T], size: int) -> list[list[T]]:
    """Split *items* into consecutive chunks of *size* (last may be shorter)."""
    if size < 1:
        raise ValueError("chunk size must be >= 1")
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


class BatchProbeOrchestrator:
    """Runs probes for a domain list in sequential chunks.

    Args:
        prober: Single-domain prober (injected).
        max_concurrency: Chunk size, i.e. peak number of in-flight probes.
    """

    def __init__(
        self,
        prober: DomainProberPort,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        self.prober = prober
        self.max_concurrency = max_concurrency

    async def _probe_safely(self, domain: Domain) -> ProbeOutcome:
        try:
            return await self.prober.probe(domain)
        except Exception as exc:  # noqa: BLE001
            log.warning(
                "probe_unexpected_error",
                hostname=domain.hostname,
                error=str(exc),
                exc_info=True,
            )
            return ProbeOutcome(
                domain=domain,
                blocked=is_blocked(FailureKind.UNKNOWN),
                error=str(exc) or type(exc).__name__,
                error_kind=FailureKind.UNKNOWN,
            )

    async def run(
        self,
        domains: Sequence[Domain],
        *,
        on_progress: ProgressCallback | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> list[ProbeOutcome]:
        """Probe every domain and return outcomes in arrival order.

        Within a chunk, arrival order depends on network latency; callers
        must not assume it matches input order.

        Args:
            domains: Domains to probe.
            on_progress: Called synchronously after each completed probe.
            cancel_event: Checked before each chunk; once set, no further
                chunk is launched and the outcomes so far are returned.

        Returns:
            Outcomes in completion order, chunk by chunk.
        """
        total = len(domains)
        batches = chunked(domains, self.max_concurrency)
        results: list[ProbeOutcome] = []
        completed = 0

        log.info(
            "probe_run_started",
            total=total,
            chunks=len(batches),
            max_concurrency=self.max_concurrency,
        )

        for index, batch in enumerate(batches):
            if cancel_event is not None and cancel_event.is_set():
                log.info(
                    "probe_run_cancelled",
                    completed=completed,
                    total=total,
                    chunks_done=index,
                )
                return results

            tasks = [asyncio.create_task(self._probe_safely(d)) for d in batch]
            try:
                for next_done in asyncio.as_completed(tasks):
                    outcome = await next_done
                    results.append(outcome)
                    completed += 1
                    if on_progress is not None:
                        on_progress(
                            ProbeProgress(
                                completed=completed, total=total, latest=outcome
                            )
                        )
            finally:
                # Only reached with pending tasks if the callback raised
                # or the run itself was cancelled.
                for task in tasks:
                    if not task.done():
                        task.cancel()

            log.debug(
                "probe_chunk_completed",
                chunk=index + 1,
                chunks=len(batches),
                completed=completed,
            )

        log.info(
            "probe_run_completed",
            total=total,
            blocked=sum(1 for o in results if o.blocked),
        )
        return results
