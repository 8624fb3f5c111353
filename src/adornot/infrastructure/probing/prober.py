"""Single-domain prober: one HEAD request, one verdict."""

from __future__ import annotations

import time

import httpx
import structlog

from adornot.domain.classification import FailureKind, is_blocked
from adornot.domain.entities.probing import Domain, ProbeOutcome, is_valid_hostname
from adornot.domain.ports.probe_transport import ProbeFailure, ProbeTransportPort

log = structlog.get_logger(__name__)

INVALID_URL_ERROR = "Invalid URL"


def probe_url(hostname: str) -> str | None:
    """Return ``https://{hostname}/`` or None if it is not a valid target."""
    if not is_valid_hostname(hostname):
        return None
    url = f"https://{hostname}/"
    try:
        httpx.URL(url)
    except httpx.InvalidURL:
        return None
    return url


def _elapsed_ms(t0: float) -> float:
    return (time.perf_counter() - t0) * 1000.0


class HttpDomainProber:
    """Probes ``https://{hostname}/`` once and classifies the outcome.

    Any protocol-level response (whatever the status code) means DNS
    resolved and the transport succeeded. Failures are classified via
    :func:`adornot.domain.classification.is_blocked`.
    """

    def __init__(self, transport: ProbeTransportPort) -> None:
        self._transport = transport

    async def probe(self, domain: Domain) -> ProbeOutcome:
        url = probe_url(domain.hostname)
        if url is None:
            log.debug("probe_invalid_hostname", hostname=domain.hostname)
            return ProbeOutcome(
                domain=domain,
                blocked=True,
                error=INVALID_URL_ERROR,
                error_kind=FailureKind.INVALID_URL,
            )

        t0 = time.perf_counter()
        try:
            status_code = await self._transport.fetch_headers(url)
        except ProbeFailure as failure:
            elapsed = _elapsed_ms(t0)
            blocked = is_blocked(failure.kind)
            log.debug(
                "probe_failed",
                hostname=domain.hostname,
                kind=failure.kind.value,
                blocked=blocked,
                elapsed_ms=round(elapsed, 1),
            )
            return ProbeOutcome(
                domain=domain,
                blocked=blocked,
                latency_ms=None if blocked else elapsed,
                elapsed_ms=elapsed,
                error=failure.message,
                error_kind=failure.kind,
            )

        elapsed = _elapsed_ms(t0)
        log.debug(
            "probe_succeeded",
            hostname=domain.hostname,
            status_code=status_code,
            elapsed_ms=round(elapsed, 1),
        )
        return ProbeOutcome(
            domain=domain,
            blocked=is_blocked(None),
            latency_ms=elapsed,
            elapsed_ms=elapsed,
        )
