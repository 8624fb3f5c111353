"""httpx-backed transport for HEAD probes."""

from __future__ import annotations

import asyncio
from http.cookiejar import CookieJar, DefaultCookiePolicy

import httpx
import structlog

from adornot.domain.ports.probe_transport import ProbeFailure
from adornot.infrastructure.probing.errors import (
    describe_exception,
    failure_kind_from_exception,
)

log = structlog.get_logger(__name__)

DEFAULT_REQUEST_TIMEOUT = 6.0
DEFAULT_RESOURCE_TIMEOUT = 10.0


def _cookie_jar_rejecting_all() -> CookieJar:
    # allowed_domains=[] makes the policy refuse every cookie, both ways.
    return CookieJar(policy=DefaultCookiePolicy(allowed_domains=[]))


def build_probe_client(
    *,
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
    user_agent: str,
    max_connections: int = 8,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create the shared client used by every probe of a run.

    Keep-alive is disabled so each probe resolves and connects on its own.
    ``transport`` replaces the network transport (connection limits then
    belong to it).
    """
    return httpx.AsyncClient(
        timeout=httpx.Timeout(request_timeout),
        follow_redirects=False,
        cookies=_cookie_jar_rejecting_all(),
        headers={
            "User-Agent": user_agent,
            "Cache-Control": "no-cache",
            "Pragma": "no-cache",
        },
        limits=httpx.Limits(
            max_connections=max_connections,
            max_keepalive_connections=0,
        ),
        transport=transport,
    )


class HttpxProbeTransport:
    """Issues single HEAD requests through a shared ``httpx.AsyncClient``.

    Args:
        http_client: Shared client (timeouts and headers configured by caller).
        resource_timeout: Upper bound for one probe, connect to last byte.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        resource_timeout: float = DEFAULT_RESOURCE_TIMEOUT,
    ) -> None:
        self.http_client = http_client
        self.resource_timeout = resource_timeout

    async def fetch_headers(self, url: str) -> int:
        try:
            response = await asyncio.wait_for(
                self.http_client.head(url, follow_redirects=False),
                timeout=self.resource_timeout,
            )
        except (httpx.HTTPError, httpx.InvalidURL, OSError) as exc:
            kind = failure_kind_from_exception(exc)
            log.debug("probe_transport_failure", url=url, kind=kind.value, error=str(exc))
            raise ProbeFailure(kind, describe_exception(exc)) from exc

        return response.status_code
