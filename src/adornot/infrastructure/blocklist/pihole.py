"""Pi-hole v6 blocklist fetcher: auth, list discovery, download, sampling."""

from __future__ import annotations

import asyncio
import math
import random
from typing import Any
from urllib.parse import urlparse

import httpx
import structlog

from adornot.domain.classification import FailureKind
from adornot.domain.entities.blocklist import (
    AuthenticationError,
    BlocklistFetchError,
    BlocklistSource,
    HostUnreachableError,
    InvalidAddressError,
    NoDomainsFoundError,
    NoInternetError,
    PiholeHttpError,
    WrongPasswordError,
)
from adornot.domain.entities.probing import Category, Domain
from adornot.infrastructure.blocklist.hosts_parser import iter_hosts_file
from adornot.infrastructure.probing.errors import failure_kind_from_exception

log = structlog.get_logger(__name__)

GITHUB_RAW_HOST = "raw.githubusercontent.com"

SAMPLE_SCALE = 200
SAMPLE_CAP = 2000

DEFAULT_DOWNLOAD_CONCURRENCY = 4


def normalize_endpoint(raw: str) -> str:
    """Turn user input like ``pi.hole/api/`` into ``http://pi.hole``."""
    url = raw.strip()
    url = url.rstrip("/")
    if url.endswith("/api/auth"):
        url = url[: -len("/api/auth")]
    if url.endswith("/api"):
        url = url[: -len("/api")]
    if not url.startswith(("http://", "https://")):
        url = f"http://{url}"
    return url


def friendly_list_name(url: str) -> str:
    """GitHub raw URLs become ``owner/repo``; everything else its host."""
    parsed = urlparse(url)
    if parsed.hostname == GITHUB_RAW_HOST:
        parts = [p for p in parsed.path.split("/") if p]
        if len(parts) >= 2:
            return f"{parts[0]}/{parts[1]}"
    return parsed.hostname or url


def sample_size_for(total: int, override: int | None = None) -> int:
    """Number of hostnames to test out of *total* distinct ones.

    ``min(floor(200 * log10(total)), 2000)``, never more than *total* and
    at least one when anything was found.
    """
    if total <= 0:
        return 0
    if override is not None:
        if override < 0:
            raise ValueError("sample size must be >= 0")
        return min(override, total)
    scaled = min(int(SAMPLE_SCALE * math.log10(total)), SAMPLE_CAP)
    return max(1, min(scaled, total))


def _transport_error(exc: Exception, endpoint: str) -> BlocklistFetchError:
    kind = failure_kind_from_exception(exc)
    if kind is FailureKind.TIMED_OUT:
        return HostUnreachableError(
            f"Connection timed out. Is Pi-hole running at {endpoint}?"
        )
    if kind in (FailureKind.CANNOT_FIND_HOST, FailureKind.DNS_LOOKUP_FAILED):
        return HostUnreachableError("Host not found. Check the Pi-hole address.")
    if kind is FailureKind.CANNOT_CONNECT:
        return HostUnreachableError(f"Cannot connect. Is Pi-hole running at {endpoint}?")
    if kind is FailureKind.NOT_CONNECTED_TO_INTERNET:
        return NoInternetError("No internet connection")
    if kind is FailureKind.INVALID_URL:
        return InvalidAddressError(
            f"Invalid URL: {endpoint}. Check the Pi-hole host address."
        )
    return BlocklistFetchError(f"Network error: {exc}")


class PiholeBlocklistFetcher:
    """Collects blocklist domains configured on a Pi-hole v6 instance.

    Flow:
        1. POST /api/auth with the password, keep the session id.
        2. GET /api/lists, keep enabled lists of type "block".
        3. Download every list (best-effort) and parse hostnames.
        4. Deduplicate (first list wins attribution) and sample.

    Args:
        http_client: Shared httpx.AsyncClient (injected).
        endpoint: Pi-hole address as typed by the user.
        password: Pi-hole web password.
        download_concurrency: Max parallel list downloads.
        rng: Random source for sampling (injectable for tests).
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        endpoint: str,
        password: str,
        *,
        download_concurrency: int = DEFAULT_DOWNLOAD_CONCURRENCY,
        rng: random.Random | None = None,
    ) -> None:
        self.http_client = http_client
        self.endpoint = normalize_endpoint(endpoint)
        self._password = password
        self.download_concurrency = max(1, download_concurrency)
        self._semaphore = asyncio.Semaphore(self.download_concurrency)
        self._rng = rng or random.Random()

    # ------------------------------------------------------------------
    # API calls
    # ------------------------------------------------------------------

    async def authenticate(self) -> str:
        """Authenticate and return the session id (sid)."""
        url = f"{self.endpoint}/api/auth"
        try:
            resp = await self.http_client.post(url, json={"password": self._password})
        except (httpx.HTTPError, httpx.InvalidURL, OSError) as exc:
            log.warning("pihole_auth_transport_error", endpoint=self.endpoint, error=str(exc))
            raise _transport_error(exc, self.endpoint) from exc

        if resp.status_code == 401:
            raise WrongPasswordError("Wrong password. Check the Pi-hole password.")
        if resp.status_code != 200:
            raise PiholeHttpError(
                f"Pi-hole returned HTTP {resp.status_code} at {url}",
                status_code=resp.status_code,
            )

        try:
            payload: Any = resp.json()
        except ValueError as exc:
            raise AuthenticationError(
                "Authentication failed. Invalid response from Pi-hole."
            ) from exc

        session = payload.get("session") if isinstance(payload, dict) else None
        sid = session.get("sid") if isinstance(session, dict) else None
        if not isinstance(sid, str) or not sid:
            raise AuthenticationError(
                "Authentication failed. Invalid session from Pi-hole."
            )

        log.info("pihole_authenticated", endpoint=self.endpoint)
        return sid

    async def fetch_sources(self, sid: str) -> list[BlocklistSource]:
        """Return enabled block lists configured on the Pi-hole."""
        url = f"{self.endpoint}/api/lists"
        try:
            resp = await self.http_client.get(url, headers={"sid": sid})
            resp.raise_for_status()
            payload: Any = resp.json()
        except httpx.HTTPStatusError as exc:
            raise PiholeHttpError(
                f"Failed to fetch blocklists: HTTP {exc.response.status_code}",
                status_code=exc.response.status_code,
            ) from exc
        except (httpx.HTTPError, OSError) as exc:
            raise _transport_error(exc, self.endpoint) from exc
        except ValueError as exc:
            raise BlocklistFetchError(f"Failed to fetch blocklists: {exc}") from exc

        entries = payload.get("lists", []) if isinstance(payload, dict) else payload
        if not isinstance(entries, list):
            raise BlocklistFetchError("Failed to fetch blocklists: unexpected response")

        sources = [
            BlocklistSource(url=entry["address"], name=friendly_list_name(entry["address"]))
            for entry in entries
            if isinstance(entry, dict)
            and entry.get("enabled") is True
            and entry.get("type") == "block"
            and isinstance(entry.get("address"), str)
        ]
        log.info("pihole_lists_fetched", configured=len(entries), enabled_block=len(sources))
        return sources

    async def _download(self, source: BlocklistSource) -> str | None:
        """Download one list body. Failures are logged and skipped."""
        async with self._semaphore:
            try:
                resp = await self.http_client.get(source.url, follow_redirects=True)
            except (httpx.HTTPError, httpx.InvalidURL, OSError) as exc:
                log.warning("blocklist_download_failed", url=source.url, error=str(exc))
                return None

        if not resp.is_success:
            log.warning(
                "blocklist_download_failed",
                url=source.url,
                status_code=resp.status_code,
            )
            return None
        return resp.text

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def collect(self, sources: list[BlocklistSource]) -> dict[str, str]:
        """Map every hostname to the first source (in list order) naming it."""
        bodies = await asyncio.gather(*(self._download(s) for s in sources))

        attribution: dict[str, str] = {}
        for source, body in zip(sources, bodies):
            if body is None:
                continue
            before = len(attribution)
            for hostname in iter_hosts_file(body):
                attribution.setdefault(hostname, source.name)
            log.debug(
                "blocklist_parsed",
                source=source.name,
                new_hostnames=len(attribution) - before,
            )
        return attribution

    def sample(self, attribution: dict[str, str], sample_size: int | None = None) -> list[Domain]:
        size = sample_size_for(len(attribution), sample_size)
        # Sorted so a seeded rng gives reproducible samples.
        picked = self._rng.sample(sorted(attribution), size)
        return [
            Domain(hostname=h, provider=attribution[h], category=Category.BLOCKLIST)
            for h in picked
        ]

    async def fetch_domains(self, sample_size: int | None = None) -> list[Domain]:
        """Fetch, merge and sample blocklist domains.

        Raises:
            BlocklistFetchError: Authentication, transport or empty result.
        """
        sid = await self.authenticate()
        sources = await self.fetch_sources(sid)
        attribution = await self.collect(sources)

        if not attribution:
            raise NoDomainsFoundError("No domains found in blocklist files")

        domains = self.sample(attribution, sample_size)
        log.info(
            "blocklist_domains_sampled",
            sources=len(sources),
            distinct=len(attribution),
            sampled=len(domains),
        )
        return domains
