from __future__ import annotations

import structlog

from adornot.domain.ports.blocklist_fetcher import BlocklistFetcherPort

log = structlog.get_logger(__name__)


class PiholeConnectionCheckUseCase:
    """Verifies Pi-hole address and password by authenticating once."""

    def __init__(self, fetcher: BlocklistFetcherPort) -> None:
        self._fetcher = fetcher

    async def execute(self) -> None:
        """Raises BlocklistFetchError with a user-facing message on failure."""
        await self._fetcher.authenticate()
        log.info("pihole_connection_ok")
