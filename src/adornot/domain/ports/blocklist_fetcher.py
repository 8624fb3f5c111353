"""Port for upstream producers of blocklist-derived domains."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from adornot.domain.entities.probing import Domain


@runtime_checkable
class BlocklistFetcherPort(Protocol):
    async def authenticate(self) -> str:
        """Authenticate and return a session id.

        Raises:
            BlocklistFetchError: Authentication or transport failure.
        """
        ...

    async def fetch_domains(self, sample_size: int | None = None) -> list[Domain]:
        """Return a sample of blocklist domains.

        Raises:
            BlocklistFetchError: Fetch failed or yielded no domains.
        """
        ...
