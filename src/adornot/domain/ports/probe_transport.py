"""Port for the network transport behind domain probes."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from adornot.domain.classification import FailureKind


class ProbeFailure(Exception):
    """Raised by a transport when a probe ends without an HTTP response."""

    def __init__(self, kind: FailureKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message


@runtime_checkable
class ProbeTransportPort(Protocol):
    """Fetches response headers for a URL, honoring its timeout config.

    Implementations perform exactly one attempt and never retry.
    """

    async def fetch_headers(self, url: str) -> int:
        """Issue a HEAD request.

        Returns:
            The HTTP status code of any protocol-level response.

        Raises:
            ProbeFailure: The request ended without a response.
        """
        ...
