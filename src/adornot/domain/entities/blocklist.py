from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class BlocklistSource:
    """A remote blocklist configured on the Pi-hole."""

    url: str
    name: str


class BlocklistFetchError(Exception):
    """Base error for blocklist fetching. ``str(exc)`` is user-facing."""


class WrongPasswordError(BlocklistFetchError):
    pass


class AuthenticationError(BlocklistFetchError):
    pass


class HostUnreachableError(BlocklistFetchError):
    pass


class NoInternetError(BlocklistFetchError):
    pass


class InvalidAddressError(BlocklistFetchError):
    pass


class PiholeHttpError(BlocklistFetchError):
    """Pi-hole answered with an unexpected HTTP status."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class NoDomainsFoundError(BlocklistFetchError):
    pass


class DomainRegistryError(Exception):
    """The curated domain registry could not be loaded."""
