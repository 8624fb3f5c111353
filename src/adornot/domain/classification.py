"""Verdict policy: decides whether a probe outcome means "blocked".

The decision table is a product decision, kept as data so it can be
reviewed and tested on its own.
"""

from __future__ import annotations

from enum import Enum


class FailureKind(str, Enum):
    """Connection-level failure kinds a probe can end with."""

    TIMED_OUT = "timed_out"
    CANNOT_FIND_HOST = "cannot_find_host"
    CANNOT_CONNECT = "cannot_connect"
    CONNECTION_LOST = "connection_lost"
    DNS_LOOKUP_FAILED = "dns_lookup_failed"
    SECURE_CONNECTION_FAILED = "secure_connection_failed"
    CERTIFICATE_UNTRUSTED = "certificate_untrusted"
    NOT_CONNECTED_TO_INTERNET = "not_connected_to_internet"
    INVALID_URL = "invalid_url"
    UNKNOWN = "unknown"


# A device without any connectivity is not evidence of filtering.
# Flip to True to count offline probes as blocked.
NO_CONNECTIVITY_IS_BLOCKED = False

VERDICTS: dict[FailureKind, bool] = {
    FailureKind.TIMED_OUT: True,
    FailureKind.CANNOT_FIND_HOST: True,
    FailureKind.CANNOT_CONNECT: True,
    FailureKind.CONNECTION_LOST: True,
    FailureKind.DNS_LOOKUP_FAILED: True,
    FailureKind.SECURE_CONNECTION_FAILED: True,
    # DNS resolved and a TLS endpoint answered; only trust failed.
    FailureKind.CERTIFICATE_UNTRUSTED: False,
    FailureKind.NOT_CONNECTED_TO_INTERNET: NO_CONNECTIVITY_IS_BLOCKED,
}

DEFAULT_VERDICT = True


def is_blocked(kind: FailureKind | None) -> bool:
    """Map a probe outcome to a verdict.

    Args:
        kind: Failure kind, or ``None`` for any protocol-level response.

    Returns:
        True if the domain counts as blocked. Unlisted kinds are blocked.
    """
    if kind is None:
        return False
    return VERDICTS.get(kind, DEFAULT_VERDICT)
