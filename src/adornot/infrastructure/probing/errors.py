"""Map httpx / OS exceptions onto probe failure kinds."""

from __future__ import annotations

import errno
import socket
import ssl
from collections.abc import Iterator

import httpx

from adornot.domain.classification import FailureKind

_HOST_NOT_FOUND_CODES = frozenset(
    code
    for code in (
        getattr(socket, "EAI_NONAME", None),
        getattr(socket, "EAI_NODATA", None),
    )
    if code is not None
)
_OFFLINE_ERRNOS = frozenset({errno.ENETUNREACH, errno.ENETDOWN})


def _exception_chain(exc: BaseException) -> Iterator[BaseException]:
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def _low_level_kind(err: BaseException) -> FailureKind | None:
    # Order matters: SSLCertVerificationError is an SSLError, gaierror
    # and TimeoutError are OSErrors.
    if isinstance(err, ssl.SSLCertVerificationError):
        return FailureKind.CERTIFICATE_UNTRUSTED
    if isinstance(err, ssl.SSLError):
        return FailureKind.SECURE_CONNECTION_FAILED
    if isinstance(err, socket.gaierror):
        if err.errno in _HOST_NOT_FOUND_CODES:
            return FailureKind.CANNOT_FIND_HOST
        return FailureKind.DNS_LOOKUP_FAILED
    if isinstance(err, TimeoutError):
        return FailureKind.TIMED_OUT
    if isinstance(err, ConnectionRefusedError):
        return FailureKind.CANNOT_CONNECT
    if isinstance(err, (ConnectionResetError, ConnectionAbortedError, BrokenPipeError)):
        return FailureKind.CONNECTION_LOST
    if isinstance(err, OSError) and err.errno in _OFFLINE_ERRNOS:
        return FailureKind.NOT_CONNECTED_TO_INTERNET
    return None


def _group_kind(group: BaseExceptionGroup) -> FailureKind | None:
    """Classify one failed attempt per resolved address.

    The device is offline only when every address failed that way; an
    IPv6 route missing next to a refused IPv4 connect is a refusal.
    """
    kinds = [_cause_kind(member) for member in group.exceptions]
    offline = FailureKind.NOT_CONNECTED_TO_INTERNET
    if kinds and all(kind is offline for kind in kinds):
        return offline
    for kind in kinds:
        if kind is not None and kind is not offline:
            return kind
    return None


def _cause_kind(exc: BaseException) -> FailureKind | None:
    for err in _exception_chain(exc):
        if isinstance(err, BaseExceptionGroup):
            kind = _group_kind(err)
        else:
            kind = _low_level_kind(err)
        if kind is not None:
            return kind
    return None


def _httpx_kind(err: BaseException) -> FailureKind | None:
    if isinstance(err, httpx.TimeoutException):
        return FailureKind.TIMED_OUT
    if isinstance(err, (httpx.InvalidURL, httpx.UnsupportedProtocol)):
        return FailureKind.INVALID_URL
    if isinstance(err, (httpx.RemoteProtocolError, httpx.ReadError, httpx.WriteError)):
        return FailureKind.CONNECTION_LOST
    if isinstance(err, httpx.ConnectError):
        return FailureKind.CANNOT_CONNECT
    return None


def failure_kind_from_exception(exc: BaseException) -> FailureKind:
    """Classify *exc* by the most specific cause in its exception chain.

    httpx wraps socket / ssl errors (``raise ... from exc``), so the
    underlying cause is inspected before the httpx wrapper type. When
    the connect attempts to several addresses all failed, the cause is
    an exception group and its members are inspected as well.
    """
    kind = _cause_kind(exc)
    if kind is not None:
        return kind
    for err in _exception_chain(exc):
        kind = _httpx_kind(err)
        if kind is not None:
            return kind
    return FailureKind.UNKNOWN


def describe_exception(exc: BaseException) -> str:
    message = str(exc).strip()
    if message:
        return message
    return type(exc).__name__
