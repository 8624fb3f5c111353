"""Domain entities for reachability probing.

Pure value objects: no framework dependencies, no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from adornot.domain.classification import FailureKind


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Category(str, Enum):
    """Domain category. ``BLOCKLIST`` tags domains parsed from Pi-hole lists."""

    ADS = "Ads"
    ANALYTICS = "Analytics"
    ERROR_TRACKERS = "Error Trackers"
    SOCIAL_TRACKERS = "Social Trackers"
    MIX = "Mix"
    OEMS = "OEMs"
    BLOCKLIST = "Pi-hole Lists"

    @classmethod
    def standard(cls) -> list[Category]:
        """The six curated categories used by the bundled registry."""
        return [
            cls.ADS,
            cls.ANALYTICS,
            cls.ERROR_TRACKERS,
            cls.SOCIAL_TRACKERS,
            cls.MIX,
            cls.OEMS,
        ]

    @property
    def description(self) -> str:
        return _CATEGORY_DESCRIPTIONS[self]


_CATEGORY_DESCRIPTIONS: dict[Category, str] = {
    Category.ADS: "Advertising networks and ad-serving domains",
    Category.ANALYTICS: "Web analytics and user tracking services",
    Category.ERROR_TRACKERS: "Error reporting and crash analytics",
    Category.SOCIAL_TRACKERS: "Social media tracking pixels and APIs",
    Category.MIX: "Mixed advertising and analytics services",
    Category.OEMS: "Device manufacturer telemetry and tracking",
    Category.BLOCKLIST: "Domains sampled from Pi-hole blocklists",
}


def is_valid_hostname(hostname: str) -> bool:
    """Return True if *hostname* can be probed as ``https://{hostname}/``.

    Requires at least one dot and rejects schemes, paths, ports,
    whitespace and empty labels.
    """
    if not hostname or "." not in hostname:
        return False
    if "://" in hostname:
        return False
    if any(ch.isspace() for ch in hostname):
        return False
    if any(ch in hostname for ch in "/:?#@[]\\"):
        return False
    labels = hostname.rstrip(".").split(".")
    return all(labels) and len(labels) >= 2


@dataclass(frozen=True)
class Domain:
    """One probe target. Unique within a run by hostname."""

    hostname: str
    provider: str
    category: Category

    def to_dict(self) -> dict[str, str]:
        return {
            "hostname": self.hostname,
            "provider": self.provider,
            "category": self.category.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Domain:
        return cls(
            hostname=data["hostname"],
            provider=data["provider"],
            category=Category(data["category"]),
        )


@dataclass(frozen=True)
class ProbeOutcome:
    """Result of probing a single domain.

    ``latency_ms`` is only set for unblocked outcomes; ``elapsed_ms`` is
    the wall time until the outcome was known, blocked or not.
    """

    domain: Domain
    blocked: bool
    latency_ms: float | None = None
    elapsed_ms: float | None = None
    error: str | None = None
    error_kind: FailureKind | None = None
    timestamp: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "domain": self.domain.to_dict(),
            "blocked": self.blocked,
            "latency_ms": self.latency_ms,
            "elapsed_ms": self.elapsed_ms,
            "error": self.error,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProbeOutcome:
        kind = data.get("error_kind")
        return cls(
            domain=Domain.from_dict(data["domain"]),
            blocked=bool(data["blocked"]),
            latency_ms=data.get("latency_ms"),
            elapsed_ms=data.get("elapsed_ms"),
            error=data.get("error"),
            error_kind=FailureKind(kind) if kind else None,
            timestamp=datetime.fromisoformat(data["timestamp"]),
        )


@dataclass(frozen=True)
class ProbeProgress:
    """Progress event emitted once per completed probe."""

    completed: int
    total: int
    latest: ProbeOutcome

    @property
    def fraction(self) -> float:
        return self.completed / self.total if self.total else 0.0
