"""Shared test fixtures for the adornot test suite."""

from __future__ import annotations

import asyncio
import os
from collections.abc import Callable
from dataclasses import dataclass, field

import pytest

from adornot.domain.classification import FailureKind, is_blocked
from adornot.domain.entities.probing import Category, Domain, ProbeOutcome
from adornot.domain.ports.probe_transport import ProbeFailure

# ---------------------------------------------------------------------------
# Scripted fakes
# ---------------------------------------------------------------------------


@dataclass
class ScriptedProber:
    """DomainProberPort fake: verdicts and delays keyed by hostname.

    Hostnames missing from *blocked* resolve as not blocked. A value of
    type Exception in *errors* is raised instead of returning.
    """

    blocked: dict[str, bool] = field(default_factory=dict)
    delays: dict[str, float] = field(default_factory=dict)
    errors: dict[str, Exception] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)
    in_flight: int = 0
    peak_in_flight: int = 0

    async def probe(self, domain: Domain) -> ProbeOutcome:
        self.calls.append(domain.hostname)
        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(domain.hostname, 0))
            if domain.hostname in self.errors:
                raise self.errors[domain.hostname]
            blocked = self.blocked.get(domain.hostname, False)
            return ProbeOutcome(
                domain=domain,
                blocked=blocked,
                latency_ms=None if blocked else 12.0,
                elapsed_ms=12.0,
                error="blocked" if blocked else None,
                error_kind=FailureKind.CANNOT_FIND_HOST if blocked else None,
            )
        finally:
            self.in_flight -= 1


@dataclass
class ScriptedTransport:
    """ProbeTransportPort fake: status code or failure kind per URL."""

    responses: dict[str, int | FailureKind] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)

    async def fetch_headers(self, url: str) -> int:
        self.calls.append(url)
        result = self.responses.get(url, 200)
        if isinstance(result, FailureKind):
            raise ProbeFailure(result, f"scripted {result.value}")
        return result


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _clean_adornot_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep ADORNOT_* from the developer's shell out of the tests."""
    for key in list(os.environ):
        if key.upper().startswith("ADORNOT_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture()
def make_domain() -> Callable[..., Domain]:
    def _make(
        hostname: str,
        provider: str = "Example",
        category: Category = Category.ADS,
    ) -> Domain:
        return Domain(hostname=hostname, provider=provider, category=category)

    return _make


@pytest.fixture()
def make_outcome(make_domain: Callable[..., Domain]) -> Callable[..., ProbeOutcome]:
    def _make(
        hostname: str,
        *,
        blocked: bool,
        provider: str = "Example",
        category: Category = Category.ADS,
    ) -> ProbeOutcome:
        kind = FailureKind.CANNOT_FIND_HOST if blocked else None
        return ProbeOutcome(
            domain=make_domain(hostname, provider, category),
            blocked=is_blocked(kind),
            latency_ms=None if blocked else 20.0,
            elapsed_ms=20.0,
            error_kind=kind,
        )

    return _make


@pytest.fixture()
def scripted_prober() -> ScriptedProber:
    return ScriptedProber()


@pytest.fixture()
def scripted_transport() -> ScriptedTransport:
    return ScriptedTransport()
