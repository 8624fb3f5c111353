from __future__ import annotations

from typing import Protocol, runtime_checkable

from adornot.domain.entities.probing import Domain, ProbeOutcome


@runtime_checkable
class DomainProberPort(Protocol):
    """Probes a single domain and classifies the outcome."""

    async def probe(self, domain: Domain) -> ProbeOutcome:
        """Probe *domain* once. Never raises for network failures."""
        ...
