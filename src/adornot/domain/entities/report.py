"""Aggregates produced by a reachability test run."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal

from adornot.domain.entities.probing import Category, ProbeOutcome
from adornot.domain.scoring import (
    ProviderTally,
    Scores,
    calculate_scores,
    protection_label,
    provider_breakdown,
)

TestMode = Literal["standard", "pihole"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class TestRun:
    """Outcomes of one run in arrival order, plus derived metrics.

    Owned by the orchestrator while the run is in flight; ``finalize``
    freezes the scores once every chunk has completed or the run was
    cancelled.
    """

    __test__ = False  # not a pytest test class

    outcomes: list[ProbeOutcome] = field(default_factory=list)
    _scores: Scores | None = field(default=None, init=False, repr=False)

    def append(self, outcome: ProbeOutcome) -> None:
        self.outcomes.append(outcome)
        self._scores = None

    def finalize(self) -> Scores:
        self._scores = calculate_scores(self.outcomes)
        return self._scores

    @property
    def scores(self) -> Scores:
        if self._scores is None:
            return self.finalize()
        return self._scores

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def blocked_count(self) -> int:
        return sum(1 for o in self.outcomes if o.blocked)

    @property
    def exposed_count(self) -> int:
        return self.total - self.blocked_count

    @property
    def overall_score(self) -> float:
        return self.scores.overall

    @property
    def category_scores(self) -> dict[Category, float]:
        return self.scores.by_category

    def provider_breakdown(self, category: Category | None = None) -> list[ProviderTally]:
        return provider_breakdown(self.outcomes, category)


@dataclass(frozen=True)
class TestReport:
    __test__ = False

    run: TestRun
    mode: TestMode = "standard"
    started_at: datetime = field(default_factory=_utcnow)
    duration_seconds: float = 0.0
    cancelled: bool = False

    @property
    def protection_label(self) -> str:
        return protection_label(self.run.overall_score)
