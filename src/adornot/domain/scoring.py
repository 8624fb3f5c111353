"""Score aggregation over probe outcomes.

Pure functions: the same outcomes always produce the same scores.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from adornot.domain.entities.probing import Category, ProbeOutcome

GOOD_THRESHOLD = 60.0
MODERATE_THRESHOLD = 30.0


@dataclass(frozen=True)
class ProviderTally:
    name: str
    blocked: int
    total: int

    @property
    def score(self) -> float:
        return percentage(self.blocked, self.total)


@dataclass(frozen=True)
class Scores:
    overall: float
    by_category: dict[Category, float] = field(default_factory=dict)

    def by_category_name(self) -> dict[str, float]:
        return {cat.value: score for cat, score in self.by_category.items()}


def percentage(blocked: int, total: int) -> float:
    """blocked / total * 100, or 0 for an empty total."""
    if total <= 0:
        return 0.0
    return blocked / total * 100.0


def calculate_scores(outcomes: Iterable[ProbeOutcome]) -> Scores:
    """Compute overall and per-category block percentages."""
    totals: dict[Category, list[int]] = {}
    blocked = 0
    count = 0
    for outcome in outcomes:
        count += 1
        tally = totals.setdefault(outcome.domain.category, [0, 0])
        tally[1] += 1
        if outcome.blocked:
            blocked += 1
            tally[0] += 1

    return Scores(
        overall=percentage(blocked, count),
        by_category={
            cat: percentage(cat_blocked, cat_total)
            for cat, (cat_blocked, cat_total) in totals.items()
        },
    )


def provider_breakdown(
    outcomes: Iterable[ProbeOutcome],
    category: Category | None = None,
) -> list[ProviderTally]:
    """Blocked/total per provider, best-protected first.

    Pass ``Category.BLOCKLIST`` to see how each Pi-hole list performed.
    """
    tallies: dict[str, list[int]] = {}
    for outcome in outcomes:
        if category is not None and outcome.domain.category != category:
            continue
        tally = tallies.setdefault(outcome.domain.provider, [0, 0])
        tally[1] += 1
        if outcome.blocked:
            tally[0] += 1

    items = [
        ProviderTally(name=name, blocked=b, total=t)
        for name, (b, t) in tallies.items()
    ]
    return sorted(items, key=lambda item: (-item.score, item.name))


def protection_label(score: float) -> str:
    if score >= GOOD_THRESHOLD:
        return "Strong Protection"
    if score >= MODERATE_THRESHOLD:
        return "Moderate Protection"
    return "Weak Protection"
