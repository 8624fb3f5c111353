"""Tests for score aggregation, thresholds and TestRun/TestReport."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from adornot.domain.entities.probing import Category, ProbeOutcome
from adornot.domain.entities.report import TestReport, TestRun
from adornot.domain.scoring import (
    calculate_scores,
    percentage,
    protection_label,
    provider_breakdown,
)


@pytest.fixture()
def ten_outcomes(make_outcome: Callable[..., ProbeOutcome]) -> list[ProbeOutcome]:
    """Ten domains: 4 Ads (1 blocked), 3 Analytics (1 blocked), 3 Mix (none)."""
    return [
        make_outcome("ad1.example.com", blocked=True, provider="AdCo"),
        make_outcome("ad2.example.com", blocked=False, provider="AdCo"),
        make_outcome("ad3.example.com", blocked=False, provider="OtherAds"),
        make_outcome("ad4.example.com", blocked=False, provider="OtherAds"),
        make_outcome(
            "m1.example.com", blocked=True, provider="Metrics", category=Category.ANALYTICS
        ),
        make_outcome(
            "m2.example.com", blocked=False, provider="Metrics", category=Category.ANALYTICS
        ),
        make_outcome(
            "m3.example.com", blocked=False, provider="Metrics", category=Category.ANALYTICS
        ),
        make_outcome("x1.example.com", blocked=False, provider="Mixed", category=Category.MIX),
        make_outcome("x2.example.com", blocked=False, provider="Mixed", category=Category.MIX),
        make_outcome("x3.example.com", blocked=False, provider="Mixed", category=Category.MIX),
    ]


class TestCalculateScores:
    def test_ten_domain_run(self, ten_outcomes: list[ProbeOutcome]) -> None:
        scores = calculate_scores(ten_outcomes)
        assert scores.overall == 20.0
        assert scores.by_category[Category.ADS] == 25.0
        assert scores.by_category[Category.ANALYTICS] == pytest.approx(100 / 3)
        assert scores.by_category[Category.MIX] == 0.0

    def test_empty_run_scores_zero(self) -> None:
        scores = calculate_scores([])
        assert scores.overall == 0.0
        assert scores.by_category == {}

    def test_categories_without_outcomes_are_absent(
        self, ten_outcomes: list[ProbeOutcome]
    ) -> None:
        scores = calculate_scores(ten_outcomes)
        assert Category.OEMS not in scores.by_category

    def test_scores_are_bounded(self, ten_outcomes: list[ProbeOutcome]) -> None:
        scores = calculate_scores(ten_outcomes)
        for value in [scores.overall, *scores.by_category.values()]:
            assert 0.0 <= value <= 100.0

    def test_idempotent(self, ten_outcomes: list[ProbeOutcome]) -> None:
        assert calculate_scores(ten_outcomes) == calculate_scores(ten_outcomes)

    def test_accepts_a_generator(self, ten_outcomes: list[ProbeOutcome]) -> None:
        assert calculate_scores(o for o in ten_outcomes).overall == 20.0

    def test_by_category_name(self, ten_outcomes: list[ProbeOutcome]) -> None:
        names = calculate_scores(ten_outcomes).by_category_name()
        assert names["Ads"] == 25.0


class TestPercentage:
    def test_zero_total(self) -> None:
        assert percentage(0, 0) == 0.0

    def test_all_blocked(self) -> None:
        assert percentage(7, 7) == 100.0


class TestProviderBreakdown:
    def test_sorted_best_first_then_by_name(
        self, ten_outcomes: list[ProbeOutcome]
    ) -> None:
        tallies = provider_breakdown(ten_outcomes)
        assert [t.name for t in tallies] == ["AdCo", "Metrics", "Mixed", "OtherAds"]
        assert tallies[0].blocked == 1
        assert tallies[0].total == 2
        assert tallies[0].score == 50.0

    def test_category_filter(self, ten_outcomes: list[ProbeOutcome]) -> None:
        tallies = provider_breakdown(ten_outcomes, Category.MIX)
        assert [t.name for t in tallies] == ["Mixed"]
        assert tallies[0].total == 3


class TestProtectionLabel:
    @pytest.mark.parametrize(
        ("score", "label"),
        [
            (100.0, "Strong Protection"),
            (60.0, "Strong Protection"),
            (59.9, "Moderate Protection"),
            (30.0, "Moderate Protection"),
            (29.9, "Weak Protection"),
            (0.0, "Weak Protection"),
        ],
    )
    def test_thresholds(self, score: float, label: str) -> None:
        assert protection_label(score) == label


class TestTestRun:
    def test_counts(self, ten_outcomes: list[ProbeOutcome]) -> None:
        run = TestRun(outcomes=list(ten_outcomes))
        assert run.total == 10
        assert run.blocked_count == 2
        assert run.exposed_count == 8
        assert run.overall_score == 20.0

    def test_append_invalidates_cached_scores(
        self, make_outcome: Callable[..., ProbeOutcome]
    ) -> None:
        run = TestRun()
        run.append(make_outcome("a.example.com", blocked=True))
        assert run.overall_score == 100.0
        run.append(make_outcome("b.example.com", blocked=False))
        assert run.overall_score == 50.0

    def test_report_label(self, ten_outcomes: list[ProbeOutcome]) -> None:
        report = TestReport(run=TestRun(outcomes=list(ten_outcomes)))
        assert report.mode == "standard"
        assert report.cancelled is False
        assert report.protection_label == "Weak Protection"
