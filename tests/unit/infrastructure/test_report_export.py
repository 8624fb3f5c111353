"""Tests for text and JSON report rendering."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from adornot.domain.classification import FailureKind
from adornot.domain.entities.probing import Category, Domain, ProbeOutcome
from adornot.domain.entities.report import TestReport, TestRun
from adornot.infrastructure.export import (
    render_json_report,
    render_text_report,
    report_to_dict,
)


def _outcome(
    hostname: str, provider: str, category: Category, blocked: bool
) -> ProbeOutcome:
    return ProbeOutcome(
        domain=Domain(hostname, provider, category),
        blocked=blocked,
        latency_ms=None if blocked else 42.04,
        elapsed_ms=42.04,
        error="host not found" if blocked else None,
        error_kind=FailureKind.CANNOT_FIND_HOST if blocked else None,
    )


@pytest.fixture()
def report() -> TestReport:
    run = TestRun(
        outcomes=[
            _outcome("z.example.com", "Zeta", Category.ADS, True),
            _outcome("a.example.com", "Alpha", Category.ADS, False),
            _outcome("m.example.com", "Metrics", Category.ANALYTICS, True),
            _outcome("l.example.com", "StevenBlack/hosts", Category.BLOCKLIST, True),
        ]
    )
    return TestReport(
        run=run,
        mode="pihole",
        started_at=datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc),
        duration_seconds=3.25,
    )


class TestTextReport:
    def test_header_and_summary(self, report: TestReport) -> None:
        text = render_text_report(report)
        assert text.startswith("AdOrNot\n")
        assert "Date: 2024-05-01 09:30 UTC" in text
        assert "Duration: 3.2s" in text or "Duration: 3.3s" in text
        assert "Test Mode: Pi-hole" in text
        assert "Overall Score: 75% (Strong Protection)" in text
        assert "Blocked: 3/4 domains" in text
        assert "Status:" not in text

    def test_category_and_blocklist_breakdown(self, report: TestReport) -> None:
        text = render_text_report(report)
        assert "  Ads: 50%" in text
        assert "  Analytics: 100%" in text
        assert "Blocklist Breakdown:" in text
        assert "  StevenBlack/hosts: 100% (1/1)" in text

    def test_details_sorted_by_provider(self, report: TestReport) -> None:
        text = render_text_report(report)
        alpha = text.index("[EXPOSED] a.example.com (Alpha)")
        zeta = text.index("[BLOCKED] z.example.com (Zeta)")
        assert alpha < zeta

    def test_cancelled_status(self, report: TestReport) -> None:
        cancelled = TestReport(run=report.run, mode="standard", cancelled=True)
        text = render_text_report(cancelled)
        assert "Status: cancelled (partial results)" in text
        assert "Test Mode: Standard" in text

    def test_no_blocklist_section_without_blocklist_outcomes(self) -> None:
        run = TestRun(outcomes=[_outcome("a.example.com", "A", Category.ADS, False)])
        assert "Blocklist Breakdown" not in render_text_report(TestReport(run=run))


class TestJsonReport:
    def test_structure(self, report: TestReport) -> None:
        data = report_to_dict(report)
        assert data["date"] == "2024-05-01T09:30:00+00:00"
        assert data["test_mode"] == "Pi-hole"
        assert data["overall_score"] == 75.0
        assert data["blocked"] == 3
        assert data["total"] == 4
        assert data["category_scores"]["Ads"] == 50.0
        first = data["results"][0]
        assert first["hostname"] == "z.example.com"
        assert first["is_blocked"] is True
        assert first["response_time_ms"] is None
        assert data["results"][1]["response_time_ms"] == 42.0

    def test_rendering_is_valid_sorted_json(self, report: TestReport) -> None:
        rendered = render_json_report(report)
        parsed = json.loads(rendered)
        assert list(parsed) == sorted(parsed)
        assert parsed == json.loads(json.dumps(report_to_dict(report)))
