"""Render test reports as plain text or JSON."""

from __future__ import annotations

import json
from typing import Any

from adornot.domain.entities.probing import Category
from adornot.domain.entities.report import TestReport

_MODE_LABELS = {"standard": "Standard", "pihole": "Pi-hole"}


def _mode_label(report: TestReport) -> str:
    return _MODE_LABELS.get(report.mode, report.mode)


def render_text_report(report: TestReport, *, app_name: str = "AdOrNot") -> str:
    run = report.run
    scores = run.scores
    lines = [
        app_name,
        "=" * max(len(app_name), 14),
        f"Date: {report.started_at.strftime('%Y-%m-%d %H:%M')} UTC",
        f"Duration: {report.duration_seconds:.1f}s",
        f"Test Mode: {_mode_label(report)}",
    ]
    if report.cancelled:
        lines.append("Status: cancelled (partial results)")
    lines += [
        "",
        f"Overall Score: {scores.overall:.0f}% ({report.protection_label})",
        f"Blocked: {run.blocked_count}/{run.total} domains",
        "",
        "Category Breakdown:",
    ]
    for category in Category:
        score = scores.by_category.get(category)
        if score is not None:
            lines.append(f"  {category.value}: {score:.0f}%")

    blocklists = run.provider_breakdown(Category.BLOCKLIST)
    if blocklists:
        lines += ["", "Blocklist Breakdown:"]
        for tally in blocklists:
            lines.append(
                f"  {tally.name}: {tally.score:.0f}% ({tally.blocked}/{tally.total})"
            )

    lines += ["", "Detailed Results:"]
    for category in Category:
        outcomes = [o for o in run.outcomes if o.domain.category == category]
        if not outcomes:
            continue
        lines += ["", f"[{category.value}]"]
        for outcome in sorted(outcomes, key=lambda o: (o.domain.provider, o.domain.hostname)):
            status = "[BLOCKED]" if outcome.blocked else "[EXPOSED]"
            lines.append(
                f"  {status} {outcome.domain.hostname} ({outcome.domain.provider})"
            )

    return "\n".join(lines) + "\n"


def report_to_dict(report: TestReport) -> dict[str, Any]:
    run = report.run
    return {
        "date": report.started_at.isoformat(),
        "duration_seconds": round(report.duration_seconds, 3),
        "test_mode": _mode_label(report),
        "cancelled": report.cancelled,
        "overall_score": run.overall_score,
        "blocked": run.blocked_count,
        "total": run.total,
        "category_scores": run.scores.by_category_name(),
        "results": [
            {
                "hostname": o.domain.hostname,
                "provider": o.domain.provider,
                "category": o.domain.category.value,
                "is_blocked": o.blocked,
                "response_time_ms": (
                    round(o.latency_ms, 1) if o.latency_ms is not None else None
                ),
                "error": o.error,
            }
            for o in run.outcomes
        ],
    }


def render_json_report(report: TestReport) -> str:
    return json.dumps(report_to_dict(report), indent=2, sort_keys=True, ensure_ascii=False)
