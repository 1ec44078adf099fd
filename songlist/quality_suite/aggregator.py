"""Aggregate test outcomes and dimension scores into a run summary."""

from collections.abc import Mapping, Sequence

from songlist.quality_suite.models.test_outcome import TestOutcome
from songlist.quality_suite.models.unified_report import (
    DimensionReports,
    FlakyTest,
    ReportSummary,
    TagMetrics,
)

HEALTH_WEIGHTS: Mapping[str, float] = {
    "pass_rate": 0.35,
    "coverage": 0.15,
    "performance": 0.15,
    "accessibility": 0.15,
    "security": 0.20,
}


def clamp(value: float) -> float:
    """Clamp a score to [0, 100]."""
    return min(max(value, 0.0), 100.0)


def calculate_pass_rate(passed: int, total: int) -> float:
    """Return the pass percentage, zero when there are no tests."""
    if total <= 0:
        return 0.0
    return round(passed / total * 100, 2)


def calculate_overall_health(pass_rate: float, scores: Mapping[str, float]) -> float:
    """Return the fixed-weight overall health score.

    Every term is clamped to [0, 100] before weighting. Missing dimensions
    count as zero.
    """
    terms = {"pass_rate": pass_rate, **scores}
    health = sum(
        clamp(terms.get(name, 0.0)) * weight for name, weight in HEALTH_WEIGHTS.items()
    )
    return round(health, 2)


def calculate_summary(
    outcomes: Sequence[TestOutcome], dimensions: DimensionReports
) -> ReportSummary:
    """Compute the run summary.

    Pure and deterministic: the same inputs always yield an equal summary.
    """
    total = len(outcomes)
    passed = sum(1 for o in outcomes if o.status == "passed")
    failed = sum(1 for o in outcomes if o.status == "failed")
    skipped = sum(1 for o in outcomes if o.status == "skipped")
    pass_rate = calculate_pass_rate(passed, total)

    scores = {
        name: dimensions.score(name)
        for name in ("coverage", "performance", "accessibility", "security")
    }

    return ReportSummary(
        total_tests=total,
        passed_tests=passed,
        failed_tests=failed,
        skipped_tests=skipped,
        pass_rate=pass_rate,
        total_duration=sum(o.duration for o in outcomes),
        overall_health=calculate_overall_health(pass_rate, scores),
        tag_metrics=calculate_tag_metrics(outcomes),
        flaky_tests=detect_flaky_tests(outcomes),
        **scores,
    )


def calculate_tag_metrics(outcomes: Sequence[TestOutcome]) -> dict[str, TagMetrics]:
    """Return outcome statistics per tag, ordered by tag name."""
    grouped: dict[str, list[TestOutcome]] = {}
    for outcome in outcomes:
        for tag in outcome.tags:
            grouped.setdefault(tag, []).append(outcome)

    metrics: dict[str, TagMetrics] = {}
    for tag in sorted(grouped):
        tagged = grouped[tag]
        passed = sum(1 for o in tagged if o.status == "passed")
        metrics[tag] = TagMetrics(
            total=len(tagged),
            passed=passed,
            failed=sum(1 for o in tagged if o.status == "failed"),
            avg_duration=round(sum(o.duration for o in tagged) / len(tagged), 2),
            success_rate=calculate_pass_rate(passed, len(tagged)),
        )
    return metrics


def detect_flaky_tests(outcomes: Sequence[TestOutcome]) -> list[FlakyTest]:
    """Return tests that were retried, in encounter order."""
    return [
        FlakyTest(
            test_id=f"{o.file}:{o.title} [{o.browser}]",
            retries=o.retries,
            inconsistent_results=o.flaky,
        )
        for o in outcomes
        if o.retries > 0
    ]
