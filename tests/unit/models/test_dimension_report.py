"""Tests for dimension report models."""

import pytest
from pydantic import ValidationError

from songlist.quality_suite.models.dimension_report import (
    REPORT_TYPES,
    AccessibilityReport,
    CoverageReport,
    FileCoverage,
    HeadersCheck,
    SecurityReport,
)


def test_score_is_clamped() -> None:
    """Scores outside [0, 100] are clamped."""
    assert AccessibilityReport(score=120).score == 100.0
    assert AccessibilityReport(score=-5).score == 0.0
    assert AccessibilityReport(score=42.5).score == 42.5


def test_dimension_is_fixed_per_type() -> None:
    """Each report type carries its own dimension name."""
    for name, report_type in REPORT_TYPES.items():
        assert report_type().dimension == name


def test_wrong_dimension_rejected() -> None:
    """A report cannot claim another dimension."""
    with pytest.raises(ValidationError):
        AccessibilityReport(dimension="security")


def test_serializes_camel_case() -> None:
    """Reports are dumped with camelCase keys."""
    report = AccessibilityReport(score=90, violations_found=2, passes=18)

    data = report.model_dump(by_alias=True)

    assert data["violationsFound"] == 2
    assert data["unavailableReason"] is None
    assert data["source"] == "extractor"


def test_accepts_camel_case_input() -> None:
    """Reports validate from camelCase keys."""
    report = AccessibilityReport.model_validate(
        {"score": 75, "violationsFound": 3, "passes": 9}
    )

    assert report.violations_found == 3


def test_reports_are_frozen() -> None:
    """Reports cannot be mutated after creation."""
    report = AccessibilityReport(score=90)

    with pytest.raises(ValidationError):
        report.score = 10  # type: ignore[misc]


def test_file_coverage_percent() -> None:
    """FileCoverage.percent handles empty resources."""
    script = FileCoverage(url="a.js", kind="js", total_bytes=200, covered_bytes=50)

    assert script.percent == 25.0
    assert FileCoverage(url="b.css", kind="css").percent == 0.0


def test_coverage_percent_matches_score() -> None:
    """coverage_percent mirrors the score."""
    assert CoverageReport(score=61.5).coverage_percent == 61.5


def test_coverage_percent_is_persisted() -> None:
    """coveragePercent is written to JSON and ignored when read back."""
    report = CoverageReport(score=61.5)

    data = report.model_dump(by_alias=True)

    assert data["coveragePercent"] == 61.5
    assert CoverageReport.model_validate(data) == report


def test_security_passed_checks() -> None:
    """passed_checks counts passing sub-checks."""
    report = SecurityReport(headers=HeadersCheck(passed=True))

    assert report.passed_checks == 1


def test_inferred_only_for_stdout() -> None:
    """Only stdout-sourced reports are inferred."""
    assert AccessibilityReport(source="stdout").inferred is True
    assert AccessibilityReport(source="side-channel").inferred is False
