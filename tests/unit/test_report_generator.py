"""Tests for unified report generation."""

import json
from pathlib import Path

import pytest

from songlist.quality_suite.models.dimension_report import (
    AccessibilityReport,
    CoverageReport,
    PerformanceReport,
    SecurityReport,
)
from songlist.quality_suite.models.suite_config import SuiteConfig
from songlist.quality_suite.report_generator import UnifiedReportGenerator
from songlist.quality_suite.result_parser import ResultsParseError
from songlist.quality_suite.session import MetricsSession

CONSOLE_LINES = [
    "♿ Accessibility Score: 10.0%",
    "⚡ Performance Score: 80.0%",
    "Performance Issues: [Page load time is slow (>5s)]",
]


def _spec(index: int, status: str) -> dict:
    stdout = [{"text": line} for line in CONSOLE_LINES] if index == 0 else []
    return {
        "title": f"test {index} @smoke",
        "tests": [
            {
                "projectName": "chromium",
                "results": [{"status": status, "duration": 50, "stdout": stdout}],
            }
        ],
    }


def _document(passed: int, failed: int) -> dict:
    statuses = ["passed"] * passed + ["failed"] * failed
    return {
        "suites": [
            {
                "title": "song-library.spec.ts",
                "file": "song-library.spec.ts",
                "specs": [_spec(i, status) for i, status in enumerate(statuses)],
            }
        ]
    }


@pytest.fixture
def config(tmp_path: Path) -> SuiteConfig:
    """Create a configuration rooted in a temporary directory."""
    results = tmp_path / "json" / "results.json"
    results.parent.mkdir()
    results.write_text(json.dumps(_document(8, 2)))
    return SuiteConfig(
        results_path=results,
        output_dir=tmp_path / "reports",
        side_channel_dir=tmp_path,
    )


def test_generate_summary(config: SuiteConfig) -> None:
    """The generated data carries outcomes and the computed summary."""
    data = UnifiedReportGenerator(config).generate()

    assert len(data.test_results) == 10
    assert data.summary.pass_rate == 80.0
    assert data.summary.tag_metrics["smoke"].total == 10
    assert data.metadata.browser == "chromium"
    assert data.metadata.test_run.startswith("run-")
    assert data.metadata.base_url == config.base_url


def test_stdout_fills_missing_dimensions(config: SuiteConfig) -> None:
    """Dimensions without primary data are recovered from console output."""
    data = UnifiedReportGenerator(config).generate()

    assert data.performance is not None
    assert data.performance.source == "stdout"
    assert data.performance.score == 80.0
    assert data.performance.recommendations == ["Page load time is slow (>5s)"]
    assert data.coverage is None
    assert data.summary.coverage == 0.0


def test_side_channel_not_overwritten_by_stdout(config: SuiteConfig) -> None:
    """Persisted reports win over scraped console values."""
    session = MetricsSession(config.side_channel_dir)
    session.record(AccessibilityReport(score=90, passes=9, violations_found=1))
    session.flush()

    data = UnifiedReportGenerator(config).generate()

    assert data.accessibility is not None
    assert data.accessibility.source == "side-channel"
    assert data.accessibility.score == 90
    assert data.summary.accessibility == 90


def test_explicit_reports_are_primary(config: SuiteConfig) -> None:
    """Reports added directly take precedence over every other source."""
    generator = UnifiedReportGenerator(config)
    generator.add_report(PerformanceReport(score=55))
    generator.add_report(CoverageReport(score=70))
    generator.add_report(SecurityReport(score=100))
    generator.add_report(AccessibilityReport(score=90))

    data = generator.generate()

    assert data.performance.score == 55
    assert data.performance.source == "extractor"
    assert data.summary.overall_health == pytest.approx(
        80 * 0.35 + 70 * 0.15 + 55 * 0.15 + 90 * 0.15 + 100 * 0.20
    )


def test_generate_with_explicit_path(config: SuiteConfig, tmp_path: Path) -> None:
    """An explicit path overrides the configured one."""
    other = tmp_path / "other.json"
    other.write_text(json.dumps(_document(1, 0)))

    data = UnifiedReportGenerator(config).generate(other)

    assert data.summary.total_tests == 1
    assert data.summary.pass_rate == 100.0


def test_generate_malformed_document(config: SuiteConfig) -> None:
    """A malformed document raises ResultsParseError."""
    config.results_path.write_text("[]")

    with pytest.raises(ResultsParseError):
        UnifiedReportGenerator(config).generate()


def test_generate_missing_document(config: SuiteConfig, tmp_path: Path) -> None:
    """A missing document raises FileNotFoundError."""
    with pytest.raises(FileNotFoundError):
        UnifiedReportGenerator(config).generate(tmp_path / "missing.json")
