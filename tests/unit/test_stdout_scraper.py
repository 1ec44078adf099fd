"""Tests for console output metric scraping."""

import pytest
from pydantic import ValidationError

from songlist.quality_suite.models.dimension_report import (
    PerformanceReport,
    SecurityReport,
)
from songlist.quality_suite.stdout_scraper import (
    format_list_line,
    format_score_line,
    scrape_metrics,
)

CONSOLE_TEXT = """
Running accessibility checks...
♿ Accessibility Score: 92.5%
Accessibility Recommendations: [Ensure images have alt text, Use sufficient contrast]
⚡ Performance Score: 65.0%
Performance Issues: [Largest Contentful Paint is slow (>2.5s), Page load time is slow (>5s)]
📈 Coverage: 41.3%
🔒 Security Score: 66.67%
Missing security header: content-security-policy
Missing security header: x-frame-options
Missing security header: content-security-policy
"""


def test_scrape_scores() -> None:
    """scrape_metrics recovers every score line."""
    scraped = scrape_metrics(CONSOLE_TEXT)

    assert scraped.score("accessibility") == 92.5
    assert scraped.score("performance") == 65.0
    assert scraped.score("coverage") == 41.3
    assert scraped.score("security") == 66.67


def test_scrape_miss_returns_zero() -> None:
    """An absent pattern yields zero without raising."""
    scraped = scrape_metrics("nothing to see here")

    assert scraped.score("coverage") == 0
    assert scraped.found("coverage") is False
    assert scraped.to_report("coverage") is None


def test_scrape_lists() -> None:
    """scrape_metrics splits bracketed recommendation lists."""
    scraped = scrape_metrics(CONSOLE_TEXT)

    assert scraped.recommendations["accessibility"] == [
        "Ensure images have alt text",
        "Use sufficient contrast",
    ]
    assert scraped.recommendations["performance"] == [
        "Largest Contentful Paint is slow (>2.5s)",
        "Page load time is slow (>5s)",
    ]


def test_scrape_missing_headers_deduplicated() -> None:
    """Missing header lines are collected once each."""
    scraped = scrape_metrics(CONSOLE_TEXT)

    assert list(scraped.missing_headers) == [
        "content-security-policy",
        "x-frame-options",
    ]


def test_security_defaults_for_medium_score() -> None:
    """Security recommendations default by score band when none were printed."""
    scraped = scrape_metrics(CONSOLE_TEXT)

    assert scraped.recommendations["security"] == [
        "Consider additional security headers for enhanced protection",
        "Review and strengthen existing security measures",
    ]


def test_security_recommendations_scraped() -> None:
    """Printed security recommendations take precedence over defaults."""
    scraped = scrape_metrics(
        "🔒 Security Score: 33.33%\nAdd referrer-policy header for enhanced security"
    )

    assert scraped.recommendations["security"] == [
        "Add referrer-policy header for enhanced security"
    ]


def test_to_report_marks_stdout_source() -> None:
    """Scraped reports are tagged as inferred."""
    scraped = scrape_metrics(CONSOLE_TEXT)

    report = scraped.to_report("performance")

    assert isinstance(report, PerformanceReport)
    assert report.source == "stdout"
    assert report.inferred is True
    assert report.score == 65.0


def test_to_report_security_findings() -> None:
    """Scraped security reports list missing headers as findings."""
    report = scrape_metrics(CONSOLE_TEXT).to_report("security")

    assert isinstance(report, SecurityReport)
    assert [f.id for f in report.findings] == [
        "missing-content-security-policy",
        "missing-x-frame-options",
    ]


def test_format_score_line_is_scrapable() -> None:
    """Lines produced by format_score_line are read back by the scraper."""
    text = "\n".join(
        [
            format_score_line("coverage", 55.0),
            format_score_line("pwa", 40),
            format_list_line("Coverage Recommendations", ["Add tests"]),
        ]
    )

    scraped = scrape_metrics(text)

    assert format_score_line("coverage", 55.0) == "📈 Coverage: 55.0%"
    assert scraped.score("coverage") == 55.0
    assert scraped.score("pwa") == 40.0
    assert scraped.recommendations["coverage"] == ["Add tests"]


def test_scraped_metrics_are_immutable() -> None:
    """Scraped values cannot be reassigned after scraping."""
    scraped = scrape_metrics(CONSOLE_TEXT)

    with pytest.raises(ValidationError):
        scraped.scores = {}
    assert scraped.model_dump()["scores"]["performance"] == 65.0
