"""Models for the aggregated unified report."""

from datetime import datetime

from pydantic import Field

from songlist.quality_suite.models.base import Model
from songlist.quality_suite.models.dimension_report import (
    AccessibilityReport,
    CoverageReport,
    DimensionReport,
    PerformanceReport,
    PwaReport,
    SecurityReport,
    utc_now,
)
from songlist.quality_suite.models.test_outcome import TestOutcome


class TagMetrics(Model):
    """Outcome statistics for one tag."""

    total: int = 0
    passed: int = 0
    failed: int = 0
    avg_duration: float = 0.0
    success_rate: float = 0.0


class FlakyTest(Model):
    """A test whose attempts disagreed or needed retries."""

    test_id: str
    retries: int
    inconsistent_results: bool


class ReportSummary(Model):
    """Counts, rates and weighted health score of a run."""

    total_tests: int = 0
    passed_tests: int = 0
    failed_tests: int = 0
    skipped_tests: int = 0
    pass_rate: float = Field(default=0.0, description="Percentage in [0, 100]")
    total_duration: float = Field(default=0.0, description="Milliseconds")
    coverage: float = 0.0
    performance: float = 0.0
    accessibility: float = 0.0
    security: float = 0.0
    overall_health: float = Field(default=0.0, description="Weighted score")
    tag_metrics: dict[str, TagMetrics] = Field(default_factory=dict)
    flaky_tests: list[FlakyTest] = Field(default_factory=list)


class ReportMetadata(Model):
    """Free-form run metadata."""

    project_name: str = "Song Library Test Suite"
    version: str = "1.0.0"
    environment: str = "Test"
    browser: str = "chromium"
    test_run: str = ""
    base_url: str | None = None


class DimensionReports(Model):
    """One optional report per scored dimension."""

    accessibility: AccessibilityReport | None = None
    performance: PerformanceReport | None = None
    coverage: CoverageReport | None = None
    security: SecurityReport | None = None
    pwa: PwaReport | None = None

    def score(self, dimension: str) -> float:
        """Return the score of a dimension, zero when absent or unavailable."""
        report: DimensionReport | None = getattr(self, dimension)
        if report is None or not report.available:
            return 0.0
        return report.score


class UnifiedReportData(Model):
    """Aggregate root persisted as JSON and rendered as HTML."""

    summary: ReportSummary = Field(default_factory=ReportSummary)
    test_results: list[TestOutcome] = Field(default_factory=list)
    accessibility: AccessibilityReport | None = None
    performance: PerformanceReport | None = None
    coverage: CoverageReport | None = None
    security: SecurityReport | None = None
    pwa: PwaReport | None = None
    metadata: ReportMetadata = Field(default_factory=ReportMetadata)
    timestamp: datetime = Field(default_factory=utc_now)

    @property
    def dimensions(self) -> DimensionReports:
        """Return the dimension reports as one bundle."""
        return DimensionReports(
            accessibility=self.accessibility,
            performance=self.performance,
            coverage=self.coverage,
            security=self.security,
            pwa=self.pwa,
        )
