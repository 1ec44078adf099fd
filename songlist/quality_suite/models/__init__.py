"""Data models for test outcomes, dimension reports and the unified report."""

from songlist.quality_suite.models.dimension_report import (
    AccessibilityReport,
    CoverageReport,
    DimensionReport,
    Finding,
    PerformanceReport,
    PwaReport,
    SecurityReport,
)
from songlist.quality_suite.models.results_document import ResultsDocument
from songlist.quality_suite.models.suite_config import SuiteConfig
from songlist.quality_suite.models.test_outcome import Attachment, TestOutcome
from songlist.quality_suite.models.unified_report import (
    DimensionReports,
    ReportMetadata,
    ReportSummary,
    UnifiedReportData,
)

__all__ = [
    "AccessibilityReport",
    "Attachment",
    "CoverageReport",
    "DimensionReport",
    "DimensionReports",
    "Finding",
    "PerformanceReport",
    "PwaReport",
    "ReportMetadata",
    "ReportSummary",
    "ResultsDocument",
    "SecurityReport",
    "SuiteConfig",
    "TestOutcome",
    "UnifiedReportData",
]
