"""Build unified report data from a test run and its collected metrics."""

import logging
from collections.abc import Sequence
from pathlib import Path

from songlist.quality_suite.aggregator import calculate_summary
from songlist.quality_suite.models.dimension_report import (
    REPORT_TYPES,
    DimensionReport,
    utc_now,
)
from songlist.quality_suite.models.suite_config import SuiteConfig
from songlist.quality_suite.models.test_outcome import TestOutcome
from songlist.quality_suite.models.unified_report import (
    DimensionReports,
    ReportMetadata,
    UnifiedReportData,
)
from songlist.quality_suite.result_parser import (
    collect_stdout,
    load_results_document,
    parse_results,
)
from songlist.quality_suite.session import load_side_channel
from songlist.quality_suite.stdout_scraper import scrape_metrics

logger = logging.getLogger(__name__)


class UnifiedReportGenerator:
    """Combines test outcomes with dimension reports from every source.

    Reports added explicitly or loaded from side-channel files are primary.
    Console output is scraped only to fill dimensions still missing after
    that, and never replaces a primary report.
    """

    def __init__(self, config: SuiteConfig) -> None:
        """Initialize generator with suite configuration."""
        self.config = config
        self._explicit: dict[str, DimensionReport] = {}

    def add_report(self, report: DimensionReport) -> None:
        """Register a report obtained directly from an extractor."""
        self._explicit[report.dimension] = report

    def generate(self, results_path: Path | None = None) -> UnifiedReportData:
        """Read the result document and assemble the report data.

        Raises:
            FileNotFoundError: If the result document doesn't exist
            ResultsParseError: If the result document is malformed

        """
        path = results_path or self.config.results_path
        logger.info(f"Reading test results from {path}")
        document = load_results_document(path)
        outcomes = parse_results(document)

        reports = self.collect_dimensions(
            console_text="\n".join(collect_stdout(document))
        )
        dimensions = DimensionReports(**reports)
        summary = calculate_summary(outcomes, dimensions)

        timestamp = utc_now()
        data = UnifiedReportData(
            summary=summary,
            test_results=outcomes,
            metadata=self._metadata(outcomes, timestamp.strftime("%Y%m%d-%H%M%S")),
            timestamp=timestamp,
            **reports,
        )
        logger.info(
            f"Report data ready: {summary.total_tests} tests, "
            f"health {summary.overall_health:.2f}"
        )
        return data

    def collect_dimensions(self, console_text: str = "") -> dict[str, DimensionReport]:
        """Return one report per dimension that any source provided."""
        reports = load_side_channel(self.config.side_channel_dir)
        reports.update(self._explicit)

        missing = [name for name in REPORT_TYPES if name not in reports]
        if missing and console_text:
            scraped = scrape_metrics(console_text)
            for dimension in missing:
                if report := scraped.to_report(dimension):
                    logger.info(f"Using console output for {dimension}")
                    reports[dimension] = report

        for dimension in REPORT_TYPES:
            if dimension not in reports:
                logger.warning(f"No {dimension} data available")
        return reports

    def _metadata(self, outcomes: Sequence[TestOutcome], run_id: str) -> ReportMetadata:
        browsers = sorted({o.browser for o in outcomes})
        return ReportMetadata(
            project_name=self.config.metadata.project_name,
            version=self.config.metadata.version,
            environment=self.config.metadata.environment,
            browser=", ".join(browsers) or "chromium",
            test_run=f"run-{run_id}",
            base_url=self.config.base_url,
        )
