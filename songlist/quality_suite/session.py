"""Per-run metrics session shared by the extractors of one test run."""

import json
import logging
from collections.abc import Mapping, Sequence
from pathlib import Path

import typer
from pydantic import ValidationError

from songlist.quality_suite.extractors.base import MetricExtractor
from songlist.quality_suite.models.dimension_report import (
    REPORT_TYPES,
    DimensionReport,
)
from songlist.quality_suite.stdout_scraper import format_list_line, format_score_line

logger = logging.getLogger(__name__)

LIST_LABELS: Mapping[str, str] = {
    "coverage": "Coverage Recommendations",
    "performance": "Performance Issues",
    "accessibility": "Accessibility Recommendations",
}


def side_channel_path(directory: Path, dimension: str) -> Path:
    """Return the side-channel file path for a dimension."""
    return directory / f"{dimension}-data.json"


class MetricsSession:
    """Collects dimension reports during a run and persists them once.

    Each dimension keeps only its latest report. ``flush`` writes one
    side-channel file per dimension; concurrent workers overwrite each other
    (last writer wins).
    """

    def __init__(self, side_channel_dir: Path) -> None:
        """Initialize an empty session writing to ``side_channel_dir``."""
        self.side_channel_dir = side_channel_dir
        self._reports: dict[str, DimensionReport] = {}

    @property
    def reports(self) -> Mapping[str, DimensionReport]:
        """Return the recorded reports keyed by dimension."""
        return dict(self._reports)

    def record(self, report: DimensionReport) -> None:
        """Record a report and announce its score on the console."""
        self._reports[report.dimension] = report

        if not report.available:
            logger.warning(
                f"{report.dimension} unavailable: {report.unavailable_reason}"
            )
            return

        typer.echo(format_score_line(report.dimension, report.score))
        if label := LIST_LABELS.get(report.dimension):
            items = (
                [f.description for f in report.findings]
                if report.dimension == "performance"
                else list(report.recommendations)
            )
            typer.echo(format_list_line(label, items))
        if report.dimension == "security":
            for finding in report.findings:
                if finding.id.startswith("missing-"):
                    typer.echo(finding.description)

    async def inspect(self, extractors: Sequence[MetricExtractor]) -> None:
        """Run extractors one after another and record their reports."""
        for extractor in extractors:
            logger.info(f"Running {type(extractor).__name__}...")
            self.record(await extractor.collect())

    def flush(self) -> list[Path]:
        """Write every recorded report to its side-channel file.

        Raises:
            OSError: If the directory or a file cannot be written

        """
        self.side_channel_dir.mkdir(parents=True, exist_ok=True)
        written: list[Path] = []
        for dimension, report in self._reports.items():
            path = side_channel_path(self.side_channel_dir, dimension)
            path.write_text(report.model_dump_json(by_alias=True, indent=2))
            written.append(path)
        logger.info(f"Flushed {len(written)} side-channel file(s)")
        return written


def load_side_channel(directory: Path) -> dict[str, DimensionReport]:
    """Load persisted dimension reports.

    Missing files are skipped. Unreadable or invalid files are logged and
    skipped so that report generation can fall back to console output.
    """
    reports: dict[str, DimensionReport] = {}
    for dimension, report_type in REPORT_TYPES.items():
        path = side_channel_path(directory, dimension)
        if not path.exists():
            continue
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            report = report_type.model_validate(data)
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Could not load persisted {dimension} data: {e}")
            continue
        reports[dimension] = report.model_copy(update={"source": "side-channel"})
        logger.info(
            f"Loaded {dimension} data with {len(report.findings)} finding(s) "
            f"from {path}"
        )
    return reports
