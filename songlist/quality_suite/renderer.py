"""Render unified report data to HTML and JSON files."""

import logging
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape
from pydantic import BaseModel, ConfigDict

from songlist.quality_suite.models.unified_report import UnifiedReportData

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"
TEMPLATE_NAME = "unified_report.html.j2"

LATEST_HTML = "latest.html"
LATEST_JSON = "latest.json"

DIMENSION_TABS = (
    ("coverage", "Coverage"),
    ("performance", "Performance"),
    ("accessibility", "Accessibility"),
    ("security", "Security"),
    ("pwa", "PWA"),
)


def score_class(score: float) -> str:
    """Return the CSS class for a score band."""
    if score >= 80:
        return "good"
    if score >= 50:
        return "warn"
    return "poor"


def format_duration(milliseconds: float) -> str:
    """Format a duration in milliseconds for display."""
    if milliseconds >= 1000:
        return f"{milliseconds / 1000:.2f}s"
    return f"{milliseconds:.0f}ms"


def create_environment() -> Environment:
    """Create the Jinja2 environment used for report templates."""
    env = Environment(
        loader=FileSystemLoader(TEMPLATES_DIR),
        autoescape=select_autoescape(["html", "j2"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["score_class"] = score_class
    env.filters["duration"] = format_duration
    return env


class RenderedReport(BaseModel):
    """Paths written by one render."""

    model_config = ConfigDict(frozen=True)

    html_path: Path
    json_path: Path
    latest_html_path: Path
    latest_json_path: Path


class ReportRenderer:
    """Writes timestamped and ``latest`` copies of a report."""

    def __init__(self, output_dir: Path, environment: Environment | None = None) -> None:
        """Initialize renderer writing into ``output_dir``."""
        self.output_dir = output_dir
        self.environment = environment or create_environment()

    def render_html(self, data: UnifiedReportData) -> str:
        """Return the self-contained HTML document for ``data``."""
        template = self.environment.get_template(TEMPLATE_NAME)
        return template.render(
            data=data,
            summary=data.summary,
            metadata=data.metadata,
            dimension_tabs=DIMENSION_TABS,
        )

    def render(self, data: UnifiedReportData) -> RenderedReport:
        """Write the HTML and JSON reports.

        Raises:
            OSError: If the output directory or a file cannot be written

        """
        self.output_dir.mkdir(parents=True, exist_ok=True)
        stamp = data.timestamp.strftime("%Y-%m-%dT%H-%M-%S")

        html = self.render_html(data)
        payload = data.model_dump_json(by_alias=True, indent=2)

        rendered = RenderedReport(
            html_path=self.output_dir / f"unified-report-{stamp}.html",
            json_path=self.output_dir / f"unified-report-{stamp}.json",
            latest_html_path=self.output_dir / LATEST_HTML,
            latest_json_path=self.output_dir / LATEST_JSON,
        )
        rendered.html_path.write_text(html, encoding="utf-8")
        rendered.json_path.write_text(payload, encoding="utf-8")
        rendered.latest_html_path.write_text(html, encoding="utf-8")
        rendered.latest_json_path.write_text(payload, encoding="utf-8")

        logger.info(f"Unified report written to {rendered.html_path}")
        return rendered


def load_report(path: Path) -> UnifiedReportData:
    """Read a JSON report snapshot back into report data."""
    return UnifiedReportData.model_validate_json(path.read_text(encoding="utf-8"))
