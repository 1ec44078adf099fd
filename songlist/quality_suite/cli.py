"""CLI entry point for the song library quality suite."""

import logging
import sys
from pathlib import Path

import typer

from songlist.quality_suite.config_loader import ConfigError, load_suite_config
from songlist.quality_suite.models.suite_config import SuiteConfig
from songlist.quality_suite.renderer import ReportRenderer
from songlist.quality_suite.report_generator import UnifiedReportGenerator
from songlist.quality_suite.result_parser import ResultsParseError
from songlist.quality_suite.server import DEFAULT_PORT, run_server

# Configure logging - force reconfiguration
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stderr,
    force=True,  # Force reconfiguration even if already set up
)
logger = logging.getLogger(__name__)

app = typer.Typer()


@app.command()
def report(
    results_path: Path | None = typer.Argument(  # noqa: B008
        None, help="Test-run result document (JSON)"
    ),
    output_dir: Path | None = typer.Option(  # noqa: B008
        None, help="Directory for rendered reports"
    ),
    config: Path | None = typer.Option(  # noqa: B008
        None, help="Path to quality-suite.yaml"
    ),
    side_channel_dir: Path | None = typer.Option(  # noqa: B008
        None, help="Directory holding per-dimension metric files"
    ),
) -> None:
    """Generate the unified HTML and JSON report for a test run."""
    try:
        suite_config = _load_config(config, results_path, output_dir, side_channel_dir)
    except ConfigError as e:
        logger.error(f"Failed to load configuration: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    path = suite_config.results_path
    logger.info(f"Looking for test results at: {path}")
    if not path.is_file():
        typer.echo(f"Error: test results not found at {path}", err=True)
        _list_siblings(path)
        raise typer.Exit(code=1)

    generator = UnifiedReportGenerator(suite_config)
    try:
        data = generator.generate(path)
    except ResultsParseError as e:
        logger.error(f"Failed to parse test results: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    try:
        rendered = ReportRenderer(suite_config.output_dir).render(data)
    except OSError as e:
        logger.error(f"Failed to write report: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    summary = data.summary
    logger.info(
        f"Tests: {summary.passed_tests}/{summary.total_tests} passed "
        f"({summary.pass_rate:.2f}%), overall health {summary.overall_health:.2f}"
    )
    typer.echo(f"Unified report generated: {rendered.html_path}")
    typer.echo(f"Latest report: {rendered.latest_html_path}")


@app.command()
def serve(
    directory: Path = typer.Option(  # noqa: B008
        Path("test-results/unified-reports"),
        "--dir",
        help="Directory containing rendered reports",
    ),
    port: int = typer.Option(DEFAULT_PORT, help="Port to listen on"),
) -> None:
    """Serve rendered reports over HTTP."""
    if not directory.is_dir():
        typer.echo(f"Error: report directory not found: {directory}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"Report server running at http://localhost:{port}")
    typer.echo("Press Ctrl+C to stop the server")
    run_server(directory, port)


def _load_config(
    config_path: Path | None,
    results_path: Path | None,
    output_dir: Path | None,
    side_channel_dir: Path | None,
) -> SuiteConfig:
    """Load configuration and apply command line overrides."""
    suite_config = load_suite_config(config_path)
    overrides = {
        "results_path": results_path,
        "output_dir": output_dir,
        "side_channel_dir": side_channel_dir,
    }
    return suite_config.model_copy(
        update={k: v for k, v in overrides.items() if v is not None}
    )


def _list_siblings(path: Path) -> None:
    """Echo the files next to a missing input to help locate it."""
    parent = path.parent
    if not parent.is_dir():
        typer.echo(f"Directory does not exist: {parent}", err=True)
        return
    entries = sorted(p.name for p in parent.iterdir())
    typer.echo(f"Files in {parent}: {', '.join(entries) or '(empty)'}", err=True)


if __name__ == "__main__":  # pragma: no cover
    app()
