"""Minimal static HTTP server for browsing rendered reports."""

import logging
from pathlib import Path

from aiohttp import web

from songlist.quality_suite.renderer import LATEST_HTML

logger = logging.getLogger(__name__)

DEFAULT_PORT = 8080

REPORT_DIR = web.AppKey("report_dir", Path)


async def serve_report_file(request: web.Request) -> web.FileResponse:
    """Serve a file from the report directory; ``/`` maps to the latest report."""
    report_dir = request.app[REPORT_DIR]
    name = request.match_info["path"] or LATEST_HTML
    target = (report_dir / name).resolve()

    if not target.is_relative_to(report_dir) or not target.is_file():
        raise web.HTTPNotFound(text="File not found")
    return web.FileResponse(target)


def create_app(report_dir: Path) -> web.Application:
    """Create the report server application."""
    app = web.Application()
    app[REPORT_DIR] = report_dir.resolve()
    app.router.add_get("/{path:.*}", serve_report_file)
    return app


def run_server(report_dir: Path, port: int = DEFAULT_PORT) -> None:
    """Serve ``report_dir`` until interrupted."""
    logger.info(f"Serving reports from {report_dir} at http://localhost:{port}")
    web.run_app(create_app(report_dir), port=port)
