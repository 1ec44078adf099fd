"""Application code coverage over the Chrome DevTools Protocol."""

import logging
from collections.abc import Iterable, Sequence
from typing import Any

from playwright.async_api import CDPSession, Page
from playwright.async_api import Error as PlaywrightError

from songlist.quality_suite.extractors.base import MetricExtractor
from songlist.quality_suite.models.dimension_report import CoverageReport, FileCoverage
from songlist.quality_suite.models.suite_config import CoverageSettings

logger = logging.getLogger(__name__)

type ByteRange = tuple[int, int]

LOW_COVERAGE_THRESHOLD = 80.0

LOW_COVERAGE_RECOMMENDATIONS = [
    "Consider adding more interaction tests to increase application coverage",
    "Focus on testing core application functionality beyond header elements",
]
GOOD_COVERAGE_RECOMMENDATIONS = [
    "Good application coverage for tested components!",
    "Consider expanding to test main application features",
]


def union_length(ranges: Iterable[ByteRange], limit: int | None = None) -> int:
    """Return the number of distinct offsets covered by half-open ranges.

    Overlapping ranges count once. With ``limit`` every range is clipped to
    ``[0, limit)`` first, so the result never exceeds the source length.
    """
    clipped = []
    for start, end in ranges:
        start = max(start, 0)
        if limit is not None:
            end = min(end, limit)
        if end > start:
            clipped.append((start, end))

    total = 0
    current_start = current_end = None
    for start, end in sorted(clipped):
        if current_end is None or start > current_end:
            if current_end is not None:
                total += current_end - current_start
            current_start, current_end = start, end
        else:
            current_end = max(current_end, end)
    if current_end is not None:
        total += current_end - current_start
    return total


def is_app_resource(url: str | None, settings: CoverageSettings) -> bool:
    """Return True when ``url`` belongs to the application under test."""
    if not url:
        return False
    if any(pattern in url for pattern in settings.exclude_patterns):
        return False
    if settings.include_patterns:
        return any(pattern in url for pattern in settings.include_patterns)
    return True


def build_coverage_report(files: Sequence[FileCoverage]) -> CoverageReport:
    """Aggregate per-resource coverage into a report."""
    total_bytes = sum(f.total_bytes for f in files)
    covered = sum(f.covered_bytes for f in files)
    percent = covered / total_bytes * 100 if total_bytes else 0.0

    recommendations = (
        LOW_COVERAGE_RECOMMENDATIONS
        if percent < LOW_COVERAGE_THRESHOLD
        else GOOD_COVERAGE_RECOMMENDATIONS
    )
    return CoverageReport(
        score=percent,
        total_files=len(files),
        total_bytes=total_bytes,
        covered_bytes=covered,
        files=list(files),
        recommendations=list(recommendations),
    )


class CoverageExtractor(MetricExtractor[CoverageReport]):
    """Collects JS and CSS byte coverage of application resources.

    Chromium only. ``start`` must run before navigation so that scripts and
    stylesheets of the initial load are tracked.
    """

    report_type = CoverageReport

    def __init__(self, page: Page, settings: CoverageSettings | None = None) -> None:
        """Initialize extractor with resource filters."""
        super().__init__(page)
        self.settings = settings or CoverageSettings()
        self._session: CDPSession | None = None
        self._stylesheets: dict[str, str] = {}

    @property
    def started(self) -> bool:
        """Return True while coverage is being collected."""
        return self._session is not None

    async def start(self) -> None:
        """Begin collecting coverage; a no-op outside Chromium."""
        try:
            session = await self.page.context.new_cdp_session(self.page)
        except PlaywrightError as e:
            logger.warning(f"Coverage API not available (requires Chromium): {e}")
            return

        session.on("CSS.styleSheetAdded", self._on_stylesheet_added)
        await session.send("Profiler.enable")
        await session.send("Debugger.enable")
        await session.send(
            "Profiler.startPreciseCoverage", {"callCount": True, "detailed": True}
        )
        await session.send("DOM.enable")
        await session.send("CSS.enable")
        await session.send("CSS.startRuleUsageTracking")
        self._session = session
        logger.info("Started application code coverage collection")

    async def generate_report(self) -> CoverageReport:
        """Stop collection and compute coverage."""
        session = self._session
        if session is None:
            return self.unavailable("Coverage only available in Chromium browser")

        try:
            js_coverage = await session.send("Profiler.takePreciseCoverage")
            css_usage = await session.send("CSS.stopRuleUsageTracking")
            await session.send("Profiler.stopPreciseCoverage")

            files = await self._js_files(session, js_coverage.get("result", []))
            files += await self._css_files(session, css_usage.get("ruleUsage", []))
        finally:
            self._session = None
            await session.detach()

        report = build_coverage_report(files)
        logger.info(
            f"Coverage: {report.covered_bytes}/{report.total_bytes} bytes "
            f"across {report.total_files} file(s)"
        )
        return report

    def _on_stylesheet_added(self, params: dict[str, Any]) -> None:
        header = params.get("header", {})
        self._stylesheets[header.get("styleSheetId", "")] = header.get(
            "sourceURL", ""
        )

    async def _js_files(
        self, session: CDPSession, scripts: list[dict[str, Any]]
    ) -> list[FileCoverage]:
        files: list[FileCoverage] = []
        for script in scripts:
            url = script.get("url")
            if not is_app_resource(url, self.settings):
                continue
            source = await session.send(
                "Debugger.getScriptSource", {"scriptId": script["scriptId"]}
            )
            length = len(source.get("scriptSource", ""))
            ranges = [
                (r["startOffset"], r["endOffset"])
                for function in script.get("functions", [])
                for r in function.get("ranges", [])
                if r.get("count", 0) > 0
            ]
            files.append(
                FileCoverage(
                    url=url,
                    kind="js",
                    total_bytes=length,
                    covered_bytes=union_length(ranges, length),
                )
            )
        return files

    async def _css_files(
        self, session: CDPSession, rule_usage: list[dict[str, Any]]
    ) -> list[FileCoverage]:
        used: dict[str, list[ByteRange]] = {}
        for rule in rule_usage:
            if rule.get("used"):
                used.setdefault(rule["styleSheetId"], []).append(
                    (int(rule["startOffset"]), int(rule["endOffset"]))
                )

        files: list[FileCoverage] = []
        for sheet_id, url in self._stylesheets.items():
            if not is_app_resource(url, self.settings):
                continue
            text = await session.send("CSS.getStyleSheetText", {"styleSheetId": sheet_id})
            length = len(text.get("text", ""))
            files.append(
                FileCoverage(
                    url=url,
                    kind="css",
                    total_bytes=length,
                    covered_bytes=union_length(used.get(sheet_id, []), length),
                )
            )
        return files
