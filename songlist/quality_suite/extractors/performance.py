"""Performance inspection from browser paint, navigation and resource timing."""

import logging
from collections.abc import Mapping
from typing import Any

from playwright.async_api import Page

from songlist.quality_suite.extractors.base import MetricExtractor
from songlist.quality_suite.models.dimension_report import Finding, PerformanceReport
from songlist.quality_suite.models.suite_config import PerformanceThresholds

logger = logging.getLogger(__name__)

TIMINGS_SCRIPT = """
async () => {
    const lcp = await new Promise((resolve) => {
        let value = 0;
        try {
            const observer = new PerformanceObserver((list) => {
                const entries = list.getEntries();
                if (entries.length > 0) {
                    value = entries[entries.length - 1].startTime;
                }
            });
            observer.observe({ type: 'largest-contentful-paint', buffered: true });
            setTimeout(() => { observer.disconnect(); resolve(value); }, 1000);
        } catch (error) {
            resolve(0);
        }
    });
    const nav = performance.getEntriesByType('navigation')[0];
    const paint = (name) => (performance.getEntriesByName(name)[0] || {}).startTime || 0;
    const resources = performance.getEntriesByType('resource');
    return {
        firstPaint: paint('first-paint'),
        firstContentfulPaint: paint('first-contentful-paint'),
        largestContentfulPaint: lcp,
        domContentLoaded: nav ? nav.domContentLoadedEventEnd : 0,
        loadTime: nav ? nav.loadEventEnd : 0,
        timeToFirstByte: nav ? nav.responseStart - nav.requestStart : 0,
        totalRequests: resources.length,
        totalBytes: resources.reduce((total, r) => total + (r.transferSize || 0), 0),
    };
}
"""


def build_performance_report(
    timings: Mapping[str, Any], thresholds: PerformanceThresholds
) -> PerformanceReport:
    """Score raw timings against thresholds.

    The score starts at 100 and loses a fixed penalty per exceeded threshold,
    never dropping below zero.
    """
    lcp = float(timings.get("largestContentfulPaint") or 0)
    first_paint = float(timings.get("firstPaint") or 0)
    load_time = float(timings.get("loadTime") or 0)
    requests = int(timings.get("totalRequests") or 0)

    checks = (
        (
            lcp > thresholds.largest_contentful_paint,
            thresholds.largest_contentful_paint_penalty,
            Finding(
                id="slow-lcp",
                impact="serious",
                description=(
                    f"Largest Contentful Paint is slow "
                    f"(>{thresholds.largest_contentful_paint / 1000:g}s)"
                ),
            ),
            "Optimize largest content element loading",
        ),
        (
            first_paint > thresholds.first_paint,
            thresholds.first_paint_penalty,
            Finding(
                id="slow-first-paint",
                impact="moderate",
                description=(
                    f"First paint is slow (>{thresholds.first_paint / 1000:g}s)"
                ),
            ),
            "Optimize critical rendering path",
        ),
        (
            load_time > thresholds.load_time,
            thresholds.load_time_penalty,
            Finding(
                id="slow-load",
                impact="serious",
                description=(
                    f"Page load time is slow (>{thresholds.load_time / 1000:g}s)"
                ),
            ),
            "Minimize resource loading and optimize assets",
        ),
        (
            requests > thresholds.max_requests,
            thresholds.max_requests_penalty,
            Finding(
                id="too-many-requests",
                impact="moderate",
                description=f"Too many HTTP requests ({requests})",
            ),
            "Combine and minify resources",
        ),
    )

    score = 100.0
    findings: list[Finding] = []
    recommendations: list[str] = []
    for exceeded, penalty, finding, recommendation in checks:
        if exceeded:
            score -= penalty
            findings.append(finding)
            recommendations.append(recommendation)

    return PerformanceReport(
        score=max(score, 0.0),
        findings=findings,
        recommendations=recommendations,
        first_paint=first_paint,
        first_contentful_paint=float(timings.get("firstContentfulPaint") or 0),
        largest_contentful_paint=lcp,
        dom_content_loaded=float(timings.get("domContentLoaded") or 0),
        load_time=load_time,
        time_to_first_byte=float(timings.get("timeToFirstByte") or 0),
        total_requests=requests,
        total_bytes=int(timings.get("totalBytes") or 0),
    )


class PerformanceExtractor(MetricExtractor[PerformanceReport]):
    """Reads timing entries exposed by the browser."""

    report_type = PerformanceReport

    def __init__(
        self, page: Page, thresholds: PerformanceThresholds | None = None
    ) -> None:
        """Initialize extractor with scoring thresholds."""
        super().__init__(page)
        self.thresholds = thresholds or PerformanceThresholds()

    async def generate_report(self) -> PerformanceReport:
        """Measure timings and score them."""
        timings: dict[str, Any] = await self.page.evaluate(TIMINGS_SCRIPT)
        report = build_performance_report(timings, self.thresholds)
        logger.info(
            f"Performance: LCP={report.largest_contentful_paint:.0f}ms "
            f"load={report.load_time:.0f}ms requests={report.total_requests}"
        )
        return report

    async def measure_element_render_time(self, selector: str) -> float:
        """Return milliseconds until ``selector`` becomes visible."""
        start_time = await self.page.evaluate("() => performance.now()")
        await self.page.locator(selector).wait_for(state="visible")
        end_time = await self.page.evaluate("() => performance.now()")
        return float(end_time - start_time)
