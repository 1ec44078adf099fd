"""Accessibility inspection with axe-core."""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from songlist.quality_suite.extractors.base import MetricExtractor
from songlist.quality_suite.models.dimension_report import (
    AccessibilityReport,
    Finding,
)
from songlist.quality_suite.models.suite_config import AXE_CDN_URL

logger = logging.getLogger(__name__)

AXE_LOADED_SCRIPT = "() => typeof window.axe !== 'undefined'"

AXE_RUN_SCRIPT = """
async (context) => {
    const results = await axe.run(context || document, {
        resultTypes: ['violations', 'passes'],
    });
    return { violations: results.violations, passes: results.passes };
}
"""

FOCUS_CHECK_SCRIPT = "(el) => document.activeElement === el"

FOCUS_INDICATOR_SCRIPT = """
(el) => {
    const styles = window.getComputedStyle(el);
    return styles.outlineStyle !== 'none' || styles.boxShadow !== 'none';
}
"""


def score_accessibility(passes: int, violations: int) -> float:
    """Return passes / (passes + violations) * 100, or 100 without violations."""
    if violations == 0:
        return 100.0
    return passes / (passes + violations) * 100


def violation_to_finding(violation: Mapping[str, Any]) -> Finding:
    """Convert an axe violation object to a finding."""
    return Finding(
        id=str(violation.get("id", "unknown")),
        impact=violation.get("impact"),
        description=str(violation.get("description", "")),
        help_url=violation.get("helpUrl"),
        element_count=len(violation.get("nodes") or []),
    )


def build_accessibility_report(results: Mapping[str, Any]) -> AccessibilityReport:
    """Build a report from raw axe results."""
    violations = list(results.get("violations") or [])
    passes = list(results.get("passes") or [])

    recommendations: list[str] = []
    for violation in violations:
        if (hint := violation.get("help")) and hint not in recommendations:
            recommendations.append(hint)

    return AccessibilityReport(
        score=score_accessibility(len(passes), len(violations)),
        passes=len(passes),
        violations_found=len(violations),
        findings=[violation_to_finding(v) for v in violations],
        recommendations=recommendations,
    )


class AccessibilityExtractor(MetricExtractor[AccessibilityReport]):
    """Runs axe-core against the page."""

    report_type = AccessibilityReport

    def __init__(self, page: Page, axe_script_url: str = AXE_CDN_URL) -> None:
        """Initialize extractor with the axe-core script location."""
        super().__init__(page)
        self.axe_script_url = axe_script_url

    async def generate_report(self) -> AccessibilityReport:
        """Scan the whole page."""
        results = await self._run_axe(None)
        report = build_accessibility_report(results)
        logger.info(
            f"Accessibility scan: {report.violations_found} violation(s), "
            f"{report.passes} pass(es)"
        )
        return report

    async def scan_element(self, selector: str) -> AccessibilityReport:
        """Scan only the subtree matching ``selector``."""
        results = await self._run_axe({"include": [selector]})
        return build_accessibility_report(results)

    async def check_keyboard_navigation(self, selectors: Sequence[str]) -> list[str]:
        """Return keyboard focus issues for the given selectors."""
        issues: list[str] = []
        for selector in selectors:
            element = self.page.locator(selector).first
            try:
                await element.focus()
                if not await element.evaluate(FOCUS_CHECK_SCRIPT):
                    issues.append(f"Element {selector} is not keyboard focusable")
                if not await element.evaluate(FOCUS_INDICATOR_SCRIPT):
                    issues.append(f"Element {selector} has no visible focus indicator")
            except PlaywrightError as e:
                issues.append(
                    f"Could not test keyboard navigation for {selector}: {e}"
                )
        return issues

    async def _run_axe(self, context: Mapping[str, Any] | None) -> dict[str, Any]:
        if not await self.page.evaluate(AXE_LOADED_SCRIPT):
            logger.info(f"Injecting axe-core from {self.axe_script_url}")
            await self.page.add_script_tag(url=self.axe_script_url)
        results: dict[str, Any] = await self.page.evaluate(AXE_RUN_SCRIPT, context)
        return results
