"""Tests for the accessibility extractor."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import Error as PlaywrightError

from songlist.quality_suite.extractors.accessibility import (
    AXE_LOADED_SCRIPT,
    AccessibilityExtractor,
    build_accessibility_report,
    score_accessibility,
)

AXE_RESULTS = {
    "violations": [
        {
            "id": "image-alt",
            "impact": "critical",
            "description": "Ensures <img> elements have alternate text",
            "help": "Images must have alternate text",
            "helpUrl": "https://dequeuniversity.com/rules/axe/4.9/image-alt",
            "nodes": [{}, {}],
        },
        {
            "id": "color-contrast",
            "impact": "serious",
            "description": "Ensures sufficient contrast",
            "help": "Elements must have sufficient color contrast",
            "nodes": [{}],
        },
    ],
    "passes": [{"id": f"rule-{i}"} for i in range(18)],
}


@pytest.fixture
def page() -> MagicMock:
    """Create a page mock that already has axe loaded."""
    page = MagicMock()

    async def evaluate(script, arg=None):
        if script == AXE_LOADED_SCRIPT:
            return True
        return AXE_RESULTS

    page.evaluate = AsyncMock(side_effect=evaluate)
    page.add_script_tag = AsyncMock()
    return page


def test_score_accessibility() -> None:
    """Score is the share of passing rules, 100 without violations."""
    assert score_accessibility(18, 2) == 90.0
    assert score_accessibility(0, 0) == 100.0
    assert score_accessibility(5, 0) == 100.0
    assert score_accessibility(0, 3) == 0.0


def test_build_report_from_axe_results() -> None:
    """Violations become findings and deduplicated recommendations."""
    report = build_accessibility_report(AXE_RESULTS)

    assert report.score == 90.0
    assert report.passes == 18
    assert report.violations_found == 2
    assert report.findings[0].id == "image-alt"
    assert report.findings[0].element_count == 2
    assert report.findings[0].help_url.endswith("image-alt")
    assert report.recommendations == [
        "Images must have alternate text",
        "Elements must have sufficient color contrast",
    ]


def test_build_report_empty_results() -> None:
    """Empty results score 100."""
    report = build_accessibility_report({})

    assert report.score == 100.0
    assert report.findings == []


async def test_generate_report(page: MagicMock) -> None:
    """generate_report runs axe without injecting it again."""
    report = await AccessibilityExtractor(page).generate_report()

    assert report.score == 90.0
    page.add_script_tag.assert_not_awaited()


async def test_injects_axe_when_missing(page: MagicMock) -> None:
    """axe-core is injected from the configured URL when absent."""

    async def evaluate(script, arg=None):
        if script == AXE_LOADED_SCRIPT:
            return False
        return {"violations": [], "passes": []}

    page.evaluate = AsyncMock(side_effect=evaluate)

    extractor = AccessibilityExtractor(page, axe_script_url="http://cdn/axe.js")
    await extractor.generate_report()

    page.add_script_tag.assert_awaited_once_with(url="http://cdn/axe.js")


async def test_scan_element_passes_context(page: MagicMock) -> None:
    """scan_element limits the scan to a selector."""
    await AccessibilityExtractor(page).scan_element("#song-table")

    _, context = page.evaluate.await_args.args
    assert context == {"include": ["#song-table"]}


async def test_collect_when_injection_fails(page: MagicMock) -> None:
    """A failed injection yields an unavailable report."""
    page.evaluate = AsyncMock(return_value=False)
    page.add_script_tag = AsyncMock(side_effect=PlaywrightError("blocked by CSP"))

    report = await AccessibilityExtractor(page).collect()

    assert report.available is False
    assert "blocked by CSP" in report.unavailable_reason


async def test_check_keyboard_navigation(page: MagicMock) -> None:
    """Unfocusable elements and missing indicators are reported."""
    focusable = MagicMock()
    focusable.focus = AsyncMock()
    focusable.evaluate = AsyncMock(side_effect=[True, False])
    broken = MagicMock()
    broken.focus = AsyncMock(side_effect=PlaywrightError("detached"))

    locators = {"a.ok": focusable, "a.broken": broken}
    page.locator = MagicMock(
        side_effect=lambda selector: MagicMock(first=locators[selector])
    )

    issues = await AccessibilityExtractor(page).check_keyboard_navigation(
        ["a.ok", "a.broken"]
    )

    assert issues == [
        "Element a.ok has no visible focus indicator",
        "Could not test keyboard navigation for a.broken: detached",
    ]
