"""End-to-end tests for the header navigation."""

import pytest
from playwright.async_api import Page

from songlist.quality_suite.extractors.accessibility import AccessibilityExtractor
from songlist.quality_suite.extractors.performance import PerformanceExtractor
from songlist.quality_suite.pages.header_page import HEADER_LINKS, HeaderPage

pytestmark = pytest.mark.e2e


@pytest.mark.smoke
async def test_header_links_visible(loaded_page: Page) -> None:
    """At least one header link is shown."""
    header = HeaderPage(loaded_page)
    await header.wait_for_header_load()

    visibility = await header.links_visibility()

    assert any(visibility.values())


async def test_header_links_have_targets(loaded_page: Page) -> None:
    """Visible header links point somewhere."""
    header = HeaderPage(loaded_page)
    await header.wait_for_header_load()

    for name in HEADER_LINKS:
        info = await header.get_link_info(name)
        if info.visible:
            assert info.href


async def test_header_images_loaded(loaded_page: Page) -> None:
    """Every header link image finished loading."""
    header = HeaderPage(loaded_page)
    await header.wait_for_header_load()

    assert all((await header.images_loaded()).values())


@pytest.mark.accessibility
async def test_header_accessibility(loaded_page: Page) -> None:
    """The header has at most five axe violations."""
    report = await AccessibilityExtractor(loaded_page).scan_element(
        ".header-link-bar"
    )

    assert report.violations_found <= 5


@pytest.mark.performance
async def test_header_render_time(loaded_page: Page) -> None:
    """The header renders within two seconds."""
    extractor = PerformanceExtractor(loaded_page)

    assert await extractor.measure_element_render_time(".header-link-bar") < 2000
