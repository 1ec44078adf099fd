"""Browser fixtures for end-to-end tests against the deployed application."""

import logging
from collections.abc import AsyncIterator

import pytest
from playwright.async_api import Page, async_playwright
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from songlist.quality_suite.config_loader import load_suite_config
from songlist.quality_suite.extractors.accessibility import AccessibilityExtractor
from songlist.quality_suite.extractors.coverage import CoverageExtractor
from songlist.quality_suite.extractors.performance import PerformanceExtractor
from songlist.quality_suite.extractors.pwa import PwaExtractor
from songlist.quality_suite.extractors.security import SecurityExtractor
from songlist.quality_suite.models.suite_config import SuiteConfig
from songlist.quality_suite.results_recorder import ResultsRecorder
from songlist.quality_suite.session import MetricsSession

logger = logging.getLogger(__name__)

recorder = ResultsRecorder()


def pytest_itemcollected(item: pytest.Item) -> None:
    """Record the tags of each browser test."""
    recorder.add_item(item)


def pytest_runtest_logreport(report: pytest.TestReport) -> None:
    """Record each phase of each browser test."""
    recorder.add_report(report)


def pytest_sessionfinish(session: pytest.Session) -> None:
    """Write the result document read by the report command."""
    recorder.write(load_suite_config().results_path)


@pytest.fixture
def suite_config() -> SuiteConfig:
    """Load the suite configuration from the working directory."""
    return load_suite_config()


@pytest.fixture
async def page() -> AsyncIterator[Page]:
    """Launch Chromium and yield a fresh page."""
    async with async_playwright() as playwright:
        browser = await playwright.chromium.launch()
        context = await browser.new_context(viewport={"width": 1280, "height": 720})
        yield await context.new_page()
        await context.close()
        await browser.close()


@pytest.fixture
async def loaded_page(page: Page, suite_config: SuiteConfig) -> AsyncIterator[Page]:
    """Navigate to the application and collect metrics on teardown.

    Coverage is started before navigation so the initial bundle is measured.
    Every dimension is recorded to the console and the side-channel files
    once the test body has finished.
    """
    coverage = CoverageExtractor(page, suite_config.coverage)
    await coverage.start()

    await page.goto(suite_config.base_url)
    try:
        await page.wait_for_load_state("networkidle", timeout=60000)
    except PlaywrightTimeoutError:
        logger.warning("Network idle timeout, falling back to DOM content loaded")
        await page.wait_for_load_state("domcontentloaded", timeout=10000)

    yield page

    session = MetricsSession(suite_config.side_channel_dir)
    await session.inspect(
        [
            PerformanceExtractor(page, suite_config.performance),
            AccessibilityExtractor(page, suite_config.axe_script_url),
            coverage,
            SecurityExtractor(page, suite_config.security),
            PwaExtractor(page),
        ]
    )
    session.flush()
