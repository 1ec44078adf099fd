"""Common page object behaviour."""

import logging
from datetime import UTC, datetime
from pathlib import Path

from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

logger = logging.getLogger(__name__)

SCREENSHOT_DIR = Path("test-results/screenshots")


class BasePage:
    """Base page object wrapping a Playwright page."""

    def __init__(self, page: Page) -> None:
        """Initialize page object."""
        self.page = page

    async def navigate_to(self, url: str) -> None:
        """Navigate to ``url``."""
        await self.page.goto(url)
        logger.info(f"Navigated to: {url}")

    async def wait_for_element(self, selector: str, timeout: float = 10000) -> None:
        """Wait until ``selector`` is visible."""
        await self.page.wait_for_selector(selector, state="visible", timeout=timeout)

    async def click_element(self, selector: str) -> None:
        """Click an element once it is visible."""
        element = self.page.locator(selector)
        await element.wait_for(state="visible")
        await element.click()
        logger.info(f"Clicked element: {selector}")

    async def fill_input(self, selector: str, value: str) -> None:
        """Replace the value of an input."""
        element = self.page.locator(selector)
        await element.wait_for(state="visible")
        await element.clear()
        await element.fill(value)
        logger.info(f"Filled input {selector} with value: {value}")

    async def get_text_content(self, selector: str) -> str:
        """Return the text of a visible element, empty when it has none."""
        element = self.page.locator(selector)
        await element.wait_for(state="visible")
        return await element.text_content() or ""

    async def take_screenshot(
        self, name: str, directory: Path = SCREENSHOT_DIR
    ) -> Path:
        """Save a full-page screenshot with a timestamped name."""
        stamp = datetime.now(UTC).strftime("%Y-%m-%dT%H-%M-%S-%f")
        path = directory / f"{name}-{stamp}.png"
        await self.page.screenshot(path=path, full_page=True)
        logger.info(f"Screenshot saved: {path}")
        return path

    async def is_element_visible(self, selector: str, timeout: float = 2000) -> bool:
        """Return True when ``selector`` becomes visible within ``timeout``."""
        try:
            await self.page.wait_for_selector(
                selector, state="visible", timeout=timeout
            )
        except PlaywrightTimeoutError:
            return False
        return True

    async def wait_for_page_load(self) -> None:
        """Wait until the network is idle."""
        await self.page.wait_for_load_state("networkidle")
        logger.info("Page loaded completely")

    async def get_page_title(self) -> str:
        """Return the document title."""
        return await self.page.title()

    @property
    def current_url(self) -> str:
        """Return the current page URL."""
        return self.page.url
