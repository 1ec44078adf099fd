"""Page object for the header link bar."""

import logging

from playwright.async_api import Locator, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from songlist.quality_suite.models.base import Model
from songlist.quality_suite.pages.base_page import BasePage

logger = logging.getLogger(__name__)

HEADER_LINKS = ("Contact Us", "Employer Login", "Vendor Login")

IMAGE_LOADED_SCRIPT = "(img) => img.complete && img.naturalWidth > 0"


class LinkInfo(Model):
    """Text, target and visibility of a header link."""

    text: str
    href: str
    visible: bool


class HeaderPage(BasePage):
    """Header navigation: Contact Us, Employer Login and Vendor Login."""

    def __init__(self, page: Page) -> None:
        """Initialize header locators."""
        super().__init__(page)
        self.container = page.locator(".header-link-bar")
        self.links: dict[str, Locator] = {
            name: self._link(name) for name in HEADER_LINKS
        }

    def _link(self, name: str) -> Locator:
        by_image = (
            self.page.locator(".header-link-bar a")
            .filter(has=self.page.locator(f'img[alt="{name}"]'))
            .first
        )
        by_text = self.page.locator(f'.header-link-bar a:has-text("{name}")').first
        return by_image.or_(by_text)

    async def wait_for_header_load(self) -> None:
        """Wait for the header bar and its first link."""
        try:
            await self.container.wait_for(state="visible", timeout=10000)
            await self.links["Contact Us"].wait_for(state="visible", timeout=5000)
            logger.info("Header navigation loaded successfully")
        except PlaywrightTimeoutError:
            logger.warning("Header might not be fully loaded, continuing anyway")

    async def is_link_visible(self, name: str, timeout: float = 2000) -> bool:
        """Return True when the named link becomes visible."""
        try:
            await self.links[name].wait_for(state="visible", timeout=timeout)
        except PlaywrightTimeoutError:
            return False
        return True

    async def links_visibility(self) -> dict[str, bool]:
        """Return visibility of every header link."""
        return {name: await self.is_link_visible(name) for name in HEADER_LINKS}

    async def get_link_href(self, name: str) -> str:
        """Return the href of the named link."""
        return await self.links[name].get_attribute("href") or ""

    async def get_link_info(self, name: str) -> LinkInfo:
        """Return text, href and visibility of the named link."""
        link = self.links[name]
        return LinkInfo(
            text=(await link.text_content() or "").strip(),
            href=await self.get_link_href(name),
            visible=await self.is_link_visible(name),
        )

    async def images_loaded(self) -> dict[str, bool]:
        """Return whether each header link image finished loading."""
        loaded: dict[str, bool] = {}
        for name in HEADER_LINKS:
            image = self.page.locator(f'img[alt="{name}"]').first
            loaded[name] = bool(await image.evaluate(IMAGE_LOADED_SCRIPT))
        return loaded
