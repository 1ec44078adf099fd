"""Page object for the song library table."""

import logging
from collections.abc import Sequence

from playwright.async_api import Locator, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from songlist.quality_suite.models.base import Model
from songlist.quality_suite.pages.base_page import BasePage

logger = logging.getLogger(__name__)

INITIAL_SONG_COUNT = 5

TABLE_COLUMNS = {
    "title": "title",
    "artist": "artist",
    "release_date": "releaseDay",
    "price": "price",
}


class SongEntry(Model):
    """Values shown in one song row."""

    title: str
    artist: str
    release_date: str
    price: str


def find_missing_fields(songs: Sequence[SongEntry]) -> list[str]:
    """Return one issue per blank field, e.g. ``Row 2: Missing artist``."""
    issues: list[str] = []
    for index, song in enumerate(songs):
        for field_name in TABLE_COLUMNS:
            if not getattr(song, field_name).strip():
                label = field_name.replace("_", " ")
                issues.append(f"Row {index}: Missing {label}")
    return issues


class SongLibraryPage(BasePage):
    """Header, date filter and song table of the library page."""

    def __init__(self, page: Page) -> None:
        """Initialize page locators."""
        super().__init__(page)
        self.page_header = page.locator("app-header header")
        self.title = page.locator("app-header header h2")

        self.date_filter = page.locator("#date-filter")
        self.date_filter_input = page.locator('#date-filter input[type="date"]')
        self.filter_button = page.locator('#date-filter button:has-text("Filter")')
        self.cancel_filter_button = page.locator(
            '#date-filter button:has-text("Cancel")'
        )
        self.add_song_button = page.locator('button:has-text("Add New Song")')

        self.song_table = page.locator("#song-table")
        self.song_rows = page.locator(".table_row")
        self.inputs = {
            field_name: page.locator(f'input[name="{name}"]')
            for field_name, name in TABLE_COLUMNS.items()
        }

    def column_header(self, field_name: str) -> Locator:
        """Return the locator of a table column header."""
        return self.page.locator(
            f'.table_header[data-name="{TABLE_COLUMNS[field_name]}"]'
        )

    async def get_title_text(self) -> str:
        """Return the page title shown in the app header."""
        return (await self.title.text_content() or "").strip()

    async def filter_buttons_visibility(self) -> dict[str, bool]:
        """Return visibility of the Filter and Cancel buttons."""
        return {
            "filter": await self.filter_button.is_visible(),
            "cancel": await self.cancel_filter_button.is_visible(),
        }

    async def column_headers_visibility(self) -> dict[str, bool]:
        """Return visibility of every column header."""
        try:
            await self.page.wait_for_selector(".table_header", timeout=5000)
        except PlaywrightTimeoutError:
            logger.warning("Table headers not rendered within 5s")
        return {
            field_name: await self.column_header(field_name).is_visible()
            for field_name in TABLE_COLUMNS
        }

    async def get_song_row_count(self) -> int:
        """Return the number of song rows."""
        count = await self.song_rows.count()
        logger.info(f"Song row count: {count}")
        return count

    async def get_song(self, index: int) -> SongEntry:
        """Return the values of the song at ``index``."""
        values = {
            field_name: await locator.nth(index).input_value()
            for field_name, locator in self.inputs.items()
        }
        return SongEntry(**values)

    async def get_all_songs(self) -> list[SongEntry]:
        """Return the values of every song row."""
        count = await self.get_song_row_count()
        return [await self.get_song(index) for index in range(count)]

    async def are_initial_songs_loaded(self) -> bool:
        """Return True when the seeded songs are shown."""
        return await self.get_song_row_count() == INITIAL_SONG_COUNT

    async def verify_required_fields(self) -> list[str]:
        """Return missing-field issues over every song row."""
        issues = find_missing_fields(await self.get_all_songs())
        if issues:
            logger.warning(f"Validation issues found: {issues}")
        return issues
