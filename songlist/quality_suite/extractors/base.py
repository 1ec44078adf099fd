"""Abstract base class for page metric extractors."""

import logging
from abc import ABC, abstractmethod

import aiohttp
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from songlist.quality_suite.models.dimension_report import DimensionReport

logger = logging.getLogger(__name__)

MEASUREMENT_ERRORS = (PlaywrightError, aiohttp.ClientError, TimeoutError)


class MetricExtractor[ReportT: DimensionReport](ABC):
    """Abstract base for extractors inspecting the currently loaded page.

    Subclasses implement ``generate_report``. Callers use ``collect``, which
    degrades measurement failures to an explicit unavailable report instead
    of raising, so one dimension never fails a whole run.
    """

    report_type: type[ReportT]

    def __init__(self, page: Page) -> None:
        """Initialize extractor for a page."""
        self.page = page

    @abstractmethod
    async def generate_report(self) -> ReportT:
        """Inspect the page and return a report.

        Raises:
            playwright.async_api.Error: If the browser capability fails
            aiohttp.ClientError: If an HTTP inspection fails
            TimeoutError: If the inspection times out

        """

    async def collect(self) -> ReportT:
        """Return the report, or an unavailable report if measurement failed."""
        try:
            return await self.generate_report()
        except MEASUREMENT_ERRORS as e:
            logger.warning(
                f"{type(self).__name__} measurement failed: {type(e).__name__}: {e}"
            )
            return self.unavailable(str(e) or type(e).__name__)

    def unavailable(self, reason: str) -> ReportT:
        """Build the documented fallback report for this dimension."""
        return self.report_type(
            available=False,
            unavailable_reason=reason,
            recommendations=[f"Measurement unavailable: {reason}"],
        )
