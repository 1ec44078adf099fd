"""Models for flattened test execution outcomes."""

from typing import Literal

from pydantic import Field

from songlist.quality_suite.models.base import Model

type OutcomeStatus = Literal["passed", "failed", "skipped", "unknown"]


class Attachment(Model):
    """Artifact attached to a test attempt (screenshot, trace, JSON blob)."""

    name: str = Field(default="", description="Attachment name")
    content_type: str = Field(default="", description="MIME type")
    path: str | None = Field(default=None, description="Path on disk, if any")

    @property
    def is_image(self) -> bool:
        """Return True for screenshots and other image attachments."""
        return self.content_type.startswith("image/")


class TestOutcome(Model):
    """Result of one test execution on one browser project."""

    __test__ = False

    title: str = Field(..., description="Spec title")
    file: str = Field(default="unknown", description="Spec file")
    suite_path: list[str] = Field(
        default_factory=list, description="Suite titles, outermost first"
    )
    status: OutcomeStatus = Field(..., description="Canonical status")
    duration: float = Field(default=0.0, description="Duration in milliseconds")
    tags: list[str] = Field(default_factory=list, description="Tags without '@'")
    browser: str = Field(default="chromium", description="Browser project name")
    attachments: list[Attachment] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list, description="Error messages")
    retries: int = Field(default=0, description="Number of retried attempts")
    flaky: bool = Field(
        default=False, description="Attempts disagree on the outcome status"
    )

    @property
    def suite(self) -> str:
        """Return the suite path joined for display."""
        return " > ".join(self.suite_path)

    @property
    def screenshots(self) -> list[Attachment]:
        """Return image attachments."""
        return [a for a in self.attachments if a.is_image]
