"""Models for the structured test-run result document.

The document nests suites inside suites; specs hold one test per browser
project and each test holds its result attempts. Every field is optional so
partially populated documents still validate.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class DocumentModel(BaseModel):
    """Lenient base for result document nodes."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _text_of(entry: Any) -> str:
    """Return the text of a stdout entry or error object."""
    if isinstance(entry, str):
        return entry
    if isinstance(entry, dict):
        for key in ("text", "message", "value"):
            if isinstance(entry.get(key), str):
                return str(entry[key])
        return ""
    return str(entry)


class AttemptAttachment(DocumentModel):
    """Attachment entry of a result attempt."""

    name: str = ""
    content_type: str = ""
    path: str | None = None


class TestAttempt(DocumentModel):
    """One execution attempt of a test."""

    __test__ = False

    status: str | None = None
    duration: float = 0.0
    retry: int = 0
    errors: list[str] = Field(default_factory=list)
    stdout: list[str] = Field(default_factory=list)
    attachments: list[AttemptAttachment] = Field(default_factory=list)

    @field_validator("duration", mode="before")
    @classmethod
    def default_duration(cls, value: Any) -> Any:
        """Treat a missing duration as zero."""
        return 0.0 if value is None else value

    @field_validator("errors", "stdout", mode="before")
    @classmethod
    def texts(cls, value: Any) -> list[str]:
        """Flatten string or object entries to plain text."""
        return [text for text in map(_text_of, _as_list(value)) if text]

    @field_validator("attachments", mode="before")
    @classmethod
    def attachment_list(cls, value: Any) -> list[Any]:
        """Accept a missing attachment list."""
        return _as_list(value)


class SpecTest(DocumentModel):
    """A spec executed on one browser project."""

    __test__ = False

    project_name: str | None = None
    status: str | None = None
    results: list[TestAttempt] = Field(default_factory=list)

    @field_validator("results", mode="before")
    @classmethod
    def result_list(cls, value: Any) -> list[Any]:
        """Accept a missing result list."""
        return _as_list(value)


class Spec(DocumentModel):
    """A single test specification."""

    title: str = ""
    file: str | None = None
    tags: list[str] = Field(default_factory=list)
    tests: list[SpecTest] = Field(default_factory=list)

    @field_validator("tags", "tests", mode="before")
    @classmethod
    def lists(cls, value: Any) -> list[Any]:
        """Accept missing or scalar values."""
        return _as_list(value)


class Suite(DocumentModel):
    """A suite containing nested suites and specs."""

    title: str = ""
    file: str | None = None
    suites: list["Suite"] = Field(default_factory=list)
    specs: list[Spec] = Field(default_factory=list)

    @field_validator("suites", "specs", mode="before")
    @classmethod
    def lists(cls, value: Any) -> list[Any]:
        """Accept missing or scalar values."""
        return _as_list(value)


class ResultsDocument(DocumentModel):
    """Root of the result document."""

    stats: dict[str, Any] = Field(default_factory=dict)
    suites: list[Suite] = Field(default_factory=list)

    @field_validator("stats", mode="before")
    @classmethod
    def stats_dict(cls, value: Any) -> Any:
        """Accept a missing stats block."""
        return {} if value is None else value

    @field_validator("suites", mode="before")
    @classmethod
    def suite_list(cls, value: Any) -> list[Any]:
        """Accept a missing suite list."""
        return _as_list(value)
