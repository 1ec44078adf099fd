"""Flatten structured test-run result documents into test outcomes."""

import json
import logging
import re
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from songlist.quality_suite.models.results_document import (
    ResultsDocument,
    Spec,
    SpecTest,
    Suite,
)
from songlist.quality_suite.models.test_outcome import (
    Attachment,
    OutcomeStatus,
    TestOutcome,
)

logger = logging.getLogger(__name__)

TAG_PATTERN = re.compile(r"@(\w+)")

STATUS_ALIASES: Mapping[str, OutcomeStatus] = {
    "passed": "passed",
    "expected": "passed",
    "failed": "failed",
    "unexpected": "failed",
    "skipped": "skipped",
}


class ResultsParseError(ValueError):
    """Raised when a result document cannot be read at all."""


def map_status(status: str | None) -> OutcomeStatus:
    """Map a source-specific completion state to a canonical status."""
    if status is None:
        return "unknown"
    return STATUS_ALIASES.get(status, "unknown")


def extract_tags(title: str, spec_tags: list[str] | None = None) -> list[str]:
    """Return deduplicated tags from spec tags and ``@tag`` tokens in a title."""
    tags: list[str] = []
    for tag in [*(spec_tags or []), *TAG_PATTERN.findall(title)]:
        name = tag.lstrip("@")
        if name and name not in tags:
            tags.append(name)
    return tags


def load_results_document(path: Path) -> ResultsDocument:
    """Read and validate a result document from disk.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ResultsParseError: If the file isn't a JSON object of the expected shape

    """
    with path.open(encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ResultsParseError(f"Invalid JSON in {path}: {e}") from e
    return parse_document(data)


def parse_document(data: Any) -> ResultsDocument:
    """Validate raw decoded JSON as a result document."""
    if not isinstance(data, dict):
        raise ResultsParseError("Result document must be a JSON object")
    try:
        return ResultsDocument.model_validate(data)
    except ValidationError as e:
        raise ResultsParseError(f"Invalid result document: {e}") from e


def parse_results(document: ResultsDocument) -> list[TestOutcome]:
    """Flatten a result document into outcomes in encounter order."""
    outcomes = [
        outcome for suite in document.suites for outcome in _visit_suite(suite, [])
    ]
    logger.info(f"Parsed {len(outcomes)} test outcomes")
    return outcomes


def _visit_suite(suite: Suite, parent_path: list[str]) -> Iterator[TestOutcome]:
    suite_path = [*parent_path, suite.title] if suite.title else parent_path

    for nested in suite.suites:
        yield from _visit_suite(nested, suite_path)

    for spec in suite.specs:
        for test in spec.tests:
            yield _build_outcome(spec, test, suite_path, suite.file)


def _build_outcome(
    spec: Spec, test: SpecTest, suite_path: list[str], suite_file: str | None
) -> TestOutcome:
    first = test.results[0] if test.results else None
    statuses = {map_status(attempt.status) for attempt in test.results}

    return TestOutcome(
        title=spec.title,
        file=spec.file or suite_file or "unknown",
        suite_path=suite_path,
        status=map_status(first.status if first else None),
        duration=first.duration if first else 0.0,
        tags=extract_tags(spec.title, spec.tags),
        browser=test.project_name or "chromium",
        attachments=[
            Attachment(name=a.name, content_type=a.content_type, path=a.path)
            for a in (first.attachments if first else [])
        ],
        errors=list(first.errors) if first else [],
        retries=max(len(test.results) - 1, 0),
        flaky=len(statuses) > 1,
    )


def collect_stdout(document: ResultsDocument) -> list[str]:
    """Return every captured stdout text in document order."""
    texts: list[str] = []

    def visit(suite: Suite) -> None:
        for nested in suite.suites:
            visit(nested)
        for spec in suite.specs:
            for test in spec.tests:
                for attempt in test.results:
                    texts.extend(attempt.stdout)

    for suite in document.suites:
        visit(suite)
    return texts
