"""Record pytest reports as a structured test-run result document."""

import json
import logging
from pathlib import Path
from typing import Any

import pytest

logger = logging.getLogger(__name__)

IGNORED_MARKERS = frozenset(
    {
        "asyncio",
        "filterwarnings",
        "parametrize",
        "skip",
        "skipif",
        "usefixtures",
        "xfail",
    }
)


class ResultsRecorder:
    """Collects test reports and writes them in the result document shape.

    Modules and classes become suites, each test becomes a spec holding one
    test for ``project_name`` with a single attempt. Markers become tags.
    Captured stdout is kept, teardown included, so console metric lines can
    be scraped when the report is generated.
    """

    def __init__(self, project_name: str = "chromium") -> None:
        """Initialize an empty recorder."""
        self.project_name = project_name
        self._tags: dict[str, list[str]] = {}
        self._attempts: dict[str, dict[str, Any]] = {}

    def add_item(self, item: pytest.Item) -> None:
        """Remember the tags of a collected test."""
        names = (
            m.name for m in item.iter_markers() if m.name not in IGNORED_MARKERS
        )
        self._tags[item.nodeid] = list(dict.fromkeys(names))

    def add_report(self, report: pytest.TestReport) -> None:
        """Fold a setup, call or teardown report into the test's attempt."""
        attempt = self._attempts.setdefault(
            report.nodeid,
            {
                "status": "passed",
                "duration": 0.0,
                "errors": [],
                "stdout": [],
                "attachments": [],
            },
        )
        attempt["duration"] += report.duration * 1000

        # captured sections accumulate over phases; the latest report holds all
        if report.capstdout:
            attempt["stdout"] = [{"text": report.capstdout}]

        if report.failed:
            attempt["status"] = "failed"
            attempt["errors"].append({"message": report.longreprtext})
        elif report.skipped and attempt["status"] == "passed":
            attempt["status"] = "skipped"

    def document(self) -> dict[str, Any]:
        """Return the recorded results as a result document."""
        suites: dict[str, dict[str, Any]] = {}
        stats = {"expected": 0, "unexpected": 0, "skipped": 0, "duration": 0.0}

        for nodeid, attempt in self._attempts.items():
            file, *classes, name = nodeid.split("::")
            suite = suites.setdefault(file, _suite(file, file))
            for title in classes:
                suite = _child_suite(suite, title, file)

            suite["specs"].append(
                {
                    "title": name,
                    "file": file,
                    "tags": self._tags.get(nodeid, []),
                    "tests": [
                        {"projectName": self.project_name, "results": [attempt]}
                    ],
                }
            )

            key = {"passed": "expected", "failed": "unexpected"}.get(
                attempt["status"], "skipped"
            )
            stats[key] += 1
            stats["duration"] += attempt["duration"]

        return {"stats": stats, "suites": list(suites.values())}

    def write(self, path: Path) -> Path | None:
        """Write the document to ``path``; nothing is written without results.

        Raises:
            OSError: If the directory or file cannot be written

        """
        if not self._attempts:
            return None
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.document(), indent=2), encoding="utf-8")
        logger.info(f"Wrote {len(self._attempts)} test result(s) to {path}")
        return path


def _suite(title: str, file: str) -> dict[str, Any]:
    return {"title": title, "file": file, "specs": [], "suites": []}


def _child_suite(parent: dict[str, Any], title: str, file: str) -> dict[str, Any]:
    for suite in parent["suites"]:
        if suite["title"] == title:
            return suite
    child = _suite(title, file)
    parent["suites"].append(child)
    return child
