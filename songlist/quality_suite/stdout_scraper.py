"""Best-effort recovery of metric scores from captured console output.

This is a fallback source. Reports built here are tagged ``source="stdout"``
and only fill dimensions the structured path left empty.
"""

import logging
import re
from collections.abc import Mapping, Sequence

from pydantic import Field

from songlist.quality_suite.models.base import Model
from songlist.quality_suite.models.dimension_report import (
    REPORT_TYPES,
    DimensionReport,
    Finding,
)

logger = logging.getLogger(__name__)

SCORE_LABELS: Mapping[str, tuple[str, str]] = {
    "coverage": ("📈", "Coverage"),
    "performance": ("⚡", "Performance Score"),
    "accessibility": ("♿", "Accessibility Score"),
    "security": ("🔒", "Security Score"),
    "pwa": ("📱", "PWA Score"),
}

SCORE_PATTERNS: Mapping[str, re.Pattern[str]] = {
    dimension: re.compile(rf"\b{re.escape(label)}:\s*(\d+(?:\.\d+)?)%")
    for dimension, (_, label) in SCORE_LABELS.items()
}

LIST_PATTERNS: Mapping[str, re.Pattern[str]] = {
    "coverage": re.compile(r"Coverage Recommendations: \[([^\]]*)\]"),
    "performance": re.compile(r"Performance Issues: \[([^\]]*)\]"),
    "accessibility": re.compile(r"Accessibility Recommendations: \[([^\]]*)\]"),
}

MISSING_HEADER_PATTERN = re.compile(r"Missing security header: ([\w-]+)")

SECURITY_RECOMMENDATION_PATTERNS = (
    re.compile(r"Add [\w-]+ header for enhanced security"),
    re.compile(r"Implement.*?CSP.*?headers?", re.IGNORECASE),
    re.compile(r"Enable.*?HSTS", re.IGNORECASE),
    re.compile(r"Review.*?input.*?sanitization", re.IGNORECASE),
    re.compile(r"Consider.*?security.*?headers?", re.IGNORECASE),
)

LOW_SECURITY_DEFAULTS = (
    "Implement Content Security Policy (CSP) headers",
    "Add X-Frame-Options header to prevent clickjacking",
    "Enable strict transport security (HSTS)",
    "Review input sanitization practices",
)
MEDIUM_SECURITY_DEFAULTS = (
    "Consider additional security headers for enhanced protection",
    "Review and strengthen existing security measures",
)


def format_score_line(dimension: str, score: float) -> str:
    """Return the console line announcing a dimension score."""
    emoji, label = SCORE_LABELS[dimension]
    return f"{emoji} {label}: {score:.1f}%"


def format_list_line(label: str, items: Sequence[str]) -> str:
    """Return a console line listing recommendations or issues."""
    return f"{label}: [{', '.join(items)}]"


class ScrapedMetrics(Model):
    """Values recovered from console text."""

    scores: dict[str, float] = Field(default_factory=dict)
    recommendations: dict[str, list[str]] = Field(default_factory=dict)
    missing_headers: list[str] = Field(default_factory=list)

    def score(self, dimension: str) -> float:
        """Return the scraped score, zero when the pattern was absent."""
        return self.scores.get(dimension, 0.0)

    def found(self, dimension: str) -> bool:
        """Return True when a score line for the dimension was present."""
        return dimension in self.scores

    def to_report(self, dimension: str) -> DimensionReport | None:
        """Build a fallback report, or None when nothing was scraped."""
        if not self.found(dimension):
            return None

        findings: list[Finding] = []
        if dimension == "security":
            findings = [
                Finding(
                    id=f"missing-{header}",
                    impact="moderate",
                    description=f"Missing security header: {header}",
                )
                for header in self.missing_headers
            ]

        return REPORT_TYPES[dimension](
            score=self.score(dimension),
            findings=findings,
            recommendations=list(self.recommendations.get(dimension, ())),
            source="stdout",
        )


def scrape_metrics(text: str) -> ScrapedMetrics:
    """Recover scores and recommendations from combined console text.

    Absent patterns are not errors; they simply produce no value.
    """
    scores: dict[str, float] = {}
    for dimension, pattern in SCORE_PATTERNS.items():
        if match := pattern.search(text):
            scores[dimension] = float(match.group(1))

    recommendations: dict[str, list[str]] = {}
    for dimension, pattern in LIST_PATTERNS.items():
        if match := pattern.search(text):
            recommendations[dimension] = _split_list(match.group(1))

    missing_headers = list(dict.fromkeys(MISSING_HEADER_PATTERN.findall(text)))

    security_recommendations: list[str] = []
    for pattern in SECURITY_RECOMMENDATION_PATTERNS:
        for found in pattern.findall(text):
            if found not in security_recommendations:
                security_recommendations.append(found)
    if "security" in scores and not security_recommendations:
        security_recommendations = _default_security_recommendations(
            scores["security"]
        )
    if security_recommendations:
        recommendations["security"] = security_recommendations

    logger.info(
        f"Scraped scores for {len(scores)} dimension(s) from console output: "
        f"{', '.join(sorted(scores)) or 'none'}"
    )
    return ScrapedMetrics(
        scores=scores,
        recommendations=recommendations,
        missing_headers=missing_headers,
    )


def _split_list(raw: str) -> list[str]:
    items = (item.strip().strip("'\"") for item in raw.split(","))
    return [item for item in items if item]


def _default_security_recommendations(score: float) -> list[str]:
    if score < 50:
        return list(LOW_SECURITY_DEFAULTS)
    if score < 80:
        return list(MEDIUM_SECURITY_DEFAULTS)
    return []
