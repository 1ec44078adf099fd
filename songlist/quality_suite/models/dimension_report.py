"""Models for per-dimension inspection reports."""

from datetime import UTC, datetime
from typing import Literal

from pydantic import Field, computed_field, field_validator

from songlist.quality_suite.models.base import Model

type Dimension = Literal["accessibility", "performance", "coverage", "security", "pwa"]
type ReportSource = Literal["extractor", "side-channel", "stdout"]


def utc_now() -> datetime:
    """Return the current time in UTC."""
    return datetime.now(UTC)


class Finding(Model):
    """Single violation or issue found by an inspection."""

    id: str = Field(..., description="Rule or check identifier")
    impact: str | None = Field(default=None, description="Severity or impact")
    description: str = Field(default="", description="Human description")
    help_url: str | None = Field(default=None, description="Link to guidance")
    element_count: int = Field(default=0, description="Affected elements")


class DimensionReport(Model):
    """Score-plus-findings result for one inspection dimension."""

    dimension: Dimension
    score: float = Field(default=0.0, description="Score clamped to [0, 100]")
    findings: list[Finding] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    available: bool = Field(default=True, description="Measurement was possible")
    unavailable_reason: str | None = None
    source: ReportSource = Field(
        default="extractor", description="Where the data was obtained from"
    )
    timestamp: datetime = Field(default_factory=utc_now)

    @field_validator("score")
    @classmethod
    def clamp_score(cls, value: float) -> float:
        """Clamp scores to the [0, 100] range."""
        return min(max(value, 0.0), 100.0)

    @property
    def inferred(self) -> bool:
        """Return True when the data was scraped from console output."""
        return self.source == "stdout"


class AccessibilityReport(DimensionReport):
    """WCAG scan results from axe-core."""

    dimension: Literal["accessibility"] = "accessibility"
    passes: int = Field(default=0, description="Rules that passed")
    violations_found: int = Field(default=0, description="Rules that failed")


class PerformanceReport(DimensionReport):
    """Paint, navigation and resource timing measurements in milliseconds."""

    dimension: Literal["performance"] = "performance"
    first_paint: float = 0.0
    first_contentful_paint: float = 0.0
    largest_contentful_paint: float = 0.0
    dom_content_loaded: float = 0.0
    load_time: float = 0.0
    time_to_first_byte: float = 0.0
    total_requests: int = 0
    total_bytes: int = 0


class FileCoverage(Model):
    """Coverage of a single application resource."""

    url: str
    kind: Literal["js", "css"]
    total_bytes: int = 0
    covered_bytes: int = 0

    @property
    def percent(self) -> float:
        """Return covered share of this resource as a percentage."""
        if not self.total_bytes:
            return 0.0
        return self.covered_bytes / self.total_bytes * 100


class CoverageReport(DimensionReport):
    """Byte coverage of application JS and CSS resources."""

    dimension: Literal["coverage"] = "coverage"
    total_files: int = 0
    total_bytes: int = 0
    covered_bytes: int = 0
    files: list[FileCoverage] = Field(default_factory=list)

    @computed_field(alias="coveragePercent")
    @property
    def coverage_percent(self) -> float:
        """Return the coverage percentage (same as the score)."""
        return self.score


class HeadersCheck(Model):
    """Security header presence check."""

    passed: bool = False
    present: dict[str, str] = Field(default_factory=dict)
    missing: list[str] = Field(default_factory=list)
    error: str | None = Field(default=None, description="Why headers were not read")


class SanitizationResult(Model):
    """Outcome of typing one injection payload into one input."""

    selector: str
    payload: str
    displayed_value: str = ""
    sanitized: bool = False
    notes: str = ""


class SanitizationCheck(Model):
    """Input sanitization check results."""

    passed: bool = False
    results: list[SanitizationResult] = Field(default_factory=list)
    summary: str = "No tests performed"


class ClientCheck(Model):
    """Informational client-side security check."""

    check: str
    passed: bool
    details: str = ""


class DataExposureCheck(Model):
    """Sensitive data exposure check over page content and storage."""

    passed: bool = False
    exposed_data: list[str] = Field(default_factory=list)
    sensitive_storage_keys: list[str] = Field(default_factory=list)
    client_checks: list[ClientCheck] = Field(default_factory=list)


class SecurityReport(DimensionReport):
    """Results of the three security sub-checks."""

    dimension: Literal["security"] = "security"
    headers: HeadersCheck = Field(default_factory=HeadersCheck)
    input_sanitization: SanitizationCheck = Field(default_factory=SanitizationCheck)
    data_exposure: DataExposureCheck = Field(default_factory=DataExposureCheck)

    @property
    def passed_checks(self) -> int:
        """Return how many of the three sub-checks passed."""
        return sum(
            (
                self.headers.passed,
                self.input_sanitization.passed,
                self.data_exposure.passed,
            )
        )


class PwaReport(DimensionReport):
    """Progressive web app readiness criteria."""

    dimension: Literal["pwa"] = "pwa"
    criteria: dict[str, bool] = Field(default_factory=dict)


type AnyDimensionReport = (
    AccessibilityReport | PerformanceReport | CoverageReport | SecurityReport | PwaReport
)

REPORT_TYPES: dict[str, type[DimensionReport]] = {
    "accessibility": AccessibilityReport,
    "performance": PerformanceReport,
    "coverage": CoverageReport,
    "security": SecurityReport,
    "pwa": PwaReport,
}
