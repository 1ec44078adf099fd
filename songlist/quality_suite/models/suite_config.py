"""Configuration models for the quality suite."""

from pathlib import Path

from pydantic import BaseModel, Field

DEFAULT_BASE_URL = "https://shuxincolorado.github.io/song-list2/dist/song-list2/"
AXE_CDN_URL = "https://cdnjs.cloudflare.com/ajax/libs/axe-core/4.9.1/axe.min.js"


class PerformanceThresholds(BaseModel):
    """Limits in milliseconds (and requests) and the penalty for exceeding each."""

    largest_contentful_paint: float = Field(default=2500, description="LCP limit")
    largest_contentful_paint_penalty: float = 20
    first_paint: float = Field(default=1800, description="First paint limit")
    first_paint_penalty: float = 15
    load_time: float = Field(default=5000, description="Total load time limit")
    load_time_penalty: float = 20
    max_requests: int = Field(default=100, description="Request count limit")
    max_requests_penalty: float = 20


class CoverageSettings(BaseModel):
    """URL substring filters selecting application resources."""

    include_patterns: list[str] = Field(
        default_factory=list,
        description="Resources must contain one of these (empty means any)",
    )
    exclude_patterns: list[str] = Field(
        default_factory=lambda: ["node_modules", "axe.min.js", "__playwright"],
        description="Resources containing any of these are test tooling",
    )


class SecuritySettings(BaseModel):
    """Security check configuration."""

    required_headers: list[str] = Field(
        default_factory=lambda: [
            "content-security-policy",
            "x-frame-options",
            "x-content-type-options",
            "strict-transport-security",
            "referrer-policy",
            "permissions-policy",
        ]
    )
    max_missing_headers: int = Field(
        default=2, description="Missing headers tolerated before the check fails"
    )
    input_selectors: list[str] = Field(
        default_factory=lambda: ['input[name="title"]', 'input[name="artist"]']
    )
    sanitized_ratio: float = Field(
        default=0.7, description="Share of payloads that must be sanitized"
    )
    request_timeout: float = Field(default=15.0, description="Header fetch timeout")


class ProjectMetadata(BaseModel):
    """Metadata copied into every report."""

    project_name: str = "Song Library Test Suite"
    version: str = "1.0.0"
    environment: str = "Test"


class SuiteConfig(BaseModel):
    """Complete suite configuration loaded from quality-suite.yaml."""

    base_url: str = Field(default=DEFAULT_BASE_URL, description="Application URL")
    results_path: Path = Field(
        default=Path("test-results/json/results.json"),
        description="Structured test-run result document",
    )
    output_dir: Path = Field(
        default=Path("test-results/unified-reports"),
        description="Directory for rendered reports",
    )
    side_channel_dir: Path = Field(
        default=Path("test-results"),
        description="Directory for per-dimension side-channel files",
    )
    axe_script_url: str = Field(default=AXE_CDN_URL, description="axe-core script")
    metadata: ProjectMetadata = Field(default_factory=ProjectMetadata)
    performance: PerformanceThresholds = Field(default_factory=PerformanceThresholds)
    coverage: CoverageSettings = Field(default_factory=CoverageSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
