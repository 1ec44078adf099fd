"""Security inspection: response headers, input handling and data exposure."""

import logging
import math
import re
from collections.abc import Mapping, Sequence

import aiohttp
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from songlist.quality_suite.extractors.base import MetricExtractor
from songlist.quality_suite.models.dimension_report import (
    ClientCheck,
    DataExposureCheck,
    Finding,
    HeadersCheck,
    SanitizationCheck,
    SanitizationResult,
    SecurityReport,
)
from songlist.quality_suite.models.suite_config import SecuritySettings

logger = logging.getLogger(__name__)

INJECTION_PAYLOADS = (
    '<script>alert("XSS")</script>',
    '<img src=x onerror=alert("XSS")>',
    'javascript:alert("XSS")',
    '"><script>document.write("XSS")</script>',
)

SENSITIVE_PATTERNS = (
    re.compile(r"""password\s*[:=]\s*["'][^"']+["']""", re.IGNORECASE),
    re.compile(r"""api[_-]?key\s*[:=]\s*["'][^"']+["']""", re.IGNORECASE),
    re.compile(r"""secret\s*[:=]\s*["'][^"']+["']""", re.IGNORECASE),
    re.compile(r"""token\s*[:=]\s*["'][^"']+["']""", re.IGNORECASE),
)

SENSITIVE_KEY_WORDS = ("password", "token", "secret")

STORAGE_KEYS_SCRIPT = """
() => Object.keys(localStorage).concat(Object.keys(sessionStorage))
"""

CONSOLE_STATEMENTS_SCRIPT = """
() => Array.from(document.scripts).some(
    (script) => (script.textContent || '').includes('console.log')
)
"""

INLINE_HANDLERS_SCRIPT = """
() => Array.from(document.querySelectorAll('*')).some(
    (el) => Array.from(el.attributes).some((attr) => attr.name.startsWith('on'))
)
"""

SUB_CHECK_COUNT = 3

HEADERS_UNAVAILABLE_RECOMMENDATION = "Could not analyze security headers"


def evaluate_headers(
    headers: Mapping[str, str], settings: SecuritySettings
) -> HeadersCheck:
    """Check response headers against the required set (case-insensitive)."""
    lowered = {name.lower(): value for name, value in headers.items()}
    present = {
        name: lowered[name] for name in settings.required_headers if name in lowered
    }
    missing = [name for name in settings.required_headers if name not in lowered]
    return HeadersCheck(
        passed=len(missing) <= settings.max_missing_headers,
        present=present,
        missing=missing,
    )


def evaluate_sanitization(
    results: Sequence[SanitizationResult], ratio: float
) -> SanitizationCheck:
    """Pass when at least ``floor(ratio * total)`` results were sanitized."""
    if not results:
        return SanitizationCheck(passed=True, results=[])

    sanitized = sum(1 for r in results if r.sanitized)
    return SanitizationCheck(
        passed=sanitized >= math.floor(len(results) * ratio),
        results=list(results),
        summary=(
            f"Input sanitization: {sanitized}/{len(results)} tests "
            f"showed proper handling"
        ),
    )


def find_exposed_data(content: str) -> list[str]:
    """Return sensitive-looking assignments found in page content."""
    exposed: list[str] = []
    for pattern in SENSITIVE_PATTERNS:
        exposed.extend(pattern.findall(content))
    return exposed


def find_sensitive_keys(keys: Sequence[str]) -> list[str]:
    """Return storage keys whose names suggest sensitive data."""
    return [
        key for key in keys if any(word in key.lower() for word in SENSITIVE_KEY_WORDS)
    ]


def score_security(
    headers: HeadersCheck,
    sanitization: SanitizationCheck,
    exposure: DataExposureCheck,
) -> float:
    """Return passed sub-checks / 3 * 100, rounded to two decimals."""
    passed = sum((headers.passed, sanitization.passed, exposure.passed))
    return round(passed / SUB_CHECK_COUNT * 100, 2)


def build_security_report(
    headers: HeadersCheck,
    sanitization: SanitizationCheck,
    exposure: DataExposureCheck,
) -> SecurityReport:
    """Combine the three sub-checks into a scored report."""
    findings = [
        Finding(
            id=f"missing-{header}",
            impact="moderate",
            description=f"Missing security header: {header}",
        )
        for header in headers.missing
    ]
    recommendations = [
        f"Add {header} header for enhanced security" for header in headers.missing
    ]
    if headers.error:
        findings.append(
            Finding(
                id="headers-unavailable",
                impact="moderate",
                description=f"Security headers could not be read: {headers.error}",
            )
        )
        recommendations.append(HEADERS_UNAVAILABLE_RECOMMENDATION)

    if not sanitization.passed:
        findings.append(
            Finding(
                id="input-not-sanitized",
                impact="serious",
                description=sanitization.summary,
                element_count=sum(1 for r in sanitization.results if not r.sanitized),
            )
        )
        recommendations.append("Review input sanitization practices")

    if exposure.exposed_data or exposure.sensitive_storage_keys:
        findings.append(
            Finding(
                id="sensitive-data-exposure",
                impact="critical",
                description="Sensitive data found in page content or browser storage",
                element_count=len(exposure.exposed_data)
                + len(exposure.sensitive_storage_keys),
            )
        )
        recommendations.extend(
            [
                "Remove sensitive data from client-side code",
                "Use environment variables for secrets",
            ]
        )

    for check in exposure.client_checks:
        if not check.passed:
            findings.append(
                Finding(
                    id=re.sub(r"\W+", "-", check.check.lower()),
                    impact="minor",
                    description=check.details,
                )
            )

    return SecurityReport(
        score=score_security(headers, sanitization, exposure),
        findings=findings,
        recommendations=recommendations,
        headers=headers,
        input_sanitization=sanitization,
        data_exposure=exposure,
    )


class SecurityExtractor(MetricExtractor[SecurityReport]):
    """Checks headers, input handling and client-side data exposure."""

    report_type = SecurityReport

    def __init__(
        self,
        page: Page,
        settings: SecuritySettings | None = None,
        settle_ms: float = 500,
    ) -> None:
        """Initialize extractor with security check settings."""
        super().__init__(page)
        self.settings = settings or SecuritySettings()
        self.settle_ms = settle_ms

    async def generate_report(self) -> SecurityReport:
        """Run the three sub-checks and score them."""
        headers = await self.check_headers()
        sanitization = await self.check_input_sanitization()
        exposure = await self.check_data_exposure()

        report = build_security_report(headers, sanitization, exposure)
        logger.info(
            f"Security: {report.passed_checks}/{SUB_CHECK_COUNT} checks passed, "
            f"{len(headers.missing)} header(s) missing"
        )
        return report

    async def check_headers(self) -> HeadersCheck:
        """Fetch the current page URL and inspect its response headers.

        A failed fetch fails this check only; the other checks still run.
        """
        timeout = aiohttp.ClientTimeout(total=self.settings.request_timeout)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(self.page.url) as response:
                    headers = dict(response.headers)
        except (aiohttp.ClientError, TimeoutError) as e:
            logger.warning(f"Could not fetch headers from {self.page.url}: {e}")
            return HeadersCheck(passed=False, error=str(e) or type(e).__name__)
        return evaluate_headers(headers, self.settings)

    async def check_input_sanitization(self) -> SanitizationCheck:
        """Type each injection payload into each visible input.

        Every filled input is cleared again afterwards.
        """
        results: list[SanitizationResult] = []
        for selector in self.settings.input_selectors:
            element = self.page.locator(selector)
            try:
                if not await element.is_visible():
                    continue
                for payload in INJECTION_PAYLOADS:
                    await element.fill(payload)
                    await self.page.wait_for_timeout(self.settle_ms)
                    displayed = await element.input_value()
                    results.append(_sanitization_result(selector, payload, displayed))
                    await element.clear()
            except PlaywrightError as e:
                logger.warning(f"Sanitization check failed for {selector}: {e}")
                results.append(
                    SanitizationResult(
                        selector=selector,
                        payload="",
                        displayed_value="",
                        sanitized=True,
                        notes=f"Test error: {e}",
                    )
                )
        return evaluate_sanitization(results, self.settings.sanitized_ratio)

    async def check_data_exposure(self) -> DataExposureCheck:
        """Scan page content and browser storage for sensitive data."""
        content = await self.page.content()
        exposed = find_exposed_data(content)
        storage_keys = await self.page.evaluate(STORAGE_KEYS_SCRIPT)
        sensitive_keys = find_sensitive_keys(storage_keys)

        return DataExposureCheck(
            passed=not exposed and not sensitive_keys,
            exposed_data=exposed,
            sensitive_storage_keys=sensitive_keys,
            client_checks=await self._client_checks(),
        )

    async def _client_checks(self) -> list[ClientCheck]:
        has_console = await self.page.evaluate(CONSOLE_STATEMENTS_SCRIPT)
        has_inline = await self.page.evaluate(INLINE_HANDLERS_SCRIPT)
        is_https = self.page.url.startswith("https://")
        return [
            ClientCheck(
                check="Console Debug Statements",
                passed=not has_console,
                details=(
                    "Console.log statements detected in inline scripts"
                    if has_console
                    else "No console debug statements detected"
                ),
            ),
            ClientCheck(
                check="Inline Event Handlers",
                passed=not has_inline,
                details=(
                    "Inline event handlers detected"
                    if has_inline
                    else "No inline event handlers detected"
                ),
            ),
            ClientCheck(
                check="HTTPS Protocol",
                passed=is_https,
                details=(
                    "Application served over HTTPS"
                    if is_https
                    else "Application not served over HTTPS"
                ),
            ),
        ]


def _sanitization_result(
    selector: str, payload: str, displayed: str
) -> SanitizationResult:
    sanitized = displayed != payload
    notes = (
        "Input appears to be sanitized or filtered"
        if sanitized
        else "Input accepted as-is"
    )
    return SanitizationResult(
        selector=selector,
        payload=payload,
        displayed_value=displayed,
        sanitized=sanitized,
        notes=notes,
    )
