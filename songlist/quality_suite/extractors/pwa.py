"""Progressive web app readiness inspection."""

import logging
from collections.abc import Mapping
from typing import Any

from songlist.quality_suite.extractors.base import MetricExtractor
from songlist.quality_suite.models.dimension_report import PwaReport

logger = logging.getLogger(__name__)

PWA_SCRIPT = """
async () => {
    const withTimeout = (promise, ms) => Promise.race([
        promise,
        new Promise((resolve) => setTimeout(() => resolve(null), ms)),
    ]);

    let serviceWorker = false;
    if ('serviceWorker' in navigator) {
        try {
            const registration = await withTimeout(navigator.serviceWorker.ready, 2000);
            serviceWorker = !!(registration && registration.active);
        } catch (error) {
            serviceWorker = false;
        }
    }

    const link = document.querySelector('link[rel="manifest"]');
    let manifest = null;
    if (link) {
        try {
            const response = await fetch(link.href);
            manifest = await response.json();
        } catch (error) {
            manifest = {};
        }
    }

    let cacheCount = 0;
    if ('caches' in window) {
        try {
            cacheCount = (await caches.keys()).length;
        } catch (error) {
            cacheCount = 0;
        }
    }

    return {
        https: location.protocol === 'https:',
        serviceWorker,
        hasManifest: !!link,
        manifest,
        cacheCount,
    };
}
"""

REQUIRED_MANIFEST_FIELDS = (
    ("name", "short_name"),
    ("icons",),
    ("start_url",),
    ("display",),
    ("theme_color",),
    ("background_color",),
)

CRITERIA_RECOMMENDATIONS: Mapping[str, str] = {
    "served_over_https": "Serve application over HTTPS for PWA functionality",
    "has_service_worker": "Implement and register a service worker",
    "has_manifest": "Add a valid web app manifest file",
    "manifest_valid": "Ensure manifest file includes all required fields",
    "has_offline_support": "Implement offline support through service worker caching",
}


def manifest_is_valid(manifest: Mapping[str, Any] | None) -> bool:
    """Return True when the manifest carries every required field."""
    if not manifest:
        return False
    return all(
        any(manifest.get(name) for name in alternatives)
        for alternatives in REQUIRED_MANIFEST_FIELDS
    )


def build_pwa_report(state: Mapping[str, Any]) -> PwaReport:
    """Score PWA criteria as criteria met / total * 100."""
    criteria = {
        "served_over_https": bool(state.get("https")),
        "has_service_worker": bool(state.get("serviceWorker")),
        "has_manifest": bool(state.get("hasManifest")),
        "manifest_valid": manifest_is_valid(state.get("manifest")),
        "has_offline_support": int(state.get("cacheCount") or 0) > 0,
    }
    met = sum(criteria.values())
    return PwaReport(
        score=met / len(criteria) * 100,
        criteria=criteria,
        recommendations=[
            CRITERIA_RECOMMENDATIONS[name] for name, ok in criteria.items() if not ok
        ],
    )


class PwaExtractor(MetricExtractor[PwaReport]):
    """Checks service worker, manifest and offline cache support."""

    report_type = PwaReport

    async def generate_report(self) -> PwaReport:
        """Inspect the page and score PWA criteria."""
        state: dict[str, Any] = await self.page.evaluate(PWA_SCRIPT)
        report = build_pwa_report(state)
        logger.info(
            f"PWA: {sum(report.criteria.values())}/{len(report.criteria)} "
            f"criteria met"
        )
        return report
