"""Lighthouse scores from the PageSpeed Insights v5 API."""

from __future__ import annotations

import asyncio
from typing import Any

from ..bundle import LighthouseData, LighthouseDiagnostic, LighthouseScores
from ..exceptions import ProviderError
from .http import CollectorContext, fetch

PAGESPEED_API_URL = "https://www.googleapis.com/pagespeedonline/v5/runPagespeed"

DIAGNOSTIC_AUDITS = (
    "render-blocking-resources",
    "uses-optimized-images",
    "uses-responsive-images",
    "unminified-css",
    "unminified-javascript",
    "unused-css-rules",
    "unused-javascript",
    "efficient-animated-content",
    "duplicated-javascript",
    "legacy-javascript",
    "dom-size",
    "critical-request-chains",
    "redirects",
    "uses-rel-preconnect",
    "server-response-time",
    "bootup-time",
    "mainthread-work-breakdown",
    "font-display",
    "third-party-summary",
)


async def run_pagespeed(ctx: CollectorContext, url: str, strategy: str) -> dict[str, Any]:
    key = ctx.keys.pagespeed
    if not key:
        raise ProviderError("pagespeed", "API key not configured")
    params = [
        ("url", url),
        ("key", key),
        ("strategy", strategy),
        *[("category", c) for c in ("PERFORMANCE", "ACCESSIBILITY", "BEST_PRACTICES", "SEO")],
    ]
    response = await fetch(ctx, PAGESPEED_API_URL, f"pagespeed-{strategy.lower()}", params=params)
    return response.json()


def extract_scores(data: dict[str, Any]) -> LighthouseScores:
    result = data["lighthouseResult"]
    categories = result.get("categories", {})
    audits = result.get("audits", {})

    def category(name: str) -> float:
        return round((categories.get(name, {}).get("score") or 0) * 100)

    def metric(name: str) -> float:
        return audits.get(name, {}).get("numericValue") or 0

    return LighthouseScores(
        performance=category("performance"),
        accessibility=category("accessibility"),
        best_practices=category("best-practices"),
        seo=category("seo"),
        lcp=metric("largest-contentful-paint"),
        cls=metric("cumulative-layout-shift"),
        tbt=metric("total-blocking-time"),
        fcp=metric("first-contentful-paint"),
        si=metric("speed-index"),
        tti=metric("interactive"),
    )


def extract_diagnostics(data: dict[str, Any]) -> list[LighthouseDiagnostic]:
    audits = data["lighthouseResult"].get("audits", {})
    return [
        LighthouseDiagnostic(
            title=audits[key].get("title", key),
            description=audits[key].get("description", ""),
            score=audits[key].get("score"),
        )
        for key in DIAGNOSTIC_AUDITS
        if key in audits
    ]


async def collect_lighthouse(ctx: CollectorContext, url: str, job_id: str) -> LighthouseData:
    mobile, desktop = await asyncio.gather(
        run_pagespeed(ctx, url, "MOBILE"),
        run_pagespeed(ctx, url, "DESKTOP"),
    )
    return LighthouseData(
        mobile=extract_scores(mobile),
        desktop=extract_scores(desktop),
        diagnostics=extract_diagnostics(mobile),
    )
