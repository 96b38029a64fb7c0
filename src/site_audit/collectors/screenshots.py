"""Desktop and mobile screenshots via the ScreenshotOne API."""

from __future__ import annotations

import asyncio

from ..bundle import ScreenshotData
from ..exceptions import ProviderError
from .http import CollectorContext, fetch

SCREENSHOTONE_API_URL = "https://api.screenshotone.com/take"

VIEWPORTS = {
    "desktop": (1440, 900),
    "mobile": (390, 844),
}


async def capture(ctx: CollectorContext, url: str, viewport: str) -> bytes:
    key = ctx.keys.screenshotone
    if not key:
        raise ProviderError("screenshotone", "API key not configured")
    width, height = VIEWPORTS[viewport]
    params = {
        "access_key": key,
        "url": url,
        "viewport_width": str(width),
        "viewport_height": str(height),
        "format": "png",
        "full_page": "true",
        "delay": "3",
        "cache": "false",
        "block_cookie_banners": "true",
        "block_banners_by_heuristics": "true",
        "block_chats": "true",
        "block_ads": "true",
    }
    response = await fetch(ctx, SCREENSHOTONE_API_URL, f"screenshot-{width}x{height}", params=params)
    return response.content


async def collect_screenshots(ctx: CollectorContext, url: str, job_id: str) -> ScreenshotData:
    """Capture both viewports; image files are written in the background."""
    desktop, mobile = await asyncio.gather(
        capture(ctx, url, "desktop"),
        capture(ctx, url, "mobile"),
    )
    if ctx.report_store is None:
        raise ProviderError("screenshotone", "no report store to hold screenshots")

    urls = {}
    for viewport, data in (("desktop", desktop), ("mobile", mobile)):
        urls[viewport] = ctx.report_store.screenshot_url(job_id, viewport)
        ctx.detached.spawn(
            asyncio.to_thread(ctx.report_store.store_screenshot, job_id, viewport, data),
            label=f"store-screenshot:{job_id}:{viewport}",
        )
    return ScreenshotData(**urls)
