"""Search presence via the Google Custom Search JSON API."""

from __future__ import annotations

import asyncio
from typing import Any
from urllib.parse import urlparse

from ..bundle import SerpData, SerpResult
from ..exceptions import ProviderError
from .http import CollectorContext, fetch

CUSTOM_SEARCH_API_URL = "https://www.googleapis.com/customsearch/v1"


async def search(ctx: CollectorContext, query: str, label: str) -> dict[str, Any]:
    credentials = ctx.keys.google_cse
    if credentials is None:
        raise ProviderError("google-cse", "API key or search engine id not configured")
    key, cx = credentials
    response = await fetch(
        ctx,
        CUSTOM_SEARCH_API_URL,
        label,
        params={"key": key, "cx": cx, "q": query, "num": "10"},
    )
    return response.json()


def brand_of(domain: str) -> str:
    return domain.replace("www.", "").split(".")[0]


async def collect_serp(ctx: CollectorContext, url: str, job_id: str) -> SerpData:
    domain = urlparse(url).hostname or ""
    brand = brand_of(domain)
    site, branded = await asyncio.gather(
        search(ctx, f"site:{domain}", "serp-site"),
        search(ctx, brand, "serp-brand"),
    )

    items = site.get("items") or []
    total = site.get("searchInformation", {}).get("totalResults")
    bare = domain.replace("www.", "")
    brand_items = branded.get("items") or []

    return SerpData(
        indexed_pages=int(total) if total is not None else None,
        homepage_snippet=items[0].get("snippet") if items else None,
        brand_search_present=any(bare in (item.get("link") or "") for item in brand_items),
        top_results=[
            SerpResult(
                title=item.get("title", ""),
                link=item.get("link", ""),
                snippet=item.get("snippet", ""),
            )
            for item in items[:5]
        ],
    )
