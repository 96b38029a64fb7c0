"""Shared fetch helpers and the context every collector receives."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from ..config import AuditConfig, ProviderKeys
from ..orchestration.fallback import retry_async
from ..orchestration.tasks import DetachedTasks
from ..storage.reports import ReportStore


@dataclass
class CollectorContext:
    """Dependencies shared by all collectors of one service."""

    config: AuditConfig
    keys: ProviderKeys
    client: httpx.AsyncClient
    report_store: Optional[ReportStore] = None
    detached: DetachedTasks = field(default_factory=DetachedTasks)

    @property
    def headers(self) -> dict[str, str]:
        return {"User-Agent": self.config.user_agent}


async def fetch(
    ctx: CollectorContext,
    url: str,
    label: str,
    method: str = "GET",
    follow_redirects: bool = True,
    raise_for_status: bool = True,
    retry: bool = True,
    **kwargs: Any,
) -> httpx.Response:
    """One HTTP request with the collector user agent and capped backoff.

    Transport errors and (when ``raise_for_status``) 4xx/5xx responses are
    retried up to ``fetch_max_attempts`` times.
    """
    headers = {**ctx.headers, **kwargs.pop("headers", {})}

    async def once() -> httpx.Response:
        response = await ctx.client.request(
            method,
            url,
            headers=headers,
            follow_redirects=follow_redirects,
            timeout=ctx.config.http_timeout_seconds,
            **kwargs,
        )
        if raise_for_status:
            response.raise_for_status()
        return response

    if not retry:
        return await once()
    return await retry_async(
        once,
        max_attempts=ctx.config.fetch_max_attempts,
        base_delay=ctx.config.fetch_base_delay_seconds,
        label=label,
        retry_on=(httpx.HTTPError,),
    )


async def fetch_page(ctx: CollectorContext, url: str, label: str) -> httpx.Response:
    return await fetch(
        ctx,
        url,
        label,
        headers={"Accept": "text/html,application/xhtml+xml"},
    )
