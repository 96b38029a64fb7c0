"""Broken link and redirect detection over the page's internal links."""

from __future__ import annotations

import asyncio
from urllib.parse import urljoin

import httpx

from ..bundle import BrokenLink, LinkCheckData, RedirectLink
from .html import soup_of, split_links
from .http import CollectorContext, fetch, fetch_page


async def check_link(ctx: CollectorContext, link: str) -> httpx.Response:
    return await fetch(
        ctx,
        link,
        "link-check",
        method="HEAD",
        follow_redirects=False,
        raise_for_status=False,
        retry=False,
    )


async def collect_link_check(ctx: CollectorContext, url: str, job_id: str) -> LinkCheckData:
    page = await fetch_page(ctx, url, "link-check-page")
    source = str(page.url)
    links = split_links(soup_of(page.text), source).internal
    links = links[: ctx.config.max_internal_links_to_check]

    responses = await asyncio.gather(
        *(check_link(ctx, link) for link in links),
        return_exceptions=True,
    )

    broken: list[BrokenLink] = []
    redirects: list[RedirectLink] = []
    for link, response in zip(links, responses):
        if isinstance(response, httpx.HTTPError):
            # unreachable counts as broken; status 0 marks no response
            broken.append(BrokenLink(url=link, status_code=0, source_url=source))
            continue
        if isinstance(response, BaseException):
            raise response
        status = response.status_code
        if status >= 400:
            broken.append(BrokenLink(url=link, status_code=status, source_url=source))
        elif 300 <= status < 400 and response.headers.get("location"):
            redirects.append(
                RedirectLink(
                    url=link,
                    redirects_to=urljoin(link, response.headers["location"]),
                    status_code=status,
                )
            )
    return LinkCheckData(total_checked=len(links), broken=broken, redirects=redirects)
