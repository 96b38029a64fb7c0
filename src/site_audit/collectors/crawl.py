"""robots.txt and sitemap.xml."""

from __future__ import annotations

from urllib.parse import urljoin

from bs4 import BeautifulSoup

from ..bundle import RobotsData, SitemapData
from .http import CollectorContext, fetch


def parse_robots(content: str) -> RobotsData:
    disallow, sitemaps = [], []
    for raw in content.splitlines():
        line = raw.split("#", 1)[0].strip()
        if ":" not in line:
            continue
        field, value = (part.strip() for part in line.split(":", 1))
        field = field.lower()
        if field == "disallow" and value:
            disallow.append(value)
        elif field == "sitemap" and value:
            sitemaps.append(value)
    return RobotsData(exists=True, content=content, disallow_rules=disallow, sitemap_refs=sitemaps)


def parse_sitemap(xml: str) -> SitemapData:
    soup = BeautifulSoup(xml, "html.parser")
    locs = [loc.get_text(strip=True) for loc in soup.find_all("loc")]
    lastmods = [lm.get_text(strip=True) for lm in soup.find_all("lastmod")]
    return SitemapData(
        exists=True,
        url_count=len(locs),
        sample_urls=locs[:10],
        lastmod=lastmods[-1] if lastmods else None,
    )


async def collect_robots(ctx: CollectorContext, url: str, job_id: str) -> RobotsData:
    response = await fetch(ctx, urljoin(url, "/robots.txt"), "robots", raise_for_status=False)
    if response.status_code == 404:
        return RobotsData(exists=False)
    response.raise_for_status()
    return parse_robots(response.text)


async def collect_sitemap(ctx: CollectorContext, url: str, job_id: str) -> SitemapData:
    response = await fetch(ctx, urljoin(url, "/sitemap.xml"), "sitemap", raise_for_status=False)
    if response.status_code == 404:
        return SitemapData(exists=False)
    response.raise_for_status()
    return parse_sitemap(response.text)
