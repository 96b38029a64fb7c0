"""Page markup extraction with BeautifulSoup."""

from __future__ import annotations

import json
from typing import Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup, Comment, Doctype

from ..bundle import Headings, HtmlData, ImageData, Links, OgTags, TwitterCard
from .http import CollectorContext, fetch_page


def soup_of(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def _attr(tag, name: str) -> Optional[str]:
    if tag is None:
        return None
    value = tag.get(name)
    if isinstance(value, list):
        value = " ".join(value)
    value = (value or "").strip()
    return value or None


def _meta(soup: BeautifulSoup, **attrs) -> Optional[str]:
    return _attr(soup.find("meta", attrs=attrs), "content")


def _int_or_none(value: Optional[str]) -> Optional[int]:
    try:
        return int(value) if value is not None else None
    except ValueError:
        return None


def _texts(soup: BeautifulSoup, name: str) -> list[str]:
    return [t for t in (el.get_text(" ", strip=True) for el in soup.find_all(name)) if t]


def split_links(soup: BeautifulSoup, base_url: str) -> Links:
    """Unique http(s) links, split by whether they share the page's host."""
    base_host = urlparse(base_url).hostname
    internal: dict[str, None] = {}
    external: dict[str, None] = {}
    for a in soup.find_all("a", href=True):
        try:
            resolved = urljoin(base_url, a["href"].strip())
            parsed = urlparse(resolved)
        except ValueError:
            continue
        if parsed.scheme not in ("http", "https"):
            continue
        resolved = parsed._replace(fragment="").geturl()
        (internal if parsed.hostname == base_host else external)[resolved] = None
    return Links(internal=list(internal), external=list(external))


def _word_count(root) -> int:
    words = 0
    for text in root.find_all(string=True):
        if isinstance(text, (Comment, Doctype)) or text.parent.name in ("script", "style", "noscript"):
            continue
        words += len(text.split())
    return words


def _schema_org(soup: BeautifulSoup) -> list:
    blocks = []
    for script in soup.find_all("script", type="application/ld+json"):
        try:
            blocks.append(json.loads(script.string or ""))
        except ValueError:
            continue
    return blocks


def _favicon(soup: BeautifulSoup) -> Optional[str]:
    for link in soup.find_all("link", rel=True):
        rel = " ".join(link.get("rel")).lower()
        if rel in ("icon", "shortcut icon", "apple-touch-icon"):
            return _attr(link, "href")
    return None


def parse_html(html: str, base_url: str) -> HtmlData:
    soup = soup_of(html)
    title_tag = soup.find("title")
    canonical = soup.find("link", rel="canonical")
    html_tag = soup.find("html")
    body = soup.find("body") or soup

    return HtmlData(
        title=(title_tag.get_text(strip=True) or None) if title_tag else None,
        meta_description=_meta(soup, name="description"),
        canonical_url=_attr(canonical, "href"),
        headings=Headings(h1=_texts(soup, "h1"), h2=_texts(soup, "h2"), h3=_texts(soup, "h3")),
        images=[
            ImageData(
                src=img.get("src", ""),
                alt=img.get("alt"),
                width=_int_or_none(img.get("width")),
                height=_int_or_none(img.get("height")),
            )
            for img in soup.find_all("img")
        ],
        links=split_links(soup, base_url),
        og_tags=OgTags(
            title=_meta(soup, property="og:title"),
            description=_meta(soup, property="og:description"),
            image=_meta(soup, property="og:image"),
            type=_meta(soup, property="og:type"),
            url=_meta(soup, property="og:url"),
        ),
        twitter_card=TwitterCard(
            card=_meta(soup, name="twitter:card"),
            title=_meta(soup, name="twitter:title"),
            description=_meta(soup, name="twitter:description"),
            image=_meta(soup, name="twitter:image"),
        ),
        schema_org=_schema_org(soup),
        forms=len(soup.find_all("form")),
        word_count=_word_count(body),
        language=_attr(html_tag, "lang"),
        favicon=_favicon(soup),
        viewport=_meta(soup, name="viewport"),
    )


async def collect_html(ctx: CollectorContext, url: str, job_id: str) -> HtmlData:
    response = await fetch_page(ctx, url, "html-fetch")
    return parse_html(response.text, str(response.url))
