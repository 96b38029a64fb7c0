"""Platform, app and third-party script detection from page markup."""

from __future__ import annotations

import re
from typing import Mapping, Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from ..bundle import DetectedApp, TechStackData, ThirdPartyScript
from .html import _attr, soup_of
from .http import CollectorContext, fetch_page

# (platform, markup needles, generator needles); first match wins
PLATFORM_SIGNATURES = (
    ("WordPress", ("wp-content",), ("wordpress",)),
    ("Shopify", ("cdn.shopify.com", "Shopify.theme"), ()),
    ("Wix", ("static.wixstatic.com", "wix-bolt"), ()),
    ("Squarespace", ("static.squarespace.com", "squarespace"), ()),
    ("Next.js", ("__NEXT_DATA__", "/_next/"), ()),
    ("Nuxt", ("__NUXT__", "/_nuxt/"), ()),
    ("Express", (), ()),
    ("Gatsby", ("__gatsby",), ()),
    ("Drupal", ("data-drupal",), ("drupal",)),
    ("Joomla", (), ("joomla",)),
    ("Webflow", ("webflow.com", "wf-page"), ()),
)

# (name, category, markup needles)
APP_SIGNATURES = (
    ("Google Analytics", "Analytics", ("google-analytics.com", "gtag")),
    ("Google Tag Manager", "Tag Management", ("googletagmanager.com",)),
    ("Meta Pixel", "Analytics", ("connect.facebook.net", "fbq(")),
    ("Hotjar", "Analytics", ("hotjar.com",)),
    ("Microsoft Clarity", "Analytics", ("clarity.ms",)),
    ("Intercom", "Customer Support", ("intercom.com", "Intercom(")),
    ("Crisp", "Customer Support", ("crisp.chat",)),
    ("Tawk.to", "Customer Support", ("tawk.to",)),
    ("Drift", "Customer Support", ("drift.com", "Drift(")),
    ("Mailchimp", "Email Marketing", ("chimpstatic.com", "list-manage.com")),
    ("Klaviyo", "Email Marketing", ("klaviyo.com",)),
    ("Shopify Buy Button", "eCommerce", ("cdn.shopify.com/s/files", "shopify-buy")),
    ("Google Fonts", "Font", ("fonts.googleapis.com", "fonts.gstatic.com")),
    ("Adobe Fonts", "Font", ("use.typekit.net",)),
    ("jsDelivr", "CDN", ("cdn.jsdelivr.net",)),
    ("jQuery", "JavaScript Library", ("jquery", "jQuery")),
    ("Tailwind CSS", "CSS Framework", ("tailwind",)),
)

SCRIPT_PURPOSES = {
    "google-analytics.com": "Analytics",
    "googletagmanager.com": "Tag Management",
    "connect.facebook.net": "Social / Advertising",
    "platform.twitter.com": "Social",
    "cdn.shopify.com": "eCommerce",
    "js.stripe.com": "Payments",
    "cdn.jsdelivr.net": "CDN",
    "cdnjs.cloudflare.com": "CDN",
    "unpkg.com": "CDN",
    "fonts.googleapis.com": "Fonts",
    "www.googleadservices.com": "Advertising",
    "pagead2.googlesyndication.com": "Advertising",
    "static.hotjar.com": "Analytics",
    "js.intercomcdn.com": "Customer Support",
    "widget.intercom.io": "Customer Support",
    "www.clarity.ms": "Analytics",
    "snap.licdn.com": "Social / Advertising",
}

_THEME_RE = re.compile(r"wp-content/themes/([^/\"']+)")
_REACT_RE = re.compile(r"__REACT_DEVTOOLS_GLOBAL_HOOK__|__reactContainer|react[-.]\d+")


def detect_platform(soup: BeautifulSoup, html: str, headers: Mapping[str, str]) -> Optional[str]:
    generator = (_attr(soup.find("meta", attrs={"name": "generator"}), "content") or "").lower()
    for platform, needles, generator_needles in PLATFORM_SIGNATURES:
        if platform == "Express":
            if "Express" in headers.get("x-powered-by", ""):
                return platform
            continue
        if any(n in html for n in needles) or any(n in generator for n in generator_needles):
            return platform
    return None


def detect_theme(soup: BeautifulSoup, html: str) -> Optional[str]:
    match = _THEME_RE.search(html)
    if match:
        return match.group(1)
    return _attr(soup.find("meta", attrs={"name": "theme-name"}), "content")


def detect_apps(soup: BeautifulSoup, html: str, headers: Mapping[str, str]) -> list[DetectedApp]:
    apps = [
        DetectedApp(name=name, category=category)
        for name, category, needles in APP_SIGNATURES
        if any(n in html for n in needles)
    ]
    if "cloudflare" in headers.get("server", "").lower() or "cloudflare" in html:
        apps.append(DetectedApp(name="Cloudflare", category="CDN"))
    if _REACT_RE.search(html) or soup.find(attrs={"data-reactroot": True}):
        apps.append(DetectedApp(name="React", category="JavaScript Framework"))
    if "Vue.js" in html or soup.find(attrs={"data-v-app": True}):
        apps.append(DetectedApp(name="Vue.js", category="JavaScript Framework"))
    angular = soup.find(attrs={"ng-version": True})
    if angular is not None or "ng-version" in html:
        apps.append(DetectedApp(
            name="Angular",
            category="JavaScript Framework",
            version=_attr(angular, "ng-version"),
        ))
    if "bootstrap" in html or soup.select_one('[class*="container-fluid"]'):
        apps.append(DetectedApp(name="Bootstrap", category="CSS Framework"))
    return apps


def script_purpose(domain: str) -> Optional[str]:
    for key, purpose in SCRIPT_PURPOSES.items():
        if key in domain:
            return purpose
    return None


def detect_third_party_scripts(soup: BeautifulSoup, base_url: str) -> list[ThirdPartyScript]:
    """One entry per external script domain, in first-seen order."""
    base_host = urlparse(base_url).hostname
    seen: dict[str, ThirdPartyScript] = {}
    for script in soup.find_all("script", src=True):
        try:
            domain = urlparse(urljoin(base_url, script["src"].strip())).hostname
        except ValueError:
            continue
        if domain and domain != base_host and domain not in seen:
            seen[domain] = ThirdPartyScript(domain=domain, purpose=script_purpose(domain))
    return list(seen.values())


def detect_stack(html: str, headers: Mapping[str, str], base_url: str) -> TechStackData:
    soup = soup_of(html)
    scripts = detect_third_party_scripts(soup, base_url)
    return TechStackData(
        platform=detect_platform(soup, html, headers),
        theme=detect_theme(soup, html),
        detected_apps=detect_apps(soup, html, headers),
        third_party_scripts=scripts,
        third_party_count=len(scripts),
    )


async def collect_tech_stack(ctx: CollectorContext, url: str, job_id: str) -> TechStackData:
    response = await fetch_page(ctx, url, "tech-stack-fetch")
    headers = {k.lower(): v for k, v in response.headers.items()}
    return detect_stack(response.text, headers, str(response.url))
