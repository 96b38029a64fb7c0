"""Collector payload schemas and the composite data bundle.

Shared by collectors, orchestration and report assembly; depends only on
:mod:`site_audit.models`.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import Field

from .models import AuditModel


class ScreenshotData(AuditModel):
    desktop: str
    mobile: str


class LighthouseScores(AuditModel):
    performance: float
    accessibility: float
    best_practices: float
    seo: float
    lcp: float
    cls: float
    tbt: float
    fcp: float
    si: float
    tti: float


class LighthouseDiagnostic(AuditModel):
    title: str
    description: str
    score: Optional[float] = None


class LighthouseData(AuditModel):
    mobile: LighthouseScores
    desktop: LighthouseScores
    diagnostics: list[LighthouseDiagnostic] = Field(default_factory=list)


class ImageData(AuditModel):
    src: str
    alt: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None


class Headings(AuditModel):
    h1: list[str] = Field(default_factory=list)
    h2: list[str] = Field(default_factory=list)
    h3: list[str] = Field(default_factory=list)


class Links(AuditModel):
    internal: list[str] = Field(default_factory=list)
    external: list[str] = Field(default_factory=list)


class OgTags(AuditModel):
    title: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    type: Optional[str] = None
    url: Optional[str] = None


class TwitterCard(AuditModel):
    card: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None


class HtmlData(AuditModel):
    title: Optional[str] = None
    meta_description: Optional[str] = None
    canonical_url: Optional[str] = None
    headings: Headings = Field(default_factory=Headings)
    images: list[ImageData] = Field(default_factory=list)
    links: Links = Field(default_factory=Links)
    og_tags: OgTags = Field(default_factory=OgTags)
    twitter_card: TwitterCard = Field(default_factory=TwitterCard)
    schema_org: list[Any] = Field(default_factory=list)
    forms: int = 0
    word_count: int = 0
    language: Optional[str] = None
    favicon: Optional[str] = None
    viewport: Optional[str] = None


class RobotsData(AuditModel):
    exists: bool
    content: Optional[str] = None
    disallow_rules: list[str] = Field(default_factory=list)
    sitemap_refs: list[str] = Field(default_factory=list)


class SitemapData(AuditModel):
    exists: bool
    url_count: int = 0
    sample_urls: list[str] = Field(default_factory=list)
    lastmod: Optional[str] = None


class RedirectHop(AuditModel):
    url: str
    status_code: int


class SslDnsData(AuditModel):
    is_https: bool
    cert_issuer: Optional[str] = None
    cert_expiry: Optional[str] = None
    protocol: Optional[str] = None
    redirect_chain: list[RedirectHop] = Field(default_factory=list)


class SecurityHeadersData(AuditModel):
    headers: dict[str, Optional[str]] = Field(default_factory=dict)
    missing_headers: list[str] = Field(default_factory=list)
    grade: Optional[str] = None


class SerpResult(AuditModel):
    title: str
    link: str
    snippet: str


class SerpData(AuditModel):
    indexed_pages: Optional[int] = None
    homepage_snippet: Optional[str] = None
    brand_search_present: bool = False
    top_results: list[SerpResult] = Field(default_factory=list)


class BrokenLink(AuditModel):
    url: str
    status_code: int
    source_url: str


class RedirectLink(AuditModel):
    url: str
    redirects_to: str
    status_code: int


class LinkCheckData(AuditModel):
    total_checked: int = 0
    broken: list[BrokenLink] = Field(default_factory=list)
    redirects: list[RedirectLink] = Field(default_factory=list)


class DetectedApp(AuditModel):
    name: str
    category: str
    version: Optional[str] = None


class ThirdPartyScript(AuditModel):
    domain: str
    purpose: Optional[str] = None


class TechStackData(AuditModel):
    platform: Optional[str] = None
    theme: Optional[str] = None
    detected_apps: list[DetectedApp] = Field(default_factory=list)
    third_party_scripts: list[ThirdPartyScript] = Field(default_factory=list)
    third_party_count: int = 0


class EarlyBundle(AuditModel):
    """The subset of collected data available before collection finishes."""

    screenshots: ScreenshotData
    html: HtmlData


class CompositeDataBundle(AuditModel):
    """All collector outputs for one job.

    Required fields are non-null by construction. An optional field is
    ``None`` when its collector failed or timed out.
    """

    screenshots: ScreenshotData
    lighthouse: LighthouseData
    html: HtmlData
    robots: Optional[RobotsData] = None
    sitemap: Optional[SitemapData] = None
    ssl_dns: Optional[SslDnsData] = None
    security_headers: Optional[SecurityHeadersData] = None
    serp: Optional[SerpData] = None
    link_check: Optional[LinkCheckData] = None
    tech_stack: Optional[TechStackData] = None

    @property
    def null_fields(self) -> list[str]:
        return [name for name in OPTIONAL_FIELDS if getattr(self, name) is None]


REQUIRED_FIELDS = ("screenshots", "lighthouse", "html")
OPTIONAL_FIELDS = (
    "robots",
    "sitemap",
    "ssl_dns",
    "security_headers",
    "serp",
    "link_check",
    "tech_stack",
)
