"""Shared test fixtures for Site Audit pipeline tests."""

from __future__ import annotations

import pytest

from site_audit.bundle import (
    CompositeDataBundle,
    DetectedApp,
    Headings,
    HtmlData,
    ImageData,
    LighthouseData,
    LighthouseScores,
    Links,
    LinkCheckData,
    OgTags,
    RobotsData,
    ScreenshotData,
    SecurityHeadersData,
    SerpData,
    SitemapData,
    SslDnsData,
    TechStackData,
    TwitterCard,
)
from site_audit.models import AnalysisResult, Rating


class FakeProvider:
    """Scripted ``StructuredProvider``.

    Each call pops the next scripted reply: an exception is raised, a dict is
    validated against the requested schema, anything else is returned as is.
    """

    def __init__(self, name: str, replies=()):
        self.name = name
        self.replies = list(replies)
        self.prompts: list[str] = []

    async def call(self, prompt, schema):
        self.prompts.append(prompt)
        if not self.replies:
            raise RuntimeError(f"{self.name}: no scripted reply")
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        if isinstance(reply, dict):
            return schema.model_validate(reply)
        return reply


def _scores(performance=72, accessibility=88) -> LighthouseScores:
    return LighthouseScores(
        performance=performance,
        accessibility=accessibility,
        best_practices=92,
        seo=90,
        lcp=3100,
        cls=0.05,
        tbt=150,
        fcp=1200,
        si=2800,
        tti=4200,
    )


def _html() -> HtmlData:
    return HtmlData(
        title="Acme Widgets - Handmade widgets",
        meta_description="Handmade widgets shipped worldwide.",
        canonical_url="https://acme.test/",
        headings=Headings(h1=["Handmade widgets"], h2=["Why Acme", "Reviews"]),
        images=[ImageData(src="/hero.jpg", alt="Hero", width=1200, height=600)],
        links=Links(internal=["https://acme.test/about"], external=["https://x.com/acme"]),
        og_tags=OgTags(title="Acme", description="Widgets", image="https://acme.test/og.png"),
        twitter_card=TwitterCard(card="summary_large_image"),
        schema_org=[{"@type": "Organization"}],
        forms=1,
        word_count=850,
        language="en",
        favicon="/favicon.ico",
        viewport="width=device-width, initial-scale=1",
    )


def build_bundle(sparse: bool = False, **overrides) -> CompositeDataBundle:
    fields = dict(
        screenshots=ScreenshotData(desktop="file:///d.png", mobile="file:///m.png"),
        lighthouse=LighthouseData(mobile=_scores(), desktop=_scores(performance=95)),
        html=_html(),
        robots=RobotsData(exists=True, content="User-agent: *", sitemap_refs=["https://acme.test/sitemap.xml"]),
        sitemap=SitemapData(exists=True, url_count=12),
        ssl_dns=SslDnsData(is_https=True, protocol="TLSv1.3"),
        security_headers=SecurityHeadersData(
            headers={"x-frame-options": "DENY"},
            missing_headers=["content-security-policy"],
            grade="B",
        ),
        serp=SerpData(indexed_pages=40, brand_search_present=True),
        link_check=LinkCheckData(total_checked=1),
        tech_stack=TechStackData(
            platform="Shopify",
            detected_apps=[DetectedApp(name="Google Analytics", category="Analytics")],
        ),
    )
    if sparse:
        for name in ("robots", "sitemap", "ssl_dns", "security_headers", "serp", "link_check", "tech_stack"):
            fields[name] = None
    fields.update(overrides)
    return CompositeDataBundle(**fields)


def build_result(title: str, score: float = 80, rating: Rating = Rating.GOOD, findings=()) -> AnalysisResult:
    return AnalysisResult(
        section_title=title,
        eli5_summary=f"{title} summary",
        why_it_matters="It matters.",
        overall_rating=rating,
        score=score,
        findings=list(findings),
    )


@pytest.fixture
def make_bundle():
    """Factory for a fully populated bundle; ``sparse=True`` nulls every optional field."""
    return build_bundle


@pytest.fixture
def bundle() -> CompositeDataBundle:
    return build_bundle()


@pytest.fixture
def make_result():
    return build_result


@pytest.fixture
def fake_provider():
    """Factory: ``fake_provider(name, replies)``."""
    return FakeProvider
