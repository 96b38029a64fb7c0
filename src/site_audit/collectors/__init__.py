"""Data collectors and the default collector table.

Each collector is ``async (ctx, url, job_id) -> payload``. The table order
is the bundle's field order: required collectors first.
"""

from functools import partial

from ..bundle import (
    OPTIONAL_FIELDS,
    REQUIRED_FIELDS,
    CompositeDataBundle,
    EarlyBundle,
)
from ..orchestration.units import Tier, UnitDescriptor
from .crawl import collect_robots, collect_sitemap
from .html import collect_html, parse_html
from .http import CollectorContext, fetch, fetch_page
from .lighthouse import collect_lighthouse
from .links import collect_link_check
from .screenshots import collect_screenshots
from .serp import collect_serp
from .tech_stack import collect_tech_stack, detect_stack
from .transport import collect_security_headers, collect_ssl_dns

COLLECTORS = (
    ("screenshots", Tier.REQUIRED, collect_screenshots),
    ("lighthouse", Tier.REQUIRED, collect_lighthouse),
    ("html", Tier.REQUIRED, collect_html),
    ("robots", Tier.OPTIONAL, collect_robots),
    ("sitemap", Tier.OPTIONAL, collect_sitemap),
    ("ssl_dns", Tier.OPTIONAL, collect_ssl_dns),
    ("security_headers", Tier.OPTIONAL, collect_security_headers),
    ("serp", Tier.OPTIONAL, collect_serp),
    ("link_check", Tier.OPTIONAL, collect_link_check),
    ("tech_stack", Tier.OPTIONAL, collect_tech_stack),
)


def default_collectors(ctx: CollectorContext) -> list[UnitDescriptor]:
    """Bind every collector to ``ctx``, in bundle field order."""
    return [UnitDescriptor(name, tier, partial(fn, ctx)) for name, tier, fn in COLLECTORS]


__all__ = [
    "COLLECTORS",
    "CollectorContext",
    "CompositeDataBundle",
    "EarlyBundle",
    "OPTIONAL_FIELDS",
    "REQUIRED_FIELDS",
    "default_collectors",
    "detect_stack",
    "fetch",
    "fetch_page",
    "parse_html",
]
