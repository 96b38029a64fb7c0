"""SEO & Keywords: on-page tags, crawlability and search presence."""

from ..models import EvidenceKind, Impact
from .base import SectionAnalyser


class SeoAnalyser(SectionAnalyser):
    title = "SEO & Keywords"
    icon_key = "search"
    prefix = "seo"
    reads = ("html", "robots", "sitemap", "serp")
    instructions = (
        "Review titles, meta descriptions, headings, canonical tags, robots.txt, "
        "sitemap and search result presence. Suggest target keywords."
    )
    why_it_matters = "Search is how most new visitors find a site. Missing basics keep you off page one."

    def findings(self, bundle):
        html = bundle.html
        out = []

        if not html.title:
            out.append(self.finding(
                1, "Missing page title", "Search engines have no title to show in results.",
                "No <title> element", EvidenceKind.MISSING, Impact.HIGH,
                "Add a descriptive <title> of 50-60 characters.", "Meta Tags",
            ))
        elif len(html.title) > 60:
            out.append(self.finding(
                1, "Page title too long", "Titles over 60 characters are truncated in results.",
                f"{len(html.title)} characters: {html.title}", EvidenceKind.HTML, Impact.LOW,
                "Shorten the title to 60 characters or fewer.", "Meta Tags",
            ))

        if not html.meta_description:
            out.append(self.finding(
                2, "Missing meta description", "Search engines will improvise a snippet from page text.",
                "No <meta name=\"description\">", EvidenceKind.MISSING, Impact.HIGH,
                "Write a 120-160 character meta description.", "Meta Tags",
            ))

        if not html.headings.h1:
            out.append(self.finding(
                3, "No H1 heading", "The main topic of the page is not marked up.",
                "0 <h1> elements", EvidenceKind.HTML, Impact.MEDIUM,
                "Add one H1 containing the primary keyword.", "Headings",
            ))

        if not html.canonical_url:
            out.append(self.finding(
                4, "No canonical URL", "Duplicate URLs may split ranking signals.",
                "No <link rel=\"canonical\">", EvidenceKind.MISSING, Impact.LOW,
                "Add a canonical link pointing at the preferred URL.", "Indexing",
            ))

        robots = bundle.robots
        if robots is not None:
            if not robots.exists:
                out.append(self.finding(
                    5, "No robots.txt", "Crawlers get no guidance on what to index.",
                    "/robots.txt returned 404", EvidenceKind.MISSING, Impact.MEDIUM,
                    "Publish a robots.txt that references your sitemap.", "Crawlability",
                ))
            elif "/" in robots.disallow_rules:
                out.append(self.finding(
                    5, "robots.txt blocks the whole site", "Search engines are told not to crawl any page.",
                    "Disallow: /", EvidenceKind.HTML, Impact.HIGH,
                    "Remove the blanket Disallow rule.", "Crawlability",
                ))

        sitemap = bundle.sitemap
        if sitemap is not None and not sitemap.exists:
            out.append(self.finding(
                6, "No XML sitemap", "Search engines have to discover pages on their own.",
                "/sitemap.xml not found", EvidenceKind.MISSING, Impact.MEDIUM,
                "Generate a sitemap.xml and submit it in Search Console.", "Crawlability",
            ))

        serp = bundle.serp
        if serp is not None and serp.indexed_pages == 0:
            out.append(self.finding(
                7, "Site not indexed", "No pages from this domain appear in search results.",
                "site: query returned 0 results", EvidenceKind.METRIC, Impact.HIGH,
                "Verify the domain in Search Console and request indexing.", "Search Presence",
            ))

        if not html.schema_org:
            out.append(self.finding(
                8, "No structured data", "Rich results need schema.org markup.",
                "No JSON-LD blocks found", EvidenceKind.MISSING, Impact.LOW,
                "Add JSON-LD for your organisation and key pages.", "Structured Data",
            ))
        return out
