"""Content & Conversion: copy depth, calls to action and link health."""

from ..models import EvidenceKind, Impact
from .base import SectionAnalyser


class ContentAnalyser(SectionAnalyser):
    title = "Content & Conversion"
    icon_key = "file-text"
    prefix = "content"
    reads = ("html", "link_check")
    primary = "gemini_fast"
    secondary = "anthropic"
    instructions = (
        "Evaluate copy depth, structure, calls to action, lead capture and broken links "
        "from the perspective of converting a first-time visitor."
    )
    why_it_matters = "Clear content and working links turn visitors into customers."

    def findings(self, bundle):
        html = bundle.html
        links = bundle.link_check
        out = []

        if html.word_count < 600:
            out.append(self.finding(
                1, "Thin page content", "There is little copy to explain the offer or rank in search.",
                f"{html.word_count} words on the page", EvidenceKind.METRIC,
                Impact.HIGH if html.word_count < 300 else Impact.MEDIUM,
                "Expand the copy to answer visitor questions (aim for 600+ words).", "Copy",
            ))

        if html.forms == 0:
            out.append(self.finding(
                2, "No lead capture form", "Visitors have no way to leave their details.",
                "0 <form> elements", EvidenceKind.HTML, Impact.MEDIUM,
                "Add a signup, contact or newsletter form.", "Conversion",
            ))

        if not html.headings.h2:
            out.append(self.finding(
                3, "Content is not broken into sections", "Long unstructured copy is hard to scan.",
                "0 <h2> elements", EvidenceKind.HTML, Impact.LOW,
                "Use H2 subheadings to split the page into scannable sections.", "Structure",
            ))

        if links is not None:
            if links.broken:
                sample = ", ".join(f"{b.url} ({b.status_code})" for b in links.broken[:3])
                out.append(self.finding(
                    4, f"{len(links.broken)} broken internal links",
                    "Broken links frustrate visitors and waste crawl budget.",
                    sample, EvidenceKind.METRIC,
                    Impact.HIGH if len(links.broken) > 3 else Impact.MEDIUM,
                    "Fix or remove the broken links.", "Links",
                ))
            if len(links.redirects) > 5:
                out.append(self.finding(
                    5, "Many internal links redirect", "Each redirect adds a round trip.",
                    f"{len(links.redirects)} of {links.total_checked} links redirect",
                    EvidenceKind.METRIC, Impact.LOW,
                    "Point internal links at their final URLs.", "Links",
                ))
        return out
