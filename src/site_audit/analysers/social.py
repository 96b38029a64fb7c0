"""Social & Sharing: Open Graph and Twitter card metadata."""

from ..models import EvidenceKind, Impact
from .base import SectionAnalyser


class SocialAnalyser(SectionAnalyser):
    title = "Social & Sharing"
    icon_key = "share-2"
    weight = 0.75
    prefix = "social"
    reads = ("html",)
    primary = "openai_fast"
    secondary = "gemini_fast"
    instructions = "Check how the page previews when shared on social networks and messaging apps."
    why_it_matters = "Links with a good title and image get far more clicks when shared."

    def findings(self, bundle):
        og = bundle.html.og_tags
        twitter = bundle.html.twitter_card
        out = []

        if not og.title:
            out.append(self.finding(
                1, "Missing Open Graph title", "Shared links will not show a proper title.",
                "No og:title meta tag", EvidenceKind.MISSING, Impact.HIGH,
                "Add <meta property=\"og:title\" content=\"...\">.", "Open Graph",
            ))
        if not og.description:
            out.append(self.finding(
                2, "Missing Open Graph description", "Shared links will have no summary line.",
                "No og:description meta tag", EvidenceKind.MISSING, Impact.MEDIUM,
                "Add <meta property=\"og:description\" content=\"...\">.", "Open Graph",
            ))
        if not og.image:
            out.append(self.finding(
                3, "Missing Open Graph image", "Shared links show a blank placeholder instead of an image.",
                "No og:image meta tag", EvidenceKind.MISSING, Impact.HIGH,
                "Add an og:image of 1200x630 pixels.", "Open Graph",
            ))
        if not twitter.card:
            out.append(self.finding(
                4, "No Twitter card", "Posts on X fall back to a minimal preview.",
                "No twitter:card meta tag", EvidenceKind.MISSING, Impact.LOW,
                "Add <meta name=\"twitter:card\" content=\"summary_large_image\">.", "Twitter",
            ))
        return out
