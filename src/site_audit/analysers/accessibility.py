"""Accessibility: Lighthouse accessibility score and markup checks."""

from ..models import EvidenceKind, Impact
from .base import SectionAnalyser


class AccessibilityAnalyser(SectionAnalyser):
    title = "Accessibility"
    icon_key = "accessibility"
    prefix = "a11y"
    reads = ("lighthouse", "html")
    instructions = (
        "Assess accessibility from the Lighthouse accessibility score, image alt text, "
        "document language and form usage, referencing WCAG 2.1 AA."
    )
    why_it_matters = "One in five people has a disability. Inaccessible sites exclude customers and invite legal risk."

    def findings(self, bundle):
        score = bundle.lighthouse.mobile.accessibility
        html = bundle.html
        out = []

        if score < 90:
            out.append(self.finding(
                1, "Accessibility score below target", "Lighthouse found accessibility barriers.",
                f"Lighthouse accessibility {score:g}/100", EvidenceKind.METRIC,
                Impact.HIGH if score < 50 else Impact.MEDIUM,
                "Fix the issues listed in the Lighthouse accessibility audit.", "Lighthouse",
            ))

        no_alt = [img.src for img in html.images if not img.alt]
        if no_alt:
            out.append(self.finding(
                2, "Images missing alt text", "Screen readers cannot describe these images.",
                f"{len(no_alt)} of {len(html.images)} images have no alt attribute",
                EvidenceKind.HTML, Impact.HIGH if len(no_alt) > 5 else Impact.MEDIUM,
                "Add meaningful alt text, or alt=\"\" for decorative images.", "Images",
                evidence_detail=", ".join(no_alt[:3]),
            ))

        if not html.language:
            out.append(self.finding(
                3, "Page language not declared", "Screen readers may pronounce content incorrectly.",
                "<html> has no lang attribute", EvidenceKind.MISSING, Impact.MEDIUM,
                "Add lang=\"en\" (or the right language) to the <html> element.", "Semantics",
            ))

        if html.headings.h3 and not html.headings.h2:
            out.append(self.finding(
                4, "Skipped heading levels", "Headings jump from H1 to H3, which confuses assistive navigation.",
                f"{len(html.headings.h3)} H3 headings with no H2", EvidenceKind.HTML, Impact.LOW,
                "Use heading levels in order.", "Semantics",
            ))
        return out
