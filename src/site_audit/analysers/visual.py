"""Visual & Design: layout signals from the screenshots and page markup."""

from ..models import EvidenceKind, Impact
from .base import SectionAnalyser


class VisualAnalyser(SectionAnalyser):
    title = "Visual & Design"
    icon_key = "eye"
    weight = 1.5
    prefix = "vis"
    requires = ("screenshots", "html")
    reads = ("screenshots", "html")
    primary = "gemini"
    secondary = "openai"
    instructions = (
        "Judge the visual design from the desktop and mobile screenshots: hierarchy, "
        "typography, colour consistency, contrast of calls to action and mobile layout."
    )
    why_it_matters = (
        "Over half of web traffic is mobile. Poor visual design raises bounce rates and lowers trust."
    )

    def findings(self, bundle):
        html = bundle.html
        out = []

        if not html.viewport:
            out.append(self.finding(
                1, "No responsive viewport configured",
                "Without a viewport meta tag mobile browsers render the desktop layout zoomed out.",
                "No <meta name=\"viewport\"> tag found", EvidenceKind.MISSING, Impact.HIGH,
                "Add <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\">.",
                "Mobile", evidence_detail=f"mobile screenshot: {bundle.screenshots.mobile}",
            ))

        h1 = html.headings.h1
        if not h1:
            out.append(self.finding(
                2, "No main heading",
                "The page has no H1, so visitors get no clear headline to anchor the layout.",
                "0 <h1> elements", EvidenceKind.HTML, Impact.MEDIUM,
                "Give the page one clear H1 headline above the fold.", "Hierarchy",
            ))
        elif len(h1) > 1:
            out.append(self.finding(
                3, "Multiple competing main headings",
                "Several H1 headings compete for attention and blur the visual hierarchy.",
                f"{len(h1)} <h1> elements: {', '.join(h1[:3])}", EvidenceKind.HTML, Impact.LOW,
                "Keep one H1 and demote the others to H2.", "Hierarchy",
            ))

        unsized = [img.src for img in html.images if img.width is None or img.height is None]
        if len(unsized) > 3:
            out.append(self.finding(
                4, "Images without explicit dimensions",
                "Images without width and height make the layout jump while the page loads.",
                f"{len(unsized)} of {len(html.images)} images lack width/height",
                EvidenceKind.HTML, Impact.MEDIUM,
                "Set width and height attributes (or CSS aspect-ratio) on every image.", "Images",
                evidence_detail=", ".join(unsized[:3]),
            ))

        if not html.favicon:
            out.append(self.finding(
                5, "No favicon",
                "Browser tabs and bookmarks show a generic icon instead of your brand.",
                "No <link rel=\"icon\"> found", EvidenceKind.MISSING, Impact.LOW,
                "Add a favicon in the <head>.", "Branding",
            ))
        return out
