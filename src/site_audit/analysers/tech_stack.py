"""Tech Stack & Apps: platform, detected apps and missing tools."""

from ..models import EvidenceKind, Impact
from .base import SectionAnalyser

MISSING_TOOLS = "Missing Tools"


def _has(apps, *needles: str) -> bool:
    for app in apps:
        text = f"{app.name} {app.category}".lower()
        if any(needle in text for needle in needles):
            return True
    return False


class TechStackAnalyser(SectionAnalyser):
    title = "Tech Stack & Apps"
    icon_key = "layers"
    weight = 0.75
    prefix = "tech"
    requires = ("tech_stack",)
    reads = ("tech_stack",)
    primary = "openai_fast"
    secondary = "gemini_fast"
    instructions = (
        "Review the detected platform, apps and third-party scripts. Recommend missing tools "
        f"as findings with evidenceType MISSING and category \"{MISSING_TOOLS}\"."
    )
    why_it_matters = "The right tools measure and grow traffic; too many scripts slow the site down."

    def findings(self, bundle):
        stack = bundle.tech_stack
        out = []

        if not stack.platform:
            out.append(self.finding(
                1, "Platform not identified", "The site's platform could not be recognised.",
                "No platform signature matched", EvidenceKind.METRIC, Impact.LOW,
                "No action needed unless you expected a known platform.", "Platform",
            ))

        if stack.third_party_count > 10:
            domains = ", ".join(s.domain for s in stack.third_party_scripts[:5])
            out.append(self.finding(
                2, f"High number of third-party scripts ({stack.third_party_count})",
                "Many third-party scripts add weight, slow rendering and widen the attack surface.",
                domains, EvidenceKind.METRIC, Impact.MEDIUM,
                "Remove unused scripts and lazy-load the non-essential ones.", "Performance",
            ))

        if not _has(stack.detected_apps, "analytics", "google tag"):
            out.append(self.finding(
                3, "No analytics tool detected",
                "Without analytics you cannot measure traffic or conversions.",
                "No analytics scripts among detected technologies", EvidenceKind.MISSING, Impact.HIGH,
                "Install Google Analytics 4, Plausible or a similar tool.", MISSING_TOOLS,
            ))

        if not _has(stack.detected_apps, "email", "newsletter", "klaviyo", "mailchimp"):
            out.append(self.finding(
                4, "No email marketing tool detected",
                "There is no way for visitors to join a mailing list.",
                "No email marketing integration found", EvidenceKind.MISSING, Impact.LOW,
                "Add a newsletter signup backed by an email platform.", MISSING_TOOLS,
            ))
        return out
