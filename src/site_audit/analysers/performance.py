"""Performance & Speed: Lighthouse scores and Core Web Vitals."""

from ..models import EvidenceKind, Impact
from .base import SectionAnalyser

# (metric, label, medium threshold, high threshold, unit)
_VITALS = (
    ("lcp", "Largest Contentful Paint", 2500, 4000, "ms"),
    ("tbt", "Total Blocking Time", 200, 600, "ms"),
    ("cls", "Cumulative Layout Shift", 0.1, 0.25, ""),
)


class PerformanceAnalyser(SectionAnalyser):
    title = "Performance & Speed"
    icon_key = "gauge"
    weight = 1.5
    prefix = "perf"
    requires = ("lighthouse",)
    reads = ("lighthouse",)
    instructions = (
        "Interpret the mobile and desktop Lighthouse results and diagnostics. "
        "Explain slow metrics in plain language and give concrete fixes."
    )
    why_it_matters = "Slow pages lose visitors: every extra second of load time cuts conversions."

    def findings(self, bundle):
        lh = bundle.lighthouse
        mobile = lh.mobile
        out = []

        if mobile.performance < 90:
            impact = Impact.HIGH if mobile.performance < 50 else Impact.MEDIUM
            out.append(self.finding(
                1, "Low mobile performance score",
                "Lighthouse rates the mobile experience as slow.",
                f"Mobile performance {mobile.performance:g}/100 (desktop {lh.desktop.performance:g}/100)",
                EvidenceKind.METRIC, impact,
                "Compress images, defer non-critical JavaScript and enable caching.", "Lighthouse",
            ))

        for n, (attr, label, medium, high, unit) in enumerate(_VITALS, start=2):
            value = getattr(mobile, attr)
            if value <= medium:
                continue
            impact = Impact.HIGH if value > high else Impact.MEDIUM
            out.append(self.finding(
                n, f"Slow {label}",
                f"{label} on mobile is above the recommended {medium:g}{unit}.",
                f"{attr.upper()} = {value:g}{unit}", EvidenceKind.METRIC, impact,
                f"Bring {label} under {medium:g}{unit}.", "Core Web Vitals",
            ))

        failing = [d for d in lh.diagnostics if d.score is not None and d.score < 0.5]
        for n, diag in enumerate(failing[:3], start=10):
            out.append(self.finding(
                n, diag.title, diag.description,
                f"Lighthouse audit score {diag.score:g}", EvidenceKind.METRIC, Impact.LOW,
                f"Address the Lighthouse audit \"{diag.title}\".", "Diagnostics",
            ))
        return out
