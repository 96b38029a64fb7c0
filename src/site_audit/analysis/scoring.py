"""Canonical scoring and local synthesis helpers.

:func:`weighted_score` is the only weighting policy in the package: the
continuous 0-100 section score, weighted per section, with ``Error``
sections excluded from numerator and denominator. The local synthesis
fallback scores through it; a provider-written synthesis keeps its own
``overallScore``.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from ..models import AnalysisResult, Impact, Rating, TopFix


def round_half_up(value: float) -> int:
    return int(np.floor(value + 0.5))


def weighted_score(results: Sequence[AnalysisResult], weights: Sequence[float]) -> int:
    """Weighted mean of non-Error scores, rounded; ``0`` when all are Error.

    ``weights`` is aligned positionally with ``results``.
    """
    if len(results) != len(weights):
        raise ValueError(f"{len(results)} results but {len(weights)} weights")

    scores = np.array([r.score for r in results], dtype=float)
    w = np.array(weights, dtype=float)
    mask = np.array([not r.is_error for r in results], dtype=bool)

    if not mask.any() or w[mask].sum() <= 0:
        return 0
    return round_half_up(float(np.average(scores[mask], weights=w[mask])))


def top_fixes(results: Sequence[AnalysisResult], limit: int = 5) -> list[TopFix]:
    """High-impact findings in section order, truncated to ``limit``."""
    fixes: list[TopFix] = []
    for result in results:
        for finding in result.findings:
            if finding.impact is not Impact.HIGH:
                continue
            fixes.append(
                TopFix(
                    title=finding.title,
                    section=result.section_title,
                    impact=finding.impact.value,
                    description=finding.fix,
                )
            )
            if len(fixes) >= limit:
                return fixes
    return fixes


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'s' if count != 1 else ''}"


def executive_summary(
    hostname: str,
    score: int,
    results: Sequence[AnalysisResult],
    fixes: Sequence[TopFix],
) -> str:
    """Templated summary; no external calls."""
    good = sum(1 for r in results if r.overall_rating is Rating.GOOD)
    critical = sum(1 for r in results if r.overall_rating is Rating.CRITICAL)
    errors = sum(1 for r in results if r.is_error)

    parts = [f"{hostname} scored {score}/100 overall."]
    if good:
        parts.append(f"{_plural(good, 'section')} rated Good.")
    if critical:
        verb = "needs" if critical == 1 else "need"
        parts.append(f"{_plural(critical, 'section')} {verb} urgent attention.")
    if errors:
        parts.append(f"{_plural(errors, 'section')} could not be analysed.")
    if fixes:
        parts.append(f"Top priority: {fixes[0].title.lower()}.")
    return " ".join(parts)
