"""Tests for the canonical weighted score and local synthesis helpers."""

import pytest

from site_audit.analysis import executive_summary, round_half_up, top_fixes, weighted_score
from site_audit.models import EvidenceKind, Finding, Impact, Rating


def _finding(title, impact=Impact.HIGH):
    return Finding(
        id=f"f-{title}",
        title=title,
        description="d",
        evidence="e",
        evidence_type=EvidenceKind.METRIC,
        impact=impact,
        fix=f"fix {title}",
        category="c",
        section="s",
    )


class TestWeightedScore:
    def test_worked_example(self, make_result):
        results = [make_result("a", 90), make_result("b", 30), make_result("c", 60)]
        assert weighted_score(results, [1.5, 1.5, 1.0]) == 60

    def test_error_sections_excluded(self, make_result):
        results = [
            make_result("a", 80),
            make_result("b", 0, Rating.ERROR),
            make_result("c", 40),
        ]
        assert weighted_score(results, [1.0, 5.0, 1.0]) == 60

    def test_all_error_scores_zero(self, make_result):
        results = [make_result("a", 0, Rating.ERROR), make_result("b", 0, Rating.ERROR)]
        assert weighted_score(results, [1.0, 1.0]) == 0

    def test_half_rounds_up(self, make_result):
        results = [make_result("a", 62), make_result("b", 63)]
        assert weighted_score(results, [1.0, 1.0]) == 63

    def test_length_mismatch_rejected(self, make_result):
        with pytest.raises(ValueError):
            weighted_score([make_result("a")], [1.0, 1.0])

    def test_round_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(2.49) == 2


class TestTopFixes:
    def test_high_only_in_section_order(self, make_result):
        results = [
            make_result("A", findings=[_finding("a1"), _finding("a2", Impact.LOW)]),
            make_result("B", findings=[_finding("b1"), _finding("b2")]),
        ]
        fixes = top_fixes(results)
        assert [f.title for f in fixes] == ["a1", "b1", "b2"]
        assert fixes[0].section == "A"
        assert fixes[0].description == "fix a1"
        assert fixes[0].impact == "High"

    def test_truncated_to_limit(self, make_result):
        results = [make_result("A", findings=[_finding(str(i)) for i in range(8)])]
        assert len(top_fixes(results, limit=5)) == 5


class TestExecutiveSummary:
    def test_counts_and_top_fix(self, make_result):
        results = [
            make_result("A", 90, Rating.GOOD),
            make_result("B", 20, Rating.CRITICAL, findings=[_finding("Slow LCP")]),
            make_result("C", 0, Rating.ERROR),
        ]
        summary = executive_summary("acme.test", 55, results, top_fixes(results))
        assert summary == (
            "acme.test scored 55/100 overall. 1 section rated Good. "
            "1 section needs urgent attention. 1 section could not be analysed. "
            "Top priority: slow lcp."
        )
