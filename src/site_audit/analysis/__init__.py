"""Scoring shared by synthesis and report assembly."""

from .scoring import executive_summary, round_half_up, top_fixes, weighted_score

__all__ = ["weighted_score", "top_fixes", "executive_summary", "round_half_up"]
