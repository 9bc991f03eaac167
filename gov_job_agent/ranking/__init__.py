"""Ranking: weighted rules and outbound link ranking."""

from .link_ranker import LinkCandidate, rank_links, score_link
from .rules import ScoringRule, explain, score

__all__ = ["ScoringRule", "score", "explain", "LinkCandidate", "score_link", "rank_links"]
