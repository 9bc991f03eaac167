"""Source trust tiering, processing order and the content admission policy."""

import re
from typing import List, Optional, Sequence, Tuple
from urllib.parse import urlparse

from gov_job_agent.config import (
    GOV_DOMAIN_SUFFIXES,
    KNOWN_BOARDS,
    POLICY_KEYWORDS,
    TIER_RULES,
    TRUSTED_SITES,
)
from gov_job_agent.ranking.rules import ScoringRule, fired_rules
from gov_job_agent.schemas.search_result import SearchResult
from gov_job_agent.utils.helpers import host_matches, host_of
from gov_job_agent.utils.job_title import is_trusted_domain
from gov_job_agent.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_TIER = 3
RECRUITMENT_PATH_RE = re.compile(r"(recruit|career|vacanc|notification|advertis|employment|jobs?)", re.IGNORECASE)


def build_tier_rules(tier_config: Sequence[dict] = TIER_RULES) -> List[ScoringRule]:
    """
    Expand tier config into rules whose weight is the tier number.
    A result's tier is the lowest weight among the rules that fire.
    """
    rules: List[ScoringRule] = []
    for entry in tier_config:
        tier = int(entry["tier"])
        for pattern in entry.get("host_patterns", []):
            regex = re.compile(pattern, re.IGNORECASE)
            rules.append(ScoringRule(f"tier{tier}:host:{pattern}", lambda r, rx=regex: bool(rx.search(host_of(r.link))), tier))
        for pattern in entry.get("text_patterns", []):
            regex = re.compile(pattern, re.IGNORECASE)
            rules.append(ScoringRule(f"tier{tier}:text:{pattern}", lambda r, rx=regex: bool(rx.search(f"{r.title} {r.snippet}")), tier))
    return rules


DEFAULT_TIER_RULES = build_tier_rules()


def assign_tier(result: SearchResult, rules: Sequence[ScoringRule] = DEFAULT_TIER_RULES) -> int:
    """0 = central authority, 1 and 2 = regional patterns, 3 = everything else."""
    fired = fired_rules(rules, result)
    if not fired:
        return DEFAULT_TIER
    return int(min(rule.weight for rule in fired))


def prioritize(
    results: List[SearchResult],
    rules: Optional[Sequence[ScoringRule]] = None,
    trusted_sites: Sequence[str] = TRUSTED_SITES,
) -> List[Tuple[SearchResult, int]]:
    """
    Stable sort by ascending tier, ties broken in favour of trusted-domain links.
    Returns (result, tier) pairs; input order is kept within equal keys.
    """
    rules = DEFAULT_TIER_RULES if rules is None else rules
    keyed = []
    for r in results:
        tier = assign_tier(r, rules)
        trusted = is_trusted_domain(r.link, trusted_sites)
        keyed.append((tier, 0 if trusted else 1, r))
    keyed.sort(key=lambda k: (k[0], k[1]))
    return [(r, tier) for tier, _, r in keyed]


def is_allowed_source(
    link: str,
    title: str,
    snippet: str,
    known_boards: Sequence[str] = KNOWN_BOARDS,
    keywords: Sequence[str] = POLICY_KEYWORDS,
) -> bool:
    """
    Admit a candidate if its host is a known recruitment board, or if it is a
    government-pattern host AND title+snippet carries a topic keyword AND the
    URL path looks like a recruitment/notification path.
    """
    try:
        parsed = urlparse(link or "")
    except ValueError:
        return False
    host = (parsed.hostname or "").lower()
    if not host:
        return False
    if host_matches(host, known_boards):
        return True

    text = f"{title or ''} {snippet or ''}".lower()
    has_keyword = any(k in text for k in keywords)
    is_gov = host.endswith(GOV_DOMAIN_SUFFIXES)
    recruitment_path = bool(RECRUITMENT_PATH_RE.search((parsed.path or "").lower()))
    return is_gov and has_keyword and recruitment_path
