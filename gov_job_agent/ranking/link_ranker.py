"""Rank outbound links of a notification page by how likely they lead to the notice itself."""

import re
from dataclasses import dataclass
from typing import List, Sequence

from gov_job_agent.config import MAX_RANKED_LINKS
from gov_job_agent.ranking.rules import ScoringRule, score
from gov_job_agent.utils.helpers import host_of
from gov_job_agent.utils.job_title import is_trusted_domain

DOCUMENT_EXT_RE = re.compile(r"\.(pdf|docx?|xlsx?)(\?|#|$)", re.IGNORECASE)
NOTICE_RE = re.compile(r"(notif|recruit|advert|advt|vacanc|career|employment|corrigendum|notice)", re.IGNORECASE)
APPLY_RE = re.compile(r"(apply|registration|register|online\s*form|application)", re.IGNORECASE)
NOISE_RE = re.compile(r"(login|signin|sign-in|captcha|share|facebook|twitter|whatsapp|redirect|javascript:|mailto:)", re.IGNORECASE)
TENDER_RE = re.compile(r"(tender|procurement|e-?auction|quotation|bid\b|gem\.gov)", re.IGNORECASE)


@dataclass(frozen=True)
class LinkCandidate:
    """One outbound link seen on a page, with its anchor text and the page it came from."""

    url: str
    text: str = ""
    page_url: str = ""

    @property
    def haystack(self) -> str:
        return f"{self.url} {self.text}"


def _same_host(c: LinkCandidate) -> bool:
    page_host = host_of(c.page_url)
    return bool(page_host) and host_of(c.url) == page_host


LINK_RULES: List[ScoringRule] = [
    ScoringRule("document", lambda c: bool(DOCUMENT_EXT_RE.search(c.url)), 6.0),
    ScoringRule("same_host", _same_host, 2.0),
    ScoringRule("trusted_domain", lambda c: is_trusted_domain(c.url), 2.0),
    ScoringRule("notice_keyword", lambda c: bool(NOTICE_RE.search(c.haystack)), 3.0),
    ScoringRule("apply_keyword", lambda c: bool(APPLY_RE.search(c.haystack)), 2.0),
    ScoringRule("noise", lambda c: bool(NOISE_RE.search(c.haystack)), -5.0),
    ScoringRule("tender", lambda c: bool(TENDER_RE.search(c.haystack)), -4.0),
]


def score_link(candidate: LinkCandidate, rules: Sequence[ScoringRule] = LINK_RULES) -> float:
    return score(rules, candidate)


def rank_links(
    candidates: Sequence[LinkCandidate],
    rules: Sequence[ScoringRule] = LINK_RULES,
    limit: int = MAX_RANKED_LINKS,
) -> List[str]:
    """
    Return distinct URLs ordered by descending score (stable for ties).
    Links scoring below zero are dropped.
    """
    best: dict[str, float] = {}
    order: List[str] = []
    for c in candidates:
        if not c.url:
            continue
        s = score(rules, c)
        if c.url not in best:
            order.append(c.url)
            best[c.url] = s
        elif s > best[c.url]:
            best[c.url] = s
    ranked = sorted((u for u in order if best[u] >= 0), key=lambda u: -best[u])
    return ranked[:limit] if limit else ranked
