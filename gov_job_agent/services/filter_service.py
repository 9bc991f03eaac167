"""Candidate filters: drop results already in the store, drop results outside the content policy."""

from typing import List, Tuple

from gov_job_agent.schemas.search_result import SearchResult
from gov_job_agent.services.job_store import JobStore
from gov_job_agent.services.source_policy import is_allowed_source


def filter_known(
    results: List[SearchResult],
    store: JobStore,
) -> Tuple[List[SearchResult], List[str]]:
    """
    Drop results whose link or raw title already exists in the store (exact match only).
    Returns (new_results, skip_reasons). Does not mutate the input list.
    """
    fresh: List[SearchResult] = []
    reasons: List[str] = []
    for r in results:
        if store.exists_by_link(r.link):
            reasons.append(f"known link: {r.link}")
        elif store.exists_by_title(r.title):
            reasons.append(f"known title: {r.title}")
        else:
            fresh.append(r)
    return fresh, reasons


def filter_by_policy(results: List[SearchResult]) -> Tuple[List[SearchResult], List[str]]:
    """Keep only results admitted by the content policy."""
    kept: List[SearchResult] = []
    reasons: List[str] = []
    for r in results:
        if is_allowed_source(r.link, r.title, r.snippet):
            kept.append(r)
        else:
            reasons.append(f"content policy rejected: {r.link}")
    return kept, reasons
