"""Search Agent: issues the sweep's topic queries and returns link-deduplicated results."""

from typing import Awaitable, Callable, List, Optional

from gov_job_agent.config import SERPAPI_KEY
from gov_job_agent.schemas.search_result import SearchResult
from gov_job_agent.services.serp_service import build_sweep_queries, search_serp
from gov_job_agent.utils.helpers import deduplicate_results
from gov_job_agent.utils.logger import get_logger

logger = get_logger(__name__)

SearchFn = Callable[[str], Awaitable[List[SearchResult]]]


async def run_search_agent(
    queries: Optional[List[str]] = None,
    search_fn: Optional[SearchFn] = None,
    issued: Optional[List[str]] = None,
) -> List[SearchResult]:
    """
    Run every query, tolerate per-query failure, deduplicate by link.
    `issued` (if given) receives each query string for the debug trace.
    """
    queries = queries if queries is not None else build_sweep_queries()
    if search_fn is None:
        async def search_fn(q: str) -> List[SearchResult]:
            return await search_serp(q, SERPAPI_KEY)

    all_results: List[SearchResult] = []
    for query in queries:
        if issued is not None:
            issued.append(query)
        try:
            all_results.extend(await search_fn(query))
        except Exception as e:
            logger.exception("Search failed for query '%s': %s", query[:50], e)

    deduped = deduplicate_results(all_results)
    logger.info(
        "Search Agent finished: queries=%s total=%s deduped=%s",
        len(queries),
        len(all_results),
        len(deduped),
    )
    return deduped
