"""SerpAPI (Google Search) service for recruitment notice discovery."""

from datetime import datetime
from typing import Any, List, Optional

import httpx

from gov_job_agent.config import (
    HTTP_TIMEOUT_SECONDS,
    RESULTS_PER_QUERY,
    SEARCH_FRESHNESS,
    SEARCH_REGION,
    SERPAPI_BASE,
    SWEEP_QUERIES,
)
from gov_job_agent.schemas.search_result import SearchResult
from gov_job_agent.utils.logger import get_logger

logger = get_logger(__name__)


def _parse_organic_result(item: dict[str, Any]) -> Optional[SearchResult]:
    """Build SearchResult from a SerpAPI organic result."""
    link = item.get("link") or item.get("url")
    if not link:
        return None
    title = item.get("title") or ""
    snippet = item.get("snippet") or item.get("description") or ""
    return SearchResult(
        title=title[:500],
        link=link,
        snippet=snippet[:1000],
    )


async def search_serp(
    query: str,
    api_key: str,
    num: int = RESULTS_PER_QUERY,
    freshness: str = SEARCH_FRESHNESS,
    region: str = SEARCH_REGION,
    client: Optional[httpx.AsyncClient] = None,
) -> List[SearchResult]:
    """
    Run a single SerpAPI Google search restricted to a recent window.
    An unconfigured key or any request failure yields an empty list.
    """
    if not api_key or "REPLACE" in api_key:
        logger.warning("SERPAPI_KEY is not set; query skipped: %s", query[:60])
        return []

    params: dict[str, Any] = {
        "q": query,
        "api_key": api_key,
        "num": min(100, max(5, num)),
        "engine": "google",
        "gl": region,
        "hl": "en",
    }
    if freshness:
        params["tbs"] = f"qdr:{freshness}"

    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(timeout=HTTP_TIMEOUT_SECONDS)
    try:
        response = await client.get(SERPAPI_BASE, params=params)
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPStatusError as e:
        logger.error("SerpAPI HTTP error: %s %s", e.response.status_code, e.response.text[:200])
        return []
    except Exception as e:
        logger.exception("SerpAPI request failed: %s", e)
        return []
    finally:
        if owns_client:
            await client.aclose()

    organic = data.get("organic_results") or []
    results = []
    for item in organic:
        r = _parse_organic_result(item)
        if r:
            results.append(r)
    logger.info("SerpAPI query '%s' returned %s results", query[:50], len(results))
    return results


def build_sweep_queries(year: Optional[int] = None, templates: Optional[List[str]] = None) -> List[str]:
    """Topic queries for one sweep with the year substituted."""
    year = year or datetime.now().year
    return [t.format(year=year) for t in (templates or SWEEP_QUERIES)]
