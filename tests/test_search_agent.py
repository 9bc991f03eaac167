"""Tests for query building, SerpAPI calls and the search agent."""

import httpx
import pytest

from gov_job_agent.agents.search_agent import run_search_agent
from gov_job_agent.schemas.search_result import SearchResult
from gov_job_agent.services.serp_service import build_sweep_queries, search_serp
from gov_job_agent.utils.helpers import deduplicate_results


def test_build_sweep_queries_substitutes_year():
    queries = build_sweep_queries(year=2026, templates=["ssc {year}", "upsc {year} notification"])
    assert queries == ["ssc 2026", "upsc 2026 notification"]
    assert all("{year}" not in q for q in build_sweep_queries(year=2026))


@pytest.mark.asyncio
async def test_search_serp_without_key_returns_nothing():
    assert await search_serp("ssc", api_key="") == []
    assert await search_serp("ssc", api_key="REPLACE_ME") == []


@pytest.mark.asyncio
async def test_search_serp_sends_recency_and_region():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.update(dict(request.url.params))
        return httpx.Response(
            200,
            json={
                "organic_results": [
                    {"title": "SSC CGL 2026", "link": "https://ssc.gov.in/cgl", "snippet": "Notice"},
                    {"title": "No link"},
                ]
            },
        )

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        results = await search_serp("ssc cgl", api_key="k", freshness="d2", region="in", client=client)

    assert results == [SearchResult(title="SSC CGL 2026", link="https://ssc.gov.in/cgl", snippet="Notice")]
    assert seen["tbs"] == "qdr:d2"
    assert seen["gl"] == "in"
    assert seen["q"] == "ssc cgl"


@pytest.mark.asyncio
async def test_search_serp_http_error_returns_nothing():
    async with httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(503))) as client:
        assert await search_serp("ssc", api_key="k", client=client) == []


@pytest.mark.asyncio
async def test_run_search_agent_tolerates_failing_queries():
    async def search_fn(query: str):
        if query == "broken":
            raise RuntimeError("provider down")
        return [
            SearchResult(title=f"{query} a", link="https://ssc.gov.in/a"),
            SearchResult(title=f"{query} b", link="https://ssc.gov.in/b/"),
        ]

    issued = []
    results = await run_search_agent(queries=["one", "broken", "two"], search_fn=search_fn, issued=issued)
    assert issued == ["one", "broken", "two"]
    assert [r.title for r in results] == ["one a", "one b"]


def test_deduplicate_results_by_normalized_link():
    results = [
        SearchResult(title="a", link="https://ssc.gov.in/x/"),
        SearchResult(title="b", link="https://ssc.gov.in/x#top"),
        SearchResult(title="c", link="https://ssc.gov.in/y"),
    ]
    assert [r.title for r in deduplicate_results(results)] == ["a", "c"]
