"""End-to-end sweep tests with injected search, HTTP and LLM collaborators."""

from datetime import datetime
from typing import List

import httpx
import pytest

from gov_job_agent.agents import sweep_agent
from gov_job_agent.agents.sweep_agent import run_sweep
from gov_job_agent.schemas.search_result import SearchResult
from gov_job_agent.services.stage_classifier import STAGE_ADMIT_CARD
from tests.conftest import PDF_CONTENT_TYPE, make_http_client, make_llm_client, make_pdf

NOW = datetime(2026, 3, 20, 9, 0)

UPPSC_RESULT = SearchResult(
    title="UPPSC Recruitment Notification Dated 12.03.2026",
    link="https://uppsc.up.nic.in/notice.pdf",
    snippet="UPPSC invites applications for Review Officer posts. Last Date: 15/04/2026",
)

UPPSC_PAYLOAD = {
    "title": "UPPSC Review Officer Recruitment 2026",
    "category": "State PSC",
    "shortInfo": "Uttar Pradesh Public Service Commission invites online applications for 411 Review Officer posts.",
    "importantDates": ["Application Start: 12/03/2026", "Last Date: 15/04/2026"],
    "applicationFee": ["General: Rs. 125"],
    "ageLimit": ["Minimum Age: 21 Years", "Maximum Age: 40 Years"],
    "vacancyDetails": [{"postName": "Review Officer", "totalPost": "411", "eligibility": "Graduate"}],
    "importantLinks": [
        {"label": "Apply Online", "url": "https://uppsc.up.nic.in/apply"},
        {"label": "Download Notification", "url": "https://uppsc.up.nic.in/notice.pdf"},
    ],
    "applyLink": "https://uppsc.up.nic.in/apply",
    "isValidNotification": True,
}


def _search(results: List[SearchResult]):
    async def search_fn(query: str) -> List[SearchResult]:
        return list(results)

    return search_fn


def _uppsc_http() -> httpx.AsyncClient:
    pdf = make_pdf("Uttar Pradesh Public Service Commission", "Review Officer Exam 2026", "Last Date: 15/04/2026")
    return make_http_client({UPPSC_RESULT.link: httpx.Response(200, content=pdf, headers=PDF_CONTENT_TYPE)})


@pytest.mark.asyncio
async def test_uppsc_notice_end_to_end(store):
    async with _uppsc_http() as http:
        summary = await run_sweep(
            store=store,
            search_fn=_search([UPPSC_RESULT]),
            llm_client=make_llm_client(UPPSC_PAYLOAD),
            http_client=http,
            now=NOW,
            queries=["uppsc recruitment"],
        )

    assert summary.success
    assert summary.jobs_added == 1
    assert summary.debug.queries == ["uppsc recruitment"]
    assert summary.debug.counts["allowed"] == 1

    records = store.recent_records(10)
    assert len(records) == 1
    record = records[0]
    assert record.is_active is False
    assert record.source_domain == "uppsc.up.nic.in"
    assert record.source_url == UPPSC_RESULT.link
    assert record.created_by == "agent"
    assert record.title != UPPSC_RESULT.title
    assert record.title == "Uttar Pradesh Public Service Commission (UPPSC) 2026 Online Form"
    assert record.post_date == "2026-03-20"
    assert record.apply_link == "https://uppsc.up.nic.in/apply"
    assert 0.0 < record.quality_score <= 1.0


@pytest.mark.asyncio
async def test_second_sweep_adds_nothing(store):
    llm = make_llm_client(error=RuntimeError("service down"))
    async with make_http_client({}) as http:
        first = await run_sweep(store=store, search_fn=_search([UPPSC_RESULT]), llm_client=llm, http_client=http, now=NOW, queries=["q"])
        second = await run_sweep(store=store, search_fn=_search([UPPSC_RESULT]), llm_client=llm, http_client=http, now=NOW, queries=["q"])

    assert first.success and first.jobs_added == 1
    assert second.success and second.jobs_added == 0
    assert second.jobs_merged == 0
    assert second.debug.counts["new"] == 0
    assert store.count_records() == 1


@pytest.mark.asyncio
async def test_expired_vacancy_is_dropped(store):
    stale = SearchResult(
        title="UPPSC Review Officer Recruitment 2019",
        link="https://uppsc.up.nic.in/old.pdf",
        snippet="UPPSC Review Officer posts. Last Date: 01/01/2020",
    )
    async with make_http_client({}) as http:
        summary = await run_sweep(
            store=store,
            search_fn=_search([stale]),
            llm_client=make_llm_client(error=RuntimeError("down")),
            http_client=http,
            now=NOW,
            queries=["q"],
        )
    assert summary.success
    assert summary.jobs_added == 0
    assert summary.debug.counts["expired"] == 1
    assert any("expired" in reason for reason in summary.debug.skipped)
    assert store.count_records() == 0


@pytest.mark.asyncio
async def test_later_stage_merges_into_same_notification(store):
    notice = SearchResult(
        title="SSC CGL 2026 Notification",
        link="https://ssc.gov.in/cgl-2026-notice",
        snippet="Staff Selection Commission CGL 2026. Last Date: 30/04/2026",
    )
    admit = SearchResult(
        title="SSC CGL 2026 Admit Card Released",
        link="https://ssc.gov.in/cgl-2026-admit-card",
        snippet="Admit card for SSC CGL 2026 Tier 1. Exam Date: 10/06/2026",
    )
    async with make_http_client({}) as http:
        summary = await run_sweep(
            store=store,
            search_fn=_search([notice, admit]),
            llm_client=make_llm_client(error=RuntimeError("down")),
            http_client=http,
            now=NOW,
            queries=["q"],
        )

    assert summary.jobs_added == 1
    assert summary.jobs_merged == 1
    records = store.recent_records(10)
    assert len(records) == 1
    merged = records[0]
    assert merged.category == STAGE_ADMIT_CARD
    assert "Exam Date: 10/06/2026" in merged.important_dates
    assert "Last Date: 30/04/2026" in merged.important_dates


@pytest.mark.asyncio
async def test_different_posts_of_one_board_stay_separate(store):
    nurse = SearchResult(
        title="UPPSC Staff Nurse Recruitment 2026",
        link="https://uppsc.up.nic.in/nurse.pdf",
        snippet="UPPSC Staff Nurse posts. Last Date: 20/04/2026",
    )
    nurse_payload = dict(
        UPPSC_PAYLOAD,
        title="UPPSC Staff Nurse Recruitment 2026",
        shortInfo="Uttar Pradesh Public Service Commission invites online applications for 250 Staff Nurse posts.",
        vacancyDetails=[{"postName": "Staff Nurse", "totalPost": "250", "eligibility": "B.Sc Nursing"}],
        importantLinks=[{"label": "Apply Online", "url": "https://uppsc.up.nic.in/apply-nurse"}],
        applyLink="https://uppsc.up.nic.in/apply-nurse",
    )
    async with make_http_client({}) as http:
        first = await run_sweep(
            store=store,
            search_fn=_search([UPPSC_RESULT]),
            llm_client=make_llm_client(UPPSC_PAYLOAD),
            http_client=http,
            now=NOW,
            queries=["q"],
        )
        second = await run_sweep(
            store=store,
            search_fn=_search([nurse]),
            llm_client=make_llm_client(nurse_payload),
            http_client=http,
            now=NOW,
            queries=["q"],
        )

    assert first.jobs_added == 1
    assert second.jobs_added == 1
    assert second.jobs_merged == 0
    records = {r.match_title: r for r in store.recent_records(10)}
    assert set(records) == {"UPPSC Review Officer Recruitment 2026", "UPPSC Staff Nurse Recruitment 2026"}
    nurse_record = records["UPPSC Staff Nurse Recruitment 2026"]
    assert nurse_record.vacancy_details[0].post_name == "Staff Nurse"
    assert nurse_record.board == "State PSC"
    # Both share one display title
    assert len({r.title for r in records.values()}) == 1


@pytest.mark.asyncio
async def test_policy_and_gate_rejections_are_traced(store):
    results = [
        SearchResult(title="SSC CGL 2026 coaching offer", link="https://coaching.example.com/ssc", snippet="Join now"),
        SearchResult(title="Online Form 2026", link="https://ssc.gov.in/online-form", snippet=""),
    ]
    async with make_http_client({}) as http:
        summary = await run_sweep(
            store=store,
            search_fn=_search(results),
            llm_client=make_llm_client(error=RuntimeError("down")),
            http_client=http,
            now=NOW,
            queries=["q"],
        )
    assert summary.success
    assert summary.jobs_added == 0
    assert summary.debug.counts["allowed"] == 1
    assert any("content policy rejected" in r for r in summary.debug.skipped)
    assert any("unclear" in r for r in summary.debug.skipped)


@pytest.mark.asyncio
async def test_candidate_failure_is_isolated(store, monkeypatch):
    calls = []
    real = sweep_agent.build_extraction_context

    async def flaky(result, client=None, **kw):
        calls.append(result.link)
        if len(calls) == 1:
            raise RuntimeError("parser crashed")
        return await real(result, client=client, **kw)

    monkeypatch.setattr(sweep_agent, "build_extraction_context", flaky)
    other = SearchResult(
        title="UPPSC Assistant Review Officer Recruitment 2026",
        link="https://uppsc.up.nic.in/aro.pdf",
        snippet="UPPSC Assistant Review Officer posts. Last Date: 15/04/2026",
    )
    async with make_http_client({}) as http:
        summary = await run_sweep(
            store=store,
            search_fn=_search([UPPSC_RESULT, other]),
            llm_client=make_llm_client(error=RuntimeError("down")),
            http_client=http,
            now=NOW,
            queries=["q"],
        )
    assert summary.success
    assert summary.jobs_added == 1
    assert any("parser crashed" in r for r in summary.debug.skipped)


@pytest.mark.asyncio
async def test_top_level_failure_reports_unsuccessful(store, monkeypatch):
    def broken(results, store):
        raise RuntimeError("store unavailable")

    monkeypatch.setattr(sweep_agent, "filter_known", broken)
    async with make_http_client({}) as http:
        summary = await run_sweep(store=store, search_fn=_search([UPPSC_RESULT]), http_client=http, now=NOW, queries=["q"])
    assert not summary.success
    assert "store unavailable" in summary.message
    assert summary.jobs_added == 0


@pytest.mark.asyncio
async def test_candidate_budget(store):
    results = [
        SearchResult(
            title=f"SSC Exam {name} 2026 Notification",
            link=f"https://ssc.gov.in/{name}",
            snippet=f"Staff Selection Commission {name} examination 2026. Last Date: 30/04/2026",
        )
        for name in ("alpha", "bravo", "charlie")
    ]
    async with make_http_client({}) as http:
        summary = await run_sweep(
            store=store,
            search_fn=_search(results),
            llm_client=make_llm_client(error=RuntimeError("down")),
            http_client=http,
            now=NOW,
            queries=["q"],
            max_candidates=2,
        )
    assert summary.debug.counts["candidates"] == 2
    assert any("budget" in r for r in summary.debug.skipped)
