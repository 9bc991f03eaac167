"""Tests for structured extraction: LLM path, fallback routing and post-processing."""

import json

import pytest

from gov_job_agent.agents import extractor_agent
from gov_job_agent.agents.extractor_agent import (
    METHOD_FALLBACK,
    METHOD_LLM,
    UNKNOWN,
    extract_fallback,
    run_extractor_agent,
    select_apply_link,
)
from gov_job_agent.schemas.extraction_context import ExtractionContext
from gov_job_agent.schemas.parsed_job import LinkItem, ParsedJob
from gov_job_agent.schemas.search_result import SearchResult
from tests.conftest import make_llm_client

RESULT = SearchResult(
    title="UPPSC Review Officer Recruitment 2026",
    link="https://uppsc.up.nic.in/notice.pdf",
    snippet="Review Officer 411 Posts. Fee: General Rs. 125, SC Rs. 65. Age 21-40 years. Graduate. Last Date: 15/04/2026",
)

LLM_PAYLOAD = {
    "title": "UPPSC Review Officer Recruitment 2026",
    "category": "State PSC",
    "shortInfo": "Uttar Pradesh Public Service Commission invites online applications for 411 Review Officer posts.",
    "importantDates": ["Last Date: 15/04/2026", "Unknown"],
    "applicationFee": ["General: Rs. 125"],
    "ageLimit": ["Minimum Age: 21 Years", "Maximum Age: 40 Years"],
    "vacancyDetails": [{"postName": "Review Officer", "totalPost": 411, "eligibility": "Graduate"}],
    "importantLinks": [
        {"label": "Download Notification", "url": "https://uppsc.up.nic.in/notice.pdf"},
        {"label": "Apply Online", "url": "https://uppsc.up.nic.in/apply"},
        {"label": "Broken", "url": "javascript:void(0)"},
        {"label": "Notification again", "url": "https://uppsc.up.nic.in/notice.pdf/"},
    ],
    "applyLink": "https://example.com/aggregator",
    "isValidNotification": True,
}


class TestFallback:
    def test_fallback_is_complete(self):
        job = extract_fallback(RESULT)
        assert job.title == RESULT.title
        assert job.short_info == RESULT.snippet
        assert job.important_dates == ["Last Date: 15/04/2026"]
        assert job.application_fee == ["GENERAL: Rs. 125", "SC: Rs. 65"]
        assert job.age_limit == ["Minimum Age: 21 Years", "Maximum Age: 40 Years"]
        assert len(job.vacancy_details) == 1
        row = job.vacancy_details[0]
        assert (row.post_name, row.total_post, row.eligibility) == ("Review Officer", "411", "Graduate")
        assert job.important_links[-1].url == RESULT.link

    def test_fallback_uses_placeholders_when_nothing_found(self):
        job = extract_fallback(SearchResult(title="SSC notice", link="https://ssc.gov.in/n"))
        assert job.important_dates == [UNKNOWN]
        assert job.application_fee == [UNKNOWN]
        assert job.age_limit == [UNKNOWN]
        assert job.vacancy_details[0].total_post == UNKNOWN
        assert job.category == "SSC"

    def test_fallback_includes_ranked_links(self):
        ctx = ExtractionContext(ranked_links=["https://uppsc.up.nic.in/docs/a.pdf", "https://uppsc.up.nic.in/apply"])
        job = extract_fallback(RESULT, ctx)
        assert [(link.label, link.url) for link in job.important_links[:2]] == [
            ("Download Notification", "https://uppsc.up.nic.in/docs/a.pdf"),
            ("Apply Online", "https://uppsc.up.nic.in/apply"),
        ]


class TestRouting:
    @pytest.mark.asyncio
    async def test_unconfigured_service_uses_fallback(self):
        out = await run_extractor_agent(RESULT, ExtractionContext(), client=None)
        assert out.method == METHOD_FALLBACK
        assert out.job is not None
        assert out.job.apply_link == RESULT.link
        assert out.normalized_title == "Uttar Pradesh Public Service Commission (UPPSC) 2026 Online Form"

    @pytest.mark.asyncio
    async def test_service_error_falls_back(self):
        client = make_llm_client(error=RuntimeError("connection reset"))
        out = await run_extractor_agent(RESULT, ExtractionContext(), client=client)
        assert out.method == METHOD_FALLBACK
        assert out.job.vacancy_details[0].total_post == "411"
        assert any("RuntimeError" in note for note in out.notes)
        client.chat.completions.create.assert_awaited_once()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", ["not json at all", "[1, 2]", ""])
    async def test_malformed_output_falls_back(self, content):
        out = await run_extractor_agent(RESULT, ExtractionContext(), client=make_llm_client(content=content))
        assert out.method == METHOD_FALLBACK
        assert out.job is not None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", ['{"isValidNotification": false}', "null"])
    async def test_not_a_notification_is_rejected(self, content):
        out = await run_extractor_agent(RESULT, ExtractionContext(), client=make_llm_client(content=content))
        assert out.job is None
        assert out.method == METHOD_LLM
        assert "not a government notification" in out.reason

    @pytest.mark.asyncio
    async def test_llm_output_is_post_processed(self):
        client = make_llm_client(content="```json\n" + json.dumps(LLM_PAYLOAD) + "\n```")
        ctx = ExtractionContext(date_hints=["Exam Date: 10/06/2026", "last date: 15/04/2026"])
        out = await run_extractor_agent(RESULT, ctx, client=client)

        assert out.method == METHOD_LLM
        job = out.job
        assert job.important_dates == ["Last Date: 15/04/2026", "Exam Date: 10/06/2026"]
        assert [link.url for link in job.important_links] == [
            "https://uppsc.up.nic.in/notice.pdf",
            "https://uppsc.up.nic.in/apply",
        ]
        assert job.apply_link == "https://uppsc.up.nic.in/apply"
        assert job.vacancy_details[0].total_post == "411"
        assert out.normalized_title != RESULT.title

        kwargs = client.chat.completions.create.await_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["temperature"] == 0.1


class TestApplyLink:
    def test_labelled_apply_link_preferred(self):
        job = ParsedJob(
            title="x",
            apply_link="https://ssc.gov.in/home",
            important_links=[LinkItem(label="Registration", url="https://example.com/register")],
        )
        assert select_apply_link(job, "https://ssc.gov.in/n") == "https://example.com/register"

    def test_trusted_link_next(self):
        job = ParsedJob(
            title="x",
            apply_link="https://example.com/a",
            important_links=[LinkItem(label="Notice", url="https://ssc.gov.in/notice.pdf")],
        )
        assert select_apply_link(job, "https://news.example.org/n") == "https://ssc.gov.in/notice.pdf"

    def test_candidate_link_last(self):
        job = ParsedJob(title="x", apply_link="https://example.com/a")
        assert select_apply_link(job, "https://news.example.org/n") == "https://news.example.org/n"


def test_llm_client_not_built_without_key(monkeypatch):
    monkeypatch.setattr(extractor_agent, "OPENAI_API_KEY", "")
    assert extractor_agent.get_llm_client() is None
