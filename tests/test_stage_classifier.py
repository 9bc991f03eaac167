"""Tests for stage classification, closing-date parsing and expiry."""

from datetime import date

import pytest

from gov_job_agent.schemas.parsed_job import ParsedJob
from gov_job_agent.services.stage_classifier import (
    STAGE_ADMISSION,
    STAGE_ADMIT_CARD,
    STAGE_ANSWER_KEY,
    STAGE_NEW_VACANCY,
    STAGE_RESULTS,
    STAGE_SYLLABUS,
    classify_stage,
    is_expired,
)
from gov_job_agent.utils.date_parser import find_closing_date, find_date_strings, parse_date

TODAY = date(2026, 3, 20)


@pytest.mark.parametrize(
    "title,expected",
    [
        ("SSC CGL 2026 Answer Key and Result", STAGE_ANSWER_KEY),
        ("SSC CGL 2026 Admit Card Result", STAGE_ADMIT_CARD),
        ("RRB NTPC Result 2026", STAGE_RESULTS),
        ("UPPSC Syllabus 2026", STAGE_SYLLABUS),
        ("B.Ed Admission 2026", STAGE_ADMISSION),
        ("UPPSC Review Officer Recruitment 2026", STAGE_NEW_VACANCY),
    ],
)
def test_classify_stage_priority(title, expected):
    assert classify_stage(ParsedJob(title=title)) == expected


def test_classify_stage_uses_link():
    job = ParsedJob(title="SSC CGL 2026")
    assert classify_stage(job, "https://ssc.gov.in/admit-card/cgl") == STAGE_ADMIT_CARD


class TestDateParsing:
    def test_numeric_and_month_name_forms(self):
        assert parse_date("Last Date: 15/04/2026") == date(2026, 4, 15)
        assert parse_date("Closing 05-01-2021") == date(2021, 1, 5)
        assert parse_date("last day 5 Jan 2021") == date(2021, 1, 5)
        assert parse_date("end date 12th March, 2026") == date(2026, 3, 12)

    def test_unparseable(self):
        assert parse_date("Last Date: soon") is None
        assert parse_date("Last Date: 31/02/2026") is None

    def test_closing_date_needs_signal(self):
        assert find_closing_date(["Exam Date: 01/01/2020", "Last Date: 15/04/2026"]) == date(2026, 4, 15)
        assert find_closing_date(["Exam Date: 01/01/2020"]) is None

    def test_find_date_strings_keeps_label(self):
        text = "Apply Start: 12/03/2026\nLast Date: 15/04/2026\nExam in 12 March 2026"
        found = find_date_strings(text)
        assert found[0] == "Apply Start: 12/03/2026"
        assert found[1] == "Last Date: 15/04/2026"
        assert "12 March 2026" in found[2]


class TestIsExpired:
    def test_past_closing_date_expires_new_vacancy(self):
        job = ParsedJob(title="x", important_dates=["Last Date: 01/01/2020"])
        assert is_expired(job, STAGE_NEW_VACANCY, today=TODAY)
        assert is_expired(job, STAGE_ADMISSION, today=TODAY)

    def test_other_stages_never_expire(self):
        job = ParsedJob(title="x", important_dates=["Last Date: 01/01/2020"])
        assert not is_expired(job, STAGE_RESULTS, today=TODAY)
        assert not is_expired(job, STAGE_ADMIT_CARD, today=TODAY)

    def test_today_is_not_expired(self):
        job = ParsedJob(title="x", important_dates=["Last Date: 20/03/2026"])
        assert not is_expired(job, STAGE_NEW_VACANCY, today=TODAY)

    def test_no_closing_date_is_not_expired(self):
        job = ParsedJob(title="x", important_dates=["Exam Date: 01/01/2020"])
        assert not is_expired(job, STAGE_NEW_VACANCY, today=TODAY)
