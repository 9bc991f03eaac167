"""Notification stage classification and the closing-date expiry filter."""

from datetime import date
from typing import Optional

from gov_job_agent.schemas.parsed_job import ParsedJob
from gov_job_agent.utils.date_parser import find_closing_date

STAGE_ANSWER_KEY = "Answer Key"
STAGE_ADMIT_CARD = "Admit Card"
STAGE_RESULTS = "Results"
STAGE_SYLLABUS = "Syllabus"
STAGE_ADMISSION = "Admission"
STAGE_NEW_VACANCY = "Latest Jobs"

# Checked in order; first hit wins
STAGE_KEYWORDS = [
    (STAGE_ANSWER_KEY, ("answer key", "answer-key", "answerkey", "objection")),
    (STAGE_ADMIT_CARD, ("admit card", "admit-card", "hall ticket", "call letter", "e-admit")),
    (STAGE_RESULTS, ("result", "merit list", "cut off", "cutoff", "final selection", "selection list")),
    (STAGE_SYLLABUS, ("syllabus", "exam pattern", "scheme of examination")),
    (STAGE_ADMISSION, ("admission", "counselling", "counseling", "entrance")),
]

EXPIRY_STAGES = (STAGE_NEW_VACANCY, STAGE_ADMISSION)


def classify_stage(job: ParsedJob, link: str = "") -> str:
    """Stage from keyword presence in title + summary + link."""
    haystack = f"{job.title} {job.short_info} {link or job.apply_link}".lower()
    for stage, keywords in STAGE_KEYWORDS:
        if any(k in haystack for k in keywords):
            return stage
    return STAGE_NEW_VACANCY


def is_expired(job: ParsedJob, stage: str, today: Optional[date] = None) -> bool:
    """
    True when a new-vacancy or admission record states a closing date strictly
    before today. Other stages never expire here.
    """
    if stage not in EXPIRY_STAGES:
        return False
    closing = find_closing_date(job.important_dates)
    if closing is None:
        return False
    return closing < (today or date.today())
