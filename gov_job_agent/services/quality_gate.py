"""Clarity gate shared by record creation and public display, plus a coarse quality score."""

import re
from dataclasses import dataclass
from typing import Optional, Sequence

from gov_job_agent.config import RECRUITMENT_KEYWORDS
from gov_job_agent.schemas.parsed_job import ParsedJob
from gov_job_agent.utils.helpers import sanitize_url
from gov_job_agent.utils.job_title import (
    FALLBACK_TITLE,
    derive_readable_title,
    is_action_only_title,
    is_generic_head_title,
    is_trusted_domain,
    normalize_spaces,
    primary_link,
    strip_generic_head_prefix,
)

MIN_STRIPPED_HEAD_LEN = 12
MIN_NORMALIZED_TITLE_LEN = 8
MIN_TITLE_LEN = 20
MIN_INFO_LEN = 40

BARE_URL_RE = re.compile(r"^https?://\S+$", re.IGNORECASE)
QUERY_NOISE_RE = re.compile(r"(\bkey=|utm_|ref=)", re.IGNORECASE)
ADMIN_NOTICE_RE = re.compile(
    r"\b(circular|office\s+order|o\.?\s*m\.?|memorandum|notice)\s*(no\.?|number)\s*[:\-]?\s*[\w./-]*\d",
    re.IGNORECASE,
)


@dataclass
class ClarityVerdict:
    ok: bool
    reason: str = ""
    normalized_title: str = ""


def has_recruitment_keyword(text: str, keywords: Sequence[str] = RECRUITMENT_KEYWORDS) -> bool:
    lowered = (text or "").lower()
    return any(re.search(rf"\b{re.escape(k)}\b", lowered) for k in keywords)


def usable_apply_link(job: ParsedJob) -> str:
    return sanitize_url(job.apply_link) or sanitize_url(primary_link(job))


def check_clarity(job: ParsedJob) -> ClarityVerdict:
    """Accept a record only if it is specific, sourced and linkable. Same thresholds everywhere."""
    raw_title = job.title or ""
    title = normalize_spaces(raw_title.lower())
    info = normalize_spaces((job.short_info or "").lower())
    normalized = derive_readable_title(job)

    if is_generic_head_title(raw_title) and len(strip_generic_head_prefix(raw_title)) < MIN_STRIPPED_HEAD_LEN:
        return ClarityVerdict(False, "generic title with no subject", normalized)
    if re.match(r"^https?://", raw_title.strip(), re.IGNORECASE) or BARE_URL_RE.match(info):
        return ClarityVerdict(False, "title or summary is a URL", normalized)
    if QUERY_NOISE_RE.search(raw_title) or QUERY_NOISE_RE.search(info):
        return ClarityVerdict(False, "tracking query noise in title or summary", normalized)
    if is_action_only_title(normalized):
        return ClarityVerdict(False, f"action-only title: {normalized}", normalized)

    keyword = has_recruitment_keyword(f"{title} {info}")
    any_trusted_link = any(is_trusted_domain(u) for u in [job.apply_link, *(link.url for link in job.important_links)])
    if ADMIN_NOTICE_RE.search(f"{raw_title} {job.short_info}") and not keyword and not any_trusted_link:
        return ClarityVerdict(False, "administrative notice unrelated to recruitment", normalized)

    if (
        not normalized
        or normalized.lower() == FALLBACK_TITLE.lower()
        or re.search(r"\(\s*\)", normalized)
        or len(normalized) <= MIN_NORMALIZED_TITLE_LEN
    ):
        return ClarityVerdict(False, "normalized title invalid", normalized)
    if not (len(title) >= MIN_TITLE_LEN or len(info) >= MIN_INFO_LEN or keyword):
        return ClarityVerdict(False, "too vague", normalized)
    if not usable_apply_link(job):
        return ClarityVerdict(False, "no usable apply link", normalized)
    return ClarityVerdict(True, "", normalized)


def is_displayable(job: ParsedJob) -> bool:
    return check_clarity(job).ok


def quality_score(job: ParsedJob, source_url: Optional[str] = None) -> float:
    """Share of schema sections that are filled, with a bonus for a trusted source; 0..1."""
    filled = [
        bool(job.short_info),
        bool(job.important_dates),
        bool(job.application_fee),
        bool(job.age_limit),
        bool(job.vacancy_details),
        bool(job.important_links),
        bool(usable_apply_link(job)),
    ]
    base = sum(filled) / len(filled)
    if is_trusted_domain(source_url or job.apply_link):
        base = min(1.0, base + 0.15)
    return round(base, 3)
