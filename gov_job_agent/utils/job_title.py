"""Readable display titles for notifications, shared by the sweep and the public read API."""

import re
from datetime import datetime
from typing import Optional, Sequence

from gov_job_agent.config import TRUSTED_SITES
from gov_job_agent.schemas.parsed_job import ParsedJob
from gov_job_agent.utils.helpers import host_matches, host_of

FALLBACK_TITLE = "Job Notification"

GENERIC_HEAD_RE = re.compile(
    r"^(recruitments?|recruitment|vacancies|vacancy notification|notification|news and notification"
    r"|recruitment/engagement|online form|vacancy\s*(?:&|and)\s*online form)\b",
    re.IGNORECASE,
)
ACTION_ONLY_RE = re.compile(
    r"^(online form|online application status|vacancy\s*(?:&|and)\s*online form|vacancy)$",
    re.IGNORECASE,
)
URL_RE = re.compile(r"https?://\S+", re.IGNORECASE)
YEAR_RE = re.compile(r"\b20\d{2}\b")
BOILERPLATE_RE = re.compile(
    r"\b(recruitments?|recruitment/engagement|news and notification|notifications?|vacancies?"
    r"|vacancy notification|notification|advertisement|state of|declared)\b",
    re.IGNORECASE,
)
ACTION_WORDS_RE = re.compile(
    r"\b(online form|apply online|online application|application status|status|result|admit card"
    r"|hall ticket|call letter|answer key|syllabus|exam pattern)\b",
    re.IGNORECASE,
)
COMPOSED_CLEAN_RE = re.compile(
    r"\b(recruitments?|recruitment/engagement|news and notification|notifications?|vacancies?"
    r"|vacancy notification|notification|advertisement|declared)\b",
    re.IGNORECASE,
)

# First match wins; more specific patterns come first
EXAM_PATTERNS = [
    (r"\brrb\s*je\b", "Railway RRB JE"),
    (r"\brrb\s*group\s*d\b", "Railway RRB Group D"),
    (r"\brrb\s*alp\b", "Railway RRB ALP"),
    (r"\brrb\s*ntpc\b", "Railway RRB NTPC"),
    (r"\bssc\s*cgl\b", "SSC CGL"),
    (r"\bssc\s*chsl\b", "SSC CHSL"),
    (r"\bssc\s*mts\b", "SSC MTS"),
    (r"\bssc\s*gd\b", "SSC GD Constable"),
    (r"\buppsc\b", "Uttar Pradesh Public Service Commission (UPPSC)"),
    (r"\bupsssc\b", "Uttar Pradesh Subordinate Services Selection Commission (UPSSSC)"),
    (r"\bnational\s+health\s+mission\b.*\bmaharashtra\b", "National Health Mission (NHM) Maharashtra"),
    (r"\bnhm\W*maharashtra\b", "National Health Mission (NHM) Maharashtra"),
    (r"\b(tshc|telangana\s+high\s+court)\b", "Telangana High Court"),
    (r"\bpsssb\b", "Punjab SSSB"),
    (r"\brpsc\b", "RPSC"),
    (r"\b(rsmssb|rssb)\b", "RSMSSB"),
    (r"\bmppsc\b", "MPPSC"),
    (r"\bbpsc\b", "BPSC"),
    (r"\bwbpsc\b", "WBPSC"),
    (r"\bjkpsc\b", "JKPSC"),
    (r"\bjpsc\b", "JPSC"),
    (r"\bmpsc\b", "MPSC"),
    (r"\bkpsc\b", "KPSC"),
    (r"\bgpsc\b", "GPSC"),
    (r"\bhpsc\b", "HPSC"),
    (r"\bhppsc\b", "HPPSC"),
    (r"\bopsc\b", "OPSC"),
    (r"\btnpsc\b", "TNPSC"),
    (r"\btspsc\b", "TSPSC"),
    (r"\bappsc\b", "APPSC"),
    (r"\bossc\b", "OSSC"),
    (r"\bhssc\b", "HSSC"),
    (r"\buksssc\b", "UKSSSC"),
    (r"\bbssc\b", "BSSC"),
    (r"\bdsssb\b", "DSSSB"),
    (r"\bjssc\b", "JSSC"),
    (r"\bcgpsc\b", "CGPSC"),
    (r"\bmpesb\b", "MPESB"),
]
_EXAM_RES = [(re.compile(p, re.IGNORECASE), name) for p, name in EXAM_PATTERNS]

HOST_EXAMS = [
    (r"sssb\.punjab\.gov\.in$", "Punjab SSSB"),
    (r"rpsc\.rajasthan\.gov\.in$", "RPSC"),
    (r"upsssc\.gov\.in$", "Uttar Pradesh Subordinate Services Selection Commission (UPSSSC)"),
    (r"uppsc\.up\.nic\.in$", "Uttar Pradesh Public Service Commission (UPPSC)"),
    (r"esb\.mp\.gov\.in$", "MPESB"),
]


def normalize_spaces(s: str) -> str:
    return re.sub(r"\s{2,}", " ", s or "").strip()


def is_trusted_domain(url: str, trusted_sites: Sequence[str] = TRUSTED_SITES) -> bool:
    """Government TLD (.gov.in / .nic.in) or a curated trusted site."""
    host = host_of(url)
    if not host:
        return False
    if re.search(r"\.(gov\.in|nic\.in)$", host):
        return True
    return host_matches(host, trusted_sites)


def is_generic_head_title(raw_title: str) -> bool:
    return bool(GENERIC_HEAD_RE.search((raw_title or "").strip()))


def strip_generic_head_prefix(raw_title: str) -> str:
    stripped = GENERIC_HEAD_RE.sub("", (raw_title or "").strip())
    return normalize_spaces(re.sub(r"\s*[|\-:]\s*", " ", stripped))


def is_action_only_title(title: str) -> bool:
    """True for a bare action phrase such as "Online Form 2026" with no subject."""
    without_year = normalize_spaces(YEAR_RE.sub(" ", normalize_spaces(title)))
    return bool(ACTION_ONLY_RE.match(without_year))


def primary_link(job: ParsedJob) -> str:
    """First important link, else the apply link."""
    for link in job.important_links:
        if link.url:
            return link.url
    return job.apply_link or ""


def _guess_exam(cleaned_base: str, info: str, url: str) -> str:
    for regex, name in _EXAM_RES:
        if regex.search(cleaned_base) or regex.search(info):
            return name
    host = host_of(url)
    for pattern, name in HOST_EXAMS:
        if host and re.search(pattern, host):
            return name
    return ""


def _guess_action(lower_all: str) -> str:
    action = "Online Form"
    if "admit card" in lower_all or "hall ticket" in lower_all or "call letter" in lower_all:
        action = "Admit Card"
    elif "answer key" in lower_all:
        action = "Answer Key"
    elif "syllabus" in lower_all or "pattern" in lower_all:
        action = "Syllabus"
    elif "result" in lower_all:
        action = "Result"
    elif "status" in lower_all:
        action = "Online Application Status"
    elif "counselling" in lower_all or "admission" in lower_all:
        action = "Admission"
    if re.search(r"application\s+status|status\s+check", lower_all):
        action = "Online Application Status"
    return action


def derive_readable_title(job: ParsedJob, now: Optional[datetime] = None) -> str:
    """
    Compose "<exam> <year> <action>" from a record's title, summary, dates and link.
    Returns FALLBACK_TITLE only when nothing usable remains.
    """
    raw_title = (job.title or "").strip()
    info = (job.short_info or "").strip()
    url = primary_link(job)

    title_no_url = normalize_spaces(re.sub(r"\s*\|\s*", " ", URL_RE.sub(" ", raw_title)))
    info_no_url = normalize_spaces(URL_RE.sub(" ", info))
    cleaned_base = normalize_spaces(BOILERPLATE_RE.sub(" ", title_no_url))
    cleaned_for_exam = normalize_spaces(YEAR_RE.sub(" ", ACTION_WORDS_RE.sub(" ", cleaned_base)))

    lower_all = normalize_spaces(f"{cleaned_base} {info_no_url}").lower()
    dates_text = " ".join(job.important_dates)
    year_match = YEAR_RE.search(cleaned_base) or YEAR_RE.search(info_no_url) or YEAR_RE.search(dates_text)
    year = year_match.group(0) if year_match else str((now or datetime.now()).year)

    exam = _guess_exam(cleaned_base, info, url)
    action = _guess_action(lower_all)

    exam_name = normalize_spaces(exam or cleaned_for_exam or cleaned_base)
    if is_action_only_title(exam_name):
        exam_name = ""
    composed = normalize_spaces(COMPOSED_CLEAN_RE.sub(" ", normalize_spaces(f"{exam_name} {year} {action}")))
    return composed or normalize_spaces(raw_title) or FALLBACK_TITLE

