"""Extractor Agent: LLM extraction into the job schema, deterministic fallback, post-processing."""

import json
import re
from dataclasses import dataclass, field
from typing import List, Optional

from openai import AsyncOpenAI
from pydantic import ValidationError

from gov_job_agent.config import (
    MAX_IMPORTANT_DATES,
    MAX_IMPORTANT_LINKS,
    MODEL_NAME,
    OPENAI_API_KEY,
    OPENAI_BASE_URL,
    POST_KEYWORDS,
    QUALIFICATION_TERMS,
    UNKNOWN_PLACEHOLDER,
)
from gov_job_agent.ranking.link_ranker import APPLY_RE, DOCUMENT_EXT_RE
from gov_job_agent.schemas.extraction_context import ExtractionContext
from gov_job_agent.schemas.parsed_job import LinkItem, ParsedJob, VacancyItem
from gov_job_agent.schemas.search_result import SearchResult
from gov_job_agent.utils.date_parser import find_date_strings
from gov_job_agent.utils.helpers import dedupe_preserve, normalize_url, sanitize_url
from gov_job_agent.utils.job_title import derive_readable_title, is_trusted_domain
from gov_job_agent.utils.logger import get_logger

logger = get_logger(__name__)

UNKNOWN = UNKNOWN_PLACEHOLDER

METHOD_LLM = "llm"
METHOD_FALLBACK = "fallback"

EXTRACTION_SYSTEM_PROMPT = """You are an information extraction system for Indian government job notifications.
Extract structured data from the notification content below. The content may be noisy, partially
garbled (extracted from PDFs), misspelled or mixed Hindi/English; extract what you can and do not refuse.
Never invent dates, fees, ages or post counts. If a value is not stated, use the string "Unknown".
If the content is clearly not a government recruitment/exam notice (coaching ad, news spam, tender),
set "isValidNotification" to false.
Return only valid JSON matching this schema (no markdown, no code block):
{
  "title": "clean notification title, e.g. 'UPPSC Review Officer Recruitment 2026'",
  "category": "one of SSC, Railway, Banking, Police, Teaching, Defence, UPSC, State PSC, Other",
  "shortInfo": "two-line summary",
  "importantDates": ["Label: date", "..."],
  "applicationFee": ["Category: amount", "..."],
  "ageLimit": ["Minimum Age: ..", "Maximum Age: .."],
  "vacancyDetails": [{"postName": "string", "totalPost": "string", "eligibility": "string"}],
  "importantLinks": [{"label": "Apply Online | Download Notification | Official Website", "url": "https://..."}],
  "applyLink": "https://...",
  "isValidNotification": true
}
Put the most important dates (application start, last date, exam date) first."""

CATEGORY_KEYWORDS = [
    ("UPSC", ("upsc", "civil services")),
    ("SSC", ("ssc", "staff selection")),
    ("Railway", ("railway", "rrb", "ntpc", "rrc")),
    ("Banking", ("bank", "ibps", "sbi", "rbi", "nabard")),
    ("Police", ("police", "constable", "sub inspector")),
    ("Defence", ("army", "navy", "air force", "airforce", "agniveer", "afcat", "drdo", "coast guard")),
    ("Teaching", ("teacher", "tgt", "pgt", "lecturer", "professor", "ctet", "tet")),
    ("State PSC", ("psc", "public service commission", "sssb", "subordinate services")),
]

FEE_RE = re.compile(r"(?:₹|\brs\.?|\binr)\s*(\d+(?:,\d+)*(?:\.\d+)?)(?:\s*/-)?", re.IGNORECASE)
FEE_LABEL_RE = re.compile(r"\b(gen(?:eral)?|obc|ews|sc|st|pwd|pwbd|female|women|ur)\b[^₹\d]{0,20}$", re.IGNORECASE)
MIN_AGE_RE = re.compile(r"(?:min(?:imum)?\.?\s*age|age\s*\(?min)\D{0,15}(\d{2})", re.IGNORECASE)
MAX_AGE_RE = re.compile(r"(?:max(?:imum)?\.?\s*age|upper\s*age|age\s*\(?max)\D{0,15}(\d{2})", re.IGNORECASE)
AGE_RANGE_RE = re.compile(r"\b(\d{2})\s*(?:-|to)\s*(\d{2})\s*(?:years|yrs)", re.IGNORECASE)
POST_COUNT_RE = re.compile(r"(\d[\d,]*)\s*(?:posts?|vacanc(?:y|ies)|seats?)\b", re.IGNORECASE)
POST_COUNT_LABEL_RE = re.compile(r"(?:total|overall)\s*(?:posts?|vacanc(?:y|ies))\s*[:\-]?\s*(\d[\d,]*)", re.IGNORECASE)


@dataclass
class Extraction:
    """Outcome of field extraction for one candidate."""

    job: Optional[ParsedJob]
    method: str
    normalized_title: str = ""
    reason: str = ""
    notes: List[str] = field(default_factory=list)


def get_llm_client() -> Optional[AsyncOpenAI]:
    """Configured AsyncOpenAI client, or None when no key is set."""
    if not OPENAI_API_KEY:
        return None
    if OPENAI_BASE_URL:
        return AsyncOpenAI(api_key=OPENAI_API_KEY, base_url=OPENAI_BASE_URL)
    return AsyncOpenAI(api_key=OPENAI_API_KEY)


def _parse_llm_json(text: str) -> Optional[dict]:
    """Parse JSON from LLM response, stripping markdown code blocks if present."""
    raw = text.strip()
    # Remove optional markdown code block
    if raw.startswith("```"):
        raw = re.sub(r"^```(?:json)?\s*", "", raw)
        raw = re.sub(r"\s*```$", "", raw)
    if raw == "null":
        return {"isValidNotification": False}
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    return data


async def _call_llm(client: AsyncOpenAI, result: SearchResult, ctx: ExtractionContext) -> dict:
    """One completion request; raises on transport, empty or malformed output."""
    user_content = (
        f"Search title: {result.title}\n"
        f"Source URL: {result.link}\n"
        f"Candidate links: {', '.join(ctx.ranked_links[:8]) or 'none'}\n\n"
        f"Content:\n{ctx.text}"
    )
    response = await client.chat.completions.create(
        model=MODEL_NAME,
        messages=[
            {"role": "system", "content": EXTRACTION_SYSTEM_PROMPT},
            {"role": "user", "content": user_content},
        ],
        temperature=0.1,
        response_format={"type": "json_object"},
    )
    choice = response.choices[0] if response.choices else None
    if not choice or not choice.message or not choice.message.content:
        raise ValueError("empty completion")
    return _parse_llm_json(choice.message.content)


def _guess_category(text: str) -> str:
    lowered = text.lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(re.search(rf"\b{re.escape(k)}\b", lowered) for k in keywords):
            return category
    return "Other"


def _link_label(url: str) -> str:
    if DOCUMENT_EXT_RE.search(url):
        return "Download Notification"
    if APPLY_RE.search(url):
        return "Apply Online"
    return "Official Website"


def extract_fallback(result: SearchResult, ctx: Optional[ExtractionContext] = None) -> ParsedJob:
    """
    Pattern-based extraction from the snippet alone. Always returns a complete
    ParsedJob; sections with nothing found hold explicit "Unknown" placeholders.
    """
    snippet = result.snippet or ""
    text = f"{result.title} {snippet}"
    lowered = text.lower()

    dates = find_date_strings(snippet, max_items=MAX_IMPORTANT_DATES)

    fees: List[str] = []
    for m in FEE_RE.finditer(snippet):
        label = FEE_LABEL_RE.search(snippet[max(0, m.start() - 25):m.start()])
        amount = f"Rs. {m.group(1)}"
        fees.append(f"{label.group(1).upper()}: {amount}" if label else amount)

    ages: List[str] = []
    min_age, max_age = MIN_AGE_RE.search(snippet), MAX_AGE_RE.search(snippet)
    if not (min_age or max_age):
        age_range = AGE_RANGE_RE.search(snippet)
        if age_range:
            ages = [f"Minimum Age: {age_range.group(1)} Years", f"Maximum Age: {age_range.group(2)} Years"]
    if min_age:
        ages.append(f"Minimum Age: {min_age.group(1)} Years")
    if max_age:
        ages.append(f"Maximum Age: {max_age.group(1)} Years")

    post_name = next((k.title() for k in POST_KEYWORDS if re.search(rf"\b{re.escape(k)}\b", lowered)), "Various Posts")
    count = POST_COUNT_LABEL_RE.search(text) or POST_COUNT_RE.search(text)
    eligibility = [q for q in QUALIFICATION_TERMS if re.search(rf"(?<![\w.]){re.escape(q)}(?![\w])", lowered)]

    links = [
        LinkItem(label=_link_label(u), url=u)
        for u in (ctx.ranked_links if ctx else [])[: MAX_IMPORTANT_LINKS - 1]
    ]
    links.append(LinkItem(label="Official Website", url=result.link))

    return ParsedJob(
        title=result.title,
        category=_guess_category(text),
        short_info=snippet,
        important_dates=dates or [UNKNOWN],
        application_fee=dedupe_preserve(fees) or [UNKNOWN],
        age_limit=ages or [UNKNOWN],
        vacancy_details=[
            VacancyItem(
                post_name=post_name,
                total_post=count.group(1).replace(",", "") if count else UNKNOWN,
                eligibility=", ".join(e.upper() if len(e) <= 4 else e.title() for e in eligibility) or UNKNOWN,
            )
        ],
        important_links=links,
        apply_link=result.link,
    )


def select_apply_link(job: ParsedJob, candidate_link: str) -> str:
    """Prefer an apply/registration-labelled link, then any trusted-domain link, then the candidate link."""
    for link in job.important_links:
        if link.url and re.search(r"\b(apply|registration|register)\b", link.label, re.IGNORECASE):
            return link.url
    for url in [job.apply_link, *(link.url for link in job.important_links)]:
        if url and is_trusted_domain(url):
            return url
    return sanitize_url(candidate_link) or job.apply_link


def post_process(job: ParsedJob, result: SearchResult, ctx: Optional[ExtractionContext]) -> ParsedJob:
    """Sanitize URLs, fold in harvested dates, choose the apply link."""
    links: List[LinkItem] = []
    seen: set[str] = set()
    for link in job.important_links:
        url = sanitize_url(link.url)
        if not url or normalize_url(url) in seen:
            continue
        seen.add(normalize_url(url))
        links.append(LinkItem(label=link.label or _link_label(url), url=url))

    dates = [d for d in job.important_dates if d.strip().lower() != UNKNOWN.lower()]
    dates = dedupe_preserve([*dates, *(ctx.date_hints if ctx else [])], cap=MAX_IMPORTANT_DATES) or [UNKNOWN]

    cleaned = job.model_copy(
        update={
            "title": job.title or result.title,
            "short_info": job.short_info or result.snippet,
            "important_links": links[:MAX_IMPORTANT_LINKS],
            "important_dates": dates,
            "apply_link": sanitize_url(job.apply_link),
        }
    )
    return cleaned.model_copy(update={"apply_link": select_apply_link(cleaned, result.link)})


async def run_extractor_agent(
    result: SearchResult,
    ctx: ExtractionContext,
    client: Optional[AsyncOpenAI] = None,
) -> Extraction:
    """
    Extract one candidate. The LLM path is tried once when a client is available;
    any failure (transport, non-JSON, schema violation) routes to the fallback.
    A model verdict that the content is not a notification is a rejection.
    """
    job: Optional[ParsedJob] = None
    method = METHOD_FALLBACK
    notes: List[str] = []

    if client is None:
        notes.append("extraction service not configured; using fallback")
    else:
        try:
            data = await _call_llm(client, result, ctx)
            if data.get("isValidNotification") is False or data.get("is_valid_notification") is False:
                logger.info("Model rejected %s as not a notification", result.link)
                return Extraction(job=None, method=METHOD_LLM, reason="model flagged as not a government notification")
            data.pop("isValidNotification", None)
            data.pop("is_valid_notification", None)
            job = ParsedJob.model_validate(data)
            method = METHOD_LLM
        except ValidationError as e:
            logger.warning("LLM output validation failed for %s: %s", result.link, e)
            notes.append("schema-violating extraction output; using fallback")
        except (json.JSONDecodeError, ValueError) as e:
            logger.warning("LLM output unparsable for %s: %s", result.link, e)
            notes.append("malformed extraction output; using fallback")
        except Exception as e:
            logger.warning("Extraction service failed for %s: %s", result.link, e)
            notes.append(f"extraction service error ({type(e).__name__}); using fallback")

    if job is None:
        job = extract_fallback(result, ctx)

    job = post_process(job, result, ctx)
    return Extraction(job=job, method=method, normalized_title=derive_readable_title(job), notes=notes)
