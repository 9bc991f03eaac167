"""Near-duplicate detection by exam-key Jaccard similarity, and the existing-biased merge policy."""

import re
from typing import Callable, Iterable, List, Optional, Set, Tuple

from gov_job_agent.config import MAX_IMPORTANT_DATES, MAX_IMPORTANT_LINKS, SIMILARITY_THRESHOLD, UNKNOWN_PLACEHOLDER
from gov_job_agent.schemas.job_record import JobRecord
from gov_job_agent.schemas.parsed_job import LinkItem, ParsedJob, VacancyItem
from gov_job_agent.services.stage_classifier import STAGE_NEW_VACANCY
from gov_job_agent.utils.helpers import dedupe_preserve, normalize_url

SUMMARY_GROWTH_FACTOR = 1.5

STAGE_WORDS_RE = re.compile(
    r"\b(online\s+form|apply\s+online|online\s+application|application\s+status|admit\s+card|hall\s+ticket"
    r"|call\s+letter|answer\s+key|exam\s+pattern|last\s+date|notifications?|recruitments?|vacanc(?:y|ies)"
    r"|advertisements?|advt|apply|application|registration|results?|syllabus|declared|released|status"
    r"|admission|counselling|extended|latest|official|notice|out)\b",
    re.IGNORECASE,
)
YEAR_RE = re.compile(r"\b(19|20)\d{2}\b")
KEY_STOPWORDS = {"the", "and", "for", "with", "from", "dated"}


def exam_key(title: str) -> str:
    """Lowercase title with years, stage/action words and punctuation removed."""
    text = YEAR_RE.sub(" ", title or "")
    text = STAGE_WORDS_RE.sub(" ", text)
    text = re.sub(r"[^a-z0-9]+", " ", text.lower())
    return re.sub(r"\s+", " ", text).strip()


def key_tokens(key: str) -> Set[str]:
    return {t for t in key.split() if len(t) >= 3 and t not in KEY_STOPWORDS}


def jaccard(a: Set[str], b: Set[str]) -> float:
    if not a or not b:
        return 0.0
    return len(a & b) / len(a | b)


def title_similarity(a: str, b: str) -> float:
    return jaccard(key_tokens(exam_key(a)), key_tokens(exam_key(b)))


def find_similar(
    title: str,
    records: Iterable[JobRecord],
    threshold: float = SIMILARITY_THRESHOLD,
) -> Tuple[Optional[JobRecord], float]:
    """
    Best-matching record if its similarity reaches threshold, else (None, best_score).
    title is the extracted title of the incoming notice; records are compared by
    their stored match title, falling back to the display title for older rows.
    """
    tokens = key_tokens(exam_key(title))
    best: Optional[JobRecord] = None
    best_score = 0.0
    for record in records:
        s = jaccard(tokens, key_tokens(exam_key(record.match_title or record.title)))
        if s > best_score:
            best, best_score = record, s
    if best is not None and best_score >= threshold:
        return best, best_score
    return None, best_score


def _date_key(entry: str) -> str:
    return re.sub(r"\s+", " ", entry or "").strip().lower()


def _is_placeholder(entry: str) -> bool:
    return _date_key(entry) in ("", UNKNOWN_PLACEHOLDER.lower())


def _stated(values: List[str]) -> List[str]:
    """Entries other than the unknown placeholder."""
    return [v for v in values if not _is_placeholder(v)]


def _stated_rows(rows: List[VacancyItem]) -> List[VacancyItem]:
    return [r for r in rows if not (_is_placeholder(r.total_post) and _is_placeholder(r.eligibility))]


def _backfill(existing: list, incoming: list, stated: Callable[[list], list]) -> list:
    """Existing section if it states anything, else incoming if that does, else existing unchanged."""
    if stated(existing):
        return existing
    if stated(incoming):
        return incoming
    return existing


def _union_links(existing: List[LinkItem], incoming: List[LinkItem]) -> List[LinkItem]:
    seen = {normalize_url(link.url) for link in existing}
    merged = list(existing)
    for link in incoming:
        key = normalize_url(link.url)
        if not key or key in seen:
            continue
        if len(merged) >= max(MAX_IMPORTANT_LINKS, len(existing)):
            break
        seen.add(key)
        merged.append(link)
    return merged


def merge_into(existing: JobRecord, incoming: ParsedJob, stage: str) -> JobRecord:
    """
    Merge incoming into existing without deleting anything: union dates and links
    (existing first), backfill empty sections, keep the existing apply link.
    Sections holding only the unknown placeholder count as empty, and a placeholder
    entry gives way to real entries once they arrive.
    """
    dates = _stated(existing.important_dates)
    seen_dates = {_date_key(d) for d in dates}
    for d in dedupe_preserve(_stated(incoming.important_dates)):
        if len(dates) >= max(MAX_IMPORTANT_DATES, len(existing.important_dates)):
            break
        if _date_key(d) not in seen_dates:
            seen_dates.add(_date_key(d))
            dates.append(d)

    category = existing.category
    if stage and stage != STAGE_NEW_VACANCY:
        category = stage

    summary = existing.short_info or ""
    incoming_summary = incoming.short_info or ""
    if not summary.strip() or len(incoming_summary) > len(summary) * SUMMARY_GROWTH_FACTOR:
        summary = incoming_summary or summary
    if stage and stage != STAGE_NEW_VACANCY and stage.lower() not in summary.lower():
        summary = f"{summary}\n{stage} available.".strip()

    return existing.model_copy(
        update={
            "important_dates": dates or existing.important_dates,
            "important_links": _union_links(existing.important_links, incoming.important_links),
            "category": category,
            "short_info": summary,
            "application_fee": _backfill(existing.application_fee, incoming.application_fee, _stated),
            "age_limit": _backfill(existing.age_limit, incoming.age_limit, _stated),
            "vacancy_details": _backfill(existing.vacancy_details, incoming.vacancy_details, _stated_rows),
            "apply_link": existing.apply_link or incoming.apply_link,
            "board": existing.board or incoming.category,
        }
    )
