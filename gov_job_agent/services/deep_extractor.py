"""Deep extraction: primary page, listing-row match, linked pages/documents, date harvest."""

import re
from typing import List, Optional, Tuple

import httpx

from gov_job_agent.config import (
    CONTEXT_MAX_CHARS,
    DOCUMENT_TEXT_MAX_CHARS,
    LINKED_TEXT_MAX_CHARS,
    MAX_IMPORTANT_DATES,
    MAX_LINKED_FETCHES,
    PRIMARY_TEXT_MAX_CHARS,
)
from gov_job_agent.ranking.link_ranker import rank_links
from gov_job_agent.schemas.extraction_context import ExtractionContext
from gov_job_agent.schemas.search_result import SearchResult
from gov_job_agent.services.document_text import extract_document_text
from gov_job_agent.services.page_fetcher import KIND_DOCUMENT, FetchedPage, fetch_page
from gov_job_agent.services.text_cleaner import (
    ListingRow,
    clean_page_text,
    extract_links,
    extract_listing_rows,
    looks_like_listing,
    parse_html,
)
from gov_job_agent.utils.date_parser import find_date_strings
from gov_job_agent.utils.helpers import dedupe_preserve, normalize_url
from gov_job_agent.utils.logger import get_logger

logger = get_logger(__name__)

ROW_TOKEN_STOPWORDS = {
    "the", "and", "for", "with", "from", "dated", "date", "online", "apply", "form", "posts", "post",
    "recruitment", "notification", "vacancy", "vacancies", "advertisement", "invites", "applications",
    "official", "website", "latest", "new", "www", "http", "https",
}


def row_match_tokens(title: str, snippet: str) -> List[str]:
    """Distinct lowercase tokens (>= 3 chars, not boilerplate) from the candidate's title and snippet."""
    words = re.findall(r"[a-z0-9]+", f"{title or ''} {snippet or ''}".lower())
    return dedupe_preserve(w for w in words if len(w) >= 3 and w not in ROW_TOKEN_STOPWORDS)


def best_listing_row(rows: List[ListingRow], tokens: List[str]) -> Tuple[Optional[ListingRow], int]:
    """Row whose text contains the most tokens; first row wins ties. (None, 0) if nothing matches."""
    best: Optional[ListingRow] = None
    best_score = 0
    for row in rows:
        lowered = row.text.lower()
        s = sum(1 for t in tokens if t in lowered)
        if s > best_score:
            best, best_score = row, s
    return best, best_score


def _page_text(page: FetchedPage, max_chars: int) -> str:
    if page.kind == KIND_DOCUMENT:
        return extract_document_text(page.content, max_chars=max_chars)
    return clean_page_text(page.text, max_chars=max_chars)


def _compose_context(pieces: List[Tuple[str, str]], dates: List[str], max_chars: int) -> str:
    body = "\n\n".join(f"{label}:\n{text.strip()}" for label, text in pieces if text and text.strip())
    tail = "\n\nDates found:\n" + "\n".join(dates) if dates else ""
    # The date list is kept whole; the body absorbs the truncation
    if max_chars and len(body) + len(tail) > max_chars:
        body = body[:max(0, max_chars - len(tail))]
    return (body + tail).strip()


async def build_extraction_context(
    result: SearchResult,
    client: Optional[httpx.AsyncClient] = None,
    max_linked_fetches: int = MAX_LINKED_FETCHES,
    max_chars: int = CONTEXT_MAX_CHARS,
) -> ExtractionContext:
    """
    Gather text for one candidate. Each fetch is individually bounded; a failed
    fetch only removes that source from the context.
    """
    snippet = (result.snippet or "").strip()
    ctx = ExtractionContext()
    dates: List[str] = find_date_strings(f"{result.title}\n{snippet}")

    page = await fetch_page(result.link, client=client)
    if page is None:
        ctx.skipped.append(f"primary fetch failed: {result.link}")
        ctx.date_hints = dedupe_preserve(dates, cap=MAX_IMPORTANT_DATES)
        ctx.text = _compose_context([("Snippet", snippet)], ctx.date_hints, max_chars)
        return ctx
    ctx.fetched_urls.append(page.url)

    if page.kind == KIND_DOCUMENT:
        doc_text = extract_document_text(page.content, max_chars=DOCUMENT_TEXT_MAX_CHARS)
        if not doc_text:
            ctx.skipped.append(f"no readable text in document: {result.link}")
        dates.extend(find_date_strings(doc_text))
        ctx.date_hints = dedupe_preserve(dates, cap=MAX_IMPORTANT_DATES)
        ctx.text = _compose_context([("Snippet", snippet), ("Document text", doc_text)], ctx.date_hints, max_chars)
        return ctx

    primary_text = clean_page_text(page.text, max_chars=PRIMARY_TEXT_MAX_CHARS)
    dates.extend(find_date_strings(primary_text))
    soup = parse_html(page.text)
    ranked = rank_links(extract_links(soup, page.url))

    if looks_like_listing(soup):
        rows = extract_listing_rows(soup, page.url)
        row, row_score = best_listing_row(rows, row_match_tokens(result.title, snippet))
        if row is not None:
            ctx.matched_row_text = row.text
            row_links = rank_links(row.links)
            if row_links:
                ctx.matched_row_link = row_links[0]
            dates.extend(find_date_strings(row.text))
            logger.info("Matched listing row (score=%s) on %s", row_score, page.url)

    if ctx.matched_row_link:
        ranked = [ctx.matched_row_link] + [u for u in ranked if u != ctx.matched_row_link]
    ctx.ranked_links = ranked

    pieces: List[Tuple[str, str]] = [("Snippet", snippet), ("Page text", primary_text)]
    if ctx.matched_row_text:
        pieces.append(("Matching listing row", ctx.matched_row_text))

    seen = {normalize_url(result.link), normalize_url(page.url)}
    fetched = 0
    for url in ranked:
        if fetched >= max_linked_fetches:
            break
        if normalize_url(url) in seen:
            continue
        seen.add(normalize_url(url))
        fetched += 1
        linked = await fetch_page(url, client=client)
        if linked is None:
            ctx.skipped.append(f"linked fetch failed: {url}")
            continue
        ctx.fetched_urls.append(linked.url)
        linked_text = _page_text(linked, LINKED_TEXT_MAX_CHARS)
        dates.extend(find_date_strings(linked_text))
        pieces.append((f"Linked {'document' if linked.kind == KIND_DOCUMENT else 'page'} {url}", linked_text))

    ctx.date_hints = dedupe_preserve(dates, cap=MAX_IMPORTANT_DATES)
    ctx.text = _compose_context(pieces, ctx.date_hints, max_chars)
    return ctx
