"""Helper utilities for the government job agent."""

import re
from typing import Iterable, List
from urllib.parse import urlparse

from gov_job_agent.schemas.search_result import SearchResult


def normalize_url(url: str) -> str:
    """Normalize URL for deduplication (strip trailing slashes, fragments)."""
    if not url:
        return ""
    url = url.strip().rstrip("/")
    if "#" in url:
        url = url.split("#")[0]
    return url


def sanitize_url(url: str) -> str:
    """Return the URL if it has an http(s) scheme and a host, else an empty string."""
    url = (url or "").strip()
    if not re.match(r"^https?://", url, re.IGNORECASE):
        return ""
    try:
        if not urlparse(url).hostname:
            return ""
    except ValueError:
        return ""
    return url


def host_of(url: str) -> str:
    """Lower-cased hostname of a URL, or empty string when unparsable."""
    try:
        return (urlparse(url or "").hostname or "").lower()
    except ValueError:
        return ""


def host_matches(host: str, domains: Iterable[str]) -> bool:
    """True if host equals one of the domains or is a subdomain of one."""
    host = (host or "").lower()
    if not host:
        return False
    return any(host == d or host.endswith("." + d) for d in domains)


def dedupe_preserve(items: Iterable[str], cap: int = 0) -> List[str]:
    """Case-insensitive dedup that keeps first occurrence order; cap > 0 truncates."""
    seen: set[str] = set()
    out: List[str] = []
    for item in items:
        text = re.sub(r"\s+", " ", (item or "")).strip()
        key = text.lower()
        if not text or key in seen:
            continue
        seen.add(key)
        out.append(text)
        if cap and len(out) >= cap:
            break
    return out


def deduplicate_results(results: List[SearchResult]) -> List[SearchResult]:
    """Remove duplicate search results by normalized link; first occurrence wins."""
    seen: set[str] = set()
    out: List[SearchResult] = []
    for r in results:
        key = normalize_url(r.link)
        if key and key not in seen:
            seen.add(key)
            out.append(r)
    return out


def slugify(text: str, max_len: int = 60) -> str:
    """Lowercase slug of letters and digits joined by hyphens."""
    slug = re.sub(r"[^a-z0-9]+", "-", (text or "").lower()).strip("-")
    return slug[:max_len].rstrip("-") or "job"
