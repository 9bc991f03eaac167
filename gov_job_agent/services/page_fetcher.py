"""Async HTTP fetcher for notification pages and linked documents."""

import asyncio
from dataclasses import dataclass
from typing import Optional, Tuple

import httpx

from gov_job_agent.config import MAX_FETCH_BYTES, PAGE_FETCH_TIMEOUT_SECONDS, USER_AGENT
from gov_job_agent.utils.logger import get_logger

logger = get_logger(__name__)

KIND_HTML = "html"
KIND_DOCUMENT = "document"

DEFAULT_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/pdf;q=0.9,*/*;q=0.5",
    "Accept-Language": "en-IN,en;q=0.9,hi;q=0.6",
}


@dataclass
class FetchedPage:
    """A successfully fetched resource classified as markup or document."""

    url: str
    kind: str
    content: bytes
    text: str = ""


def classify_response(url: str, content_type: str, content: bytes) -> Optional[str]:
    """KIND_DOCUMENT for PDFs, KIND_HTML for text/markup, None for anything else."""
    ct = (content_type or "").split(";")[0].strip().lower()
    if ct == "application/pdf" or content[:5] == b"%PDF-":
        return KIND_DOCUMENT
    if ct in ("application/octet-stream", "binary/octet-stream") and url.lower().split("?")[0].endswith(".pdf"):
        return KIND_DOCUMENT
    if ct.startswith("text/") or ct in ("application/xhtml+xml", "application/xml") or not ct:
        return KIND_HTML
    return None


async def _read_capped(response: httpx.Response, max_bytes: int) -> bytes:
    """Body bytes up to max_bytes; the rest of the stream is left unread."""
    buf = bytearray()
    async for chunk in response.aiter_bytes():
        buf.extend(chunk)
        if len(buf) >= max_bytes:
            logger.info("Stopped reading %s at %s bytes", response.url, max_bytes)
            break
    return bytes(buf[:max_bytes])


async def _get_capped(client: httpx.AsyncClient, url: str, max_bytes: int) -> Tuple[httpx.Response, bytes]:
    async with client.stream("GET", url) as response:
        response.raise_for_status()
        return response, await _read_capped(response, max_bytes)


async def fetch_page(
    url: str,
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = PAGE_FETCH_TIMEOUT_SECONDS,
    max_bytes: int = MAX_FETCH_BYTES,
) -> Optional[FetchedPage]:
    """
    Fetch a public page or document with a bounded timeout and a bounded body size.
    Any failure (timeout, transport error, non-2xx, unsupported content type)
    returns None; nothing is raised to the caller.
    """
    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(follow_redirects=True, timeout=timeout, headers=DEFAULT_HEADERS)
    try:
        response, content = await asyncio.wait_for(_get_capped(client, url, max_bytes), timeout=timeout)
        content_type = response.headers.get("content-type", "")
        kind = classify_response(url, content_type, content)
        if kind is None:
            logger.warning("Unsupported content type %s for %s", content_type, url)
            return None
        text = content.decode(response.encoding or "utf-8", errors="replace") if kind == KIND_HTML else ""
        return FetchedPage(url=str(response.url), kind=kind, content=content, text=text)
    except httpx.HTTPStatusError as e:
        logger.warning("HTTP error %s for %s", e.response.status_code, url)
    except (asyncio.TimeoutError, httpx.TimeoutException):
        logger.warning("Timed out fetching %s after %.0fs", url, timeout)
    except httpx.HTTPError as e:
        logger.warning("Request failed for %s: %s", url, str(e))
    except Exception:
        logger.exception("Unexpected error fetching %s", url)
    finally:
        if owns_client:
            await client.aclose()
    return None
