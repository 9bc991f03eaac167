"""Clean notification pages to plain text, pull outbound links and listing-table rows."""

import html as htmlmod
import re
from dataclasses import dataclass, field
from typing import List, Union
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from gov_job_agent.config import PRIMARY_TEXT_MAX_CHARS
from gov_job_agent.ranking.link_ranker import LinkCandidate

Markup = Union[str, BeautifulSoup]


@dataclass
class ListingRow:
    """One row-like fragment of an index page."""

    text: str
    links: List[LinkCandidate] = field(default_factory=list)


def clean_page_text(html_text: str, max_chars: int = PRIMARY_TEXT_MAX_CHARS) -> str:
    """
    Clean raw HTML/text into readable plain text.
    Removes scripts, styles, excessive whitespace, and truncates if needed.
    """
    if not html_text or not html_text.strip():
        return ""

    text = html_text

    # Remove script and style blocks (content between tags)
    text = re.sub(r"<script[^>]*>[\s\S]*?</script>", " ", text, flags=re.IGNORECASE)
    text = re.sub(r"<style[^>]*>[\s\S]*?</style>", " ", text, flags=re.IGNORECASE)
    text = re.sub(r"<noscript[^>]*>[\s\S]*?</noscript>", " ", text, flags=re.IGNORECASE)
    text = re.sub(r"<!--[\s\S]*?-->", " ", text)

    # Replace block elements with newlines to preserve structure
    for tag in ("br", "p", "div", "li", "tr", "h1", "h2", "h3", "h4", "table"):
        text = re.sub(rf"</{tag}\s*>", "\n", text, flags=re.IGNORECASE)
        text = re.sub(rf"<{tag}[^>]*>", "\n", text, flags=re.IGNORECASE)
    # Keep table cells apart on one line
    text = re.sub(r"</t[dh]\s*>", " | ", text, flags=re.IGNORECASE)

    # Strip all remaining HTML tags
    text = re.sub(r"<[^>]+>", " ", text)
    text = htmlmod.unescape(text).replace("\xa0", " ")

    # Collapse whitespace and newlines
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r"(\s*\|\s*)+\n", "\n", text)
    text = re.sub(r"\n\s*\n", "\n\n", text)
    text = text.strip()

    if max_chars and len(text) > max_chars:
        text = text[:max_chars]

    return text


def parse_html(markup: Markup) -> BeautifulSoup:
    """Parse once with the html.parser; an already-parsed soup is returned as is."""
    if isinstance(markup, BeautifulSoup):
        return markup
    return BeautifulSoup(markup or "", "html.parser")


def _node_text(node: Tag) -> str:
    return re.sub(r"\s+", " ", node.get_text(" ", strip=True)).strip()


def _row_text(row: Tag) -> str:
    cells = [_node_text(cell) for cell in row.find_all(["td", "th"])]
    cells = [c for c in cells if c]
    return " | ".join(cells) if cells else _node_text(row)


def _links_in(node: Tag, base_url: str) -> List[LinkCandidate]:
    links: List[LinkCandidate] = []
    for a in node.find_all("a", href=True):
        href = a["href"].strip()
        if not href or href.startswith("#"):
            continue
        url = urljoin(base_url, href)
        if not url.lower().startswith(("http://", "https://")):
            continue
        links.append(LinkCandidate(url=url, text=_node_text(a), page_url=base_url))
    return links


def _leaf_rows(soup: BeautifulSoup) -> List[Tag]:
    # Outer rows of nested tables repeat their inner rows' text
    return [tr for tr in soup.find_all("tr") if tr.find("tr") is None]


def extract_links(markup: Markup, base_url: str) -> List[LinkCandidate]:
    """Every http(s) anchor on the page, resolved against base_url, in page order."""
    return _links_in(parse_html(markup), base_url)


def looks_like_listing(markup: Markup, min_rows: int = 5) -> bool:
    """An index page: a table (or list) with several rows that carry links."""
    soup = parse_html(markup)
    rows = [tr for tr in _leaf_rows(soup) if tr.find("a", href=True)]
    if len(rows) >= min_rows:
        return True
    items = [li for li in soup.find_all("li") if li.find("a", href=True)]
    return len(items) >= min_rows * 2


def extract_listing_rows(markup: Markup, base_url: str) -> List[ListingRow]:
    """Table rows (falling back to list items) with their text and links."""
    soup = parse_html(markup)
    fragments = _leaf_rows(soup) or soup.find_all("li")
    rows: List[ListingRow] = []
    for frag in fragments:
        text = _row_text(frag) if frag.name == "tr" else _node_text(frag)
        if not text:
            continue
        rows.append(ListingRow(text=text, links=_links_in(frag, base_url)))
    return rows
