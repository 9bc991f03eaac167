"""Find and parse notification dates in page text (numeric and month-name forms)."""

import re
from datetime import date
from typing import Iterable, List, Optional

MONTHS = [
    "jan", "feb", "mar", "apr", "may", "jun",
    "jul", "aug", "sep", "oct", "nov", "dec",
]

_months_abbr = r"(?:jan|feb|mar|apr|may|jun|jul|aug|sep|sept|oct|nov|dec)"
_months_full = r"(?:january|february|march|april|may|june|july|august|september|october|november|december)"
_month_name = rf"(?:{_months_full}|{_months_abbr})"

# 12/03/2026, 12-03-2026, 12.03.2026
NUMERIC_DATE_RE = re.compile(r"\b(\d{1,2})[/.\-](\d{1,2})[/.\-](\d{4})\b")
# 12 March 2026, 12th Mar, 2026
MONTH_NAME_DATE_RE = re.compile(
    rf"\b(\d{{1,2}})(?:st|nd|rd|th)?\s+({_month_name})\.?,?\s+(\d{{4}})\b", re.IGNORECASE
)
# March 12, 2026 (harvested only; not a closing-date parse format)
MONTH_FIRST_DATE_RE = re.compile(
    rf"\b({_month_name})\.?\s+(\d{{1,2}})(?:st|nd|rd|th)?,?\s+(\d{{4}})\b", re.IGNORECASE
)

DATE_LABEL_HINT_RE = re.compile(
    r"(date|last|closing|start|begin|exam|from|till|upto|up to|apply|registration|fee|admit|result|notification)",
    re.IGNORECASE,
)
CLOSING_DATE_RE = re.compile(r"(last\s*date|closing|end\s*date|last\s*day)", re.IGNORECASE)


def _month_num(mon_str: str) -> int:
    s = mon_str.lower()[:3]
    for i, m in enumerate(MONTHS, 1):
        if s == m:
            return i
    raise KeyError(mon_str)


def find_date_strings(text: str, max_items: int = 0) -> List[str]:
    """
    Harvest literal date substrings from text, in order of appearance.
    When a short label precedes the date on the same line (e.g. "Last Date: 01/01/2020")
    the label is kept with it. Duplicates are dropped; max_items > 0 caps the list.
    """
    if not text:
        return []
    found: List[tuple[int, str]] = []
    for pattern in (NUMERIC_DATE_RE, MONTH_NAME_DATE_RE, MONTH_FIRST_DATE_RE):
        for m in pattern.finditer(text):
            found.append((m.start(), _with_label(text, m.start(), m.group(0))))
    found.sort(key=lambda x: x[0])

    seen: set[str] = set()
    out: List[str] = []
    for _, s in found:
        key = s.lower()
        if key in seen:
            continue
        seen.add(key)
        out.append(s)
        if max_items and len(out) >= max_items:
            break
    return out


def _with_label(text: str, start: int, date_text: str) -> str:
    line_start = max(text.rfind("\n", 0, start) + 1, start - 48)
    prefix = text[line_start:start]
    # Cut at the previous date or sentence boundary so labels don't run together
    prefix = re.split(r"[.;|]\s|\d{4}", prefix)[-1]
    prefix = re.sub(r"\s+", " ", prefix).strip(" :-–,")
    if prefix and DATE_LABEL_HINT_RE.search(prefix) and len(prefix) <= 40:
        return f"{prefix}: {date_text.strip()}"
    return date_text.strip()


def parse_date(text: str) -> Optional[date]:
    """
    Parse the first date in text under D/M/YYYY (any of / - . separators)
    or D <MonthName> YYYY. Returns None when neither form parses.
    """
    if not text:
        return None
    m = NUMERIC_DATE_RE.search(text)
    if m:
        try:
            return date(int(m.group(3)), int(m.group(2)), int(m.group(1)))
        except ValueError:
            pass
    m = MONTH_NAME_DATE_RE.search(text)
    if m:
        try:
            return date(int(m.group(3)), _month_num(m.group(2)), int(m.group(1)))
        except (ValueError, KeyError):
            pass
    return None


def find_closing_date(dates: Iterable[str]) -> Optional[date]:
    """First successfully parsed entry that signals a closing date (last date, closing, end date, last day)."""
    for entry in dates or []:
        if not CLOSING_DATE_RE.search(entry or ""):
            continue
        parsed = parse_date(entry)
        if parsed:
            return parsed
    return None
