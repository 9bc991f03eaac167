"""Utility exports."""

from .date_parser import find_date_strings, parse_date
from .helpers import deduplicate_results, normalize_url, sanitize_url
from .job_title import derive_readable_title
from .logger import get_logger

__all__ = [
    "get_logger",
    "normalize_url",
    "sanitize_url",
    "deduplicate_results",
    "find_date_strings",
    "parse_date",
    "derive_readable_title",
]
