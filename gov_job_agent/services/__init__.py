"""Service exports."""

from .deep_extractor import build_extraction_context
from .job_store import JobStore
from .page_fetcher import fetch_page
from .public_api import get_job, list_active_jobs, list_jobs_by_category
from .serp_service import build_sweep_queries, search_serp
from .text_cleaner import clean_page_text, extract_links

__all__ = [
    "JobStore",
    "fetch_page",
    "search_serp",
    "build_sweep_queries",
    "build_extraction_context",
    "clean_page_text",
    "extract_links",
    "list_active_jobs",
    "list_jobs_by_category",
    "get_job",
]
