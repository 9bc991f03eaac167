"""Schema exports."""

from .extraction_context import ExtractionContext
from .job_record import JobRecord, StoreCapabilities, WriteOutcome
from .parsed_job import LinkItem, ParsedJob, VacancyItem
from .search_result import SearchResult
from .sweep_summary import SweepDebug, SweepSummary

__all__ = [
    "SearchResult",
    "ParsedJob",
    "VacancyItem",
    "LinkItem",
    "JobRecord",
    "StoreCapabilities",
    "WriteOutcome",
    "ExtractionContext",
    "SweepDebug",
    "SweepSummary",
]
