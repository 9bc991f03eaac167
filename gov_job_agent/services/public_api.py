"""Read-only views over published records, filtered by the same clarity gate as ingestion."""

from typing import List, Optional

from gov_job_agent.schemas.job_record import JobRecord
from gov_job_agent.services.job_store import JobStore
from gov_job_agent.services.quality_gate import check_clarity


def _for_display(record: JobRecord) -> Optional[JobRecord]:
    verdict = check_clarity(record)
    if not verdict.ok:
        return None
    return record.model_copy(update={"title": verdict.normalized_title})


def list_active_jobs(store: JobStore) -> List[JobRecord]:
    """Active records that pass the clarity gate, newest first, with normalized titles."""
    out: List[JobRecord] = []
    for record in store.list_records(active_only=True):
        shown = _for_display(record)
        if shown is not None:
            out.append(shown)
    return out


def list_jobs_by_category(store: JobStore, category: str) -> List[JobRecord]:
    wanted = (category or "").strip().lower()
    return [r for r in list_active_jobs(store) if r.category.lower() == wanted]


def get_job(store: JobStore, record_id: str) -> Optional[JobRecord]:
    """One record by id; None when missing or when it fails the clarity gate."""
    record = store.get_record(record_id)
    if record is None:
        return None
    return _for_display(record)
