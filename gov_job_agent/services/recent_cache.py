"""Sweep-lifetime cache of recent job records used for similarity matching."""

from typing import Dict, List, Optional, Tuple

from gov_job_agent.config import RECENT_RECORDS_WINDOW, SIMILARITY_THRESHOLD
from gov_job_agent.schemas.job_record import JobRecord
from gov_job_agent.services.job_store import JobStore
from gov_job_agent.services.merge_service import find_similar


class RecentRecordCache:
    """Built once at sweep start, updated after every insert or merge, dropped at sweep end."""

    def __init__(self, records: List[JobRecord]) -> None:
        self._records: Dict[str, JobRecord] = {r.id: r for r in records}

    @classmethod
    def load(cls, store: JobStore, window: int = RECENT_RECORDS_WINDOW) -> "RecentRecordCache":
        return cls(store.recent_records(window))

    def __len__(self) -> int:
        return len(self._records)

    def records(self) -> List[JobRecord]:
        return list(self._records.values())

    def find_similar(self, title: str, threshold: float = SIMILARITY_THRESHOLD) -> Tuple[Optional[JobRecord], float]:
        return find_similar(title, self._records.values(), threshold=threshold)

    def put(self, record: JobRecord) -> None:
        self._records[record.id] = record
