"""SQLite job store: existence checks, recent records, inserts with best-effort metadata."""

from __future__ import annotations

import hashlib
import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from gov_job_agent.config import JOB_DB_PATH, SCHEMA_VERSION
from gov_job_agent.schemas.job_record import JobRecord, StoreCapabilities, WriteOutcome
from gov_job_agent.schemas.search_result import SearchResult
from gov_job_agent.utils.helpers import slugify
from gov_job_agent.utils.logger import get_logger

logger = get_logger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS job_details (
  id TEXT PRIMARY KEY,
  title TEXT NOT NULL,
  category TEXT,
  post_date TEXT,
  short_info TEXT,
  important_dates TEXT,
  application_fee TEXT,
  age_limit TEXT,
  vacancy_details TEXT,
  important_links TEXT,
  apply_link TEXT,
  match_title TEXT,
  board TEXT,
  is_active INTEGER NOT NULL DEFAULT 0,
  created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_job_details_apply_link ON job_details(apply_link);
CREATE INDEX IF NOT EXISTS idx_job_details_title ON job_details(title);

CREATE TABLE IF NOT EXISTS raw_posts (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  job_id TEXT,
  title TEXT,
  link TEXT,
  snippet TEXT,
  created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_raw_posts_link ON raw_posts(link);
"""

# Present at every schema version; added in place to older files
MATCH_COLUMNS = {
    "match_title": "TEXT",
    "board": "TEXT",
}

METADATA_COLUMNS = {
    "source_url": "TEXT",
    "source_domain": "TEXT",
    "created_by": "TEXT",
    "quality_score": "REAL",
    "updated_at": "TEXT",
}

_JSON_FIELDS = ("important_dates", "application_fee", "age_limit", "vacancy_details", "important_links")


def now_utc_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def _loads_list(raw: Optional[str]) -> list:
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        # Legacy rows sometimes hold a bare string
        return [raw]
    return value if isinstance(value, list) else [value]


class JobStore:
    """
    Job-record table plus the raw-post audit table.
    Capabilities are resolved once here and exposed via `capabilities`.
    """

    def __init__(self, path: str = JOB_DB_PATH, schema_version: int = SCHEMA_VERSION) -> None:
        if path != ":memory:":
            Path(path).parent.mkdir(parents=True, exist_ok=True)
        self.path = path
        self.conn = sqlite3.connect(path)
        self.conn.row_factory = sqlite3.Row
        self.conn.executescript(SCHEMA_SQL)
        for name, col_type in MATCH_COLUMNS.items():
            self._ensure_column("job_details", name, col_type)
        if schema_version >= 2:
            for name, col_type in METADATA_COLUMNS.items():
                self._ensure_column("job_details", name, col_type)
        self.conn.commit()
        self.capabilities = self._resolve_capabilities(schema_version)
        logger.info("Opened job store %s (%s)", path, self.capabilities)

    def close(self) -> None:
        self.conn.close()

    def _ensure_column(self, table: str, column: str, col_type: str) -> None:
        if column not in self._columns(table):
            self.conn.execute(f"ALTER TABLE {table} ADD COLUMN {column} {col_type}")

    def _columns(self, table: str) -> List[str]:
        return [r[1] for r in self.conn.execute(f"PRAGMA table_info({table})").fetchall()]

    def _resolve_capabilities(self, schema_version: int) -> StoreCapabilities:
        cols = set(self._columns("job_details"))
        return StoreCapabilities(
            schema_version=schema_version,
            has_metadata_columns=all(c in cols for c in METADATA_COLUMNS),
            has_raw_posts=bool(self._columns("raw_posts")),
        )

    # --- reads ---
    def exists_by_link(self, link: str) -> bool:
        if not link:
            return False
        if self.conn.execute("SELECT 1 FROM job_details WHERE apply_link=? LIMIT 1", (link,)).fetchone():
            return True
        if self.capabilities.has_metadata_columns and self.conn.execute(
            "SELECT 1 FROM job_details WHERE source_url=? LIMIT 1", (link,)
        ).fetchone():
            return True
        return self.conn.execute("SELECT 1 FROM raw_posts WHERE link=? LIMIT 1", (link,)).fetchone() is not None

    def exists_by_title(self, title: str) -> bool:
        if not title:
            return False
        if self.conn.execute("SELECT 1 FROM job_details WHERE title=? LIMIT 1", (title,)).fetchone():
            return True
        return self.conn.execute("SELECT 1 FROM raw_posts WHERE title=? LIMIT 1", (title,)).fetchone() is not None

    def get_record(self, record_id: str) -> Optional[JobRecord]:
        row = self.conn.execute("SELECT * FROM job_details WHERE id=?", (record_id,)).fetchone()
        return self._row_to_record(row) if row else None

    def recent_records(self, limit: int) -> List[JobRecord]:
        rows = self.conn.execute(
            "SELECT * FROM job_details ORDER BY created_at DESC, rowid DESC LIMIT ?", (limit,)
        ).fetchall()
        return [self._row_to_record(r) for r in rows]

    def list_records(self, active_only: bool = True) -> List[JobRecord]:
        sql = "SELECT * FROM job_details"
        if active_only:
            sql += " WHERE is_active=1"
        rows = self.conn.execute(sql + " ORDER BY created_at DESC, rowid DESC").fetchall()
        return [self._row_to_record(r) for r in rows]

    def count_records(self) -> int:
        return int(self.conn.execute("SELECT COUNT(*) FROM job_details").fetchone()[0])

    # --- writes ---
    def new_record_id(self, title: str, disambiguator: str = "") -> str:
        """Slug of the title plus a short hash suffix; a counter is appended on collision."""
        suffix = hashlib.sha1(f"{title}|{disambiguator}".encode("utf-8")).hexdigest()[:6]
        base = f"{slugify(title)}-{suffix}"
        candidate, n = base, 2
        while self.conn.execute("SELECT 1 FROM job_details WHERE id=?", (candidate,)).fetchone():
            candidate = f"{base}-{n}"
            n += 1
        return candidate

    def insert_record(self, record: JobRecord) -> WriteOutcome:
        """
        Insert the core row (errors propagate), then write provenance metadata as a
        separate best-effort statement whose failure is reported in the outcome.
        """
        values = self._core_values(record)
        values["id"] = record.id
        values["is_active"] = 1 if record.is_active else 0
        values["created_at"] = now_utc_iso()
        cols = ",".join(values)
        placeholders = ",".join("?" for _ in values)
        self.conn.execute(f"INSERT INTO job_details({cols}) VALUES ({placeholders})", list(values.values()))
        self.conn.commit()

        outcome = WriteOutcome(record_id=record.id)
        if not self.capabilities.has_metadata_columns:
            outcome.metadata_ok = False
            outcome.metadata_error = f"metadata columns unavailable (schema v{self.capabilities.schema_version})"
            return outcome
        try:
            self._write_metadata(record)
        except sqlite3.Error as e:
            self.conn.rollback()
            outcome.metadata_ok = False
            outcome.metadata_error = str(e)
        return outcome

    def update_record(self, record: JobRecord) -> None:
        values = self._core_values(record)
        assignments = ",".join(f"{c}=?" for c in values)
        self.conn.execute(f"UPDATE job_details SET {assignments} WHERE id=?", [*values.values(), record.id])
        if self.capabilities.has_metadata_columns:
            self.conn.execute("UPDATE job_details SET updated_at=? WHERE id=?", (now_utc_iso(), record.id))
        self.conn.commit()

    def set_active(self, record_id: str, active: bool = True) -> None:
        self.conn.execute("UPDATE job_details SET is_active=? WHERE id=?", (1 if active else 0, record_id))
        self.conn.commit()

    def insert_raw_post(self, result: SearchResult, job_id: str = "") -> None:
        self.conn.execute(
            "INSERT INTO raw_posts(job_id, title, link, snippet, created_at) VALUES (?, ?, ?, ?, ?)",
            (job_id, result.title, result.link, result.snippet[:2000], now_utc_iso()),
        )
        self.conn.commit()

    # --- mapping ---
    def _write_metadata(self, record: JobRecord) -> None:
        self.conn.execute(
            "UPDATE job_details SET source_url=?, source_domain=?, created_by=?, quality_score=?, updated_at=? WHERE id=?",
            (
                record.source_url,
                record.source_domain,
                record.created_by,
                record.quality_score,
                now_utc_iso(),
                record.id,
            ),
        )
        self.conn.commit()

    @staticmethod
    def _core_values(record: JobRecord) -> Dict[str, Any]:
        return {
            "title": record.title,
            "category": record.category,
            "post_date": record.post_date,
            "short_info": record.short_info,
            "important_dates": json.dumps(record.important_dates, ensure_ascii=False),
            "application_fee": json.dumps(record.application_fee, ensure_ascii=False),
            "age_limit": json.dumps(record.age_limit, ensure_ascii=False),
            "vacancy_details": json.dumps([v.model_dump(by_alias=True) for v in record.vacancy_details], ensure_ascii=False),
            "important_links": json.dumps([link.model_dump() for link in record.important_links], ensure_ascii=False),
            "apply_link": record.apply_link,
            "match_title": record.match_title,
            "board": record.board,
        }

    def _row_to_record(self, row: sqlite3.Row) -> JobRecord:
        data: Dict[str, Any] = {k: row[k] for k in row.keys()}
        for f in _JSON_FIELDS:
            data[f] = _loads_list(data.get(f))
        data["is_active"] = bool(data.get("is_active"))
        text_fields = (
            "post_date", "short_info", "apply_link", "match_title", "board",
            "source_url", "source_domain", "created_by", "updated_at",
        )
        for f in text_fields:
            data[f] = data.get(f) or ""
        data.pop("created_at", None)
        return JobRecord(**data)
