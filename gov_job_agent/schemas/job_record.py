"""Persisted job record, store capabilities and write outcomes."""

from typing import Optional

from pydantic import BaseModel, Field

from gov_job_agent.schemas.parsed_job import ParsedJob


class JobRecord(ParsedJob):
    """A ParsedJob as stored: identity, publication gate and provenance."""

    id: str = Field(..., description="Slug of the title plus a disambiguating suffix")
    match_title: str = Field(default="", alias="matchTitle", description="Extracted title used for similarity")
    board: str = Field(default="", description="Extracted category: SSC, Railway, State PSC, ...")
    post_date: str = Field(default="", alias="postDate")
    is_active: bool = Field(default=False, alias="isActive", description="New agent records start inactive")
    source_url: str = Field(default="", alias="sourceUrl")
    source_domain: str = Field(default="", alias="sourceDomain")
    created_by: str = Field(default="", alias="createdBy", description="agent or admin")
    quality_score: Optional[float] = Field(default=None, alias="qualityScore")
    updated_at: str = Field(default="", alias="updatedAt")


class StoreCapabilities(BaseModel):
    """Schema shape of the job store, resolved once when the store is opened."""

    schema_version: int = Field(default=1)
    has_metadata_columns: bool = Field(default=False, description="source_url, source_domain, created_by, quality_score, updated_at")
    has_raw_posts: bool = Field(default=False)


class WriteOutcome(BaseModel):
    """Result of an insert: primary row plus the best-effort metadata write."""

    record_id: str
    primary_ok: bool = True
    metadata_ok: bool = True
    metadata_error: Optional[str] = None

    @property
    def partial(self) -> bool:
        return self.primary_ok and not self.metadata_ok
