"""Summary of one harvesting sweep."""

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field


class SweepDebug(BaseModel):
    """Observability trace; never consulted by control flow."""

    queries: List[str] = Field(default_factory=list)
    counts: Dict[str, int] = Field(default_factory=dict, description="Candidates remaining after each stage")
    skipped: List[str] = Field(default_factory=list, description="Human-readable rejection reasons")
    merged: List[str] = Field(default_factory=list, description="Ids of records updated by merge")
    inserted: List[str] = Field(default_factory=list, description="Ids of records inserted")


class SweepSummary(BaseModel):
    """Return value of run_sweep."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message: str
    jobs_added: int = Field(default=0, alias="jobsAdded")
    jobs_merged: int = Field(default=0, alias="jobsMerged")
    debug: SweepDebug = Field(default_factory=SweepDebug)
