"""Per-candidate extraction context built by the deep extractor."""

from typing import List

from pydantic import BaseModel, Field


class ExtractionContext(BaseModel):
    """Text and link material gathered for one candidate; lives for one pass."""

    text: str = Field(default="", description="Bounded aggregate of snippet, page, row, linked and date text")
    ranked_links: List[str] = Field(default_factory=list, description="Outbound links, best first")
    date_hints: List[str] = Field(default_factory=list, description="Literal date substrings, deduplicated")
    matched_row_text: str = Field(default="")
    matched_row_link: str = Field(default="")
    fetched_urls: List[str] = Field(default_factory=list)
    skipped: List[str] = Field(default_factory=list, description="Per-fetch skip reasons")
