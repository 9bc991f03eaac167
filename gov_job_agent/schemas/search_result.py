"""Raw search result schema from the web search provider."""

from pydantic import BaseModel, Field


class SearchResult(BaseModel):
    """Unstructured notification candidate from search engine results."""

    title: str = Field(default="", description="Title of the organic result")
    link: str = Field(..., description="URL of the result")
    snippet: str = Field(default="", description="Description snippet from search result")
