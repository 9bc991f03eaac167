"""Structured job schema after extraction (service-backed or deterministic)."""

from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _as_str_list(value: Any) -> List[str]:
    """Coerce None / str / list of mixed values into a list of non-empty strings."""
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return []
    out: List[str] = []
    for item in value:
        if item is None:
            continue
        if isinstance(item, dict):
            item = ": ".join(str(v) for v in item.values() if v)
        text = str(item).strip()
        if text:
            out.append(text)
    return out


class VacancyItem(BaseModel):
    """One row of a notification's vacancy table."""

    model_config = ConfigDict(populate_by_name=True)

    post_name: str = Field(default="", alias="postName")
    total_post: str = Field(default="", alias="totalPost")
    eligibility: str = Field(default="")

    @field_validator("post_name", "total_post", "eligibility", mode="before")
    @classmethod
    def _stringify(cls, v: Any) -> str:
        return "" if v is None else str(v).strip()


class LinkItem(BaseModel):
    """Labelled link shown under "Important Links"."""

    label: str = Field(default="")
    url: str = Field(default="")

    @field_validator("label", "url", mode="before")
    @classmethod
    def _stringify(cls, v: Any) -> str:
        return "" if v is None else str(v).strip()


class ParsedJob(BaseModel):
    """Canonical structured shape of one government job notification."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(default="", description="Notification title")
    category: str = Field(default="Other", description="SSC, Railway, Banking, Police, Teaching, Defence, UPSC, State PSC, Other")
    short_info: str = Field(default="", alias="shortInfo", description="Two-line summary")
    important_dates: List[str] = Field(default_factory=list, alias="importantDates")
    application_fee: List[str] = Field(default_factory=list, alias="applicationFee")
    age_limit: List[str] = Field(default_factory=list, alias="ageLimit")
    vacancy_details: List[VacancyItem] = Field(default_factory=list, alias="vacancyDetails")
    important_links: List[LinkItem] = Field(default_factory=list, alias="importantLinks")
    apply_link: str = Field(default="", alias="applyLink")

    @field_validator("title", "short_info", "apply_link", mode="before")
    @classmethod
    def _stringify(cls, v: Any) -> str:
        return "" if v is None else str(v).strip()

    @field_validator("category", mode="before")
    @classmethod
    def _category(cls, v: Any) -> str:
        return str(v).strip() if v else "Other"

    @field_validator("important_dates", "application_fee", "age_limit", mode="before")
    @classmethod
    def _lists(cls, v: Any) -> List[str]:
        return _as_str_list(v)

    @field_validator("vacancy_details", "important_links", mode="before")
    @classmethod
    def _records(cls, v: Any) -> list:
        if v is None:
            return []
        if isinstance(v, dict):
            return [v]
        if not isinstance(v, (list, tuple)):
            return []
        return [item for item in v if isinstance(item, (dict, BaseModel))]
