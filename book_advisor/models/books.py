"""Book and reading list data models.

Everything here is serialized with camelCase aliases, since these payloads are
handed verbatim to the LLM as tool results.
"""

from datetime import UTC, datetime
from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Priority = Literal["high", "medium", "low"]
StatsPeriod = Literal["all-time", "year", "month"]

UNKNOWN_AUTHOR = "Unknown author"
NO_DESCRIPTION = "No description"
NO_CATEGORY = "Uncategorized"
UNKNOWN_DATE = "Unknown date"
NO_RATING = "No rating"


def _as_utc(value: datetime) -> datetime:
    # SQLite drops the offset, stored timestamps are always UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


class CamelModel(BaseModel):
    """Base model with camelCase JSON aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class BookSummary(CamelModel):
    """A single search hit."""

    id: str
    title: str
    authors: str = UNKNOWN_AUTHOR
    thumbnail: str | None = None
    short_description: str = NO_DESCRIPTION


class BookDetails(CamelModel):
    """Full details of a volume, with placeholders for anything missing."""

    id: str
    title: str
    authors: str = UNKNOWN_AUTHOR
    description: str = NO_DESCRIPTION
    page_count: int = 0
    categories: str = NO_CATEGORY
    thumbnail: str | None = None
    published_date: str = UNKNOWN_DATE
    average_rating: float | str = NO_RATING


class PendingBookEntry(CamelModel):
    """A book the user intends to read."""

    external_id: str
    title: str
    authors: str
    thumbnail: str | None = None
    page_count: int = 0
    priority: Priority = "medium"
    notes: str | None = None
    added_at: UtcDatetime


class ReadBookEntry(CamelModel):
    """A book the user has finished."""

    external_id: str
    title: str
    authors: str
    thumbnail: str | None = None
    page_count: int = 0
    rating: int | None = Field(None, ge=1, le=5)
    review: str | None = None
    finished_at: UtcDatetime


class AuthorCount(CamelModel):
    author: str
    count: int


class ReadingStats(CamelModel):
    """Aggregate statistics over read books."""

    period: StatsPeriod = "all-time"
    total_read: int = 0
    total_pages: int = 0
    average_rating: float = 0
    top_authors: list[AuthorCount] = Field(default_factory=list)
