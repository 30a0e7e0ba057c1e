"""Reading list tools: add, list, mark as read, stats."""

from pydantic import BaseModel, Field

from book_advisor.models.books import Priority, StatsPeriod
from book_advisor.services.reading_list import ReadingListService
from book_advisor.tools.base import ToolDefinition
from book_advisor.tools.books import BookIdInput


class AddToReadingListInput(BookIdInput):
    """Input schema for adding a book to the reading list."""

    priority: Priority = Field("medium", description="Priority of the book (optional)")
    notes: str | None = Field(None, max_length=1000, description="The user's personal notes about the book (optional)")


class GetReadingListInput(BaseModel):
    """Input schema for listing the reading list."""

    limit: int = Field(20, ge=1, le=100, description="Maximum number of books to return (default: 20)")


class MarkAsReadInput(BookIdInput):
    """Input schema for marking a book as read."""

    rating: int | None = Field(None, ge=1, le=5, description="Rating from 1 to 5 stars (optional)")
    review: str | None = Field(None, max_length=2000, description="The user's personal review (optional)")


class GetReadingStatsInput(BaseModel):
    """Input schema for reading statistics."""

    period: StatsPeriod = Field("all-time", description="Time period for the statistics (default: all-time)")


def create_add_to_reading_list_tool(reading_list: ReadingListService) -> ToolDefinition:
    async def add_to_reading_list_handler(params: AddToReadingListInput) -> dict:
        """Add a book to the user's "want to read" list.

        Use this tool when the user says they want to read a book, or asks to add
        or save it ("add it", "save it", "add the first/second/third one").

        Important Notes:
        - Use the "id" field of the previous search results as bookId
        - Do NOT search again if you already have the results

        Common Errors:
        - "duplicate" - The book is already on the list
        - "book not found" - The id could not be resolved; suggest searching again
        """
        return await reading_list.add_pending(params.book_id, params.priority, params.notes)

    return ToolDefinition.from_handler("addToReadingList", AddToReadingListInput, add_to_reading_list_handler)


def create_get_reading_list_tool(reading_list: ReadingListService) -> ToolDefinition:
    async def get_reading_list_handler(params: GetReadingListInput) -> dict:
        """Get the user's list of books pending to read, most recently added first.

        Use this tool when the user asks what is on their list or what they still
        have to read.

        Response: {"items": [{"externalId", "title", "authors", "priority", "notes", "addedAt", ...}], "count"}
        """
        return await reading_list.list_pending(params.limit)

    return ToolDefinition.from_handler("getReadingList", GetReadingListInput, get_reading_list_handler)


def create_mark_as_read_tool(reading_list: ReadingListService) -> ToolDefinition:
    async def mark_as_read_handler(params: MarkAsReadInput) -> dict:
        """Mark a book as read, optionally with a rating and review.

        Use this tool when the user says they finished a book or already read it.

        Important Notes:
        - If you do not have the book's id, call getReadingList FIRST and use the
          "externalId" field of the matching book as bookId
        - NEVER invent ids
        - The book is removed from the pending list

        Common Errors:
        - "duplicate" - The book was already marked as read
        - "not available" - The id could not be resolved
        """
        return await reading_list.mark_read(params.book_id, params.rating, params.review)

    return ToolDefinition.from_handler("markAsRead", MarkAsReadInput, mark_as_read_handler)


def create_get_reading_stats_tool(reading_list: ReadingListService) -> ToolDefinition:
    async def get_reading_stats_handler(params: GetReadingStatsInput) -> dict:
        """Get the user's reading statistics.

        Use this tool when the user asks about their statistics, how many books
        they have read, pages read, average rating or favourite authors.

        Response: {"period", "totalRead", "totalPages", "averageRating", "topAuthors": [{"author", "count"}]}
        """
        return await reading_list.stats(params.period)

    return ToolDefinition.from_handler("getReadingStats", GetReadingStatsInput, get_reading_stats_handler)
