"""Book search and lookup tools."""

from pydantic import BaseModel, ConfigDict, Field

from book_advisor.clients.google_books import BookLookupClient
from book_advisor.tools.base import ToolDefinition


class SearchBooksInput(BaseModel):
    """Input schema for the book search tool."""

    model_config = ConfigDict(populate_by_name=True)

    query: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Search terms: title, author, topic or keywords",
        examples=["Asimov", "space opera", "Dune Frank Herbert"],
    )
    max_results: int = Field(
        10,
        alias="maxResults",
        ge=1,
        le=20,
        description="Maximum number of results (default: 10)",
    )


class BookIdInput(BaseModel):
    """Input schema for tools that take a single Google Books id."""

    model_config = ConfigDict(populate_by_name=True)

    book_id: str = Field(
        ...,
        alias="bookId",
        min_length=1,
        max_length=64,
        description="Google Books id of the book (the \"id\" field of a search result)",
        examples=["zyTCAlFPjgYC"],
    )


def create_search_books_tool(book_client: BookLookupClient) -> ToolDefinition:
    async def search_books_handler(params: SearchBooksInput) -> dict:
        """Search Google Books by title, author or topic.

        Purpose: Find books when the user asks for recommendations or looks for books

        Use this tool when:
        - The user asks for recommendations for the FIRST time
        - The user looks for books on a topic
        - The user mentions an author or title and there are no previous results

        Response: {"items": [{"id", "title", "authors", "thumbnail", "shortDescription"}], "count"}
        Every item has an "id" field: that is the bookId the other tools expect.
        """
        return await book_client.search(params.query, params.max_results)

    return ToolDefinition.from_handler("searchBooks", SearchBooksInput, search_books_handler)


def create_get_book_details_tool(book_client: BookLookupClient) -> ToolDefinition:
    async def get_book_details_handler(params: BookIdInput) -> dict:
        """Get detailed information about one book by its Google Books id.

        Use this tool ALWAYS when the user asks for details, full information,
        or says "tell me more about [book]".

        Response: {"id", "title", "authors", "description", "pageCount", "categories",
        "thumbnail", "publishedDate", "averageRating"} or {"error": "not found"}
        """
        return await book_client.get_details(params.book_id)

    return ToolDefinition.from_handler("getBookDetails", BookIdInput, get_book_details_handler)
