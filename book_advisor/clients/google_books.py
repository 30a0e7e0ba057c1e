"""Google Books API client.

Every operation returns a JSON-ready dict. Failures are logged and reported as
an ``{"error": ...}`` payload instead of raised, so tool callers always have
something to hand back to the LLM.
"""

from typing import Any
from urllib.parse import quote

import httpx

from book_advisor.models.books import (
    NO_CATEGORY,
    NO_DESCRIPTION,
    NO_RATING,
    UNKNOWN_AUTHOR,
    UNKNOWN_DATE,
    BookDetails,
    BookSummary,
)
from book_advisor.utils.logging import get_logger

logger = get_logger(__name__)

# Volume ids containing these fragments routinely 404/503 on the volume endpoint.
BAD_ID_PATTERNS = ("AAAMAAJ", "AAAQBAJ")

SHORT_DESCRIPTION_CHARS = 200
GOOGLE_BOOKS_MAX_RESULTS = 40

NOT_FOUND = "not found"
LOOKUP_FAILED = "lookup failed"


def is_bad_volume_id(volume_id: str) -> bool:
    """Check whether a volume id matches a known-bad pattern."""
    return any(pattern in volume_id for pattern in BAD_ID_PATTERNS)


def _join_authors(volume_info: dict[str, Any]) -> str:
    authors = volume_info.get("authors") or []
    return ", ".join(authors) or UNKNOWN_AUTHOR


def _thumbnail(volume_info: dict[str, Any]) -> str | None:
    return (volume_info.get("imageLinks") or {}).get("thumbnail")


def _parse_search_items(raw_items: list[dict[str, Any]], max_results: int) -> list[BookSummary]:
    """Keep usable items, in order, up to ``max_results``."""
    books: list[BookSummary] = []
    for item in raw_items:
        if len(books) >= max_results:
            break
        if not isinstance(item, dict):
            continue

        volume_id = item.get("id")
        volume_info = item.get("volumeInfo") or {}
        if not volume_id or not volume_info.get("title") or is_bad_volume_id(volume_id):
            continue

        description = volume_info.get("description")
        books.append(
            BookSummary(
                id=volume_id,
                title=volume_info["title"],
                authors=_join_authors(volume_info),
                thumbnail=_thumbnail(volume_info),
                short_description=description[:SHORT_DESCRIPTION_CHARS] if description else NO_DESCRIPTION,
            )
        )
    return books


def _parse_details(data: dict[str, Any], book_id: str) -> BookDetails | None:
    """Build details from a volume payload, or None when it has no title."""
    volume_info = data.get("volumeInfo")
    if not volume_info or not volume_info.get("title"):
        return None

    return BookDetails(
        id=data.get("id") or book_id,
        title=volume_info["title"],
        authors=_join_authors(volume_info),
        description=volume_info.get("description") or NO_DESCRIPTION,
        page_count=volume_info.get("pageCount") or 0,
        categories=", ".join(volume_info.get("categories") or []) or NO_CATEGORY,
        thumbnail=_thumbnail(volume_info),
        published_date=volume_info.get("publishedDate") or UNKNOWN_DATE,
        average_rating=volume_info.get("averageRating") or NO_RATING,
    )


class BookLookupClient:
    """Read-only client for the Google Books volumes API."""

    def __init__(
        self,
        base_url: str = "https://www.googleapis.com/books/v1",
        api_key: str | None = None,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: Google Books API root
            api_key: Optional API key sent as the ``key`` query parameter
            timeout: Request timeout in seconds
            http_client: Optional preconfigured client (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.http = http_client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        await self.http.aclose()

    def _params(self, **params: Any) -> dict[str, Any]:
        if self.api_key:
            params["key"] = self.api_key
        return params

    async def search(self, query: str, max_results: int = 10) -> dict[str, Any]:
        """Search volumes by free text.

        More raw results are requested than asked for, so that items with
        known-bad ids or missing data can be filtered out before truncating.

        Args:
            query: Title, author, topic or keywords
            max_results: Maximum number of items to return

        Returns:
            ``{"items": [...], "count": n}`` or ``{"error": ..., "items": []}``
        """
        query = query.strip()
        if not query:
            return {"error": "empty query", "items": []}

        if max_results < 1:
            return {"items": [], "count": 0, "message": "No books requested."}

        raw_results = min(max_results * 2, GOOGLE_BOOKS_MAX_RESULTS)
        logger.info(f"Searching books for {query!r} (max {max_results}, requesting {raw_results})")

        try:
            response = await self.http.get(
                f"{self.base_url}/volumes",
                params=self._params(q=query, maxResults=raw_results),
            )
            response.raise_for_status()
            raw_items = response.json().get("items") or []
            books = _parse_search_items(raw_items, max_results)
        except (httpx.HTTPError, ValueError, AttributeError, TypeError) as e:
            logger.warning(f"Book search failed for {query!r}: {e}")
            return {"error": "search failed", "items": []}

        logger.debug(f"Search {query!r}: {len(raw_items)} raw items, {len(books)} kept")

        result: dict[str, Any] = {
            "items": [book.model_dump(by_alias=True) for book in books],
            "count": len(books),
        }
        if not books:
            result["message"] = "No books found for that search."
        return result

    async def get_details(self, book_id: str) -> dict[str, Any]:
        """Get full details for a single volume.

        Args:
            book_id: Google Books volume id

        Returns:
            Book details with placeholders for missing fields, or ``{"error": ...}``
        """
        book_id = book_id.strip()
        if not book_id:
            return {"error": NOT_FOUND}

        try:
            response = await self.http.get(
                f"{self.base_url}/volumes/{quote(book_id, safe='')}",
                params=self._params(),
            )
            if response.status_code == 404:
                logger.info(f"Book {book_id} not found")
                return {"error": NOT_FOUND}
            response.raise_for_status()
            details = _parse_details(response.json(), book_id)
        except (httpx.HTTPError, ValueError, AttributeError, TypeError) as e:
            # ValueError covers bad JSON and pydantic ValidationError on malformed fields
            logger.warning(f"Book lookup failed for {book_id}: {e}")
            return {"error": LOOKUP_FAILED}

        if details is None:
            return {"error": NOT_FOUND}
        return details.model_dump(by_alias=True)
