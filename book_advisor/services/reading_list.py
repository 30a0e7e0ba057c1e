"""Reading list service interface and SQLAlchemy implementation."""

from typing import Any, Protocol

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from book_advisor.clients.google_books import BookLookupClient
from book_advisor.db.tables import Base, PendingBook, ReadBook, utcnow
from book_advisor.models.books import (
    UNKNOWN_AUTHOR,
    AuthorCount,
    PendingBookEntry,
    Priority,
    ReadBookEntry,
    ReadingStats,
    StatsPeriod,
)
from book_advisor.utils.logging import get_logger

logger = get_logger(__name__)

DUPLICATE = "duplicate"
BOOK_NOT_FOUND = "book not found"
NOT_AVAILABLE = "not available"

TOP_AUTHORS = 3


class ReadingListService(Protocol):
    """Interface for reading list operations exposed as tools."""

    async def add_pending(
        self, external_id: str, priority: Priority = "medium", notes: str | None = None
    ) -> dict[str, Any]:
        """Add a book to the pending list.

        Returns:
            ``{"success": True, "entry": ...}`` or ``{"success": False, "error": ...}``
        """
        ...

    async def list_pending(self, limit: int = 20) -> dict[str, Any]:
        """List pending books, most recently added first."""
        ...

    async def mark_read(self, external_id: str, rating: int | None = None, review: str | None = None) -> dict[str, Any]:
        """Move a book to the read list, optionally with a rating and review."""
        ...

    async def stats(self, period: StatsPeriod = "all-time") -> dict[str, Any]:
        """Aggregate statistics over read books."""
        ...


class ReadingListStore:
    """Reading list persisted in a relational database.

    Uniqueness of ``external_id`` in both tables is enforced by the database;
    violations are reported as ``duplicate`` errors rather than raised.
    """

    def __init__(self, database_url: str, book_client: BookLookupClient):
        """Initialize the store. Call ``open()`` before use.

        Args:
            database_url: SQLAlchemy async URL, e.g. ``sqlite+aiosqlite:///./reading_list.db``
            book_client: Client used to resolve book metadata
        """
        self.database_url = database_url
        self.book_client = book_client
        self._engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    async def open(self) -> None:
        """Create the engine and tables. Safe to call more than once."""
        if self._engine is not None:
            return

        logger.info(f"Opening reading list store at {self.database_url}")
        self._engine = create_async_engine(self.database_url)
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        self._sessionmaker = async_sessionmaker(self._engine, expire_on_commit=False)

    async def close(self) -> None:
        """Dispose of the engine and its connections."""
        if self._engine is None:
            return

        logger.info("Closing reading list store")
        await self._engine.dispose()
        self._engine = None
        self._sessionmaker = None

    def _session(self) -> AsyncSession:
        if self._sessionmaker is None:
            raise RuntimeError("ReadingListStore is not open")
        return self._sessionmaker()

    async def add_pending(
        self, external_id: str, priority: Priority = "medium", notes: str | None = None
    ) -> dict[str, Any]:
        """Add a book to the pending list after resolving its metadata."""
        details = await self.book_client.get_details(external_id)
        if "error" in details:
            logger.warning(f"Cannot add {external_id} to reading list: {details['error']}")
            return {
                "success": False,
                "error": BOOK_NOT_FOUND,
                "message": "Could not add the book. It is not available right now.",
                "suggestion": "Search for the book again and pick another result.",
            }

        entry = PendingBook(
            external_id=external_id,
            title=details["title"],
            authors=details["authors"],
            thumbnail=details["thumbnail"],
            page_count=details["pageCount"],
            priority=priority,
            notes=notes or None,
            added_at=utcnow(),
        )

        async with self._session() as session:
            session.add(entry)
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                logger.info(f"Book {external_id} is already on the reading list")
                return {
                    "success": False,
                    "error": DUPLICATE,
                    "message": "This book is already on your reading list.",
                }

        logger.info(f"Added {external_id} ({entry.title}) to reading list with priority {priority}")
        return {
            "success": True,
            "message": f'"{entry.title}" added to your reading list',
            "entry": PendingBookEntry.model_validate(entry).model_dump(by_alias=True, mode="json"),
        }

    async def list_pending(self, limit: int = 20) -> dict[str, Any]:
        """List pending books, most recently added first."""
        async with self._session() as session:
            rows = await session.scalars(
                select(PendingBook).order_by(PendingBook.added_at.desc(), PendingBook.id.desc()).limit(limit)
            )
            items = [PendingBookEntry.model_validate(row).model_dump(by_alias=True, mode="json") for row in rows]

        return {"items": items, "count": len(items)}

    async def mark_read(self, external_id: str, rating: int | None = None, review: str | None = None) -> dict[str, Any]:
        """Move a book to the read list.

        Metadata is taken from the matching pending entry when there is one, so
        the external API is only consulted for books that were never listed.
        """
        async with self._session() as session:
            pending = await session.scalar(select(PendingBook).where(PendingBook.external_id == external_id).limit(1))

        if pending is not None:
            logger.debug(f"Using reading list metadata for {external_id}")
            title, authors = pending.title, pending.authors
            thumbnail, page_count = pending.thumbnail, pending.page_count
        else:
            logger.debug(f"{external_id} not on reading list, looking it up")
            details = await self.book_client.get_details(external_id)
            if "error" in details:
                logger.warning(f"Cannot mark {external_id} as read: {details['error']}")
                return {
                    "success": False,
                    "error": NOT_AVAILABLE,
                    "message": "Could not mark the book as read. The book is not available.",
                }
            title = details["title"]
            authors = details["authors"] or UNKNOWN_AUTHOR
            thumbnail = details["thumbnail"]
            page_count = details["pageCount"]

        read = ReadBook(
            external_id=external_id,
            title=title,
            authors=authors,
            thumbnail=thumbnail,
            page_count=page_count,
            rating=rating,
            review=review or None,
            finished_at=utcnow(),
        )

        async with self._session() as session:
            session.add(read)
            try:
                await session.flush()
            except IntegrityError:
                await session.rollback()
                logger.info(f"Book {external_id} was already marked as read")
                return {
                    "success": False,
                    "error": DUPLICATE,
                    "message": "This book was already marked as read.",
                }

            removed = await session.execute(delete(PendingBook).where(PendingBook.external_id == external_id))
            await session.commit()

        logger.info(f"Marked {external_id} ({title}) as read, removed {removed.rowcount} pending entries")
        return {
            "success": True,
            "message": f'"{title}" marked as read',
            "entry": ReadBookEntry.model_validate(read).model_dump(by_alias=True, mode="json"),
        }

    async def stats(self, period: StatsPeriod = "all-time") -> dict[str, Any]:
        """Aggregate statistics over read books.

        ``period`` is accepted and echoed back, but is not applied as a filter.
        """
        # TODO: filter on finished_at once "year"/"month" are pinned down as calendar or rolling windows.
        books = func.count(ReadBook.id).label("books")

        async with self._session() as session:
            total_read, total_pages, average_rating = (
                await session.execute(
                    select(
                        func.count(ReadBook.id),
                        func.coalesce(func.sum(ReadBook.page_count), 0),
                        func.avg(ReadBook.rating),
                    )
                )
            ).one()

            top_authors = await session.execute(
                select(ReadBook.authors, books)
                .group_by(ReadBook.authors)
                .order_by(books.desc(), func.min(ReadBook.id))
                .limit(TOP_AUTHORS)
            )

            stats = ReadingStats(
                period=period,
                total_read=total_read,
                total_pages=total_pages,
                average_rating=round(float(average_rating), 1) if average_rating is not None else 0,
                top_authors=[AuthorCount(author=author, count=count) for author, count in top_authors],
            )

        return stats.model_dump(by_alias=True)
