"""Tests for the SQLAlchemy-backed reading list store."""

import pytest

from book_advisor.services.reading_list import BOOK_NOT_FOUND, DUPLICATE, NOT_AVAILABLE, ReadingListStore


class TestAddPending:
    """Tests for adding books to the pending list."""

    @pytest.mark.asyncio
    async def test_add_pending(self, store):
        result = await store.add_pending("zyTCAlFPjgYC", priority="high", notes="Recommended by a friend")

        assert result["success"] is True
        entry = result["entry"]
        assert entry["externalId"] == "zyTCAlFPjgYC"
        assert entry["title"] == "Foundation"
        assert entry["authors"] == "Isaac Asimov"
        assert entry["pageCount"] == 255
        assert entry["priority"] == "high"
        assert entry["notes"] == "Recommended by a friend"
        assert entry["addedAt"]

    @pytest.mark.asyncio
    async def test_add_pending_defaults(self, store):
        result = await store.add_pending("duneFH00001")

        assert result["entry"]["priority"] == "medium"
        assert result["entry"]["notes"] is None

    @pytest.mark.asyncio
    async def test_add_pending_duplicate(self, store):
        """The same book cannot be listed twice."""
        await store.add_pending("zyTCAlFPjgYC")

        result = await store.add_pending("zyTCAlFPjgYC", priority="low")

        assert result["success"] is False
        assert result["error"] == DUPLICATE
        assert (await store.list_pending())["count"] == 1

    @pytest.mark.asyncio
    async def test_add_pending_unknown_book(self, store):
        result = await store.add_pending("doesNotExist")

        assert result["success"] is False
        assert result["error"] == BOOK_NOT_FOUND
        assert "suggestion" in result
        assert (await store.list_pending())["count"] == 0

    @pytest.mark.asyncio
    async def test_add_pending_lookup_failure(self, store):
        result = await store.add_pending("brokenVolume")

        assert result["error"] == BOOK_NOT_FOUND

    @pytest.mark.asyncio
    async def test_add_pending_malformed_volume(self, store, google_books):
        google_books.volumes["badPages001"] = {
            "id": "badPages001",
            "volumeInfo": {"title": "Dune", "pageCount": "many"},
        }

        result = await store.add_pending("badPages001")

        assert result["success"] is False
        assert result["error"] == BOOK_NOT_FOUND
        assert (await store.list_pending())["count"] == 0


class TestListPending:
    @pytest.mark.asyncio
    async def test_list_pending_most_recent_first(self, store):
        await store.add_pending("zyTCAlFPjgYC")
        await store.add_pending("iRobot00001")
        await store.add_pending("duneFH00001")

        result = await store.list_pending()

        assert [item["externalId"] for item in result["items"]] == ["duneFH00001", "iRobot00001", "zyTCAlFPjgYC"]
        assert result["count"] == 3

    @pytest.mark.asyncio
    async def test_list_pending_limit(self, store):
        await store.add_pending("zyTCAlFPjgYC")
        await store.add_pending("duneFH00001")

        result = await store.list_pending(limit=1)

        assert [item["externalId"] for item in result["items"]] == ["duneFH00001"]
        assert result["count"] == 1

    @pytest.mark.asyncio
    async def test_list_pending_timestamps_match_add(self, store):
        """Timestamps read back from the database keep their UTC offset."""
        added = await store.add_pending("zyTCAlFPjgYC")

        [listed] = (await store.list_pending())["items"]

        assert listed["addedAt"] == added["entry"]["addedAt"]
        assert listed["addedAt"].endswith("Z")

    @pytest.mark.asyncio
    async def test_list_pending_empty(self, store):
        assert await store.list_pending() == {"items": [], "count": 0}


class TestMarkRead:
    """Tests for moving books to the read list."""

    @pytest.mark.asyncio
    async def test_mark_read_from_pending(self, store, google_books):
        """Listed books are moved using the stored metadata."""
        await store.add_pending("zyTCAlFPjgYC")
        requests_before = len(google_books.requests)

        result = await store.mark_read("zyTCAlFPjgYC", rating=5, review="A classic")

        assert result["success"] is True
        assert result["entry"]["title"] == "Foundation"
        assert result["entry"]["rating"] == 5
        assert result["entry"]["review"] == "A classic"
        assert result["entry"]["pageCount"] == 255
        assert result["entry"]["finishedAt"]
        assert len(google_books.requests) == requests_before
        assert (await store.list_pending())["count"] == 0
        assert (await store.stats())["totalRead"] == 1

    @pytest.mark.asyncio
    async def test_mark_read_not_listed(self, store):
        """Books that were never listed are looked up."""
        result = await store.mark_read("duneFH00001")

        assert result["success"] is True
        assert result["entry"]["title"] == "Dune"
        assert result["entry"]["rating"] is None

    @pytest.mark.asyncio
    async def test_mark_read_unknown_book(self, store):
        result = await store.mark_read("doesNotExist", rating=4)

        assert result["success"] is False
        assert result["error"] == NOT_AVAILABLE
        assert (await store.stats())["totalRead"] == 0

    @pytest.mark.asyncio
    async def test_mark_read_lookup_failure(self, store):
        assert (await store.mark_read("brokenVolume"))["error"] == NOT_AVAILABLE

    @pytest.mark.asyncio
    async def test_mark_read_malformed_volume(self, store, google_books):
        google_books.volumes["listBody001"] = [{"id": "listBody001"}]

        assert (await store.mark_read("listBody001"))["error"] == NOT_AVAILABLE
        assert (await store.stats())["totalRead"] == 0

    @pytest.mark.asyncio
    async def test_mark_read_twice(self, store):
        await store.mark_read("zyTCAlFPjgYC", rating=5)

        result = await store.mark_read("zyTCAlFPjgYC", rating=3)

        assert result["success"] is False
        assert result["error"] == DUPLICATE
        assert (await store.stats())["totalRead"] == 1

    @pytest.mark.asyncio
    async def test_mark_read_keeps_other_pending(self, store):
        await store.add_pending("zyTCAlFPjgYC")
        await store.add_pending("duneFH00001")

        await store.mark_read("zyTCAlFPjgYC")

        pending = await store.list_pending()
        assert [item["externalId"] for item in pending["items"]] == ["duneFH00001"]


class TestStats:
    """Tests for reading statistics."""

    @pytest.mark.asyncio
    async def test_stats_empty(self, store):
        stats = await store.stats()

        assert stats == {
            "period": "all-time",
            "totalRead": 0,
            "totalPages": 0,
            "averageRating": 0,
            "topAuthors": [],
        }

    @pytest.mark.asyncio
    async def test_stats_aggregates(self, store):
        await store.mark_read("zyTCAlFPjgYC", rating=5)
        await store.mark_read("iRobot00001", rating=4)
        await store.mark_read("duneFH00001")

        stats = await store.stats()

        assert stats["totalRead"] == 3
        assert stats["totalPages"] == 255 + 224 + 412
        assert stats["averageRating"] == 4.5
        assert stats["topAuthors"] == [
            {"author": "Isaac Asimov", "count": 2},
            {"author": "Frank Herbert", "count": 1},
        ]

    @pytest.mark.asyncio
    async def test_stats_pending_books_not_counted(self, store):
        await store.add_pending("zyTCAlFPjgYC")

        assert (await store.stats())["totalRead"] == 0

    @pytest.mark.asyncio
    async def test_stats_echoes_period(self, store):
        assert (await store.stats("year"))["period"] == "year"


class TestStoreLifecycle:
    @pytest.mark.asyncio
    async def test_use_before_open_fails(self, book_client, tmp_path):
        store = ReadingListStore(f"sqlite+aiosqlite:///{tmp_path / 'closed.db'}", book_client)

        assert not store.is_open
        with pytest.raises(RuntimeError, match="not open"):
            await store.list_pending()

    @pytest.mark.asyncio
    async def test_data_survives_reopen(self, book_client, tmp_path):
        url = f"sqlite+aiosqlite:///{tmp_path / 'persist.db'}"
        first = ReadingListStore(url, book_client)
        await first.open()
        await first.add_pending("zyTCAlFPjgYC")
        await first.close()

        second = ReadingListStore(url, book_client)
        await second.open()
        try:
            assert (await second.list_pending())["count"] == 1
        finally:
            await second.close()
