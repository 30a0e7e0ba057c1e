"""Shared fixtures for the test suite."""

import httpx
import pytest
import pytest_asyncio

from book_advisor.clients.google_books import BookLookupClient
from book_advisor.services.reading_list import ReadingListStore
from tests.fakes import BASE_URL, FakeGoogleBooks


@pytest.fixture
def google_books() -> FakeGoogleBooks:
    return FakeGoogleBooks()


@pytest_asyncio.fixture
async def book_client(google_books):
    """Book client wired to the fake Google Books API."""
    client = BookLookupClient(BASE_URL, http_client=httpx.AsyncClient(transport=httpx.MockTransport(google_books)))
    yield client
    await client.aclose()


@pytest_asyncio.fixture
async def store(book_client, tmp_path):
    """Reading list store backed by a temporary SQLite file."""
    reading_list = ReadingListStore(f"sqlite+aiosqlite:///{tmp_path / 'reading_list.db'}", book_client)
    await reading_list.open()
    yield reading_list
    await reading_list.close()
