"""Shared test fixtures."""

import os
from collections.abc import AsyncGenerator

os.environ["LINKGEN_LOG_LEVEL"] = "ERROR"  # Reduce log noise

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from linkgen import app
from linkgen.links import LinkService
from linkgen.storage import InMemoryCache, LocalBlobStore

from .fakes import InMemoryRepository


@pytest.fixture
def repository() -> InMemoryRepository:
    """Dict-backed durable store."""
    return InMemoryRepository()


@pytest.fixture
def cache() -> InMemoryCache:
    """Small in-memory cache."""
    return InMemoryCache(max_size=100, ttl=60)


@pytest.fixture
def blob_store(tmp_path) -> LocalBlobStore:
    """Local blob store writing into a temporary directory."""
    store = LocalBlobStore(directory=str(tmp_path / "files"))
    store.directory.mkdir(parents=True, exist_ok=True)
    return store


@pytest.fixture
def service(repository, blob_store, cache) -> LinkService:
    """Link service wired to in-memory collaborators."""
    return LinkService(repository=repository, blob_store=blob_store, cache=cache)


@pytest_asyncio.fixture
async def client(service: LinkService) -> AsyncGenerator[AsyncClient, None]:
    """Test client with the link service injected via app.state."""
    app.state.link_service = service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.state.link_service = None


@pytest.fixture
def sample_link() -> dict[str, str]:
    """Sample form submission."""
    return {"name": "Alice", "slug": "alice1", "note": "Hi!"}
