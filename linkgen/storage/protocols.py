"""Storage protocol definitions using typing.Protocol."""

from typing import Protocol

from ..models import LinkRecord
from ..types import UploadedFile


class LinkRepository(Protocol):
    """Durable key-value store for link records, keyed by slug."""

    async def put(self, slug: str, record: LinkRecord) -> None:
        """Write a record under slug, overwriting any existing value."""
        ...

    async def create(self, slug: str, record: LinkRecord) -> None:
        """Write a record only if slug is not yet stored."""
        ...

    async def get(self, slug: str) -> LinkRecord:
        """Get the record stored under slug."""
        ...

    async def health_check(self) -> bool:
        """Check if repository is healthy."""
        ...

    async def startup(self) -> None:
        """Initialize repository on startup."""
        ...

    async def shutdown(self) -> None:
        """Cleanup repository on shutdown."""
        ...


class BlobStore(Protocol):
    """Object storage for uploaded files."""

    async def store(self, file: UploadedFile) -> str:
        """Upload a file and return its public URL."""
        ...

    async def health_check(self) -> bool:
        """Check if blob store is healthy."""
        ...

    async def startup(self) -> None:
        """Initialize blob store on startup."""
        ...

    async def shutdown(self) -> None:
        """Cleanup blob store on shutdown."""
        ...


class LinkCache(Protocol):
    """Process-side cache of link records."""

    async def get(self, slug: str) -> LinkRecord | None:
        """Get cached record."""
        ...

    async def set(self, slug: str, record: LinkRecord) -> None:
        """Cache a record, overwriting any existing entry."""
        ...

    async def startup(self) -> None:
        """Initialize cache on startup."""
        ...

    async def shutdown(self) -> None:
        """Cleanup cache on shutdown."""
        ...
