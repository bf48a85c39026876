"""Link service: creation and lookup of personalized links."""

from urllib.parse import quote

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from .exceptions import NotFoundError, SlugTakenError, StorageError, ValidationError
from .models import LinkRecord, LinkRequest
from .storage import BlobStore, LinkCache, LinkRepository
from .types import HealthStatus, UploadedFile


def link_url(base_url: str, slug: str) -> str:
    """Compose the shareable URL for a slug."""
    return f"{base_url.rstrip('/')}/link/{quote(slug, safe='')}"


class LinkService:
    """Link service handling creation and lookup."""

    def __init__(
        self,
        repository: LinkRepository,
        blob_store: BlobStore,
        cache: LinkCache,
    ) -> None:
        """Initialize with injected dependencies."""
        self.repository = repository
        self.blob_store = blob_store
        self.cache = cache

    async def create(
        self,
        slug: str,
        name: str,
        note: str = "",
        file: UploadedFile | None = None,
        *,
        base_url: str,
    ) -> str:
        """Store a new link and return its shareable URL.

        The durable write is a create-if-absent, so of two concurrent
        creates for one slug exactly one succeeds. The cache is only
        populated once the durable write has succeeded.

        Raises:
            ValidationError: If name or slug is missing.
            SlugTakenError: If the slug is already in use.
            StorageError: If the upload or the durable write fails.
        """
        try:
            request = LinkRequest(name=name, slug=slug, note=note)
        except PydanticValidationError as e:
            raise ValidationError("Name and slug are required") from e

        if await self._try_cache_get(request.slug) is not None:
            logger.debug(f"Slug {request.slug} found in cache")
            raise SlugTakenError(request.slug)

        file_url = await self._upload(file) if file is not None else None
        record = LinkRecord(name=request.name, note=request.note, file_url=file_url)

        try:
            await self.repository.create(request.slug, record)
        except (SlugTakenError, StorageError):
            raise
        except Exception as e:
            logger.error(f"Failed to save link {request.slug}: {e}")
            raise StorageError(f"Failed to save link: {e}") from e

        await self._try_cache_set(request.slug, record)
        logger.info(f"Link created: {request.slug} (file={'yes' if file_url else 'no'})")

        return link_url(base_url, request.slug)

    async def lookup(self, slug: str) -> LinkRecord:
        """Return the record for slug, reading through the cache.

        Raises:
            NotFoundError: If no link is stored under slug.
            StorageError: If the durable store cannot be read.
        """
        cached = await self._try_cache_get(slug)
        if cached is not None:
            logger.debug(f"Cache hit for slug {slug}")
            return cached

        logger.debug(f"Cache miss for slug {slug}")
        try:
            record = await self.repository.get(slug)
        except (NotFoundError, StorageError):
            raise
        except Exception as e:
            logger.error(f"Failed to read link {slug}: {e}")
            raise StorageError(f"Failed to read link: {e}") from e

        await self._try_cache_set(slug, record)
        return record

    async def health_check(self) -> HealthStatus:
        """Check health of all components."""
        logger.debug("Performing health checks")

        return {
            "storage": await self._check_health(self.repository, "Storage"),
            "blob_store": await self._check_health(self.blob_store, "Blob store"),
            "cache": await self._check_cache_health(),
        }

    async def _upload(self, file: UploadedFile) -> str:
        try:
            return await self.blob_store.store(file)
        except StorageError:
            raise
        except Exception as e:
            logger.error(f"Unexpected upload error: {e}")
            raise StorageError(f"Failed to upload file: {e}") from e

    async def _try_cache_get(self, slug: str) -> LinkRecord | None:
        """Try to get from cache with graceful fallback."""
        try:
            return await self.cache.get(slug)
        except Exception as e:  # noqa: BLE001
            logger.warning(f"Cache get failed (non-critical): {e}")
            return None

    async def _try_cache_set(self, slug: str, record: LinkRecord) -> None:
        """Try to set cache with graceful fallback."""
        try:
            await self.cache.set(slug, record)
        except Exception as e:  # noqa: BLE001
            logger.warning(f"Cache set failed (non-critical): {e}")

    async def _check_health(self, component, label: str) -> bool:
        try:
            return await component.health_check()
        except Exception as e:  # noqa: BLE001
            logger.error(f"{label} health check failed: {e}")
            return False

    async def _check_cache_health(self) -> bool:
        """Check cache health."""
        try:
            await self.cache.get("__health_check__")
        except Exception as e:  # noqa: BLE001
            logger.warning(f"Cache health check failed: {e}")
            return False
        else:
            return True
