"""Storage module with factories for repository, blob store and cache instances."""

from urllib.parse import parse_qs, urlparse

from loguru import logger

from ..config import Settings, settings
from ..exceptions import ConfigurationError
from .blob import LocalBlobStore, S3BlobStore, object_key
from .cache import InMemoryCache, NoOpCache, RedisCache, cache_key
from .dynamodb import DynamoDBRepository
from .protocols import BlobStore, LinkCache, LinkRepository
from .sqlite import SQLiteRepository

LOCAL_FILES_PATH = "/files"


def create_repository(
    database_url: str | None = None, config: Settings | None = None
) -> LinkRepository:
    """Create repository instance based on database URL.

    A ``dynamodb://`` URL without a table or region falls back to the
    ``dynamodb_table`` and ``aws_region`` settings.

    Args:
        database_url: Database URL. Uses settings if not provided.
        config: Settings to read defaults from. Uses global settings if not provided.

    Returns:
        Repository instance.

    Raises:
        ConfigurationError: If no DynamoDB table name can be resolved.
    """
    config = config or settings
    url = database_url or config.database_url
    parsed = urlparse(url)

    if parsed.scheme == "dynamodb":
        table = parsed.netloc or parsed.path.lstrip("/") or config.dynamodb_table
        region = parse_qs(parsed.query).get("region", [None])[0] or config.aws_region
        if not table:
            raise ConfigurationError(
                "DynamoDB selected but no table name given. "
                "Set it in LINKGEN_DATABASE_URL or LINKGEN_DYNAMODB_TABLE."
            )
        logger.info(f"Creating DynamoDB repository for table {table} in {region}")
        return DynamoDBRepository(f"dynamodb://{table}?region={region}")
    logger.info("Creating SQLite repository")
    return SQLiteRepository(url)


def local_files_path(config: Settings | None = None) -> str:
    """URL path the local blob store's files are served under."""
    config = config or settings
    if config.blob_public_base_url:
        return urlparse(config.blob_public_base_url).path.rstrip("/") or LOCAL_FILES_PATH
    return LOCAL_FILES_PATH


def create_blob_store(config: Settings | None = None) -> BlobStore:
    """Create blob store: S3 when a bucket is configured, local files otherwise."""
    config = config or settings

    if config.blob_bucket:
        logger.info(f"Creating S3 blob store for bucket {config.blob_bucket}")
        return S3BlobStore(
            bucket=config.blob_bucket,
            region=config.aws_region,
            folder=config.blob_folder,
            allowed_extensions=config.blob_allowed_extensions,
            public_base_url=config.blob_public_base_url,
        )

    logger.info("No blob bucket configured, storing uploads locally")
    return LocalBlobStore(
        directory=config.blob_local_dir,
        public_base_url=config.blob_public_base_url or LOCAL_FILES_PATH,
        folder=config.blob_folder,
        allowed_extensions=config.blob_allowed_extensions,
    )


def create_cache(config: Settings | None = None) -> LinkCache:
    """Create cache instance based on configuration.

    Args:
        config: Settings to read cache options from. Uses global settings if not provided.

    Returns:
        Cache instance.
    """
    config = config or settings

    if not config.cache_enabled:
        logger.info("Link cache disabled")
        return NoOpCache()

    if config.redis_url:
        logger.info("Creating Redis cache")
        return RedisCache(config.redis_url, ttl=config.cache_ttl_seconds)

    logger.info("Creating in-memory cache")
    return InMemoryCache(max_size=config.cache_max_size, ttl=config.cache_ttl_seconds)


__all__ = [
    "LOCAL_FILES_PATH",
    "BlobStore",
    "DynamoDBRepository",
    "InMemoryCache",
    "LinkCache",
    "LinkRepository",
    "LocalBlobStore",
    "NoOpCache",
    "RedisCache",
    "S3BlobStore",
    "SQLiteRepository",
    "cache_key",
    "create_blob_store",
    "create_cache",
    "create_repository",
    "local_files_path",
    "object_key",
]
