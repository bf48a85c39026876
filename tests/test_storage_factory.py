"""Tests for storage factories."""

import pytest

from linkgen.config import Settings
from linkgen.exceptions import ConfigurationError
from linkgen.storage import (
    DynamoDBRepository,
    InMemoryCache,
    LocalBlobStore,
    NoOpCache,
    RedisCache,
    S3BlobStore,
    SQLiteRepository,
    create_blob_store,
    create_cache,
    create_repository,
    local_files_path,
)


def test_create_repository_dynamodb() -> None:
    repo = create_repository("dynamodb://links?region=us-west-2")

    assert isinstance(repo, DynamoDBRepository)
    assert repo.table_name == "links"
    assert repo.region == "us-west-2"


def test_create_repository_dynamodb_from_settings() -> None:
    """Table and region come from settings when the URL omits them."""
    config = Settings(
        database_url="dynamodb://", dynamodb_table="my-links", aws_region="eu-west-1"
    )

    repo = create_repository(config=config)

    assert isinstance(repo, DynamoDBRepository)
    assert repo.table_name == "my-links"
    assert repo.region == "eu-west-1"


def test_create_repository_dynamodb_url_table_uses_default_region() -> None:
    repo = create_repository(
        "dynamodb://other-table", config=Settings(aws_region="ap-south-1")
    )

    assert repo.table_name == "other-table"
    assert repo.region == "ap-south-1"


def test_create_repository_dynamodb_without_table() -> None:
    with pytest.raises(ConfigurationError):
        create_repository(config=Settings(database_url="dynamodb://", dynamodb_table=""))


def test_create_repository_sqlite() -> None:
    assert isinstance(create_repository("sqlite+aiosqlite:///./test.db"), SQLiteRepository)


def test_create_blob_store_s3() -> None:
    store = create_blob_store(
        Settings(blob_bucket="bucket", aws_region="eu-central-1", blob_folder="f")
    )

    assert isinstance(store, S3BlobStore)
    assert store.region == "eu-central-1"
    assert store.folder == "f"


def test_create_blob_store_local(tmp_path) -> None:
    store = create_blob_store(Settings(blob_bucket=None, blob_local_dir=str(tmp_path)))

    assert isinstance(store, LocalBlobStore)
    assert store.public_base_url == "/files"


def test_create_cache_variants() -> None:
    assert isinstance(create_cache(Settings(cache_enabled=False)), NoOpCache)
    assert isinstance(create_cache(Settings(redis_url="redis://localhost:6379")), RedisCache)

    cache = create_cache(Settings(redis_url=None, cache_max_size=5, cache_ttl_seconds=7))
    assert isinstance(cache, InMemoryCache)
    assert cache.max_size == 5
    assert cache.ttl == 7


def test_local_files_path() -> None:
    assert local_files_path(Settings(blob_public_base_url=None)) == "/files"
    assert local_files_path(Settings(blob_public_base_url="/media/")) == "/media"
    assert local_files_path(Settings(blob_public_base_url="https://files.example.com/up")) == "/up"
    assert local_files_path(Settings(blob_public_base_url="https://files.example.com")) == "/files"
