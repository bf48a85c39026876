"""DynamoDB repository implementation."""

import asyncio
from typing import Any
from urllib.parse import parse_qs, urlparse

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from ..exceptions import NotFoundError, SlugTakenError, StorageError
from ..models import LinkRecord


class DynamoDBRepository:
    """Link repository on a DynamoDB table whose partition key is ``slug``."""

    def __init__(self, database_url: str):
        """Initialize DynamoDB repository.

        Args:
            database_url: DynamoDB URL in format: dynamodb://table_name?region=us-east-1
        """
        parsed = urlparse(database_url)
        self.table_name = parsed.netloc or parsed.path.lstrip("/")
        self.region = parse_qs(parsed.query).get("region", [None])[0]
        self.table = None

    async def startup(self) -> None:
        """Initialize DynamoDB table reference."""
        resource = boto3.resource("dynamodb", region_name=self.region)
        self.table = resource.Table(self.table_name)
        logger.info(f"Connected to DynamoDB table: {self.table_name} in {self.region}")

    async def shutdown(self) -> None:
        """No cleanup needed for DynamoDB."""
        pass

    async def put(self, slug: str, record: LinkRecord) -> None:
        """Write a record under slug, overwriting any existing value.

        Raises:
            StorageError: If DynamoDB rejects the write.
        """
        item = {"slug": slug, **record.to_item()}
        try:
            await self._run(lambda: self.table.put_item(Item=item))
        except (BotoCoreError, ClientError) as e:
            logger.error(f"DynamoDB put failed for slug {slug}: {e}")
            raise StorageError(f"Failed to store link: {e}") from e

    async def create(self, slug: str, record: LinkRecord) -> None:
        """Write a record only if no item exists under slug.

        Raises:
            SlugTakenError: If the slug is already stored.
            StorageError: If DynamoDB rejects the write.
        """
        item = {"slug": slug, **record.to_item()}
        try:
            await self._run(
                lambda: self.table.put_item(
                    Item=item,
                    ConditionExpression="attribute_not_exists(slug)",
                )
            )
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException":
                raise SlugTakenError(slug) from e
            logger.error(f"DynamoDB conditional put failed for slug {slug}: {e}")
            raise StorageError(f"Failed to store link: {e}") from e
        except BotoCoreError as e:
            logger.error(f"DynamoDB conditional put failed for slug {slug}: {e}")
            raise StorageError(f"Failed to store link: {e}") from e

    async def get(self, slug: str) -> LinkRecord:
        """Get the record stored under slug.

        Raises:
            NotFoundError: If no item exists under slug.
            StorageError: If DynamoDB rejects the read.
        """
        try:
            response = await self._run(lambda: self.table.get_item(Key={"slug": slug}))
        except (BotoCoreError, ClientError) as e:
            logger.error(f"DynamoDB get failed for slug {slug}: {e}")
            raise StorageError(f"Failed to read link: {e}") from e

        item = response.get("Item")
        if item is None:
            raise NotFoundError(slug)
        return LinkRecord.model_validate(item)

    async def health_check(self) -> bool:
        """Check if DynamoDB is accessible.

        Returns:
            True if DynamoDB is healthy, False otherwise.
        """
        try:
            await self._run(lambda: self.table.table_status)
            return True
        except (AttributeError, BotoCoreError, ClientError) as e:
            logger.warning(f"DynamoDB health check failed: {e}")
            return False

    async def _run(self, func) -> Any:
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, func)
