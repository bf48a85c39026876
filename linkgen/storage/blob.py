"""Blob storage implementations for uploaded files."""

import asyncio
import mimetypes
import uuid
from collections.abc import Iterable
from pathlib import Path, PurePath

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from ..exceptions import StorageError, UnsupportedFileTypeError
from ..types import UploadedFile


def object_key(folder: str, filename: str, allowed_extensions: Iterable[str]) -> str:
    """Build a unique key under folder, keeping the upload's extension.

    Raises:
        UnsupportedFileTypeError: If the extension is not in allowed_extensions.
    """
    extension = PurePath(filename).suffix.lower().lstrip(".")
    if extension not in set(allowed_extensions):
        raise UnsupportedFileTypeError(f"File type not allowed: {filename!r}")
    return f"{folder.strip('/')}/{uuid.uuid4().hex}.{extension}"


class S3BlobStore:
    """S3 blob store returning public URLs for uploaded objects."""

    def __init__(
        self,
        bucket: str,
        region: str | None = None,
        folder: str = "personalized_files",
        allowed_extensions: Iterable[str] = ("jpg", "jpeg", "png", "pdf", "docx"),
        public_base_url: str | None = None,
    ):
        """Initialize S3 blob store.

        Args:
            bucket: S3 bucket name.
            region: AWS region of the bucket.
            folder: Key prefix every upload is stored under.
            allowed_extensions: Accepted file extensions, without dots.
            public_base_url: CDN base URL; defaults to the bucket endpoint.
        """
        self.bucket = bucket
        self.region = region
        self.folder = folder
        self.allowed_extensions = tuple(allowed_extensions)
        self.public_base_url = public_base_url or f"https://{bucket}.s3.{region}.amazonaws.com"
        self.client = None

    async def startup(self) -> None:
        """Create the S3 client."""
        self.client = boto3.client("s3", region_name=self.region)
        logger.info(f"S3 blob store using bucket: {self.bucket}")

    async def shutdown(self) -> None:
        """No cleanup needed for S3."""
        pass

    async def store(self, file: UploadedFile) -> str:
        """Upload a file and return its public URL.

        Raises:
            UnsupportedFileTypeError: If the file extension is not accepted.
            StorageError: If S3 rejects the upload.
        """
        key = object_key(self.folder, file["filename"], self.allowed_extensions)
        content_type = file["content_type"] or mimetypes.guess_type(file["filename"])[0]
        extra = {"ContentType": content_type} if content_type else {}

        try:
            loop = asyncio.get_event_loop()
            await loop.run_in_executor(
                None,
                lambda: self.client.put_object(
                    Bucket=self.bucket, Key=key, Body=file["content"], **extra
                ),
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"S3 upload failed for {file['filename']!r}: {e}")
            raise StorageError(f"Failed to upload file: {e}") from e

        logger.debug(f"Uploaded {file['filename']!r} to s3://{self.bucket}/{key}")
        return f"{self.public_base_url}/{key}"

    async def health_check(self) -> bool:
        """Check if the bucket is reachable."""
        try:
            loop = asyncio.get_event_loop()
            await loop.run_in_executor(None, lambda: self.client.head_bucket(Bucket=self.bucket))
            return True
        except (AttributeError, BotoCoreError, ClientError) as e:
            logger.warning(f"S3 health check failed: {e}")
            return False


class LocalBlobStore:
    """Filesystem blob store for development, served under ``public_base_url``."""

    def __init__(
        self,
        directory: str,
        public_base_url: str = "/files",
        folder: str = "personalized_files",
        allowed_extensions: Iterable[str] = ("jpg", "jpeg", "png", "pdf", "docx"),
    ):
        self.directory = Path(directory)
        self.public_base_url = public_base_url.rstrip("/")
        self.folder = folder
        self.allowed_extensions = tuple(allowed_extensions)

    async def startup(self) -> None:
        """Create the storage directory."""
        self.directory.mkdir(parents=True, exist_ok=True)
        logger.info(f"Local blob store using directory: {self.directory}")

    async def shutdown(self) -> None:
        """No cleanup needed for local files."""
        pass

    async def store(self, file: UploadedFile) -> str:
        """Write a file below the storage directory and return its URL."""
        key = object_key(self.folder, file["filename"], self.allowed_extensions)
        path = self.directory / key
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(file["content"])
        except OSError as e:
            logger.error(f"Local upload failed for {file['filename']!r}: {e}")
            raise StorageError(f"Failed to store file: {e}") from e
        return f"{self.public_base_url}/{key}"

    async def health_check(self) -> bool:
        """Check that the storage directory exists."""
        return self.directory.is_dir()
