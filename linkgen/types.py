"""Type definitions for the link generator."""

from typing_extensions import TypedDict


class HealthStatus(TypedDict):
    """Health status of system components."""

    storage: bool
    blob_store: bool
    cache: bool


class UploadedFile(TypedDict):
    """File received with a create request."""

    filename: str
    content: bytes
    content_type: str | None
