"""Domain-specific exceptions for the link generator."""


class LinkGenError(Exception):
    """Base exception for all link generator errors."""


class SlugTakenError(LinkGenError):
    """The requested slug is already in use."""

    def __init__(self, slug: str) -> None:
        super().__init__(f"Slug already exists: {slug}")
        self.slug = slug


class NotFoundError(LinkGenError):
    """No link is stored under the requested slug."""

    def __init__(self, slug: str) -> None:
        super().__init__(f"Link not found: {slug}")
        self.slug = slug


class StorageError(LinkGenError):
    """Error related to durable store or blob store operations."""


class UnsupportedFileTypeError(StorageError):
    """Uploaded file has an extension the blob store does not accept."""


class ValidationError(LinkGenError):
    """Error related to input validation (not Pydantic)."""


class ConfigurationError(LinkGenError):
    """Error related to configuration issues."""
