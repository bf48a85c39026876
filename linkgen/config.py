"""Configuration using pydantic-settings."""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with validation and constants."""

    model_config = SettingsConfigDict(env_prefix="LINKGEN_", env_file=".env", extra="ignore")

    host: str = "0.0.0.0"  # nosec B104 - Required for container deployment
    port: int = 3000
    log_level: str = "INFO"
    log_file: str | None = None

    # Overrides the scheme://host taken from the request when building links
    public_base_url: str | None = None

    database_url: str = "sqlite+aiosqlite:///./data/links.db"
    aws_region: str = "us-east-1"
    dynamodb_table: str = "links"

    # Blob storage settings
    blob_bucket: str | None = None
    blob_public_base_url: str | None = None
    blob_folder: str = "personalized_files"
    blob_allowed_extensions: list[str] = ["jpg", "jpeg", "png", "pdf", "docx"]
    blob_local_dir: str = "./data/files"

    # Cache settings
    redis_url: str | None = None
    cache_enabled: bool = True
    cache_ttl_seconds: int = 3600
    cache_max_size: int = 1000

    @field_validator("blob_allowed_extensions", mode="after")
    @classmethod
    def normalize_extensions(cls, value: list[str]) -> list[str]:
        """Lowercase extensions and drop leading dots."""
        return [ext.strip().lower().lstrip(".") for ext in value if ext.strip()]

    @field_validator("public_base_url", "blob_public_base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, value: str | None) -> str | None:
        return value.rstrip("/") if value else value


settings = Settings()
