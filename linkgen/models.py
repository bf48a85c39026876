"""Data models using Pydantic."""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_core import PydanticCustomError


class LinkRecord(BaseModel):
    """Stored payload of a personalized link."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    note: str = ""
    file_url: str | None = Field(default=None, alias="fileUrl")

    def to_item(self) -> dict[str, str | None]:
        """Serialize with the stored field names (``fileUrl``)."""
        return self.model_dump(by_alias=True)


class LinkRequest(BaseModel):
    """Form submission for a new link."""

    name: str = Field(..., min_length=1)
    slug: str = Field(..., min_length=1)
    note: str = ""

    @field_validator("name", "slug", mode="before")
    @classmethod
    def validate_present(cls, value: str | None) -> str:
        if value is None or not str(value).strip():
            raise PydanticCustomError("missing_value", "Value cannot be empty", {"input": value})
        return str(value).strip()

    @field_validator("note", mode="before")
    @classmethod
    def default_note(cls, value: str | None) -> str:
        return value or ""
