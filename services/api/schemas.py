from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from core.objects.model import DESCRIPTION_MAX_LENGTH, TITLE_MAX_LENGTH, StoredObject


class CreateObjectForm(BaseModel):
    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str | None = Field(None, max_length=DESCRIPTION_MAX_LENGTH)

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("description", mode="before")
    @classmethod
    def _empty_description(cls, value: object) -> object:
        # HTML forms submit untouched optional fields as empty strings.
        if isinstance(value, str) and not value.strip():
            return None
        return value


class StoredObjectOut(BaseModel):
    id: str
    title: str
    description: str | None = None
    imageUrl: str
    storageKey: str
    createdAt: datetime

    @classmethod
    def from_record(cls, record: StoredObject) -> "StoredObjectOut":
        return cls(
            id=record.id,
            title=record.title,
            description=record.description,
            imageUrl=record.image_url,
            storageKey=record.storage_key,
            createdAt=record.created_at,
        )


class DeleteObjectResponse(BaseModel):
    deleted: bool = True


class ErrorResponse(BaseModel):
    error: str
    message: str
    details: dict[str, str] = Field(default_factory=dict)
