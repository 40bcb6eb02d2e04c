from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from core.exceptions import ValidationError

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 2000


@dataclass(frozen=True)
class NewObject:
    """Fields of an object record before the store assigns ``id``/``created_at``."""

    title: str
    image_url: str
    storage_key: str
    description: str | None = None

    def validate(self) -> None:
        if not self.title or not self.title.strip():
            raise ValidationError("title required", {"field": "title"})
        if len(self.title) > TITLE_MAX_LENGTH:
            raise ValidationError(
                f"title must be at most {TITLE_MAX_LENGTH} characters", {"field": "title"}
            )
        if self.description is not None and len(self.description) > DESCRIPTION_MAX_LENGTH:
            raise ValidationError(
                f"description must be at most {DESCRIPTION_MAX_LENGTH} characters",
                {"field": "description"},
            )
        if not self.image_url:
            raise ValidationError("imageUrl required", {"field": "imageUrl"})
        if not self.storage_key:
            raise ValidationError("storageKey required", {"field": "storageKey"})


@dataclass(frozen=True)
class StoredObject:
    id: str
    title: str
    image_url: str
    storage_key: str
    created_at: datetime
    description: str | None = None


__all__ = ["NewObject", "StoredObject", "TITLE_MAX_LENGTH", "DESCRIPTION_MAX_LENGTH"]
