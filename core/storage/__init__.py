"""Blob storage abstraction (S3 or local filesystem fallback)."""

from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Protocol
from uuid import uuid4


@dataclass(frozen=True)
class UploadResult:
    url: str
    key: str


class BlobStore(Protocol):
    def upload(self, data: bytes, content_type: str, filename: str) -> UploadResult:
        ...

    def delete(self, key: str) -> None:
        ...


def build_storage_key(filename: str) -> str:
    """Return ``<epoch-millis>-<8 hex>-<basename>`` for an uploaded file."""
    # Browsers on Windows may send the full client path.
    name = PurePosixPath((filename or "").replace("\\", "/")).name.strip() or "upload"
    return f"{int(time.time() * 1000)}-{uuid4().hex[:8]}-{name}"


__all__ = ["BlobStore", "UploadResult", "build_storage_key"]
