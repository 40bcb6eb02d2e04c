from __future__ import annotations

from pathlib import Path
from urllib.parse import quote

from core.exceptions import StorageUnavailable
from core.storage import UploadResult, build_storage_key


class LocalBlobStore:
    """Filesystem blob store; files are served by the API under ``/files``."""

    def __init__(self, root: Path, public_base_url: str = "http://localhost:3000") -> None:
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)
        self.public_base_url = public_base_url.rstrip("/")

    def upload(self, data: bytes, content_type: str, filename: str) -> UploadResult:
        key = build_storage_key(filename)
        path = self.root / key
        try:
            path.write_bytes(data)
        except OSError as exc:
            raise StorageUnavailable("Blob upload failed", {"key": key}) from exc
        return UploadResult(url=f"{self.public_base_url}/files/{quote(key)}", key=key)

    def delete(self, key: str) -> None:
        try:
            (self.root / key).unlink(missing_ok=True)
        except OSError as exc:
            raise StorageUnavailable("Blob delete failed", {"key": key}) from exc


__all__ = ["LocalBlobStore"]
