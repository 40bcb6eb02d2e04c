"""Blob store factory."""

from __future__ import annotations

from core.exceptions import ConfigurationError
from core.settings import StorageSettings
from core.storage import BlobStore
from core.storage.local import LocalBlobStore
from core.storage.s3 import S3BlobStore


def build_blob_store(settings: StorageSettings) -> BlobStore:
    """Return the blob store selected by ``settings.backend``.

    An S3 store without a bucket is still returned: uploads then fail with
    ``ConfigurationError`` and deletes are no-ops.
    """
    if settings.backend == "s3":
        return S3BlobStore(
            bucket=settings.bucket,
            region=settings.region,
            endpoint_url=settings.endpoint_url,
        )
    if settings.backend == "local":
        return LocalBlobStore(settings.local_root, public_base_url=settings.public_base_url)
    raise ConfigurationError(
        f"Unsupported storage backend: {settings.backend}",
        {"setting": "STORAGE_BACKEND"},
    )


__all__ = ["build_blob_store"]
