"""Object service: validation plus the failure policy between record and blob store."""

from __future__ import annotations

from typing import Any, Protocol

from core.exceptions import ConfigurationError, PersistenceError, StorageError, UpstreamFailure, ValidationError
from core.logging_config import get_logger
from core.objects.model import NewObject, StoredObject
from core.storage import BlobStore


class ObjectRecords(Protocol):
    def insert(self, record: NewObject) -> StoredObject:
        ...

    def list_all(self) -> list[StoredObject]:
        ...

    def get_by_id(self, object_id: str) -> StoredObject:
        ...

    def delete_by_id(self, object_id: str) -> StoredObject:
        ...


class ObjectService:
    def __init__(self, records: ObjectRecords, blobs: BlobStore, log: Any = None) -> None:
        self.records = records
        self.blobs = blobs
        self.log = log if log is not None else get_logger("ObjectService")

    def create_object(
        self,
        title: str,
        description: str | None,
        image_bytes: bytes,
        image_content_type: str,
        image_filename: str,
    ) -> StoredObject:
        """Upload the image, then insert the record that points at it.

        Raises:
            ValidationError: Empty image or a content type outside ``image/*``.
            UpstreamFailure: The blob store or the record store failed.
        """
        if not image_bytes:
            self.log.warning("Create attempt without image data")
            raise ValidationError("image required", {"field": "file"})
        if not (image_content_type or "").startswith("image/"):
            self.log.warning("Invalid file type received: {content_type}", content_type=image_content_type)
            raise ValidationError("invalid content type", {"content_type": str(image_content_type)})

        self.log.info(
            "Uploading file: {filename} ({size} bytes)",
            filename=image_filename,
            size=len(image_bytes),
        )
        try:
            upload = self.blobs.upload(image_bytes, image_content_type, image_filename)
        except (StorageError, ConfigurationError) as exc:
            self.log.opt(exception=exc).error("Image upload failed")
            raise UpstreamFailure("Failed to create object - please try again later") from exc
        self.log.info("Upload successful: url={url} key={key}", url=upload.url, key=upload.key)

        # An upload followed by a failed insert leaves the blob orphaned; no reverse delete.
        try:
            created = self.records.insert(
                NewObject(
                    title=title,
                    description=description,
                    image_url=upload.url,
                    storage_key=upload.key,
                )
            )
        except PersistenceError as exc:
            self.log.opt(exception=exc).error("Record insert failed, blob {key} orphaned", key=upload.key)
            raise UpstreamFailure("Failed to create object - please try again later") from exc

        self.log.debug("Object created with ID: {id}", id=created.id)
        return created

    def list_objects(self) -> list[StoredObject]:
        try:
            return self.records.list_all()
        except PersistenceError as exc:
            self.log.opt(exception=exc).error("Listing objects failed")
            raise UpstreamFailure("Failed to list objects") from exc

    def get_object(self, object_id: str) -> StoredObject:
        try:
            return self.records.get_by_id(object_id)
        except PersistenceError as exc:
            self.log.opt(exception=exc).error("Loading object {id} failed", id=object_id)
            raise UpstreamFailure("Failed to load object") from exc

    def delete_object(self, object_id: str) -> dict[str, bool]:
        """Delete the record, then make a best-effort attempt at the blob.

        The record deletion is authoritative: once it succeeds the call reports
        success even if the blob cannot be removed.
        """
        try:
            deleted = self.records.delete_by_id(object_id)
        except PersistenceError as exc:
            self.log.opt(exception=exc).error("Deleting object {id} failed", id=object_id)
            raise UpstreamFailure("Failed to delete object") from exc

        if deleted.storage_key:
            try:
                self.blobs.delete(deleted.storage_key)
                self.log.info("Blob deleted: {key}", key=deleted.storage_key)
            except Exception as exc:
                self.log.warning(
                    "Failed to delete blob {key}: {error}",
                    key=deleted.storage_key,
                    error=repr(exc),
                )

        return {"deleted": True}


__all__ = ["ObjectService", "ObjectRecords"]
