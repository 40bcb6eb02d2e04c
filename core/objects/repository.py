"""MongoDB-backed record store for object records."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from core.exceptions import NotFoundError, PersistenceError
from core.objects.model import NewObject, StoredObject
from core.settings import DatabaseSettings

_NEWEST_FIRST = [("createdAt", DESCENDING), ("_id", DESCENDING)]


def _utcnow() -> datetime:
    # BSON dates carry milliseconds; truncate so the returned record equals the stored one.
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def _parse_id(object_id: str) -> ObjectId | None:
    # ObjectId(None) would mint a fresh id; only accept 24-char hex strings.
    if not isinstance(object_id, str) or len(object_id) != 24:
        return None
    try:
        return ObjectId(object_id)
    except InvalidId:
        return None


def _not_found(object_id: str) -> NotFoundError:
    return NotFoundError(f"Object with ID {object_id} not found", {"id": str(object_id)})


def _from_document(document: dict[str, Any]) -> StoredObject:
    created_at = document["createdAt"]
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return StoredObject(
        id=str(document["_id"]),
        title=document["title"],
        description=document.get("description"),
        image_url=document["imageUrl"],
        storage_key=document.get("storageKey", ""),
        created_at=created_at,
    )


class MongoObjectRepository:
    def __init__(self, collection: Collection) -> None:
        self.collection = collection

    @classmethod
    def from_settings(cls, settings: DatabaseSettings) -> "MongoObjectRepository":
        client: MongoClient = MongoClient(settings.url, tz_aware=True)
        return cls(client[settings.database_name][settings.collection])

    def ensure_indexes(self) -> None:
        try:
            self.collection.create_index([("createdAt", DESCENDING)])
        except PyMongoError as exc:
            raise PersistenceError("Could not create indexes") from exc

    def insert(self, record: NewObject) -> StoredObject:
        record.validate()
        document: dict[str, Any] = {
            "title": record.title,
            "imageUrl": record.image_url,
            "storageKey": record.storage_key,
            "createdAt": _utcnow(),
        }
        if record.description is not None:
            document["description"] = record.description
        try:
            result = self.collection.insert_one(document)
        except PyMongoError as exc:
            raise PersistenceError("Could not insert object") from exc
        document["_id"] = result.inserted_id
        return _from_document(document)

    def list_all(self) -> list[StoredObject]:
        try:
            return [_from_document(doc) for doc in self.collection.find().sort(_NEWEST_FIRST)]
        except PyMongoError as exc:
            raise PersistenceError("Could not list objects") from exc

    def get_by_id(self, object_id: str) -> StoredObject:
        oid = _parse_id(object_id)
        if oid is None:
            raise _not_found(object_id)
        try:
            document = self.collection.find_one({"_id": oid})
        except PyMongoError as exc:
            raise PersistenceError("Could not load object", {"id": object_id}) from exc
        if document is None:
            raise _not_found(object_id)
        return _from_document(document)

    def delete_by_id(self, object_id: str) -> StoredObject:
        oid = _parse_id(object_id)
        if oid is None:
            raise _not_found(object_id)
        try:
            document = self.collection.find_one_and_delete({"_id": oid})
        except PyMongoError as exc:
            raise PersistenceError("Could not delete object", {"id": object_id}) from exc
        if document is None:
            raise _not_found(object_id)
        return _from_document(document)

    def close(self) -> None:
        self.collection.database.client.close()


__all__ = ["MongoObjectRepository"]
