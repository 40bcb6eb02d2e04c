from __future__ import annotations

from typing import Any, Optional
from urllib.parse import quote

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from core.exceptions import ConfigurationError, StorageUnavailable
from core.storage import UploadResult, build_storage_key

_MISSING_KEY_CODES = {"NoSuchKey", "404", "NotFound"}


class S3BlobStore:
    def __init__(
        self,
        bucket: Optional[str],
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        client: Any = None,
    ) -> None:
        self.bucket = bucket
        self.region = region
        self.endpoint_url = endpoint_url.rstrip("/") if endpoint_url else None
        if client is None:
            session = boto3.session.Session(region_name=region) if region else boto3.session.Session()
            client = session.client("s3", endpoint_url=self.endpoint_url)
        self.client = client

    def public_url(self, key: str) -> str:
        path = quote(key)
        if self.endpoint_url:
            return f"{self.endpoint_url}/{self.bucket}/{path}"
        if self.region:
            return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{path}"
        return f"https://{self.bucket}.s3.amazonaws.com/{path}"

    def upload(self, data: bytes, content_type: str, filename: str) -> UploadResult:
        if not self.bucket:
            raise ConfigurationError("S3_BUCKET not configured", {"setting": "S3_BUCKET"})
        key = build_storage_key(filename)
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
                ACL="public-read",
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageUnavailable("Blob upload failed", {"key": key}) from exc
        return UploadResult(url=self.public_url(key), key=key)

    def delete(self, key: str) -> None:
        if not self.bucket:
            return
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            code = str(exc.response.get("Error", {}).get("Code", ""))
            if code in _MISSING_KEY_CODES:
                logger.debug("Blob {key} already absent", key=key)
                return
            raise StorageUnavailable("Blob delete failed", {"key": key}) from exc
        except BotoCoreError as exc:
            raise StorageUnavailable("Blob delete failed", {"key": key}) from exc


__all__ = ["S3BlobStore"]
