"""Blob-store clients used for existence probes and uploads."""

from __future__ import annotations

import logging
from typing import Any, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from bottlesync.errors import BlobStoreError

logger = logging.getLogger(__name__)

PUBLIC_READ = "public-read"
NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


class BlobStore(Protocol):
    def exists(self, key: str) -> bool: ...

    def put(self, key: str, body: bytes, acl: str = PUBLIC_READ) -> None: ...


def _error_code(exc: ClientError) -> str:
    code = str(exc.response.get("Error", {}).get("Code", ""))
    if code:
        return code
    status = exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    return str(status) if status is not None else ""


class S3BlobStore:
    def __init__(
        self,
        bucket: str,
        region: str,
        access_key: str,
        secret_key: str,
        client: Any | None = None,
    ) -> None:
        self.bucket = bucket
        self.region = region
        self._client = client or boto3.client(
            "s3",
            region_name=region,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
        )

    def exists(self, key: str) -> bool:
        try:
            self._client.head_object(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            if _error_code(exc) in NOT_FOUND_CODES:
                return False
            raise BlobStoreError(f"HEAD s3://{self.bucket}/{key} failed: {exc}") from exc
        except BotoCoreError as exc:
            raise BlobStoreError(f"HEAD s3://{self.bucket}/{key} failed: {exc}") from exc
        return True

    def put(self, key: str, body: bytes, acl: str = PUBLIC_READ) -> None:
        try:
            self._client.put_object(Bucket=self.bucket, Key=key, Body=body, ACL=acl)
        except (ClientError, BotoCoreError) as exc:
            raise BlobStoreError(f"PUT s3://{self.bucket}/{key} failed: {exc}") from exc
        logger.debug("Stored %d bytes at s3://%s/%s", len(body), self.bucket, key)


class MemoryBlobStore:
    """In-process store for dry runs; keeps uploads in a dict."""

    def __init__(self, existing: set[str] | None = None) -> None:
        self.objects: dict[str, bytes] = {key: b"" for key in existing or ()}
        self.acls: dict[str, str] = {}

    def exists(self, key: str) -> bool:
        return key in self.objects

    def put(self, key: str, body: bytes, acl: str = PUBLIC_READ) -> None:
        if key in self.objects:
            raise BlobStoreError(f"Refusing to overwrite existing key {key}")
        self.objects[key] = body
        self.acls[key] = acl
