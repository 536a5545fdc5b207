"""
Memos Backend - Object Store
=============================

What:  Byte storage for uploaded resources, behind one small interface.
How:   `ObjectStore` is the abstract contract; `LocalObjectStore` writes
       files under a root directory with aiofiles, `S3ObjectStore` talks to
       any S3-compatible endpoint (AWS S3, Cloudflare R2, MinIO) via boto3.
Who:   ResourceService (upload/delete) and the blob download route.
When:  Built once by `create_app()` from Settings and kept on `app.state`.

Keys:
    Every object is addressed by `{resource_uid}/{filename}`. The store
    never invents keys; callers pass them in.

Contract:
    put(key, data, content_type)  → store bytes, overwrite if present
    get(key)                      → bytes, NotFoundError if absent
    delete(key)                   → remove, no error if already gone
    url_for(key)                  → URL a client can GET directly, or None
                                    when the bytes must be streamed by us
    uri_for(key)                  → stable URI recorded on the resource row

Failure Policy:
    Backend failures become StorageError (500). There is exactly one
    attempt per call; retries are the client's decision.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import aiofiles
import aiofiles.os
import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from memos.config import Settings
from memos.exceptions import NotFoundError, StorageError, ValidationError

logger = logging.getLogger(__name__)


class ObjectStore(ABC):
    """Abstract byte store addressed by string keys."""

    # What: Short backend name reported by /health
    backend: str = "abstract"

    @abstractmethod
    async def put(self, key: str, data: bytes, content_type: str) -> None:
        ...

    @abstractmethod
    async def get(self, key: str) -> bytes:
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        ...

    @abstractmethod
    def url_for(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def uri_for(self, key: str) -> str:
        ...


# ══════════════════════════════════════════════════════════════════════════
# Local Filesystem Backend
# ══════════════════════════════════════════════════════════════════════════


class LocalObjectStore(ObjectStore):
    """
    Stores objects as files under `root`.

    Directory Structure:
        storage/
        └── 6f1c...-uid/
            └── photo.png

    Keys are resolved against the root and rejected if the resolved path
    escapes it (`../../etc/passwd`).
    """

    backend = "local"

    def __init__(self, root: str):
        self.root = Path(root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)
        logger.info("LocalObjectStore initialized with root=%s", self.root)

    def path_for(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if path == self.root or self.root not in path.parents:
            raise ValidationError(
                message="Invalid object key",
                field="key",
                context={"key": key},
            )
        return path

    async def put(self, key: str, data: bytes, content_type: str) -> None:
        path = self.path_for(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                await f.write(data)
        except OSError as e:
            logger.error("Failed to store object %s: %s", key, str(e))
            raise StorageError(
                message="Failed to save uploaded file. Please try again.",
                context={"key": key, "os_error": str(e)},
            )
        logger.info("Object stored: %s (%d bytes, %s)", key, len(data), content_type)

    async def get(self, key: str) -> bytes:
        path = self.path_for(key)
        try:
            async with aiofiles.open(path, "rb") as f:
                return await f.read()
        except FileNotFoundError:
            raise NotFoundError(resource="object", resource_id=key)
        except OSError as e:
            logger.error("Failed to read object %s: %s", key, str(e))
            raise StorageError(context={"key": key, "os_error": str(e)})

    async def delete(self, key: str) -> None:
        path = self.path_for(key)
        try:
            if await aiofiles.os.path.exists(path):
                await aiofiles.os.remove(path)
                logger.info("Object deleted: %s", key)
            else:
                logger.debug("Delete: object already gone: %s", key)
            # Drop the per-resource directory once it is empty
            parent = path.parent
            if parent != self.root and not any(parent.iterdir()):
                await aiofiles.os.rmdir(parent)
        except FileNotFoundError:
            logger.debug("Delete: object already gone: %s", key)
        except OSError as e:
            logger.error("Failed to delete object %s: %s", key, str(e))
            raise StorageError(context={"key": key, "os_error": str(e)})

    def url_for(self, key: str) -> Optional[str]:
        return None

    def uri_for(self, key: str) -> str:
        return f"local://{key}"


# ══════════════════════════════════════════════════════════════════════════
# S3-Compatible Backend
# ══════════════════════════════════════════════════════════════════════════


class S3ObjectStore(ObjectStore):
    """
    S3-compatible object storage (AWS S3, Cloudflare R2, MinIO).

    boto3 is synchronous; every network call runs in a worker thread so the
    event loop keeps serving other requests. Downloads are not proxied:
    `url_for()` hands out a presigned GET URL and the blob route redirects.
    """

    backend = "s3"

    def __init__(
        self,
        bucket: str,
        endpoint_url: Optional[str],
        region: str,
        access_key_id: Optional[str],
        secret_access_key: Optional[str],
        presign_ttl_seconds: int = 3600,
        client=None,
    ):
        self.bucket = bucket
        self.presign_ttl_seconds = presign_ttl_seconds
        if client is None:
            client = boto3.client(
                "s3",
                endpoint_url=endpoint_url,
                region_name=region,
                aws_access_key_id=access_key_id,
                aws_secret_access_key=secret_access_key,
                config=Config(signature_version="s3v4"),
            )
        self._client = client
        logger.info("S3ObjectStore initialized for bucket=%s endpoint=%s", bucket, endpoint_url)

    async def put(self, key: str, data: bytes, content_type: str) -> None:
        try:
            await asyncio.to_thread(
                self._client.put_object,
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("S3 put failed for %s: %s", key, str(e))
            raise StorageError(
                message="Failed to save uploaded file. Please try again.",
                context={"key": key, "error": type(e).__name__},
            )
        logger.info("Object stored in s3://%s/%s (%d bytes)", self.bucket, key, len(data))

    async def get(self, key: str) -> bytes:
        try:
            response = await asyncio.to_thread(
                self._client.get_object, Bucket=self.bucket, Key=key
            )
            return await asyncio.to_thread(response["Body"].read)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            if code in ("NoSuchKey", "404", "NotFound"):
                raise NotFoundError(resource="object", resource_id=key)
            logger.error("S3 get failed for %s: %s", key, str(e))
            raise StorageError(context={"key": key, "error": code})
        except BotoCoreError as e:
            logger.error("S3 get failed for %s: %s", key, str(e))
            raise StorageError(context={"key": key, "error": type(e).__name__})

    async def delete(self, key: str) -> None:
        try:
            await asyncio.to_thread(
                self._client.delete_object, Bucket=self.bucket, Key=key
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("S3 delete failed for %s: %s", key, str(e))
            raise StorageError(context={"key": key, "error": type(e).__name__})
        logger.info("Object deleted from s3://%s/%s", self.bucket, key)

    def url_for(self, key: str) -> Optional[str]:
        return self._client.generate_presigned_url(
            ClientMethod="get_object",
            Params={"Bucket": self.bucket, "Key": key},
            ExpiresIn=self.presign_ttl_seconds,
        )

    def uri_for(self, key: str) -> str:
        return f"s3://{self.bucket}/{key}"


def build_object_store(settings: Settings) -> ObjectStore:
    """Create the object store selected by `settings.storage_backend`."""
    if settings.storage_backend == "s3":
        return S3ObjectStore(
            bucket=settings.s3_bucket or "",
            endpoint_url=settings.s3_endpoint_url,
            region=settings.s3_region,
            access_key_id=settings.s3_access_key_id,
            secret_access_key=settings.s3_secret_access_key,
            presign_ttl_seconds=settings.s3_presign_ttl_seconds,
        )
    return LocalObjectStore(settings.storage_root)
