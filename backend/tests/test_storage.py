"""
Memos Backend - Object Store Tests
===================================

What:  Tests for LocalObjectStore (real temp directory) and S3ObjectStore
       (boto3 client replaced by a MagicMock; no network).
"""

from pathlib import Path
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from memos.config import Settings
from memos.exceptions import NotFoundError, StorageError, ValidationError
from memos.services.storage import (
    LocalObjectStore,
    S3ObjectStore,
    build_object_store,
)


class TestLocalObjectStore:

    def setup_method(self):
        self.key = "3f2a-uid/photo.png"

    @pytest.mark.asyncio
    async def test_put_then_get(self, temp_storage):
        store = LocalObjectStore(temp_storage)
        await store.put(self.key, b"\x89PNG data", "image/png")

        assert (Path(temp_storage) / self.key).read_bytes() == b"\x89PNG data"
        assert await store.get(self.key) == b"\x89PNG data"

    @pytest.mark.asyncio
    async def test_put_overwrites(self, temp_storage):
        store = LocalObjectStore(temp_storage)
        await store.put(self.key, b"old", "text/plain")
        await store.put(self.key, b"new", "text/plain")
        assert await store.get(self.key) == b"new"

    @pytest.mark.asyncio
    async def test_get_missing_raises_not_found(self, temp_storage):
        store = LocalObjectStore(temp_storage)
        with pytest.raises(NotFoundError):
            await store.get("nope/missing.txt")

    @pytest.mark.asyncio
    async def test_delete_removes_file_and_empty_directory(self, temp_storage):
        store = LocalObjectStore(temp_storage)
        await store.put(self.key, b"bytes", "image/png")

        await store.delete(self.key)

        assert not (Path(temp_storage) / self.key).exists()
        assert not (Path(temp_storage) / "3f2a-uid").exists()

    @pytest.mark.asyncio
    async def test_delete_missing_is_quiet(self, temp_storage):
        store = LocalObjectStore(temp_storage)
        await store.put("keep/other.txt", b"x", "text/plain")
        await store.delete("keep/gone.txt")
        assert (Path(temp_storage) / "keep" / "other.txt").exists()

    @pytest.mark.parametrize("key", ["../escape.txt", "a/../../escape.txt", ""])
    def test_keys_outside_root_rejected(self, temp_storage, key):
        store = LocalObjectStore(temp_storage)
        with pytest.raises(ValidationError):
            store.path_for(key)

    def test_urls(self, temp_storage):
        store = LocalObjectStore(temp_storage)
        assert store.url_for(self.key) is None
        assert store.uri_for(self.key) == f"local://{self.key}"
        assert store.backend == "local"


class TestS3ObjectStore:

    def setup_method(self):
        self.client = MagicMock()
        self.store = S3ObjectStore(
            bucket="memos-bucket",
            endpoint_url="https://r2.example.com",
            region="auto",
            access_key_id="key",
            secret_access_key="secret",
            presign_ttl_seconds=600,
            client=self.client,
        )

    @pytest.mark.asyncio
    async def test_put_object(self):
        await self.store.put("uid/a.txt", b"hello", "text/plain")
        self.client.put_object.assert_called_once_with(
            Bucket="memos-bucket",
            Key="uid/a.txt",
            Body=b"hello",
            ContentType="text/plain",
        )

    @pytest.mark.asyncio
    async def test_get_object(self):
        body = MagicMock()
        body.read.return_value = b"hello"
        self.client.get_object.return_value = {"Body": body}

        assert await self.store.get("uid/a.txt") == b"hello"
        self.client.get_object.assert_called_once_with(Bucket="memos-bucket", Key="uid/a.txt")

    @pytest.mark.asyncio
    async def test_get_missing_key(self):
        self.client.get_object.side_effect = ClientError(
            {"Error": {"Code": "NoSuchKey", "Message": "missing"}}, "GetObject"
        )
        with pytest.raises(NotFoundError):
            await self.store.get("uid/a.txt")

    @pytest.mark.asyncio
    async def test_get_access_denied_is_storage_error(self):
        self.client.get_object.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "no"}}, "GetObject"
        )
        with pytest.raises(StorageError):
            await self.store.get("uid/a.txt")

    @pytest.mark.asyncio
    async def test_put_connection_failure(self):
        self.client.put_object.side_effect = EndpointConnectionError(
            endpoint_url="https://r2.example.com"
        )
        with pytest.raises(StorageError):
            await self.store.put("uid/a.txt", b"x", "text/plain")

    @pytest.mark.asyncio
    async def test_delete_object(self):
        await self.store.delete("uid/a.txt")
        self.client.delete_object.assert_called_once_with(Bucket="memos-bucket", Key="uid/a.txt")

    def test_presigned_url(self):
        self.client.generate_presigned_url.return_value = "https://signed.example/uid/a.txt"
        assert self.store.url_for("uid/a.txt") == "https://signed.example/uid/a.txt"
        self.client.generate_presigned_url.assert_called_once_with(
            ClientMethod="get_object",
            Params={"Bucket": "memos-bucket", "Key": "uid/a.txt"},
            ExpiresIn=600,
        )

    def test_uri(self):
        assert self.store.uri_for("uid/a.txt") == "s3://memos-bucket/uid/a.txt"


class TestBuildObjectStore:

    def test_local_by_default(self, temp_storage):
        store = build_object_store(Settings(_env_file=None, storage_root=temp_storage))
        assert isinstance(store, LocalObjectStore)

    def test_s3_when_selected(self):
        settings = Settings(
            _env_file=None,
            storage_backend="S3",
            s3_endpoint_url="https://r2.example.com",
            s3_bucket="memos-bucket",
            s3_access_key_id="key",
            s3_secret_access_key="secret",
        )
        store = build_object_store(settings)
        assert isinstance(store, S3ObjectStore)
        assert store.bucket == "memos-bucket"
        assert store.uri_for("k") == "s3://memos-bucket/k"
