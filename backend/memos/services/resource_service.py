"""
Memos Backend - Resource Service
=================================

What:  Upload, list, look up and delete resources (uploaded blobs).
How:   Bytes go to the application's ObjectStore under `{uid}/{filename}`;
       the metadata row records filename, MIME type, size and the store's
       URI for the object.
Who:   Called by the /api/resource routes and the /o/r blob route.

Upload Flow:
    ┌──────────┐    ┌────────────┐    ┌──────────────┐    ┌──────────┐
    │  Upload  │───▶│  Validate  │───▶│ ObjectStore  │───▶│ Row (DB) │
    │  (Route) │    │ name, size │    │    .put()    │    │  flush   │
    └──────────┘    └────────────┘    └──────────────┘    └──────────┘

    If the row cannot be written, the stored object is removed again
    (single best-effort attempt).

Delete Flow:
    Links and row are removed and committed first; only then is the object
    deleted, as a single best-effort attempt whose failure is logged, not
    raised. A failed commit leaves the object in place.
"""

import logging
import uuid
from pathlib import PurePosixPath
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from memos.clock import current_epoch
from memos.database import translate_db_errors
from memos.exceptions import (
    MemosError,
    NotFoundError,
    PayloadTooLargeError,
    ValidationError,
)
from memos.models.memo import memo_resource
from memos.models.resource import Resource
from memos.models.user import User
from memos.schemas.resource import ResourceRecord, resource_record
from memos.services.storage import ObjectStore

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"


def clean_filename(filename: Optional[str]) -> str:
    """
    Reduce a client-supplied filename to its final path component.

    `../../etc/passwd` becomes `passwd`; a name with nothing left is
    rejected.
    """
    name = PurePosixPath((filename or "").replace("\\", "/")).name.strip()
    if not name or name in (".", ".."):
        raise ValidationError(message="No file provided", field="file")
    return name


async def _discard_object(store: ObjectStore, key: str) -> None:
    try:
        await store.delete(key)
    except MemosError as e:
        logger.warning("Could not remove object %s: %s", key, e.message)


class ResourceService:

    @translate_db_errors("upload_resource")
    async def upload(
        self,
        db: AsyncSession,
        store: ObjectStore,
        actor: User,
        filename: Optional[str],
        content_type: Optional[str],
        data: bytes,
        max_size: int,
    ) -> ResourceRecord:
        """
        Store an uploaded blob and record it.

        Raises:
            ValidationError:       no usable filename (400)
            PayloadTooLargeError:  more than `max_size` bytes (413)
            StorageError:          the object store failed (500)
        """
        name = clean_filename(filename)
        if len(data) > max_size:
            raise PayloadTooLargeError(max_size=max_size, actual_size=len(data))

        uid = str(uuid.uuid4())
        key = f"{uid}/{name}"
        mime_type = content_type or DEFAULT_MIME_TYPE

        await store.put(key, data, mime_type)

        resource = Resource(
            uid=uid,
            creator_id=actor.id,
            filename=name,
            mime_type=mime_type,
            size=len(data),
            external_uri=store.uri_for(key),
            created_ts=current_epoch(),
        )
        db.add(resource)
        try:
            await db.flush()
        except SQLAlchemyError:
            await _discard_object(store, key)
            raise

        logger.info(
            "Resource %d uploaded by user %d: %s (%d bytes)",
            resource.id, actor.id, key, resource.size,
        )
        return resource_record(resource)

    @translate_db_errors("list_resources")
    async def list_resources(
        self,
        db: AsyncSession,
        actor: User,
        limit: int = 50,
        offset: int = 0,
    ) -> List[ResourceRecord]:
        result = await db.execute(
            select(Resource)
            .where(Resource.creator_id == actor.id)
            .order_by(Resource.created_ts.desc(), Resource.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return [resource_record(row) for row in result.scalars().all()]

    @translate_db_errors("get_resource_by_uid")
    async def get_by_uid(self, db: AsyncSession, uid: str, filename: str) -> Resource:
        resource = await db.scalar(select(Resource).where(Resource.uid == uid))
        if resource is None or resource.filename != filename:
            raise NotFoundError(resource="resource", resource_id=f"{uid}/{filename}")
        return resource

    @translate_db_errors("delete_resource")
    async def delete_resource(
        self,
        db: AsyncSession,
        store: ObjectStore,
        actor: User,
        resource_id: int,
    ) -> None:
        resource = await db.scalar(
            select(Resource).where(Resource.id == resource_id, Resource.creator_id == actor.id)
        )
        if resource is None:
            raise NotFoundError(resource="resource", resource_id=str(resource_id))

        key = resource.object_key
        await db.execute(delete(memo_resource).where(memo_resource.c.resource_id == resource.id))
        await db.delete(resource)
        # The row must be gone for good before its object is removed
        await db.commit()
        logger.info("Resource %d deleted by user %d", resource_id, actor.id)

        await _discard_object(store, key)


# ── Singleton Instance ────────────────────────────────────────────────────
resource_service = ResourceService()
