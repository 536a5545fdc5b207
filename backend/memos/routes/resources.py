"""
Memos Backend - Resource Route Handlers
========================================

What:  Upload, list and delete resources; serve stored blobs.
How:   Uploads are multipart (`file` field). Bytes go to the application's
       object store; downloads either redirect to the store's URL (S3/R2
       presigned GET) or are streamed from the local store.

Route Inventory:
    POST   /api/resource/blob           upload (auth), 413 over the size limit
    GET    /api/resource                list caller's resources (auth)
    DELETE /api/resource/{id}           delete (owner only)
    GET    /o/r/{uid}/{filename}        download: 302 to the store, or bytes
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.responses import RedirectResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from memos.config import Settings, get_settings
from memos.database import get_db_session
from memos.dependencies import get_current_user, get_object_store
from memos.exceptions import PayloadTooLargeError
from memos.models.user import User
from memos.schemas.common import ErrorResponse, MessageResponse
from memos.schemas.resource import ResourceRecord
from memos.services.resource_service import resource_service
from memos.services.storage import ObjectStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/resource", tags=["Resources"])
blob_router = APIRouter(tags=["Resources"])


@router.post(
    "/blob",
    response_model=ResourceRecord,
    responses={
        400: {"description": "No file provided", "model": ErrorResponse},
        401: {"description": "Missing or invalid bearer token", "model": ErrorResponse},
        413: {"description": "File exceeds the upload size limit", "model": ErrorResponse},
        500: {"description": "Object store failure", "model": ErrorResponse},
    },
    summary="Upload a resource",
    description=(
        "Stores the uploaded file under `{uid}/{filename}` in the configured object "
        "store and records it. The MIME type is taken from the upload's content type."
    ),
)
async def upload_resource(
    file: Optional[UploadFile] = File(default=None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    store: ObjectStore = Depends(get_object_store),
    settings: Settings = Depends(get_settings),
) -> ResourceRecord:
    """
    Size is checked twice: against the declared part size before reading,
    then against the bytes actually read (at most limit + 1 are read).
    """
    max_size = settings.max_upload_size
    if file is None:
        data, filename, content_type = b"", None, None
    else:
        if file.size is not None and file.size > max_size:
            raise PayloadTooLargeError(max_size=max_size, actual_size=file.size)
        data = await file.read(max_size + 1)
        filename, content_type = file.filename, file.content_type

    return await resource_service.upload(
        db,
        store,
        current_user,
        filename=filename,
        content_type=content_type,
        data=data,
        max_size=max_size,
    )


@router.get("", response_model=List[ResourceRecord], summary="List the caller's resources")
async def list_resources(
    limit: int = Query(default=50, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[ResourceRecord]:
    return await resource_service.list_resources(db, current_user, limit=limit, offset=offset)


@router.delete(
    "/{resource_id}",
    response_model=MessageResponse,
    responses={404: {"description": "Resource not found", "model": ErrorResponse}},
    summary="Delete a resource",
    description="Removes memo links and the record; the stored object is deleted best-effort.",
)
async def delete_resource(
    resource_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    store: ObjectStore = Depends(get_object_store),
) -> MessageResponse:
    await resource_service.delete_resource(db, store, current_user, resource_id)
    return MessageResponse(message="Resource deleted successfully")


@blob_router.get(
    "/o/r/{uid}/{filename}",
    responses={
        200: {"description": "Blob bytes (local storage)"},
        302: {"description": "Redirect to the object store"},
        404: {"description": "Resource not found", "model": ErrorResponse},
    },
    summary="Download a resource blob",
)
async def download_resource(
    uid: str,
    filename: str,
    db: AsyncSession = Depends(get_db_session),
    store: ObjectStore = Depends(get_object_store),
) -> Response:
    resource = await resource_service.get_by_uid(db, uid, filename)
    key = resource.object_key

    url = store.url_for(key)
    if url is not None:
        return RedirectResponse(url=url, status_code=302)

    data = await store.get(key)
    return Response(
        content=data,
        media_type=resource.mime_type,
        headers={"Cache-Control": "private, max-age=3600"},
    )
