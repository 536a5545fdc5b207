"""Resource schemas and the resource row-to-record mapping."""

from memos.models.resource import Resource
from memos.schemas.common import CamelModel


class ResourceRecord(CamelModel):
    id: int
    uid: str
    creator_id: int
    filename: str
    mime_type: str
    size: int
    external_uri: str
    created_ts: int


def resource_record(row: Resource) -> ResourceRecord:
    return ResourceRecord(
        id=row.id,
        uid=row.uid,
        creator_id=row.creator_id,
        filename=row.filename,
        mime_type=row.mime_type,
        size=row.size,
        external_uri=row.external_uri,
        created_ts=row.created_ts,
    )
