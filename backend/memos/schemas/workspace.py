"""Workspace profile schema. Workspace settings travel as plain JSON objects."""

from pydantic import Field

from memos.schemas.common import CamelModel


class WorkspaceProfile(CamelModel):
    owner: str = Field(description="users/{uid} of the first HOST, empty before signup")
    version: str
    mode: str = Field(description="prod or dev")
    instance_url: str
