"""
Memos Backend - Shared Schema Pieces
=====================================

What:  Base model for camelCase API payloads, and the response shapes that
       every router shares (errors, health, plain messages).

Wire Naming:
    Python attributes stay snake_case; JSON uses camelCase
    (`creator_id` ⇄ `creatorId`). Requests accept either spelling.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class MessageResponse(BaseModel):
    message: str = Field(description="Human-readable outcome")


class ErrorResponse(BaseModel):
    """
    Standardized error body returned by every exception handler.

    Example:
        {
            "error": "unauthenticated",
            "message": "Unauthorized",
            "request_id": "1f0c2b7a"
        }
    """

    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    storage: str = Field(description="Object store backend in use: local, s3")
    uptime_seconds: float = Field(description="Seconds since the application was created")
