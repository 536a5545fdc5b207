"""
Sign-up / sign-in payloads.

Username and password are optional at the schema level so that a missing
field reaches the service and produces the documented 400, rather than
FastAPI's generic 422.
"""

from typing import Optional

from pydantic import Field

from memos.schemas.common import CamelModel
from memos.schemas.user import UserRecord


class SignInRequest(CamelModel):
    username: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = None


class SignUpRequest(SignInRequest):
    email: Optional[str] = Field(default=None, max_length=255)


class AuthResponse(CamelModel):
    access_token: str = Field(description="Bearer token for the Authorization header")
    user: UserRecord
