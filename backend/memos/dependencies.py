"""
Memos Backend - Request Dependencies
=====================================

What:  FastAPI dependencies that hand route handlers the per-application
       objects (token authenticator, object store) and the calling user.
How:   Everything is read from `request.app.state`, which `create_app()`
       fills; nothing here is a module-level singleton.

Authentication Flow:
    Authorization: Bearer <token>
        │
        ▼
    TokenAuthenticator.authenticate()  ──None──▶  AuthenticationError (401)
        │ claims
        ▼
    active user with uid == claims.sub  ──None──▶  NotFoundError (404)
        │
        ▼
    User row handed to the route

    Every token defect ends in the same 401 body; which check failed is
    only logged at DEBUG, and the token itself is never logged.
"""

import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from memos.database import get_db_session
from memos.exceptions import AuthenticationError, NotFoundError
from memos.models.user import User
from memos.security.tokens import TokenAuthenticator
from memos.services.storage import ObjectStore
from memos.services.user_service import user_service

logger = logging.getLogger(__name__)

# auto_error=False: a missing header reaches our handler, which answers
# with the standard error body instead of FastAPI's default 403
bearer_scheme = HTTPBearer(auto_error=False)


def get_token_authenticator(request: Request) -> TokenAuthenticator:
    return request.app.state.authenticator


def get_object_store(request: Request) -> ObjectStore:
    return request.app.state.object_store


async def _resolve_user(
    credentials: HTTPAuthorizationCredentials,
    authenticator: TokenAuthenticator,
    db: AsyncSession,
) -> User:
    claims = authenticator.authenticate(credentials.credentials)
    if claims is None:
        raise AuthenticationError()

    user = await user_service.get_active_user_by_uid(db, claims.subject_id)
    if user is None:
        logger.debug("Token subject %s has no active user", claims.subject_id)
        raise NotFoundError(resource="user", resource_id=claims.subject_id)
    return user


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    authenticator: TokenAuthenticator = Depends(get_token_authenticator),
    db: AsyncSession = Depends(get_db_session),
) -> User:
    """Require a valid bearer token; returns the caller's user row."""
    if credentials is None:
        logger.debug("Request without bearer credentials")
        raise AuthenticationError()
    return await _resolve_user(credentials, authenticator, db)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    authenticator: TokenAuthenticator = Depends(get_token_authenticator),
    db: AsyncSession = Depends(get_db_session),
) -> Optional[User]:
    """
    Anonymous callers get None. A token that is present but invalid is
    still rejected with 401 rather than silently downgraded.
    """
    if credentials is None:
        return None
    return await _resolve_user(credentials, authenticator, db)
