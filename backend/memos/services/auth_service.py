"""
Memos Backend - Auth Service
=============================

What:  First-user signup and username/password sign-in, both answering
       with a signed bearer token.
How:   Passwords are checked with bcrypt; tokens come from the
       application's TokenAuthenticator (passed in, never global).
Who:   Called by the /api/auth routes.

Signup Policy:
    The workspace has exactly one self-registered account: the HOST.
    Signup succeeds only while no NORMAL user exists; afterwards it is
    refused with SIGNUP_DISABLED (403). `allow_signup=False` refuses it
    unconditionally.

Sign-in Policy:
    Unknown username, archived account and wrong password all produce the
    same INVALID_CREDENTIALS (401), so the response never reveals which
    usernames exist.
"""

import asyncio
import logging
import uuid
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from memos.clock import current_epoch
from memos.database import translate_db_errors
from memos.exceptions import (
    AuthenticationError,
    ConflictError,
    PermissionDeniedError,
    ValidationError,
)
from memos.models.enums import Role, RowStatus
from memos.models.user import User
from memos.schemas.auth import AuthResponse
from memos.schemas.user import user_record
from memos.security.passwords import hash_password, verify_password
from memos.security.tokens import TokenAuthenticator

logger = logging.getLogger(__name__)

CREDENTIALS_REQUIRED = "USERNAME_AND_PASSWORD_REQUIRED"
INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
SIGNUP_DISABLED = "SIGNUP_DISABLED"
USERNAME_TAKEN = "USERNAME_ALREADY_EXISTS"


def _require_credentials(username: Optional[str], password: Optional[str]) -> str:
    username = (username or "").strip()
    if not username or not password:
        raise ValidationError(message=CREDENTIALS_REQUIRED, field="username" if not username else "password")
    return username


class AuthService:
    """Stateless; every call receives its session and authenticator."""

    @translate_db_errors("sign_up")
    async def sign_up(
        self,
        db: AsyncSession,
        authenticator: TokenAuthenticator,
        username: Optional[str],
        password: Optional[str],
        email: Optional[str] = None,
        allow_signup: bool = True,
    ) -> AuthResponse:
        """
        Create the HOST account and sign it in.

        Raises:
            ValidationError:        username or password missing (400)
            PermissionDeniedError:  signup disabled or a user already exists (403)
            ConflictError:          username held by an archived account (409)
        """
        username = _require_credentials(username, password)

        if not allow_signup:
            raise PermissionDeniedError(message=SIGNUP_DISABLED)

        active_users = await db.scalar(
            select(func.count()).select_from(User).where(User.row_status == RowStatus.NORMAL.value)
        )
        if active_users:
            logger.info("Signup refused: workspace already has %d active user(s)", active_users)
            raise PermissionDeniedError(message=SIGNUP_DISABLED)

        existing = await db.scalar(select(User.id).where(User.username == username))
        if existing is not None:
            raise ConflictError(message=USERNAME_TAKEN, context={"username": username})

        # bcrypt runs in a worker thread
        password_hash = await asyncio.to_thread(hash_password, password)

        now = current_epoch()
        user = User(
            uid=str(uuid.uuid4()),
            username=username,
            nickname=username,
            role=Role.HOST.value,
            email=email,
            password_hash=password_hash,
            row_status=RowStatus.NORMAL.value,
            created_ts=now,
            updated_ts=now,
        )
        db.add(user)
        await db.flush()
        logger.info("HOST account created: id=%d username=%s", user.id, user.username)

        token = authenticator.issue(user.uid, user.username, user.role, now=now)
        return AuthResponse(access_token=token, user=user_record(user))

    @translate_db_errors("sign_in")
    async def sign_in(
        self,
        db: AsyncSession,
        authenticator: TokenAuthenticator,
        username: Optional[str],
        password: Optional[str],
    ) -> AuthResponse:
        username = _require_credentials(username, password)

        user = await db.scalar(
            select(User).where(
                User.username == username,
                User.row_status == RowStatus.NORMAL.value,
            )
        )
        if user is None:
            logger.debug("Sign-in failed: no active user named %s", username)
            raise AuthenticationError(message=INVALID_CREDENTIALS)

        matches = await asyncio.to_thread(verify_password, password, user.password_hash)
        if not matches:
            logger.debug("Sign-in failed: wrong password for user id=%d", user.id)
            raise AuthenticationError(message=INVALID_CREDENTIALS)

        token = authenticator.issue(user.uid, user.username, user.role)
        logger.info("User signed in: id=%d", user.id)
        return AuthResponse(access_token=token, user=user_record(user))


# ── Singleton Instance ────────────────────────────────────────────────────
auth_service = AuthService()
