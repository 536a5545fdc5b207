"""
Memos Backend - Auth Route Handlers
====================================

What:  POST /api/auth/signup and POST /api/auth/signin.
Who:   Called by the sign-in page before any other authenticated call.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from memos.config import Settings, get_settings
from memos.database import get_db_session
from memos.dependencies import get_token_authenticator
from memos.schemas.auth import AuthResponse, SignInRequest, SignUpRequest
from memos.schemas.common import ErrorResponse
from memos.security.tokens import TokenAuthenticator
from memos.services.auth_service import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/signup",
    response_model=AuthResponse,
    responses={
        400: {"description": "Username or password missing", "model": ErrorResponse},
        403: {"description": "Signup disabled (a user already exists)", "model": ErrorResponse},
        409: {"description": "Username already exists", "model": ErrorResponse},
    },
    summary="Create the first (HOST) account",
    description=(
        "Creates the workspace owner. Only succeeds while the workspace has no "
        "active user; returns an access token together with the new user."
    ),
)
async def sign_up(
    payload: SignUpRequest,
    db: AsyncSession = Depends(get_db_session),
    authenticator: TokenAuthenticator = Depends(get_token_authenticator),
    settings: Settings = Depends(get_settings),
) -> AuthResponse:
    return await auth_service.sign_up(
        db,
        authenticator,
        username=payload.username,
        password=payload.password,
        email=payload.email,
        allow_signup=settings.allow_signup,
    )


@router.post(
    "/signin",
    response_model=AuthResponse,
    responses={
        400: {"description": "Username or password missing", "model": ErrorResponse},
        401: {"description": "Invalid credentials", "model": ErrorResponse},
    },
    summary="Sign in with username and password",
)
async def sign_in(
    payload: SignInRequest,
    db: AsyncSession = Depends(get_db_session),
    authenticator: TokenAuthenticator = Depends(get_token_authenticator),
) -> AuthResponse:
    return await auth_service.sign_in(
        db, authenticator, username=payload.username, password=payload.password
    )
