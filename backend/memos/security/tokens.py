"""
Memos Backend - Bearer Token Signing & Verification
====================================================

What:  Issues and validates compact, URL-safe signed tokens carrying a user
       identity and an expiry. Every protected request goes through here.
How:   HS256 JWS via python-jose:

           base64url(header) . base64url(claims) . base64url(HMAC-SHA256)

       header is {"alg": "HS256", "typ": "JWT"}; all three segments are
       base64url without '=' padding; the signature covers the literal
       "header.payload" text, so changing any character of either segment
       invalidates the token.
Who:   AuthService signs on signup/signin; the `get_current_user`
       dependency verifies on every protected request.

Failure Policy:
    verify_token() returns None for every defect (too few segments, bad
    signature, unparsable payload, missing claims, expired). Callers only
    ever see "authenticated" or "not authenticated"; the reason is logged
    at DEBUG and never returned to the client.

State:
    None. The only shared value is the secret, held by a TokenAuthenticator
    that the application factory builds from Settings. There is no
    revocation list; a token dies at `exp`.
"""

import logging
from typing import Optional

from jose import JWTError, jwt
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from memos.clock import current_epoch

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"

# What: Default token lifetime (7 days)
DEFAULT_TTL_SECONDS = 7 * 24 * 60 * 60


class TokenClaims(BaseModel):
    """
    Claims carried in a token payload.

    Python attribute names are descriptive; the wire names are the short
    registered JWT claim names (sub, iat, exp).
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    subject_id: str = Field(alias="sub", description="User UID")
    username: str
    role: str
    issued_at: int = Field(alias="iat", description="Issued-at, Unix seconds")
    expires_at: int = Field(alias="exp", description="Expiry, Unix seconds")

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True)


def sign_token(claims: TokenClaims, secret: str) -> str:
    """
    Sign `claims` with `secret` and return `header.payload.signature`.

    Pure apart from the HMAC call: issued/expiry times come from `claims`.
    """
    return jwt.encode(claims.to_payload(), secret, algorithm=ALGORITHM)


def verify_token(token: str, secret: str, now: Optional[int] = None) -> Optional[TokenClaims]:
    """
    Verify `token` against `secret`.

    Returns:
        The decoded claims, or None when the token is malformed, the
        signature does not match, the payload is not valid claims JSON, or
        `exp < now`.
    """
    if not token or len(token.split(".")) < 3:
        logger.debug("Token rejected: fewer than 3 segments")
        return None

    try:
        # Expiry is checked below with a strict `exp < now` rule, so the
        # library check is disabled to keep a single definition of "expired".
        payload = jwt.decode(
            token,
            secret,
            algorithms=[ALGORITHM],
            options={"verify_exp": False},
        )
        claims = TokenClaims.model_validate(payload)
    except (JWTError, PydanticValidationError) as e:
        logger.debug("Token rejected: %s", type(e).__name__)
        return None

    if now is None:
        now = current_epoch()
    if claims.expires_at < now:
        logger.debug("Token rejected: expired at %d (now %d)", claims.expires_at, now)
        return None

    return claims


class TokenAuthenticator:
    """
    Holds the signing secret and the default lifetime for one application.

    Built once by `create_app()` from Settings and stored on `app.state`;
    there is no module-level secret.
    """

    def __init__(self, secret: str, ttl_seconds: int = DEFAULT_TTL_SECONDS):
        if not secret:
            raise ValueError("Token secret must not be empty")
        self._secret = secret
        self.ttl_seconds = ttl_seconds

    def issue(
        self,
        subject_id: str,
        username: str,
        role: str,
        now: Optional[int] = None,
        ttl_seconds: Optional[int] = None,
    ) -> str:
        """Build claims valid from `now` for `ttl_seconds` and sign them."""
        if now is None:
            now = current_epoch()
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        claims = TokenClaims(
            subject_id=subject_id,
            username=username,
            role=role,
            issued_at=now,
            expires_at=now + ttl,
        )
        return sign_token(claims, self._secret)

    def authenticate(self, token: str, now: Optional[int] = None) -> Optional[TokenClaims]:
        return verify_token(token, self._secret, now=now)
