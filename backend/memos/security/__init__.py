# Security package init
"""
Memos Backend - Security Package
=================================

    - tokens.py:     HS256 bearer token signing/verification (TokenAuthenticator)
    - passwords.py:  bcrypt password hashing
"""

from memos.security.passwords import hash_password, verify_password
from memos.security.tokens import (
    TokenAuthenticator,
    TokenClaims,
    sign_token,
    verify_token,
)

__all__ = [
    "TokenAuthenticator",
    "TokenClaims",
    "hash_password",
    "sign_token",
    "verify_password",
    "verify_token",
]
