"""
Password hashing with bcrypt.

bcrypt only looks at the first 72 bytes of a password; both functions
truncate the UTF-8 encoding to 72 bytes so hashing and checking agree.
"""

import bcrypt

BCRYPT_MAX_BYTES = 72


def hash_password(password: str) -> str:
    password_bytes = password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    hashed = bcrypt.hashpw(password_bytes, bcrypt.gensalt())
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Return True when `password` matches `password_hash`; malformed hashes never match."""
    password_bytes = password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    try:
        return bcrypt.checkpw(password_bytes, password_hash.encode("utf-8"))
    except ValueError:
        return False
