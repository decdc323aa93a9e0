"""
Bearer token verification.

Tokens are issued elsewhere and signed with POSTS_SECRET_KEY (HS256). The
``sub`` claim carries the user id.
"""

import os
from uuid import UUID

from jose import JWTError, jwt

SECRET_KEY = os.environ.get("POSTS_SECRET_KEY", "dev-secret-unsafe")
ALGORITHM = "HS256"


class InvalidTokenError(Exception):
    """Token failed the signature, expiry or subject check."""


def subject_from_token(token: str) -> UUID:
    """
    Verify a bearer token and return the user id it names.

    Raises:
        InvalidTokenError: bad signature, expired, or no usable ``sub``.
    """
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as e:
        raise InvalidTokenError(str(e)) from e

    sub = payload.get("sub")
    if not isinstance(sub, str):
        raise InvalidTokenError("token has no subject")
    try:
        return UUID(sub)
    except ValueError as e:
        raise InvalidTokenError(f"subject is not a user id: {sub!r}") from e
