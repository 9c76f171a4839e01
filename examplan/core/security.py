# examplan/core/security.py

from datetime import datetime, timedelta, timezone
from typing import Optional, Any, Dict

from jose import jwt

from .config import settings


def create_access_token(
    subject: str,
    expires_delta: Optional[timedelta] = None,
    additional_claims: Optional[dict[str, Any]] = None,
) -> str:
    """
    Creates a new JWT access token.

    Args:
        subject: The subject of the token (the user ID).
        expires_delta: The lifespan of the token. Defaults to settings.
        additional_claims: A dictionary of extra data to include in the payload.

    Returns:
        The encoded JWT string.
    """
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES
        )

    to_encode: Dict[str, Any] = {"sub": subject, "exp": expire}
    if additional_claims:
        to_encode.update(additional_claims)

    return jwt.encode(
        to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM
    )


def decode_access_token(token: str) -> Dict[str, Any]:
    """Decode and verify a token. Raises ``jose.JWTError`` when invalid."""
    return jwt.decode(
        token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM]
    )
