from datetime import datetime, timedelta, timezone
from typing import Optional, Any
import hashlib
import hmac
import secrets
import uuid

from jose import JWTError, jwt

from kitflow.config import settings


SIGN_IN_CODE_LENGTH = 6


def create_access_token(
    subject: str | uuid.UUID,
    expires_delta: Optional[timedelta] = None,
    additional_claims: Optional[dict[str, Any]] = None
) -> str:
    """
    Create a JWT access token.

    Args:
        subject: The subject of the token (usually user ID)
        expires_delta: Optional custom expiration time
        additional_claims: Optional additional claims to include

    Returns:
        Encoded JWT token string
    """
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {
        "sub": str(subject),
        "exp": expire,
        "iat": datetime.now(timezone.utc),
        "jti": str(uuid.uuid4()),
        "type": "access"
    }

    if additional_claims:
        to_encode.update(additional_claims)

    return jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM
    )


def decode_token(token: str) -> Optional[dict[str, Any]]:
    """
    Decode and validate a JWT token.

    Returns:
        Decoded token payload or None if invalid
    """
    try:
        return jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )
    except JWTError:
        return None


def verify_access_token(token: str) -> Optional[str]:
    """
    Verify an access token and return the subject (user ID).

    Args:
        token: The JWT access token

    Returns:
        User ID string or None if invalid
    """
    payload = decode_token(token)
    if payload is None:
        return None

    if payload.get("type") != "access":
        return None

    return payload.get("sub")


def generate_sign_in_code() -> str:
    """Generate a random numeric one-time sign-in code."""
    return "".join(str(secrets.randbelow(10)) for _ in range(SIGN_IN_CODE_LENGTH))


def hash_sign_in_code(code: str) -> str:
    """Hash a sign-in code for storage."""
    return hashlib.sha256(code.encode()).hexdigest()


def verify_sign_in_code(code: str, code_hash: str) -> bool:
    return hmac.compare_digest(hash_sign_in_code(code), code_hash)
