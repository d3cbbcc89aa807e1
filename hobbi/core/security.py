# Implements security-related functionality:
# JWT access/refresh token generation and validation
# Bearer token extraction from the Authorization header
# Password hashing and verification using bcrypt

from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

from fastapi import Request
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from hobbi.core.config import settings
from hobbi.core.exceptions import ExpiredToken, InvalidToken

logger = logging.getLogger("app")

BEARER_PREFIX = "Bearer "

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def create_token(email: str, expires_delta: timedelta) -> str:
    now = datetime.now(timezone.utc)
    to_encode = {"sub": email, "iat": now, "exp": now + expires_delta}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_access_token(email: str) -> str:
    return create_token(email, timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))


def create_refresh_token(email: str) -> str:
    return create_token(email, timedelta(minutes=settings.REFRESH_TOKEN_EXPIRE_MINUTES))


def _decode(token: str) -> dict:
    if not token:
        raise InvalidToken()
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError:
        logger.info("Token expired")
        raise ExpiredToken()
    except (JWTError, ValueError) as e:
        logger.warning(f"JWT verification error: {e}")
        raise InvalidToken()


def validate_token(token: str) -> None:
    """Raise ExpiredToken or InvalidToken unless the token verifies."""
    _decode(token)


def get_email_from_token(token: str) -> str:
    email = _decode(token).get("sub")
    if not email:
        logger.warning("Token payload missing 'sub' field")
        raise InvalidToken()
    return email


def resolve_access_token(request: Request) -> Optional[str]:
    bearer_token = request.headers.get("Authorization")
    if bearer_token is not None and bearer_token.startswith(BEARER_PREFIX):
        return bearer_token[len(BEARER_PREFIX):]
    return None


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)
