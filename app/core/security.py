from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from fastapi import Request

from app.core.config import settings

ACCESS_TOKEN_EXPIRE_MINUTES = 30


class AuthenticationError(Exception):
    """Raised by `require_user`; rendered as a 401 `{"error": ...}` body."""


def create_access_token(subject: str, data: Optional[Dict[str, Any]] = None, expires_minutes: Optional[int] = None) -> str:
    to_encode: Dict[str, Any] = {"sub": subject}
    if data:
        to_encode.update(data)
    expire = datetime.now(timezone.utc) + timedelta(minutes=(expires_minutes or ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])


async def require_user(request: Request) -> Dict[str, Any]:
    """FastAPI dependency: decode the bearer token or reject with 401."""
    header = request.headers.get("authorization")
    if not header:
        raise AuthenticationError("Missing Authorization header")

    token = header.replace("Bearer ", "", 1)
    try:
        user = decode_access_token(token)
    except jwt.PyJWTError:
        raise AuthenticationError("Invalid token")

    request.state.user = user
    return user
