"""FastAPI authentication dependencies for route protection."""

import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from flipdeck.auth.jwt import ACCESS, decode_token
from flipdeck.database import get_db
from flipdeck.models.user import User

# Strict bearer — raises 403 automatically if no token provided
_bearer_scheme = HTTPBearer()

# Optional bearer — returns None if no token provided
_bearer_scheme_optional = HTTPBearer(auto_error=False)


class InvalidCredentials(Exception):
    pass


async def resolve_user(db: AsyncSession, token: str) -> User:
    """Map an access token to an active user or raise ``InvalidCredentials``."""
    try:
        payload = decode_token(token, expected_type=ACCESS)
        user_id = uuid.UUID(payload.get("sub") or "")
    except (JWTError, ValueError):
        raise InvalidCredentials from None

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None or not user.is_active:
        raise InvalidCredentials
    return user


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(_bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Return the user behind the Bearer token.

    Raises:
        HTTPException 401: If the token is invalid, expired, not an access
            token, or the user is missing or inactive.
    """
    try:
        return await resolve_user(db, credentials.credentials)
    except InvalidCredentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None


async def get_current_active_user(
    user: User = Depends(get_current_user),
) -> User:
    """Return the current user only if their account is active."""
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive",
        )
    return user


async def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme_optional),
    db: AsyncSession = Depends(get_db),
) -> User | None:
    """Like ``get_current_user`` but returns ``None`` for anonymous callers.

    Used by the public flipbook view so share links work without a session
    while owners still get ``is_owner`` set.
    """
    if credentials is None:
        return None
    try:
        return await resolve_user(db, credentials.credentials)
    except InvalidCredentials:
        return None
