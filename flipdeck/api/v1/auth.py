"""Account routes: register, login, refresh and the signed-in profile.

New accounts get no role row; ``get_user_role`` reads a missing row as the
free plan, so the profile always carries a role.
"""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from jose import JWTError
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from flipdeck.auth.dependencies import get_current_active_user
from flipdeck.auth.jwt import REFRESH, create_token_pair, decode_token
from flipdeck.auth.passwords import hash_password, verify_password
from flipdeck.database import get_db
from flipdeck.models.user import User
from flipdeck.schemas.auth import (
    AuthResponse,
    Credentials,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from flipdeck.services.role_service import get_user_role

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def _find_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(func.lower(User.email) == email))
    return result.scalar_one_or_none()


async def _profile(db: AsyncSession, user: User) -> UserResponse:
    profile = UserResponse.model_validate(user)
    profile.role = await get_user_role(db, user.id)
    return profile


async def _signed_in(db: AsyncSession, user: User) -> AuthResponse:
    return AuthResponse(
        user=await _profile(db, user),
        tokens=TokenResponse(**create_token_pair(str(user.id))),
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)) -> AuthResponse:
    if await _find_by_email(db, body.email) is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    user = User(email=body.email, hashed_password=hash_password(body.password), name=body.name)
    db.add(user)
    await db.flush()
    await db.refresh(user)
    logger.info("Registered user %s", user.id)
    return await _signed_in(db, user)


@router.post("/login", response_model=AuthResponse)
async def login(body: Credentials, db: AsyncSession = Depends(get_db)) -> AuthResponse:
    user = await _find_by_email(db, body.email)
    if user is None or not user.hashed_password or not verify_password(body.password, user.hashed_password):
        logger.info("Failed login for %s", body.email)
        raise _unauthorized("Invalid email or password")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is inactive")
    return await _signed_in(db, user)


@router.post("/refresh", response_model=TokenResponse)
async def refresh(body: RefreshRequest, db: AsyncSession = Depends(get_db)) -> TokenResponse:
    """Trade a refresh token for a new pair. Access tokens are refused here."""
    try:
        payload = decode_token(body.refresh_token, expected_type=REFRESH)
        user = await db.get(User, uuid.UUID(payload.get("sub") or ""))
    except (JWTError, ValueError):
        raise _unauthorized("Invalid or expired refresh token") from None

    if user is None or not user.is_active:
        raise _unauthorized("User not found or inactive")
    return TokenResponse(**create_token_pair(str(user.id)))


@router.get("/me", response_model=UserResponse)
async def me(
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    return await _profile(db, current_user)
