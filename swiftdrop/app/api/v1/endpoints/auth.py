"""
Authentication API endpoints.

Provides register, login, refresh, logout and user info endpoints.
"""

import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from swiftdrop.app.db.session import get_db
from swiftdrop.app.models.user import User
from swiftdrop.app.models.enums import UserRole
from swiftdrop.app.schemas.auth import UserRegister, UserLogin, RefreshRequest, TokenResponse, UserResponse
from swiftdrop.app.schemas.common import SuccessResponse, ERROR_RESPONSES
from swiftdrop.app.core.exceptions import AuthenticationError, InsufficientPermissionsError
from swiftdrop.app.core.security import (
    get_password_hash,
    verify_password,
    hash_refresh_token,
    refresh_token_matches,
)
from swiftdrop.app.core.jwt import create_access_token, create_refresh_token, decode_refresh_token
from swiftdrop.app.core.dependencies import get_current_user
from swiftdrop.app.core.token_revocation import revoke_token

router = APIRouter(prefix="/auth", tags=["Authentication"], responses=ERROR_RESPONSES)
logger = logging.getLogger("swiftdrop.auth")


async def _issue_tokens(user: User, db: AsyncSession) -> TokenResponse:
    """Issue a new access/refresh pair and remember the refresh token digest."""
    jwt_payload = {
        "sub": user.username,
        "user_id": user.id,
        "role": user.role.value,
    }
    access_token = create_access_token(data=jwt_payload)
    refresh_token = create_refresh_token(user.id)

    user.refresh_token_hash = hash_refresh_token(refresh_token)
    await db.commit()

    return TokenResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        token_type="bearer",
        user_id=user.id,
        username=user.username,
        email=user.email,
        role=user.role,
    )


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserRegister,
    db: AsyncSession = Depends(get_db)
):
    """
    Register a new sender or receiver.

    Admin accounts cannot be created through the API.
    """
    if user_data.role == UserRole.ADMIN:
        raise InsufficientPermissionsError("Admin users cannot be registered via API")

    result = await db.execute(
        select(User).where(
            or_(User.username == user_data.username, User.email == user_data.email.lower())
        )
    )
    existing_user = result.scalars().first()

    if existing_user:
        if existing_user.username == user_data.username:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Username already registered"
            )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )

    new_user = User(
        email=user_data.email.lower(),
        username=user_data.username,
        hashed_password=get_password_hash(user_data.password),
        role=user_data.role,
        is_active=True,
    )

    db.add(new_user)
    await db.commit()
    await db.refresh(new_user)

    logger.info("User registered id=%s role=%s", new_user.id, new_user.role.value)

    return await _issue_tokens(new_user, db)


@router.post("/login", response_model=TokenResponse)
async def login(
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    """
    Login user and return access and refresh tokens.

    Accepts username or email for login.
    """
    result = await db.execute(
        select(User).where(
            or_(User.username == credentials.username, User.email == credentials.username.lower())
        )
    )
    user = result.scalars().first()

    if not user or not verify_password(credentials.password, user.hashed_password):
        logger.warning("Failed login for %s", credentials.username)
        raise AuthenticationError("Invalid credentials")

    if not user.is_active:
        logger.warning("Login attempt on inactive account id=%s", user.id)
        raise InsufficientPermissionsError("Inactive user account")

    logger.info("User logged in id=%s", user.id)
    return await _issue_tokens(user, db)


@router.post("/refresh", response_model=TokenResponse)
async def refresh(
    body: RefreshRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Exchange a refresh token for a new token pair.

    The presented refresh token must be the latest one issued to the user;
    it is rotated on every use.
    """
    payload = decode_refresh_token(body.refresh_token)
    if payload is None:
        raise AuthenticationError("Invalid refresh token")

    result = await db.execute(select(User).where(User.id == payload.get("user_id")))
    user = result.scalar_one_or_none()

    if (
        not user
        or not user.refresh_token_hash
        or not refresh_token_matches(body.refresh_token, user.refresh_token_hash)
    ):
        raise AuthenticationError("Invalid refresh token")

    if not user.is_active:
        raise InsufficientPermissionsError("Inactive user account")

    return await _issue_tokens(user, db)


@router.post("/logout", response_model=SuccessResponse[dict])
async def logout(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Revoke the presented access token and forget the refresh token."""
    user_id = current_user["user_id"]

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user:
        user.refresh_token_hash = None
        await db.commit()

    await revoke_token(current_user["token"], user_id)
    logger.info("User logged out id=%s", user_id)

    return SuccessResponse(data={"message": "Logged out"})


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Get current authenticated user information.

    Requires valid JWT token in Authorization header.
    """
    result = await db.execute(select(User).where(User.id == current_user.get("user_id")))
    user = result.scalar_one_or_none()

    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    return UserResponse.model_validate(user)
