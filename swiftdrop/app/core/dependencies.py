"""
Authentication dependencies for FastAPI.

This module provides dependencies for protecting routes with JWT authentication.
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from swiftdrop.app.core.exceptions import AuthenticationError, InsufficientPermissionsError
from swiftdrop.app.core.jwt import decode_access_token
from swiftdrop.app.core.token_revocation import is_token_revoked
from swiftdrop.app.db.session import get_db
from swiftdrop.app.models.user import User

# HTTP Bearer security scheme (missing credentials are reported as 401 below)
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> dict:
    """
    FastAPI dependency for JWT authentication.

    Checks, in order:
    1. A bearer token is present
    2. Signature and expiry are valid
    3. The token has not been revoked (logout)
    4. The user still exists and is active

    Returns:
        Decoded token payload (sub, user_id, role) plus the raw token under "token"

    Raises:
        AuthenticationError: 401 if authentication fails for any reason
        InsufficientPermissionsError: 403 if the account is inactive
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Not authenticated")

    token = credentials.credentials

    payload = decode_access_token(token)
    if payload is None:
        raise AuthenticationError("Could not validate credentials")

    user_id = payload.get("user_id")
    if not user_id:
        raise AuthenticationError("Invalid token payload")

    if await is_token_revoked(token):
        raise AuthenticationError("Token has been revoked")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if not user:
        raise AuthenticationError("User not found")

    if not user.is_active:
        raise InsufficientPermissionsError("User account is inactive")

    return {**payload, "role": user.role.value, "token": token}
