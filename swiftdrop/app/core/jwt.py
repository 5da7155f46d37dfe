"""
JWT token utilities for authentication.

This module provides functions for encoding and decoding access and refresh tokens.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from swiftdrop.app.core.config import settings

REFRESH_TOKEN_TYPE = "refresh"


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Data payload to encode in the token (should include: sub, user_id, role)
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string

    Example payload:
        {
            "sub": "username",
            "user_id": 123,
            "role": "sender",
            "exp": 1234567890
        }
    """
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.access_token_expire_minutes)

    # jti keeps tokens issued within the same second distinct (revocation is per token)
    to_encode.update({"exp": expire, "jti": uuid.uuid4().hex})
    encoded_jwt = jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)

    return encoded_jwt


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Decode and validate a JWT access token.

    Returns:
        Decoded token payload if valid, None otherwise
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None
    if payload.get("type") == REFRESH_TOKEN_TYPE:
        return None
    return payload


def create_refresh_token(user_id: int) -> str:
    """Create a long-lived refresh token signed with the refresh secret."""
    expire = datetime.now(timezone.utc) + timedelta(days=settings.refresh_token_expire_days)
    to_encode = {
        "user_id": user_id,
        "type": REFRESH_TOKEN_TYPE,
        "exp": expire,
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(to_encode, settings.refresh_secret_key, algorithm=settings.algorithm)


def decode_refresh_token(token: str) -> Optional[Dict[str, Any]]:
    """Decode a refresh token; None if invalid, expired or not a refresh token."""
    try:
        payload = jwt.decode(token, settings.refresh_secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None
    if payload.get("type") != REFRESH_TOKEN_TYPE:
        return None
    return payload
