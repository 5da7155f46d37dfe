"""
Token Revocation using Redis.

Blacklists access tokens on logout so they stop working before they expire.
"""

import logging
from swiftdrop.app.core.config import settings
from swiftdrop.app.core.redis_client import get_redis

logger = logging.getLogger("swiftdrop.auth")

# Redis key prefix for blacklisted tokens
TOKEN_BLACKLIST_PREFIX = "blacklist:token:"


async def revoke_token(token: str, user_id: int) -> bool:
    """
    Revoke a specific JWT token by adding it to the blacklist.

    Args:
        token: The JWT token string to revoke
        user_id: User ID who owns the token

    Returns:
        True if successfully revoked, False otherwise
    """
    try:
        redis_client = await get_redis()
        # Tokens expire on their own, so the entry only has to outlive them
        ttl_seconds = settings.access_token_expire_minutes * 60
        await redis_client.set(
            f"{TOKEN_BLACKLIST_PREFIX}{token}",
            str(user_id),
            ex=ttl_seconds,
        )
        return True
    except Exception:
        logger.exception("Error revoking token for user %s", user_id)
        return False


async def is_token_revoked(token: str) -> bool:
    """
    Check if a token has been revoked.

    If Redis is unreachable the token is treated as valid (availability over
    strictness); the failure is logged.
    """
    try:
        redis_client = await get_redis()
        exists = await redis_client.exists(f"{TOKEN_BLACKLIST_PREFIX}{token}")
        return exists > 0
    except Exception:
        logger.exception("Error checking token revocation")
        return False
