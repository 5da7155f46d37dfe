"""
Password and refresh-token hashing utilities.
"""

import hashlib
import hmac

import bcrypt


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its bcrypt hash."""
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        return False


def hash_refresh_token(token: str) -> str:
    """
    Digest a refresh token for storage.

    Refresh tokens are long random JWTs (beyond bcrypt's 72-byte input limit),
    so a plain SHA-256 digest is stored instead.
    """
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def refresh_token_matches(token: str, stored_hash: str) -> bool:
    return hmac.compare_digest(hash_refresh_token(token), stored_hash)
