"""Security and authentication utilities."""
import secrets
import hmac
import hashlib
from datetime import datetime, timedelta, timezone
from typing import Optional
import argon2
import jwt
from fastapi import HTTPException

from rollcall.core import config

# Argon2 hasher for account passwords
ph = argon2.PasswordHasher(
    time_cost=2,
    memory_cost=65536,
    parallelism=1,
    hash_len=32,
    salt_len=16
)


def generate_qr_token() -> str:
    """Generate a secure random QR token (256 bits, URL-safe)."""
    return secrets.token_urlsafe(32)


def get_password_hash(password: str) -> str:
    """Hash a password using Argon2."""
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its Argon2 hash."""
    try:
        ph.verify(password_hash, password)
        return True
    except argon2.exceptions.VerifyMismatchError:
        return False
    except argon2.exceptions.InvalidHashError:
        return False


def create_token_lookup_key(token: str) -> str:
    """Create deterministic lookup key from token using HMAC-SHA256.

    QR tokens are stored only as this key, so a leaked database row cannot be
    replayed as a valid scan. HMAC (rather than Argon2) keeps the lookup O(1)
    on an indexed column; tokens are random 32-byte values, not user-chosen.

    Returns:
        64-character hex string (SHA256 output)
    """
    return hmac.new(
        config.settings.SECRET_KEY.encode(),
        token.encode(),
        hashlib.sha256
    ).hexdigest()


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=config.settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, config.settings.SECRET_KEY, algorithm=config.settings.ALGORITHM)
    return encoded_jwt


def create_user_token(user_id: int, role: int) -> str:
    """Create the bearer token handed to the mobile client after login."""
    return create_access_token({"sub": str(user_id), "role": role})


def decode_access_token(token: str) -> dict:
    """Decode and verify a bearer token, returning its payload."""
    try:
        payload = jwt.decode(token, config.settings.SECRET_KEY, algorithms=[config.settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.PyJWTError:
        raise HTTPException(status_code=401, detail="Invalid token")

    if not payload.get("sub"):
        raise HTTPException(status_code=401, detail="Invalid token")
    return payload
