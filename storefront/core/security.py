# storefront/core/security.py
"""
Password hashing and bearer token helpers.

- Hashing: passlib CryptContext. pbkdf2_sha256 is current; hashes in the
  deprecated schemes listed below still verify and are flagged for rehash.
  Old accounts may hold an unsalted base64 SHA-256 digest or plain text;
  the login flow upgrades those on first successful use.
- Tokens: HS256 JWT (python-jose) carrying username (sub), role and
  customer_id.
"""
import base64
import binascii
import hashlib
import hmac
from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import HTTPException, status
from jose import JWTError, jwt
from passlib.context import CryptContext

from storefront.core.config import get_settings

settings = get_settings()

pwd_context = CryptContext(
    schemes=["pbkdf2_sha256", "sha256_crypt"],
    deprecated=["sha256_crypt"],
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def is_password_hash(value: str) -> bool:
    """True when `value` is a hash string in one of the known schemes."""
    return pwd_context.identify(value) is not None


def verify_password(password: str, stored: str) -> tuple[bool, str | None]:
    """
    Check `password` against a stored hash.

    Returns:
        (matches, new_hash). new_hash is set when the stored hash uses a
        deprecated scheme and should be replaced.
    """
    if not is_password_hash(stored):
        return False, None
    return pwd_context.verify_and_update(password, stored)


def legacy_sha256(password: str) -> str:
    """Unsalted base64(SHA-256(password)), the old account format."""
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest()).decode("ascii")


def looks_like_legacy_sha256(stored: str) -> bool:
    """
    True for values shaped like a base64 SHA-256 digest (44 chars, 32 bytes).

    A plain-text password of that exact shape is indistinguishable from a
    digest, so it is never accepted by the plain-text fallback; such an
    account needs a password reset.
    """
    if len(stored) != 44:
        return False
    try:
        return len(base64.b64decode(stored, validate=True)) == 32
    except (binascii.Error, ValueError):
        return False


def legacy_sha256_matches(password: str, stored: str) -> bool:
    if not looks_like_legacy_sha256(stored):
        return False
    return hmac.compare_digest(legacy_sha256(password).encode("ascii"), stored.encode("ascii"))


def plaintext_equals(password: str, stored: str) -> bool:
    """Constant-time comparison for legacy plain-text credentials."""
    return hmac.compare_digest(password.encode("utf-8"), stored.encode("utf-8"))


def create_access_token(username: str, role: str, customer_id: str) -> str:
    now = datetime.now(timezone.utc)
    claims = {
        "sub": username,
        "role": role,
        "customer_id": customer_id,
        "iat": now,
        "exp": now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALG)


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and verify a bearer token (signature + exp).

    Raises:
        HTTPException(401): if token is invalid/expired.
    """
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALG])
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )
