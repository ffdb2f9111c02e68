# storefront/core/auth.py
from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from storefront.core.security import decode_access_token

ROLE_CUSTOMER = "Customer"
ROLE_ADMIN = "Admin"

# auto_error=False: a missing Authorization header means an anonymous
# visitor, which public routes (home, product browsing) allow.
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Identity:
    """Who is calling, as carried by the bearer token."""

    username: str
    role: str
    customer_id: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> Identity | None:
    """
    Resolve the caller from the bearer token.

    Returns:
        Identity, or None for anonymous callers.

    Raises:
        HTTPException(401): token is invalid, expired or lacks a username/role.
    """
    if credentials is None:
        return None

    payload = decode_access_token(credentials.credentials)
    username = payload.get("sub")
    role = payload.get("role")
    if not username or not role:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token missing sub/role",
        )
    return Identity(
        username=username,
        role=role,
        customer_id=payload.get("customer_id") or "",
    )


def require_auth(identity: Identity | None = Depends(get_current_identity)) -> Identity:
    """
    Enforce authentication.

    Raises:
        HTTPException(401): anonymous caller.
    """
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return identity


def require_admin(identity: Identity = Depends(require_auth)) -> Identity:
    """
    Enforce the Admin role.

    Raises:
        HTTPException(403): role is not Admin.
    """
    if identity.role != ROLE_ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return identity


def require_customer(identity: Identity = Depends(require_auth)) -> Identity:
    """
    Enforce the Customer role (cart, checkout, my orders).
    Admins are rejected with 403.
    """
    if identity.role != ROLE_CUSTOMER:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Customer access required",
        )
    return identity
