# storefront/models/user.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    """
    Local credential record used by the login flow.

    Role:
      - "Customer" | "Admin"

    password_hash normally holds a passlib hash string. Rows imported from
    the legacy system may still hold the plain-text password; those are
    upgraded to a hash on the first successful login.
    """

    __tablename__ = "users"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    username: str = Field(
        unique=True,
        index=True,
        max_length=50,
    )

    password_hash: str = Field(
        description="passlib hash (or legacy plain text awaiting upgrade)",
    )

    role: str = Field(
        default="Customer",
        index=True,
        description="Application role: Customer | Admin",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
