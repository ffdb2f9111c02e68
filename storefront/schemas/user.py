# storefront/schemas/user.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import EmailStr, ConfigDict, field_validator, model_validator
from sqlmodel import SQLModel, Field

# App-level roles. Anonymous callers carry no token, so no role is stored for them.
Role = Literal["Customer", "Admin"]


class RegisterRequest(SQLModel):
    """
    Self-registration payload.

    Validation rules:
      - username 3..50 chars
      - password at least 6 chars, must equal confirm_password
      - names, email and shipping address are required
    """

    model_config = ConfigDict(extra="forbid")

    username: str = Field(min_length=3, max_length=50)
    password: str = Field(min_length=6)
    confirm_password: str
    first_name: str
    last_name: str
    email: EmailStr
    shipping_address: str
    role: Role = "Customer"

    @field_validator("username", "first_name", "last_name", "shipping_address")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v

    @model_validator(mode="after")
    def passwords_match(self) -> "RegisterRequest":
        if self.password != self.confirm_password:
            raise ValueError("The password and confirmation password do not match.")
        return self


class LoginRequest(SQLModel):
    model_config = ConfigDict(extra="forbid")

    username: str
    password: str


class TokenResponse(SQLModel):
    """Bearer token plus the identity it carries."""

    access_token: str
    token_type: str = "bearer"
    username: str
    role: Role
    customer_id: str


class UserRead(SQLModel):
    id: uuid.UUID
    username: str
    role: Role
    created_at: datetime
