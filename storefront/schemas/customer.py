# storefront/schemas/customer.py
from pydantic import ConfigDict, EmailStr, Field, field_validator

from storefront.schemas.entity import CamelModel, TableEntityModel

CUSTOMER_PARTITION = "CUSTOMER"


class Customer(TableEntityModel):
    """
    Customer entity as stored by the gateway.

    customer_id is the row key; username is unique across customers.
    """

    name: str = ""
    surname: str = ""
    username: str = ""
    email: str = ""
    shipping_address: str = ""

    @property
    def customer_id(self) -> str | None:
        return self.row_key


class CustomerUpdate(CamelModel):
    """
    Gateway PUT payload. Only the fields sent are changed.
    """

    partition_key: str | None = None
    etag: str | None = Field(default=None, alias="eTag")
    name: str | None = None
    surname: str | None = None
    username: str | None = None
    email: str | None = None
    shipping_address: str | None = None


class CustomerProfileUpdate(CamelModel):
    """
    Storefront payload for a customer editing their own profile.
    Username is not editable.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = None
    surname: str | None = None
    email: EmailStr | None = None
    shipping_address: str | None = None

    @field_validator("name", "surname", "shipping_address")
    @classmethod
    def not_blank(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class CustomerCreate(CamelModel):
    """
    Admin payload for creating a customer record.
    """

    model_config = ConfigDict(extra="forbid")

    name: str
    surname: str
    username: str = Field(min_length=3, max_length=50)
    email: EmailStr
    shipping_address: str

    @field_validator("name", "surname", "username", "shipping_address")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v
