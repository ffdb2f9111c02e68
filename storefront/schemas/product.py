# storefront/schemas/product.py
from decimal import Decimal

from pydantic import Field

from storefront.schemas.entity import CamelModel, Money, TableEntityModel

PRODUCT_PARTITION = "PRODUCTS"


class Product(TableEntityModel):
    """
    Catalog entry.

    stock_available is informational: orders do not decrement it.
    """

    product_name: str = ""
    description: str = ""
    price: Money = Field(default=Decimal("0"), ge=0)
    stock_available: int = Field(default=0, ge=0)
    product_image_url: str = ""

    @property
    def product_id(self) -> str | None:
        return self.row_key


class ProductUpdate(CamelModel):
    """
    Gateway PUT payload. Only the fields sent are changed.
    """

    partition_key: str | None = None
    etag: str | None = Field(default=None, alias="eTag")
    product_name: str | None = None
    description: str | None = None
    price: Money | None = Field(default=None, ge=0)
    stock_available: int | None = Field(default=None, ge=0)
    product_image_url: str | None = None
