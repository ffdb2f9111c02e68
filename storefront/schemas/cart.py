# storefront/schemas/cart.py
from decimal import Decimal

from pydantic import ConfigDict, Field, computed_field

from storefront.schemas.entity import CamelModel, Money


class CartItem(CamelModel):
    """
    One cart line as kept in the session cookie.
    """

    product_id: str
    product_name: str = ""
    unit_price: Money = Field(default=Decimal("0"), ge=0)
    quantity: int = Field(gt=0)

    @computed_field
    @property
    def total_price(self) -> Money:
        return self.unit_price * self.quantity


class CartItemAdd(CamelModel):
    model_config = ConfigDict(extra="forbid")

    product_id: str = Field(min_length=1)
    quantity: int = Field(default=1, gt=0)


class CartItemUpdate(CamelModel):
    model_config = ConfigDict(extra="forbid")

    quantity: int = Field(gt=0)


class CartLineRead(CartItem):
    """Cart line enriched with the product's current stock and image."""

    stock_available: int = 0
    image_url: str | None = None


class CartSummary(CamelModel):
    items: list[CartLineRead] = Field(default_factory=list)
    grand_total: Money = Decimal("0")
    total_items: int = 0
