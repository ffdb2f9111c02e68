# storefront/services/cart_service.py
from decimal import Decimal

from fastapi import HTTPException, status

from storefront.clients.base import FunctionsApi
from storefront.core.session_cart import SessionCart
from storefront.schemas.cart import (
    CartItem,
    CartItemAdd,
    CartItemUpdate,
    CartLineRead,
    CartSummary,
)
from storefront.schemas.product import Product


class CartService:
    """
    Business logic for the session cart.

    Responsibilities:
      - validate product existence through the API client
      - reject a requested quantity above the product's stockAvailable
        (the cart is left untouched)
      - merge repeated adds of a product into one line
      - compute line totals and cart totals
    """

    def __init__(self, api: FunctionsApi):
        self.api = api

    # ---- internal helpers ----

    def _get_product(self, product_id: str) -> Product:
        product = self.api.get_product(product_id)
        if product is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        return product

    @staticmethod
    def _check_stock(product: Product, requested: int) -> None:
        if requested > product.stock_available:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Only {product.stock_available} items available in stock.",
            )

    @staticmethod
    def _find(items: list[CartItem], product_id: str) -> CartItem | None:
        return next((it for it in items if it.product_id == product_id), None)

    # ---- public operations ----

    def get_cart_summary(self, cart: SessionCart) -> CartSummary:
        """
        Return the cart with each line enriched with the product's current
        stock and image; grand_total and total_items cover all lines.
        """
        lines: list[CartLineRead] = []
        grand_total = Decimal("0")
        total_items = 0

        for it in cart.load():
            product = self.api.get_product(it.product_id)
            lines.append(
                CartLineRead(
                    product_id=it.product_id,
                    product_name=it.product_name,
                    unit_price=it.unit_price,
                    quantity=it.quantity,
                    stock_available=product.stock_available if product else 0,
                    image_url=(product.product_image_url or None) if product else None,
                )
            )
            grand_total += it.total_price
            total_items += it.quantity

        return CartSummary(items=lines, grand_total=grand_total, total_items=total_items)

    def add_item(self, cart: SessionCart, payload: CartItemAdd) -> CartSummary:
        """
        Add a product to the cart.

        Rules:
          - product must exist (404)
          - requested quantity <= stockAvailable (400, cart unchanged)
          - an existing line for the product has its quantity increased
        """
        product = self._get_product(payload.product_id)
        self._check_stock(product, payload.quantity)

        items = cart.load()
        existing = self._find(items, payload.product_id)
        if existing:
            existing.quantity += payload.quantity
        else:
            items.append(
                CartItem(
                    product_id=payload.product_id,
                    product_name=product.product_name,
                    unit_price=product.price,
                    quantity=payload.quantity,
                )
            )

        cart.save(items)
        return self.get_cart_summary(cart)

    def update_quantity(
        self,
        cart: SessionCart,
        product_id: str,
        payload: CartItemUpdate,
    ) -> CartSummary:
        items = cart.load()
        existing = self._find(items, product_id)
        if existing is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Item not in cart",
            )

        product = self._get_product(product_id)
        self._check_stock(product, payload.quantity)

        existing.quantity = payload.quantity
        cart.save(items)
        return self.get_cart_summary(cart)

    def remove_item(self, cart: SessionCart, product_id: str) -> CartSummary:
        """Removing a product that is not in the cart is a no-op."""
        items = [it for it in cart.load() if it.product_id != product_id]
        cart.save(items)
        return self.get_cart_summary(cart)

    def clear(self, cart: SessionCart) -> None:
        cart.clear()
