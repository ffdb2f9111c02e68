# storefront/core/session_cart.py
"""
Shopping cart persistence in the signed session cookie.

The cart lives under request.session["ShoppingCart"] as a list of
camelCase CartItem dicts. Corrupt or foreign session content reads as an
empty cart.
"""
import logging

from fastapi import Request
from pydantic import ValidationError

from storefront.schemas.cart import CartItem

logger = logging.getLogger(__name__)

CART_SESSION_KEY = "ShoppingCart"


class SessionCart:
    def __init__(self, request: Request):
        self.session = request.session

    def load(self) -> list[CartItem]:
        raw = self.session.get(CART_SESSION_KEY)
        if not raw:
            return []
        try:
            return [CartItem.model_validate(item) for item in raw]
        except (TypeError, ValidationError):
            logger.warning("Discarding unreadable cart from session")
            self.session.pop(CART_SESSION_KEY, None)
            return []

    def save(self, items: list[CartItem]) -> None:
        if not items:
            self.clear()
            return
        self.session[CART_SESSION_KEY] = [
            item.model_dump(mode="json", by_alias=True, exclude={"total_price"})
            for item in items
        ]

    def clear(self) -> None:
        self.session.pop(CART_SESSION_KEY, None)


def get_session_cart(request: Request) -> SessionCart:
    return SessionCart(request)
