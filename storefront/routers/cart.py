# storefront/routers/cart.py
from fastapi import APIRouter, Depends, status

from storefront.clients.base import FunctionsApi
from storefront.clients.deps import get_functions_api
from storefront.core.auth import Identity, require_customer
from storefront.core.session_cart import SessionCart, get_session_cart
from storefront.schemas.cart import CartItemAdd, CartItemUpdate, CartSummary
from storefront.schemas.order import Order
from storefront.services.cart_service import CartService
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/cart", tags=["Cart"])


def get_cart_service(api: FunctionsApi = Depends(get_functions_api)) -> CartService:
    return CartService(api)


def get_order_service(api: FunctionsApi = Depends(get_functions_api)) -> OrderService:
    return OrderService(api)


@router.get("", response_model=CartSummary)
def get_my_cart(
    identity: Identity = Depends(require_customer),
    cart: SessionCart = Depends(get_session_cart),
    service: CartService = Depends(get_cart_service),
):
    """
    Current cart with line totals, grand total and item count.

    Auth:
      - Only role='Customer' can access.
    """
    return service.get_cart_summary(cart)


@router.post("/items", response_model=CartSummary)
def add_to_cart(
    payload: CartItemAdd,
    identity: Identity = Depends(require_customer),
    cart: SessionCart = Depends(get_session_cart),
    service: CartService = Depends(get_cart_service),
):
    """
    Add a product; adding a product already in the cart increases its
    quantity. Returns the updated cart summary.
    """
    return service.add_item(cart, payload)


@router.patch("/items/{product_id}", response_model=CartSummary)
def update_cart_item(
    product_id: str,
    payload: CartItemUpdate,
    identity: Identity = Depends(require_customer),
    cart: SessionCart = Depends(get_session_cart),
    service: CartService = Depends(get_cart_service),
):
    return service.update_quantity(cart, product_id, payload)


@router.delete("/items/{product_id}", response_model=CartSummary)
def remove_cart_item(
    product_id: str,
    identity: Identity = Depends(require_customer),
    cart: SessionCart = Depends(get_session_cart),
    service: CartService = Depends(get_cart_service),
):
    return service.remove_item(cart, product_id)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
def clear_cart(
    identity: Identity = Depends(require_customer),
    cart: SessionCart = Depends(get_session_cart),
    service: CartService = Depends(get_cart_service),
):
    service.clear(cart)
    return None


@router.post(
    "/checkout",
    response_model=Order,
    status_code=status.HTTP_201_CREATED,
)
def checkout(
    identity: Identity = Depends(require_customer),
    cart: SessionCart = Depends(get_session_cart),
    service: OrderService = Depends(get_order_service),
):
    """
    Turn the cart into an order (status Submitted) and empty the cart.
    """
    return service.create_from_cart(identity, cart)
