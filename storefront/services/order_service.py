# storefront/services/order_service.py
import logging
from datetime import datetime, timezone
from decimal import Decimal

from fastapi import HTTPException, status

from storefront.clients.base import FileContent, FunctionsApi
from storefront.core.auth import Identity
from storefront.core.config import get_settings
from storefront.core.session_cart import SessionCart
from storefront.schemas.customer import CUSTOMER_PARTITION, Customer
from storefront.schemas.order import (
    CANCELLABLE_STATUSES,
    AdminOrderEdit,
    Order,
    OrderItem,
    OrderStatus,
    OrderUpdate,
    can_transition,
    parse_status,
)
from storefront.services.notification_service import send_order_confirmation

logger = logging.getLogger(__name__)

settings = get_settings()

CHECKOUT_RETRY_MESSAGE = "We could not place your order. Please try again."

MAX_PROOF_BYTES = 5 * 1024 * 1024  # 5MB


def _newest_first(orders: list[Order]) -> list[Order]:
    def key(order: Order) -> datetime:
        d = order.order_date
        return d if d.tzinfo else d.replace(tzinfo=timezone.utc)

    return sorted(orders, key=key, reverse=True)


class OrderService:
    """
    Business logic for checkout and order management.

    Responsibilities:
      - checkout: session cart -> Order (status Submitted), then clear cart
      - enforce the status machine on every status change
      - ownership checks for customer-facing order views
      - admin listing / edit / status / delete
    """

    def __init__(self, api: FunctionsApi):
        self.api = api

    # ----- helpers -----

    @staticmethod
    def _is_owner(order: Order, identity: Identity) -> bool:
        if identity.customer_id and order.customer_id == identity.customer_id:
            return True
        return bool(identity.username) and order.username == identity.username

    def _get_order_or_404(self, order_id: str) -> Order:
        order = self.api.get_order(order_id)
        if order is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )
        return order

    def _get_own_order(self, identity: Identity, order_id: str) -> Order:
        order = self._get_order_or_404(order_id)
        if not self._is_owner(order, identity):
            # same answer as a missing order: do not reveal other customers' ids
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )
        return order

    def _resolve_customer(self, identity: Identity) -> Customer:
        """
        Customer for checkout: by id, then by username, else a minimal
        record that is persisted best-effort.
        """
        customer = self.api.get_customer(identity.customer_id)
        if customer is None:
            customer = self.api.get_customer_by_username(identity.username)
        if customer is not None:
            return customer

        logger.warning(
            "No customer record for %s; creating a minimal one", identity.username
        )
        customer = Customer(
            partition_key=CUSTOMER_PARTITION,
            row_key=identity.customer_id,
            username=identity.username,
            name="Customer",
            surname="User",
            email=f"{identity.username}@{settings.FALLBACK_EMAIL_DOMAIN}",
            shipping_address="Address not provided",
        )
        created = self.api.create_customer(customer)
        logger.info("Minimal customer creation for %s: %s", identity.username, created is not None)
        return created or customer

    def _set_status(self, order: Order, new_status: OrderStatus) -> Order:
        if not self.api.update_order_status(order.row_key, new_status):
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Could not update the order. Please try again.",
            )
        return order.model_copy(update={"status": new_status.value})

    # ----- checkout -----

    def create_from_cart(self, identity: Identity, cart: SessionCart) -> Order:
        """
        Place an order from the session cart.

        Steps:
          1. identity must carry username + customer id
          2. cart must be non-empty
          3. resolve (or synthesize) the customer
          4. cart lines -> order items, with product images
          5. create the order (status Submitted)
          6. clear the cart (only after the order exists)
          7. send a confirmation e-mail (best effort)
        """
        if not identity.username or not identity.customer_id:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Please log in to checkout.",
            )

        cart_items = cart.load()
        if not cart_items:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Your cart is empty.",
            )

        customer = self._resolve_customer(identity)

        order_items: list[OrderItem] = []
        for it in cart_items:
            product = self.api.get_product(it.product_id)
            order_items.append(
                OrderItem(
                    product_id=it.product_id,
                    product_name=it.product_name,
                    quantity=it.quantity,
                    unit_price=it.unit_price,
                    image_url=(product.product_image_url or None) if product else None,
                )
            )

        order = Order(
            customer_id=customer.row_key or identity.customer_id,
            username=customer.username or identity.username,
            order_date=datetime.now(timezone.utc),
            status=OrderStatus.SUBMITTED.value,
            shipping_address=customer.shipping_address,
            customer_email=customer.email,
            order_items=order_items,
            total_amount=sum((i.total_price for i in order_items), Decimal("0")),
        )

        created = self.api.create_order(order)
        if created is None:
            logger.error("Checkout failed for %s: order was not created", identity.username)
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=CHECKOUT_RETRY_MESSAGE,
            )

        cart.clear()
        logger.info(
            "Order %s placed by %s (%d items, total %s)",
            created.row_key,
            identity.username,
            len(created.order_items),
            created.total_amount,
        )

        customer_name = f"{customer.name} {customer.surname}".strip() or identity.username
        send_order_confirmation(created, customer_name)
        return created

    # ----- customer views -----

    def list_my_orders(self, identity: Identity) -> list[Order]:
        """Own orders, newest first."""
        orders = self.api.list_orders_for_customer(customer_id=identity.customer_id)
        if not orders:
            orders = self.api.list_orders_for_customer(username=identity.username)
        return _newest_first(orders)

    def get_my_order(self, identity: Identity, order_id: str) -> Order:
        return self._get_own_order(identity, order_id)

    def cancel_my_order(self, identity: Identity, order_id: str) -> Order:
        """
        Customer cancellation: own orders only, and only while Submitted
        or Processing.
        """
        order = self._get_own_order(identity, order_id)
        current = parse_status(order.status)
        if current not in CANCELLABLE_STATUSES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Orders with status '{order.status}' cannot be cancelled.",
            )
        logger.info("Order %s cancelled by customer %s", order_id, identity.username)
        return self._set_status(order, OrderStatus.CANCELLED)

    def upload_proof_of_payment(
        self,
        identity: Identity,
        order_id: str,
        file: FileContent,
    ) -> str:
        order = self._get_own_order(identity, order_id)
        if not file.data:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Uploaded file is empty",
            )
        if len(file.data) > MAX_PROOF_BYTES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="File too large (max 5MB)",
            )

        url = self.api.upload_proof_of_payment(order.row_key, file)
        if url is None:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Could not upload the file. Please try again.",
            )
        logger.info("Proof of payment for order %s uploaded by %s", order_id, identity.username)
        return url

    # ----- admin -----

    def list_all_orders(self) -> list[Order]:
        return _newest_first(self.api.list_orders())

    def get_order_admin(self, order_id: str) -> Order:
        return self._get_order_or_404(order_id)

    def update_status(self, order_id: str, new_status: OrderStatus) -> Order:
        """
        Admin status change. Follows the status machine, except that
        cancellation is allowed from any state. Any other invalid
        transition raises 400.
        """
        order = self._get_order_or_404(order_id)
        if order.status == new_status.value:
            return order
        if not can_transition(order.status, new_status, as_admin=True):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Cannot change status from '{order.status}' to '{new_status.value}'",
            )
        return self._set_status(order, new_status)

    def edit_order(self, order_id: str, payload: AdminOrderEdit) -> Order:
        """
        Admin edit: status and order date only; every other field keeps
        its stored value.
        """
        order = self._get_order_or_404(order_id)
        changes = OrderUpdate()

        if payload.order_date is not None:
            changes = changes.model_copy(update={"order_date": payload.order_date})

        if payload.status is not None and payload.status.value != order.status:
            if not can_transition(order.status, payload.status, as_admin=True):
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Cannot change status from '{order.status}' to '{payload.status.value}'",
                )
            changes = changes.model_copy(update={"status": payload.status.value})

        if not changes.model_fields_set:
            return order

        changes = changes.model_copy(update={"etag": order.etag})
        if not self.api.update_order(order_id, changes):
            latest = self.api.get_order(order_id)
            if latest is not None and latest.etag != order.etag:
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="The order was changed by someone else. Reload and try again.",
                )
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Could not update the order. Please try again.",
            )
        return self._get_order_or_404(order_id)

    def delete_order(self, order_id: str) -> None:
        self._get_order_or_404(order_id)
        if not self.api.delete_order(order_id):
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Could not delete the order. Please try again.",
            )
        logger.info("Order %s deleted by admin", order_id)
