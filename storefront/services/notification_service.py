# storefront/services/notification_service.py
import logging
import smtplib

from storefront.core.config import get_settings
from storefront.core.email_client import send_email, smtp_configured
from storefront.schemas.order import Order

logger = logging.getLogger(__name__)

settings = get_settings()


def _order_confirmation_text(order: Order, customer_name: str) -> str:
    lines = [
        f"Hi {customer_name},",
        "",
        f"Thank you for your order {order.row_key}.",
        "",
    ]
    for item in order.order_items:
        lines.append(
            f"  {item.quantity} x {item.product_name} @ {item.unit_price:.2f} = {item.total_price:.2f}"
        )
    lines += [
        "",
        f"Total: {order.total_amount:.2f}",
        f"Shipping to: {order.shipping_address}",
        f"Status: {order.status}",
        "",
        f"- {settings.PROJECT_NAME}",
    ]
    return "\n".join(lines)


def send_order_confirmation(order: Order, customer_name: str) -> bool:
    """
    E-mail the order summary to order.customer_email.

    Best effort: returns False (and logs) when SMTP is not configured, the
    order has no address, or delivery fails. Never raises.
    """
    if not smtp_configured(settings):
        logger.debug("SMTP not configured; skipping confirmation for order %s", order.row_key)
        return False
    if not order.customer_email:
        return False

    try:
        send_email(
            to_email=order.customer_email,
            subject=f"[{settings.PROJECT_NAME}] Order {order.row_key} received",
            text_body=_order_confirmation_text(order, customer_name),
        )
    except (smtplib.SMTPException, OSError, RuntimeError):
        logger.exception("Failed to send confirmation for order %s", order.row_key)
        return False

    logger.info("Sent confirmation for order %s to %s", order.row_key, order.customer_email)
    return True
