# storefront/core/email_client.py
"""
SMTP e-mail sending for storefront notifications.

Responsibilities:
  - Build the SMTP connection from Settings (SMTP_* keys).
  - Provide a single send_email(...) function for services to use.
  - Support both STARTTLS and implicit SSL connections.

Typical .env configuration:

    SMTP_HOST=smtp.example.com
    SMTP_PORT=587
    SMTP_USERNAME=shop@example.com
    SMTP_PASSWORD=app-password
    SMTP_FROM_EMAIL=shop@example.com
    SMTP_FROM_NAME=Storefront
    SMTP_USE_TLS=true
    SMTP_USE_SSL=false
"""
import smtplib
from email.message import EmailMessage

from storefront.core.config import Settings, get_settings


def smtp_configured(settings: Settings | None = None) -> bool:
    settings = settings or get_settings()
    return bool(settings.SMTP_HOST and settings.SMTP_USERNAME and settings.SMTP_PASSWORD)


def _create_smtp_client(settings: Settings) -> smtplib.SMTP:
    """
    Open an SMTP connection.

    - SMTP_USE_SSL -> smtplib.SMTP_SSL (usually port 465)
    - otherwise    -> smtplib.SMTP, upgraded with STARTTLS when SMTP_USE_TLS
    """
    if settings.SMTP_USE_SSL:
        return smtplib.SMTP_SSL(settings.SMTP_HOST, settings.SMTP_PORT, timeout=30)

    server = smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=30)
    if settings.SMTP_USE_TLS:
        server.starttls()
    return server


def send_email(
    to_email: str,
    subject: str,
    text_body: str,
    html_body: str | None = None,
) -> None:
    """
    Send an e-mail to a single recipient.

    Raises:
        RuntimeError: SMTP is not configured.
        smtplib.SMTPException / OSError: connection or delivery failed.
    """
    settings = get_settings()
    if not smtp_configured(settings):
        raise RuntimeError(
            "SMTP is not configured. Set SMTP_HOST, SMTP_USERNAME and SMTP_PASSWORD."
        )

    sender = settings.SMTP_FROM_EMAIL or settings.SMTP_USERNAME

    msg = EmailMessage()
    msg["From"] = f"{settings.SMTP_FROM_NAME} <{sender}>"
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.set_content(text_body)
    if html_body:
        msg.add_alternative(html_body, subtype="html")

    server = _create_smtp_client(settings)
    try:
        server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
        server.send_message(msg)
    finally:
        try:
            server.quit()
        except (smtplib.SMTPException, OSError):
            # connection is being torn down anyway
            pass
