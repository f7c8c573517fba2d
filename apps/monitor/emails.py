"""
Account lifecycle email: welcome, password reset, account deletion and the
SMTP test message.

Every sender is gated on SMTP being configured and never raises: failures
are logged and reported through the return value so the action that
triggered the email still succeeds.
"""

import logging

from django.conf import settings
from django.core.mail import get_connection, send_mail
from django.template.loader import render_to_string
from django.utils import timezone

logger = logging.getLogger(__name__)

SENDER_NAME = "SceptView Network Monitor"


def smtp_configured():
    return bool(settings.EMAIL_HOST and settings.EMAIL_HOST_USER)


def from_address():
    return f'"{SENDER_NAME}" <{settings.DEFAULT_FROM_EMAIL}>'


def send_templated_email(recipients, subject, template, context):
    """
    Render emails/<template>.txt and emails/<template>.html and send them as
    one multipart message. Raises on transport errors.
    """
    context = {"product_name": SENDER_NAME, **context}
    send_mail(
        subject=subject,
        message=render_to_string(f"emails/{template}.txt", context),
        from_email=from_address(),
        recipient_list=list(recipients),
        html_message=render_to_string(f"emails/{template}.html", context),
        fail_silently=False,
    )


def _deliver(kind, to, subject, template, context):
    if not smtp_configured():
        logger.info("SMTP not configured, skipping %s email", kind)
        return False
    if not to:
        logger.warning("No recipient address for %s email", kind)
        return False

    try:
        send_templated_email([to], subject, template, context)
    except Exception as e:
        logger.error("Failed to send %s email to %s: %s", kind, to, e)
        return False

    logger.info("%s email sent to %s", kind.capitalize(), to)
    return True


def send_welcome_email(to, first_name=""):
    return _deliver(
        "welcome",
        to,
        f"Welcome to {SENDER_NAME}",
        "welcome",
        {"first_name": first_name},
    )


def send_password_reset_email(to, reset_token, base_url):
    reset_url = f"{base_url.rstrip('/')}/reset-password?token={reset_token}"
    return _deliver(
        "password reset",
        to,
        f"Reset Your Password - {SENDER_NAME}",
        "password_reset",
        {"reset_url": reset_url},
    )


def send_account_deletion_email(to, first_name=""):
    return _deliver(
        "account deletion",
        to,
        f"Account Deleted - {SENDER_NAME}",
        "account_deleted",
        {"first_name": first_name},
    )


def send_test_email(to):
    """Send the SMTP configuration test message. Returns {success, message}."""
    if not smtp_configured():
        return {
            "success": False,
            "message": (
                "SMTP not configured. Please set SMTP_HOST, SMTP_PORT, "
                "SMTP_USER, and SMTP_PASS environment variables."
            ),
        }

    try:
        send_templated_email(
            [to],
            f"Test Email - {SENDER_NAME} SMTP Configuration",
            "test",
            {"sent_at": timezone.localtime()},
        )
    except Exception as e:
        logger.error("Failed to send test email to %s: %s", to, e)
        return {"success": False, "message": str(e) or "Failed to send test email"}

    logger.info("Test email sent successfully to %s", to)
    return {"success": True, "message": f"Test email sent successfully to {to}"}


def test_email_connection():
    """Open and close an SMTP connection. Returns {success, message}."""
    if not smtp_configured():
        return {"success": False, "message": "SMTP credentials not configured"}

    connection = get_connection(fail_silently=False)
    try:
        connection.open()
        connection.close()
    except Exception as e:
        logger.warning("SMTP connection check failed: %s", e)
        return {"success": False, "message": str(e) or "SMTP connection failed"}

    return {"success": True, "message": "SMTP connection successful"}
