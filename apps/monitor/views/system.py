"""
System views - notification settings, SMTP checks and the activity log.
"""

import logging

from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import JsonResponse
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from ..emails import send_test_email, smtp_configured, test_email_connection
from ..models import ActivityLog, NotificationSettings, Role
from .helpers import (
    _iso,
    _log_payload,
    _parse_bool,
    _parse_int,
    api_login_required,
    error_response,
    parse_json_body,
    role_required,
    validation_error_response,
)

logger = logging.getLogger(__name__)

DEFAULT_LOG_LIMIT = 100
MAX_LOG_LIMIT = 500

NOTIFICATION_FLAGS = (
    "email_enabled",
    "notify_on_offline",
    "notify_on_recovery",
    "notify_on_high_utilization",
)


def ping(request):
    """Health check endpoint."""
    return JsonResponse(
        {
            "status": "ok",
            "message": "monitor api wired",
        }
    )


def _notification_payload(alert_settings):
    return {
        "email_enabled": alert_settings.email_enabled,
        "email_recipients": alert_settings.recipient_list(),
        "notify_on_offline": alert_settings.notify_on_offline,
        "notify_on_recovery": alert_settings.notify_on_recovery,
        "notify_on_high_utilization": alert_settings.notify_on_high_utilization,
        "utilization_threshold": alert_settings.utilization_threshold,
        "cooldown_minutes": alert_settings.cooldown_minutes,
        "last_notification_at": _iso(alert_settings.last_notification_at),
        "smtp_configured": smtp_configured(),
    }


@require_http_methods(["GET", "POST"])
@role_required(Role.OPERATOR)
def notification_settings(request):
    """
    GET  -> current alert settings
    POST -> update any subset of them

    POST body:
    {
        "email_enabled": true,
        "email_recipients": ["noc@example.com"],   # or a comma separated string
        "notify_on_offline": true,
        "notify_on_recovery": true,
        "notify_on_high_utilization": false,
        "utilization_threshold": 90,
        "cooldown_minutes": 5
    }
    """
    alert_settings = NotificationSettings.load()

    if request.method == "GET":
        return JsonResponse(_notification_payload(alert_settings))

    payload, error = parse_json_body(request)
    if error is not None:
        return error

    for flag in NOTIFICATION_FLAGS:
        if flag in payload:
            setattr(alert_settings, flag, _parse_bool(payload[flag]))

    if "email_recipients" in payload:
        recipients = payload["email_recipients"] or []
        if isinstance(recipients, str):
            recipients = recipients.split(",")
        if not isinstance(recipients, list):
            return error_response(
                "'email_recipients' must be a list or comma separated string.",
                field="email_recipients",
            )
        recipients = [str(r).strip() for r in recipients if str(r).strip()]
        bad = [r for r in recipients if "@" not in r]
        if bad:
            return error_response(
                f"Invalid email address: {bad[0]}", field="email_recipients"
            )
        alert_settings.email_recipients = ", ".join(recipients)

    try:
        if "utilization_threshold" in payload:
            alert_settings.utilization_threshold = _parse_int(
                payload["utilization_threshold"], "utilization_threshold", minimum=1, maximum=100
            )
        if "cooldown_minutes" in payload:
            alert_settings.cooldown_minutes = _parse_int(
                payload["cooldown_minutes"], "cooldown_minutes", minimum=0
            )
    except ValidationError as exc:
        return validation_error_response(exc)

    alert_settings.save()
    logger.info("Notification settings updated by %s", request.user.username)

    return JsonResponse(_notification_payload(alert_settings))


@require_POST
@role_required(Role.ADMIN)
def send_test_email_view(request):
    """
    Body:
    {
        "to": "admin@example.com"     # optional, defaults to your own address
    }
    """
    payload, error = parse_json_body(request)
    if error is not None:
        return error

    to = str(payload.get("to") or request.user.email or "").strip()
    if not to:
        return error_response("Recipient address is required.", field="to")

    result = send_test_email(to)
    return JsonResponse(result, status=200 if result["success"] else 400)


@require_GET
@role_required(Role.ADMIN)
def smtp_status(request):
    connection = test_email_connection()
    return JsonResponse(
        {
            "configured": smtp_configured(),
            "host": settings.EMAIL_HOST or None,
            "port": settings.EMAIL_PORT,
            "from_email": settings.DEFAULT_FROM_EMAIL or None,
            "connection": connection,
        }
    )


@require_GET
@api_login_required
def activity_logs(request):
    """
    Newest activity first.

    Query params:
      - limit: optional int, defaults to 100, capped at 500
    """
    try:
        requested_limit = int(request.GET.get("limit", DEFAULT_LOG_LIMIT))
    except ValueError:
        requested_limit = DEFAULT_LOG_LIMIT

    limit = max(1, min(requested_limit, MAX_LOG_LIMIT))

    entries = ActivityLog.objects.all()[:limit]
    return JsonResponse(
        {
            "count": len(entries),
            "logs": [_log_payload(e) for e in entries],
        }
    )
