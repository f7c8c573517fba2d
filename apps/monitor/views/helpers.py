"""
Shared helper functions, decorators, and payload builders for views.
"""

import json
import logging
from decimal import Decimal, InvalidOperation
from functools import wraps

from django.core.exceptions import NON_FIELD_ERRORS, ValidationError
from django.http import JsonResponse
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from ..models import Role, UserProfile

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Error responses
# ---------------------------------------------------------------------------

def error_response(message, status=400, field=None):
    """JSON error body shared by every endpoint: {"message", "field"?}."""
    body = {"message": message}
    if field:
        body["field"] = field
    return JsonResponse(body, status=status)


def validation_error_response(exc: ValidationError):
    """Translate a ValidationError into a 400 naming the first bad field."""
    if hasattr(exc, "error_dict"):
        field, messages = next(iter(exc.message_dict.items()))
        if field == NON_FIELD_ERRORS:
            field = None
        return error_response(messages[0], 400, field)
    return error_response(exc.messages[0], 400)


def parse_json_body(request):
    """
    Decode a JSON object body.

    Returns (payload, error_response):
      - (dict, None) on success
      - (None, JsonResponse) on failure
    """
    try:
        payload = json.loads(request.body.decode("utf-8") or "{}")
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None, error_response("Invalid JSON")
    if not isinstance(payload, dict):
        return None, error_response("JSON body must be an object")
    return payload, None


# ---------------------------------------------------------------------------
# Auth decorators
# ---------------------------------------------------------------------------

def get_role(user):
    return UserProfile.for_user(user).role


def api_login_required(view_func):
    """
    Decorator for JSON API views that require a logged-in user (session-based).
    Returns HTTP 401 JSON instead of redirecting to login HTML.
    """
    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return error_response("Authentication required", status=401)
        return view_func(request, *args, **kwargs)
    return _wrapped


def check_role(request, required):
    """Return a 403 response if the user lacks `required`, else None."""
    if not Role.satisfies(get_role(request.user), required):
        return error_response("You do not have permission to perform this action.", status=403)
    return None


def role_required(required):
    """
    Decorator for JSON API views restricted to a minimum role.
    Implies api_login_required.
    """
    def decorator(view_func):
        @wraps(view_func)
        def _wrapped(request, *args, **kwargs):
            if not request.user.is_authenticated:
                return error_response("Authentication required", status=401)
            denied = check_role(request, required)
            if denied is not None:
                return denied
            return view_func(request, *args, **kwargs)
        return _wrapped
    return decorator


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------

def _parse_bool(value) -> bool:
    """Parse a JSON or query-string value to boolean."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return str(value).lower() in ("1", "true", "yes", "y", "on")


def _parse_int(value, field, minimum=None, maximum=None):
    """Coerce `value` to int or raise a ValidationError naming `field`."""
    if isinstance(value, bool):
        raise ValidationError({field: f"'{field}' must be an integer."})
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError({field: f"'{field}' must be an integer."})
    if minimum is not None and number < minimum:
        raise ValidationError({field: f"'{field}' must be at least {minimum}."})
    if maximum is not None and number > maximum:
        raise ValidationError({field: f"'{field}' must be at most {maximum}."})
    return number


def _parse_decimal(value, field, minimum=None, maximum=None):
    """Coerce `value` to a 2-place Decimal or raise a ValidationError."""
    if isinstance(value, bool) or value is None:
        raise ValidationError({field: f"'{field}' must be a number."})
    try:
        number = Decimal(str(value)).quantize(Decimal("0.01"))
    except (InvalidOperation, ValueError):
        raise ValidationError({field: f"'{field}' must be a number."})
    if not number.is_finite():
        raise ValidationError({field: f"'{field}' must be a number."})
    if minimum is not None and number < minimum:
        raise ValidationError({field: f"'{field}' must be at least {minimum}."})
    if maximum is not None and number > maximum:
        raise ValidationError({field: f"'{field}' must be at most {maximum}."})
    return number


def _parse_local(dt_str):
    """
    Parse a datetime string (from the browser) and make it
    timezone-aware in the current Django timezone.
    """
    if not dt_str:
        return None
    try:
        dt = parse_datetime(dt_str)
    except ValueError:
        return None
    if not dt:
        return None
    if timezone.is_naive(dt):
        dt = timezone.make_aware(dt, timezone.get_current_timezone())
    return dt


def _iso(dt):
    return dt.isoformat() if dt else None


# ---------------------------------------------------------------------------
# Payload builders
# ---------------------------------------------------------------------------

def _user_payload(user):
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "role": get_role(user),
        "date_joined": _iso(user.date_joined),
        "last_login": _iso(user.last_login),
    }


def _site_payload(site, device_count=None):
    return {
        "id": site.id,
        "name": site.name,
        "display_order": site.display_order,
        "device_count": site.device_count() if device_count is None else device_count,
        "created_at": _iso(site.created_at),
    }


def _device_payload(device):
    return {
        "id": device.id,
        "name": device.name,
        "ip": device.ip,
        "community": device.community,
        "type": device.type,
        "site": device.site,
        "status": device.status,
        "utilization": device.utilization,
        "bandwidth_mbps": float(device.bandwidth_mbps),
        "max_bandwidth": device.max_bandwidth,
        "last_seen": _iso(device.last_seen),
        "last_check": _iso(device.last_check),
        "created_at": _iso(device.created_at),
    }


def _link_payload(link):
    return {
        "id": link.id,
        "source_device_id": link.source_device_id,
        "target_device_id": link.target_device_id,
        "link_type": link.link_type,
        "link_label": link.link_label,
        "bandwidth_mbps": link.bandwidth_mbps,
        "current_traffic_mbps": float(link.current_traffic_mbps),
        "status": link.status,
        "last_check": _iso(link.last_check),
        "created_at": _iso(link.created_at),
        "updated_at": _iso(link.updated_at),
    }


def _history_payload(sample):
    return {
        "id": sample.id,
        "device_id": sample.device_id,
        "timestamp": _iso(sample.timestamp),
        "utilization": sample.utilization,
        "bandwidth_mbps": float(sample.bandwidth_mbps),
    }


def _log_payload(entry):
    return {
        "id": entry.id,
        "created_at": _iso(entry.created_at),
        "level": entry.level,
        "message": entry.message,
        "device_id": entry.device_id,
    }
