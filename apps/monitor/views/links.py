"""
Device link views: CRUD plus auto-discovery.
"""

import logging

from django.core.exceptions import ValidationError
from django.http import HttpResponse, JsonResponse
from django.views.decorators.http import require_http_methods, require_POST

from ..discovery import auto_discover
from ..models import ActivityLog, Device, DeviceLink, Role
from .helpers import (
    _link_payload,
    _parse_int,
    api_login_required,
    check_role,
    error_response,
    parse_json_body,
    role_required,
    validation_error_response,
)

logger = logging.getLogger(__name__)


def _resolve_device(payload, field):
    device_id = _parse_int(payload.get(field), field)
    device = Device.objects.filter(pk=device_id).first()
    if device is None:
        raise ValidationError({field: f"Device {device_id} does not exist."})
    return device


def _apply_link_fields(link, payload, partial):
    for field, attr in (("source_device_id", "source_device"), ("target_device_id", "target_device")):
        if field in payload:
            setattr(link, attr, _resolve_device(payload, field))
        elif not partial:
            raise ValidationError({field: f"Field '{field}' is required."})

    if "bandwidth_mbps" in payload:
        link.bandwidth_mbps = _parse_int(payload["bandwidth_mbps"], "bandwidth_mbps", minimum=1)

    if "link_label" in payload:
        link.link_label = str(payload.get("link_label") or "").strip()

    if link.source_device_id == link.target_device_id:
        raise ValidationError(
            {"target_device_id": "Source and target devices must be different."}
        )


def _save_link(link):
    """Validate, derive status and persist. Raises ValidationError."""
    try:
        link.full_clean()
    except ValidationError as exc:
        # Report model field names the way the API spells them
        errors = {
            (f"{field}_id" if field in ("source_device", "target_device") else field): messages
            for field, messages in exc.message_dict.items()
        }
        raise ValidationError(errors)
    link.refresh_status(save=False)
    link.save()


@require_http_methods(["GET", "POST"])
@api_login_required
def links_collection(request):
    """
    GET  -> every link
    POST -> create a manual link

    POST body:
    {
        "source_device_id": 1,
        "target_device_id": 2,
        "link_label": "uplink",     # optional
        "bandwidth_mbps": 1000      # optional
    }
    """
    if request.method == "GET":
        return JsonResponse(
            {"links": [_link_payload(link) for link in DeviceLink.objects.all()]}
        )

    denied = check_role(request, Role.OPERATOR)
    if denied is not None:
        return denied

    payload, error = parse_json_body(request)
    if error is not None:
        return error

    link = DeviceLink()
    try:
        _apply_link_fields(link, payload, partial=False)
        _save_link(link)
    except ValidationError as exc:
        return validation_error_response(exc)

    ActivityLog.record(
        f"Link added between '{link.source_device.name}' and '{link.target_device.name}'"
    )
    return JsonResponse(_link_payload(link), status=201)


@require_http_methods(["GET", "PATCH", "DELETE"])
@api_login_required
def link_detail(request, link_id):
    link = DeviceLink.objects.select_related("source_device", "target_device").filter(
        pk=link_id
    ).first()
    if link is None:
        return error_response("Link not found", status=404)

    if request.method == "GET":
        return JsonResponse(_link_payload(link))

    denied = check_role(request, Role.OPERATOR)
    if denied is not None:
        return denied

    if request.method == "DELETE":
        link.delete()
        ActivityLog.record(f"Link {link_id} removed", ActivityLog.WARNING)
        return HttpResponse(status=204)

    payload, error = parse_json_body(request)
    if error is not None:
        return error

    try:
        _apply_link_fields(link, payload, partial=True)
        _save_link(link)
    except ValidationError as exc:
        return validation_error_response(exc)

    return JsonResponse(_link_payload(link))


@require_POST
@role_required(Role.OPERATOR)
def auto_discover_links(request):
    created = auto_discover()
    if created:
        ActivityLog.record(f"Auto-discovery added {len(created)} link(s)")
    return JsonResponse(
        {
            "discovered": len(created),
            "links": [_link_payload(link) for link in created],
        }
    )
