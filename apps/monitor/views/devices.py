"""
SceptView Network Monitor - Device Endpoints

This module provides the device inventory JSON endpoints:
    - devices_collection: List (optionally per site) and create devices
    - device_detail: Retrieve, update and delete one device
    - reassign_site: Move every device of one site to another
    - record_metrics: Apply a poll result to a device
    - device_history: Samples, averages and trend for a time window

Reads are open to every signed-in user; mutations require an operator.

Author:     Gonzalo Patino
Created:    2025
Course:     Southern New Hampshire University
License:    Academic Use Only - See LICENSE file
"""

import logging

from django.core.exceptions import ValidationError
from django.http import HttpResponse, JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_http_methods, require_POST

from ..history import (
    DEFAULT_WINDOW_HOURS,
    MAX_HISTORY_SAMPLES,
    MAX_WINDOW_HOURS,
    compare_performance,
    window_start,
)
from ..models import ActivityLog, Device, DeviceType, Role, Site
from ..notifications import check_and_send_device_alerts
from .helpers import (
    _device_payload,
    _history_payload,
    _parse_bool,
    _parse_decimal,
    _parse_int,
    _parse_local,
    api_login_required,
    check_role,
    error_response,
    parse_json_body,
    role_required,
    validation_error_response,
)

logger = logging.getLogger(__name__)

# Free-text fields a client may set on create/update
EDITABLE_TEXT_FIELDS = ("name", "ip", "community", "site")

# Largest value the 10,2 bandwidth columns hold
MAX_BANDWIDTH_MBPS = 99999999


def _apply_device_fields(device, payload, partial):
    """
    Copy editable fields from `payload` onto `device`.
    Raises ValidationError for missing or malformed values.
    """
    for field in EDITABLE_TEXT_FIELDS:
        if field in payload:
            setattr(device, field, str(payload.get(field) or "").strip())
        elif not partial and field != "community":
            raise ValidationError({field: f"Field '{field}' is required."})

    if "type" in payload:
        device_type = payload.get("type")
        if not isinstance(device_type, str) or device_type not in dict(DeviceType.CHOICES):
            raise ValidationError({"type": f"Invalid device type '{device_type}'."})
        device.type = device_type

    if "max_bandwidth" in payload:
        device.max_bandwidth = _parse_int(payload["max_bandwidth"], "max_bandwidth", minimum=1)

    if not device.community:
        device.community = "public"


@require_http_methods(["GET", "POST"])
@api_login_required
def devices_collection(request):
    """
    GET  -> all devices, filtered by ?site=<name> when given
    POST -> create a device

    POST body:
    {
        "name": "core-router",
        "ip": "10.0.0.1",
        "site": "HQ",
        "type": "mikrotik",         # optional, defaults to generic
        "community": "public",      # optional
        "max_bandwidth": 1000       # optional, Mbps
    }
    """
    if request.method == "GET":
        devices = Device.objects.all()
        site = request.GET.get("site")
        if site:
            devices = devices.filter(site=site)
        return JsonResponse({"devices": [_device_payload(d) for d in devices]})

    denied = check_role(request, Role.OPERATOR)
    if denied is not None:
        return denied

    payload, error = parse_json_body(request)
    if error is not None:
        return error

    device = Device()
    try:
        _apply_device_fields(device, payload, partial=False)
        device.full_clean()
    except ValidationError as exc:
        return validation_error_response(exc)
    device.save()

    ActivityLog.record(f"Device '{device.name}' added to {device.site}", device=device)
    logger.info("Device %s (%s) created", device.name, device.ip)

    return JsonResponse(_device_payload(device), status=201)


@require_http_methods(["GET", "PATCH", "DELETE"])
@api_login_required
def device_detail(request, device_id):
    device = Device.objects.filter(pk=device_id).first()
    if device is None:
        return error_response("Device not found", status=404)

    if request.method == "GET":
        return JsonResponse(_device_payload(device))

    denied = check_role(request, Role.OPERATOR)
    if denied is not None:
        return denied

    if request.method == "DELETE":
        name = device.name
        device.delete()
        ActivityLog.record(f"Device '{name}' removed", ActivityLog.WARNING)
        return HttpResponse(status=204)

    payload, error = parse_json_body(request)
    if error is not None:
        return error

    try:
        _apply_device_fields(device, payload, partial=True)
        device.full_clean()
    except ValidationError as exc:
        return validation_error_response(exc)
    device.save()

    ActivityLog.record(f"Device '{device.name}' updated", device=device)
    return JsonResponse(_device_payload(device))


@require_POST
@role_required(Role.OPERATOR)
def reassign_site(request):
    """
    Move every device of one site to another.

    Body:
    {
        "from_site": "Old Site",
        "to_site": "New Site"
    }
    """
    payload, error = parse_json_body(request)
    if error is not None:
        return error

    from_site = str(payload.get("from_site") or "").strip()
    to_site = str(payload.get("to_site") or "").strip()
    if not from_site:
        return error_response("Field 'from_site' is required.", field="from_site")
    if not to_site:
        return error_response("Field 'to_site' is required.", field="to_site")
    if not Site.objects.filter(name=to_site).exists():
        return error_response(f"Site '{to_site}' does not exist.", field="to_site")

    updated = Device.objects.filter(site=from_site).update(site=to_site)
    if not updated:
        return error_response(f"No devices found on site '{from_site}'.", status=404)

    ActivityLog.record(f"Moved {updated} device(s) from '{from_site}' to '{to_site}'")
    return JsonResponse({"updated": updated})


@require_POST
@role_required(Role.OPERATOR)
def record_metrics(request, device_id):
    """
    Apply one poll result to a device.

    Body:
    {
        "utilization": 42,          # percent, 0-100
        "bandwidth_mbps": 120.5,
        "reachable": true           # optional, defaults to true
    }

    Updates the device and its links, appends a history sample and sends
    any device alerts that apply.
    """
    device = Device.objects.filter(pk=device_id).first()
    if device is None:
        return error_response("Device not found", status=404)

    payload, error = parse_json_body(request)
    if error is not None:
        return error

    try:
        utilization = _parse_int(payload.get("utilization"), "utilization", minimum=0, maximum=100)
        bandwidth = _parse_decimal(
            payload.get("bandwidth_mbps"), "bandwidth_mbps", minimum=0, maximum=MAX_BANDWIDTH_MBPS
        )
    except ValidationError as exc:
        return validation_error_response(exc)

    reachable = _parse_bool(payload["reachable"]) if "reachable" in payload else True

    previous = device.record_metrics(utilization, bandwidth, reachable=reachable)
    alerts = check_and_send_device_alerts(device, previous)

    return JsonResponse(
        {
            "device": _device_payload(device),
            "previous_status": previous,
            "alerts_sent": alerts,
        }
    )


@require_http_methods(["GET"])
@api_login_required
def device_history(request, device_id):
    """
    Samples, averages and current-vs-average comparison for a device.

    Query params (either form):
      - hours: trailing window in hours (default 24)
      - start, end: explicit ISO datetimes
    """
    device = Device.objects.filter(pk=device_id).first()
    if device is None:
        return error_response("Device not found", status=404)

    start_raw = request.GET.get("start")
    end_raw = request.GET.get("end")

    if start_raw or end_raw:
        start = _parse_local(start_raw)
        end = _parse_local(end_raw)
        if start is None:
            return error_response("Invalid 'start' datetime.", field="start")
        if end is None:
            return error_response("Invalid 'end' datetime.", field="end")
        if start > end:
            return error_response("'start' must be before 'end'.", field="start")
    else:
        try:
            hours = _parse_int(
                request.GET.get("hours", DEFAULT_WINDOW_HOURS),
                "hours",
                minimum=1,
                maximum=MAX_WINDOW_HOURS,
            )
        except ValidationError as exc:
            return validation_error_response(exc)
        end = timezone.now()
        start = window_start(hours, end)

    samples = list(
        device.history
        .filter(timestamp__gte=start, timestamp__lte=end)
        .order_by("-timestamp")[:MAX_HISTORY_SAMPLES]
    )

    comparison = compare_performance(device.utilization, device.bandwidth_mbps, samples)

    return JsonResponse(
        {
            "device_id": device.id,
            "start": start.isoformat(),
            "end": end.isoformat(),
            "count": len(samples),
            "history": [_history_payload(s) for s in samples],
            "averages": {
                "avg_utilization": comparison["utilization"]["average"],
                "avg_bandwidth": comparison["bandwidth"]["average"],
            },
            "comparison": comparison,
        }
    )
