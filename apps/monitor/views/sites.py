"""
Site registry views: list, add, bulk import, reorder, rename and delete.
"""

import logging

from django.core.exceptions import ValidationError
from django.db.models import Count
from django.http import JsonResponse
from django.views.decorators.http import require_http_methods, require_POST

from ..models import ActivityLog, Device, Role, Site
from .helpers import (
    _parse_int,
    _site_payload,
    api_login_required,
    check_role,
    error_response,
    parse_json_body,
    role_required,
    validation_error_response,
)

logger = logging.getLogger(__name__)


def _device_counts():
    rows = Device.objects.values("site").annotate(total=Count("id"))
    return {row["site"]: row["total"] for row in rows}


@require_http_methods(["GET", "POST"])
@api_login_required
def sites_collection(request):
    """
    GET  -> sites in display order, each with its device count
    POST -> {"name": "Branch Office"} adds a site at the end of the list
    """
    if request.method == "GET":
        counts = _device_counts()
        return JsonResponse(
            {"sites": [_site_payload(s, counts.get(s.name, 0)) for s in Site.objects.all()]}
        )

    denied = check_role(request, Role.OPERATOR)
    if denied is not None:
        return denied

    payload, error = parse_json_body(request)
    if error is not None:
        return error

    name = str(payload.get("name") or "").strip()
    if not name:
        return error_response("Site name is required.", field="name")
    if Site.objects.filter(name=name).exists():
        return error_response("A site with that name already exists.", field="name")

    site = Site(name=name, display_order=Site.next_display_order())
    try:
        site.full_clean()
    except ValidationError as exc:
        return validation_error_response(exc)
    site.save()

    ActivityLog.record(f"Site '{site.name}' added")
    return JsonResponse(_site_payload(site, 0), status=201)


@require_POST
@role_required(Role.OPERATOR)
def reorder_sites(request):
    """
    Body:
    {
        "site_ids": [3, 1, 2]
    }
    """
    payload, error = parse_json_body(request)
    if error is not None:
        return error

    raw_ids = payload.get("site_ids")
    if not isinstance(raw_ids, list) or not raw_ids:
        return error_response("'site_ids' must be a non-empty list.", field="site_ids")

    try:
        site_ids = [_parse_int(value, "site_ids") for value in raw_ids]
        if len(set(site_ids)) != len(site_ids):
            raise ValidationError({"site_ids": "'site_ids' contains duplicates."})
        Site.reorder(site_ids)
    except ValidationError as exc:
        return validation_error_response(exc)

    counts = _device_counts()
    return JsonResponse(
        {"sites": [_site_payload(s, counts.get(s.name, 0)) for s in Site.objects.all()]}
    )


@require_POST
@role_required(Role.OPERATOR)
def bulk_import_sites(request):
    """
    Body:
    {
        "names": ["HQ", "Warehouse", "Branch"]
    }
    """
    payload, error = parse_json_body(request)
    if error is not None:
        return error

    names = payload.get("names")
    if not isinstance(names, list):
        return error_response("'names' must be a list.", field="names")

    created, skipped = Site.bulk_import(names)
    if created:
        ActivityLog.record(f"Imported {len(created)} site(s): {', '.join(created)}")

    return JsonResponse({"created": created, "skipped": skipped})


@require_http_methods(["PATCH", "DELETE"])
@role_required(Role.OPERATOR)
def site_detail(request, site_id):
    """
    PATCH  {"name": "New Name"}            -> rename, moving its devices along
    DELETE {"reassign_to": "Other Site"}   -> delete, moving its devices first
    """
    site = Site.objects.filter(pk=site_id).first()
    if site is None:
        return error_response("Site not found", status=404)

    if request.method == "PATCH":
        return rename_site(request, site)

    # DELETE may come without a body
    payload, error = parse_json_body(request)
    if error is not None:
        return error
    target = payload.get("reassign_to") or request.GET.get("reassign_to")

    old_name = site.name
    try:
        reassigned = site.delete_with_reassignment(target)
    except ValidationError as exc:
        return validation_error_response(exc)

    if reassigned:
        ActivityLog.record(
            f"Site '{old_name}' deleted, {reassigned} device(s) moved to '{target}'",
            ActivityLog.WARNING,
        )
    else:
        ActivityLog.record(f"Site '{old_name}' deleted", ActivityLog.WARNING)

    return JsonResponse({"deleted": old_name, "reassigned": reassigned})


def rename_site(request, site):
    payload, error = parse_json_body(request)
    if error is not None:
        return error

    old_name = site.name
    try:
        reassigned = site.rename(payload.get("name"))
    except ValidationError as exc:
        return validation_error_response(exc)

    if site.name != old_name:
        ActivityLog.record(
            f"Site '{old_name}' renamed to '{site.name}' ({reassigned} device(s) updated)"
        )

    return JsonResponse(
        {"site": _site_payload(site), "reassigned": reassigned}
    )
