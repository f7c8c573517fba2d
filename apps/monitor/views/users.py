"""
User management views (admin only).
"""

import logging

from django.contrib.auth import get_user_model
from django.http import JsonResponse
from django.views.decorators.http import require_http_methods

from ..emails import send_account_deletion_email, send_welcome_email
from ..models import ActivityLog, Role, UserProfile
from .auth import _validate_new_account, create_account
from .helpers import _user_payload, error_response, parse_json_body, role_required

logger = logging.getLogger(__name__)
User = get_user_model()


@require_http_methods(["GET", "POST"])
@role_required(Role.ADMIN)
def users_collection(request):
    """
    GET  -> every user with its role
    POST -> create a user

    POST body:
    {
        "username": "jdoe",
        "email": "jdoe@example.com",
        "password": "secret123",
        "role": "operator"          # optional, defaults to viewer
    }
    """
    if request.method == "GET":
        users = User.objects.select_related("profile").order_by("username")
        return JsonResponse({"users": [_user_payload(u) for u in users]})

    payload, error = parse_json_body(request)
    if error is not None:
        return error

    role = payload.get("role") or Role.VIEWER
    if not Role.is_valid(role):
        return error_response(f"Invalid role '{role}'.", field="role")

    fields, error = _validate_new_account(payload)
    if error is not None:
        return error

    user = create_account(fields, role)
    logger.info("User %s created by %s", user.username, request.user.username)

    email_sent = send_welcome_email(user.email, user.first_name)

    return JsonResponse(
        {**_user_payload(user), "welcome_email_sent": email_sent},
        status=201,
    )


@require_http_methods(["PATCH"])
@role_required(Role.ADMIN)
def update_user_role(request, user_id):
    """
    Body:
    {
        "role": "admin" | "operator" | "viewer"
    }
    """
    user = User.objects.filter(pk=user_id).first()
    if user is None:
        return error_response("User not found", status=404)

    if user.pk == request.user.pk:
        return error_response("You cannot change your own role.", field="role")

    payload, error = parse_json_body(request)
    if error is not None:
        return error

    role = payload.get("role")
    if not Role.is_valid(role):
        return error_response(f"Invalid role '{role}'.", field="role")

    profile = UserProfile.for_user(user)
    profile.role = role
    profile.save(update_fields=["role", "updated_at"])

    is_admin = role == Role.ADMIN
    if user.is_staff != is_admin or user.is_superuser != is_admin:
        user.is_staff = user.is_superuser = is_admin
        user.save(update_fields=["is_staff", "is_superuser"])

    ActivityLog.record(f"Role of '{user.username}' changed to {role}")
    return JsonResponse(_user_payload(user))


@require_http_methods(["DELETE"])
@role_required(Role.ADMIN)
def user_detail(request, user_id):
    user = User.objects.filter(pk=user_id).first()
    if user is None:
        return error_response("User not found", status=404)

    if user.pk == request.user.pk:
        return error_response("You cannot delete your own account from user management.")

    email, first_name, username = user.email, user.first_name, user.username
    user.delete()
    ActivityLog.record(f"User '{username}' deleted by {request.user.username}")

    email_sent = send_account_deletion_email(email, first_name)

    return JsonResponse({"message": f"User '{username}' deleted.", "email_sent": email_sent})
