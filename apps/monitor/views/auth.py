"""
Authentication views - first-run setup, login, registration, password reset
and self-service account deletion. All endpoints speak JSON.
"""

import logging

from django.conf import settings
from django.contrib.auth import authenticate, get_user_model, login, logout
from django.db import transaction
from django.http import JsonResponse
from django.middleware.csrf import get_token
from django.views.decorators.csrf import ensure_csrf_cookie
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from ..emails import (
    send_account_deletion_email,
    send_password_reset_email,
    send_welcome_email,
)
from ..models import ActivityLog, Role, UserProfile
from ..ratelimits import ratelimit_login, ratelimit_password_reset, ratelimit_register
from ..signing import decode_reset_token, encode_reset_token
from .helpers import (
    _user_payload,
    api_login_required,
    error_response,
    get_role,
    parse_json_body,
)

logger = logging.getLogger(__name__)
User = get_user_model()

MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 6


def _text(payload, key):
    """String value of a JSON field; numbers are coerced, null becomes empty."""
    value = payload.get(key)
    return "" if value is None else str(value)


# ---------------------------------------------------------------------------
# Account creation
# ---------------------------------------------------------------------------

def _validate_new_account(payload):
    """
    Validate the fields of a new account.

    Returns (fields, error_response).
    """
    username = _text(payload, "username").strip()
    email = _text(payload, "email").strip()
    password = _text(payload, "password")

    if len(username) < MIN_USERNAME_LENGTH:
        return None, error_response(
            f"Username must be at least {MIN_USERNAME_LENGTH} characters.", field="username"
        )
    if not email or "@" not in email:
        return None, error_response("A valid email address is required.", field="email")
    if len(password) < MIN_PASSWORD_LENGTH:
        return None, error_response(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters.", field="password"
        )
    if User.objects.filter(username=username).exists():
        return None, error_response("This username is already taken.", field="username")
    if User.objects.filter(email__iexact=email).exists():
        return None, error_response("This email address is already in use.", field="email")

    return {
        "username": username,
        "email": email,
        "password": password,
        "first_name": _text(payload, "first_name").strip(),
        "last_name": _text(payload, "last_name").strip(),
    }, None


def create_account(fields, role):
    """Create a user with its profile. Admins also get Django admin access."""
    is_admin = role == Role.ADMIN
    with transaction.atomic():
        user = User.objects.create_user(
            username=fields["username"],
            email=fields["email"],
            password=fields["password"],
            first_name=fields["first_name"],
            last_name=fields["last_name"],
            is_staff=is_admin,
            is_superuser=is_admin,
        )
        UserProfile.objects.create(user=user, role=role)
    ActivityLog.record(f"User '{user.username}' created with role {role}")
    return user


@require_GET
def needs_setup(request):
    """True until the first account exists."""
    return JsonResponse({"needs_setup": not User.objects.exists()})


@require_POST
@ratelimit_register
def setup_admin(request):
    """
    Create the first administrator account.

    Body:
    {
        "username": "admin",
        "email": "admin@example.com",
        "password": "secret123",
        "first_name": "optional",
        "last_name": "optional"
    }

    Only allowed while no user exists. Logs the new admin in.
    """
    if User.objects.exists():
        return error_response("Setup has already been completed.", status=403)

    payload, error = parse_json_body(request)
    if error is not None:
        return error

    fields, error = _validate_new_account(payload)
    if error is not None:
        return error

    user = create_account(fields, Role.ADMIN)
    login(request, user)
    logger.info("Initial admin account %s created", user.username)

    email_sent = send_welcome_email(user.email, user.first_name)

    return JsonResponse(
        {**_user_payload(user), "welcome_email_sent": email_sent},
        status=201,
    )


@require_POST
@ratelimit_register
def register_user(request):
    """
    Self-registration. New accounts always start as viewers.

    On success:
    - Creates a new user
    - Logs them in (session cookie)
    - Sends a welcome email (failure does not block registration)
    """
    payload, error = parse_json_body(request)
    if error is not None:
        return error

    fields, error = _validate_new_account(payload)
    if error is not None:
        return error

    user = create_account(fields, Role.VIEWER)
    login(request, user)

    email_sent = send_welcome_email(user.email, user.first_name)

    return JsonResponse(
        {**_user_payload(user), "welcome_email_sent": email_sent},
        status=201,
    )


# ---------------------------------------------------------------------------
# Session endpoints
# ---------------------------------------------------------------------------

@require_GET
@ensure_csrf_cookie
def csrf_token(request):
    """Set the CSRF cookie for the browser client and echo the token."""
    return JsonResponse({"csrf_token": get_token(request)})


@ratelimit_login
@require_POST
def login_user(request):
    """
    JSON login endpoint.

    Body:
    {
        "username": "admin",        # or "email": "admin@example.com"
        "password": "secret123"
    }
    """
    payload, error = parse_json_body(request)
    if error is not None:
        return error

    username = _text(payload, "username").strip()
    email = _text(payload, "email").strip()
    password = _text(payload, "password")

    if not (username or email) or not password:
        return error_response("Fields 'username' (or 'email') and 'password' are required")

    if not username:
        match = User.objects.filter(email__iexact=email).first()
        username = match.username if match else email

    user = authenticate(request, username=username, password=password)
    if user is None:
        return error_response("Invalid credentials")

    login(request, user)

    return JsonResponse(_user_payload(user))


@require_POST
def logout_user(request):
    """
    Log out the current user (session-based).
    """
    logout(request)
    return JsonResponse({"status": "ok"})


@require_GET
@api_login_required
def current_user(request):
    return JsonResponse(_user_payload(request.user))


# ---------------------------------------------------------------------------
# Password reset
# ---------------------------------------------------------------------------

def _reset_base_url(request):
    return settings.APP_BASE_URL or request.build_absolute_uri("/").rstrip("/")


@require_POST
@ratelimit_password_reset
def forgot_password(request):
    """
    Email a password reset link.

    Always answers 200 so the endpoint cannot be used to probe which
    addresses are registered.
    """
    payload, error = parse_json_body(request)
    if error is not None:
        return error

    email = _text(payload, "email").strip()
    user = User.objects.filter(email__iexact=email).first() if email else None
    if user is not None:
        token = encode_reset_token(user)
        send_password_reset_email(user.email, token, _reset_base_url(request))
    else:
        logger.info("Password reset requested for unknown email")

    return JsonResponse(
        {"message": "If that email is registered, a reset link has been sent."}
    )


@require_GET
def verify_reset_token(request):
    user = decode_reset_token(request.GET.get("token", ""))
    if user is None:
        return JsonResponse({"valid": False, "message": "This reset link is invalid or has expired."})
    return JsonResponse({"valid": True})


@require_POST
def reset_password(request):
    """
    Body:
    {
        "token": "<token from the reset email>",
        "password": "new-secret"
    }
    """
    payload, error = parse_json_body(request)
    if error is not None:
        return error

    password = _text(payload, "password")
    if len(password) < MIN_PASSWORD_LENGTH:
        return error_response(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters.", field="password"
        )

    user = decode_reset_token(_text(payload, "token"))
    if user is None:
        return error_response("This reset link is invalid or has expired.", field="token")

    user.set_password(password)
    user.save(update_fields=["password"])
    logger.info("Password reset completed for user %s", user.username)

    return JsonResponse({"message": "Password has been reset. You can now sign in."})


# ---------------------------------------------------------------------------
# Account deletion
# ---------------------------------------------------------------------------

def is_last_admin(user):
    if get_role(user) != Role.ADMIN:
        return False
    return not UserProfile.objects.filter(role=Role.ADMIN).exclude(user=user).exists()


@require_http_methods(["DELETE"])
@api_login_required
def delete_account(request):
    """
    Delete the logged-in user's own account after re-checking the password.

    Body:
    {
        "password": "secret123"
    }
    """
    payload, error = parse_json_body(request)
    if error is not None:
        return error

    user = request.user
    if not user.check_password(_text(payload, "password")):
        return error_response("Password is incorrect.", field="password")

    if is_last_admin(user):
        return error_response(
            "You are the only administrator. Promote another user before deleting your account."
        )

    email, first_name, username = user.email, user.first_name, user.username
    logout(request)
    user.delete()
    ActivityLog.record(f"User '{username}' deleted their account")

    email_sent = send_account_deletion_email(email, first_name)

    return JsonResponse({"message": "Account deleted.", "email_sent": email_sent})
