"""
SceptView Network Monitor - Rate Limiting Decorators

This module provides rate limiting decorators to protect API endpoints
from abuse and brute-force attacks:
    - ratelimit_login: 5 attempts per minute per IP
    - ratelimit_register: 3 registrations per hour per IP
    - ratelimit_password_reset: 5 reset requests per hour per IP

Author:     Gonzalo Patino
Created:    2025
Course:     Southern New Hampshire University
License:    Academic Use Only - See LICENSE file
"""

from django.conf import settings
from django.http import JsonResponse
from django_ratelimit.decorators import ratelimit


# Rate limit decorators for specific endpoints
def ratelimit_login(view_func):
    """Rate limit: 5 attempts per minute for login."""
    return ratelimit(
        key="ip",
        rate=getattr(settings, "RATELIMIT_LOGIN", "5/m"),
        method=["POST"],
        block=True,
    )(view_func)


def ratelimit_register(view_func):
    """Rate limit: 3 registrations per hour per IP."""
    return ratelimit(
        key="ip",
        rate=getattr(settings, "RATELIMIT_REGISTER", "3/h"),
        method=["POST"],
        block=True,
    )(view_func)


def ratelimit_password_reset(view_func):
    """Rate limit: 5 password reset requests per hour per IP."""
    return ratelimit(
        key="ip",
        rate=getattr(settings, "RATELIMIT_PASSWORD_RESET", "5/h"),
        method=["POST"],
        block=True,
    )(view_func)


def ratelimited_error(request, exception=None):
    """Custom view for rate limit exceeded errors."""
    return JsonResponse(
        {
            "error": "rate_limit_exceeded",
            "message": "Too many requests. Please try again later.",
        },
        status=429,
    )
