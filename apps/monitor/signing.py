"""
SceptView Network Monitor - Password Reset Tokens

This module issues and checks password reset tokens. Uses Django's built-in
signing module for tamper-proof, timestamped tokens, so nothing has to be
stored server side.

Functions:
    encode_reset_token: Issue a reset token for a user
    decode_reset_token: Resolve a reset token back to its user

Author:     Gonzalo Patino
Created:    2025
Course:     Southern New Hampshire University
License:    Academic Use Only - See LICENSE file
"""

import hashlib

from django.contrib.auth import get_user_model
from django.core import signing

# Salt ensures tokens for different purposes can't be swapped
PASSWORD_RESET_SALT = "password-reset-token"

# Reset links expire after one hour
PASSWORD_RESET_MAX_AGE = 60 * 60

User = get_user_model()


def _password_fingerprint(user) -> str:
    # Changes whenever the password does, which retires older tokens
    return hashlib.sha256(user.password.encode("utf-8")).hexdigest()[:16]


def encode_reset_token(user) -> str:
    """
    Encode a user into an opaque, signed reset token.

    Example:
        user #7 -> "eyJ1c2VyIjo3LCJwdyI6IjFhMmIuLi4ifQ:1tK2Xm:abc123..."
    """
    return signing.dumps(
        {"user": user.pk, "pw": _password_fingerprint(user)},
        salt=PASSWORD_RESET_SALT,
    )


def decode_reset_token(token: str, max_age: int = PASSWORD_RESET_MAX_AGE):
    """
    Decode a reset token back to its user.

    Returns None if the token is invalid, tampered with, expired, or was
    issued before the user's password last changed.
    """
    if not token:
        return None
    try:
        data = signing.loads(token, salt=PASSWORD_RESET_SALT, max_age=max_age)
    except signing.BadSignature:
        return None

    user = User.objects.filter(pk=data.get("user")).first()
    if user is None or data.get("pw") != _password_fingerprint(user):
        return None
    return user
