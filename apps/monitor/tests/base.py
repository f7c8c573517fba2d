"""
Shared fixtures for the monitor test suite.
"""

import json

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.test import TestCase

from apps.monitor.models import Device, Role, Site, UserProfile

User = get_user_model()


def make_user(username, role=Role.VIEWER, password="secret123", email=None):
    user = User.objects.create_user(
        username=username,
        email=email or f"{username}@example.com",
        password=password,
    )
    UserProfile.objects.create(user=user, role=role)
    return user


def make_site(name, display_order=None):
    if display_order is None:
        display_order = Site.next_display_order()
    return Site.objects.create(name=name, display_order=display_order)


def make_device(name, site, device_type="generic", **extra):
    extra.setdefault("ip", "10.0.0.1")
    return Device.objects.create(name=name, site=site, type=device_type, **extra)


class MonitorTestCase(TestCase):
    """TestCase with JSON request helpers and a clean rate-limit cache."""

    def setUp(self):
        # django-ratelimit counters live in the cache and outlive transactions
        cache.clear()

    def login_as(self, role, username=None):
        user = make_user(username or f"{role}-user", role=role)
        self.client.force_login(user)
        return user

    def post_json(self, url, data=None, **extra):
        return self.client.post(
            url, data=json.dumps(data or {}), content_type="application/json", **extra
        )

    def patch_json(self, url, data=None):
        return self.client.patch(url, data=json.dumps(data or {}), content_type="application/json")

    def delete_json(self, url, data=None):
        return self.client.delete(url, data=json.dumps(data or {}), content_type="application/json")
