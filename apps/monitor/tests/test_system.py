from django.core import mail
from django.test import override_settings
from django.urls import reverse

from apps.monitor.models import ActivityLog, NotificationSettings, Role

from .base import MonitorTestCase


class NotificationSettingsApiTests(MonitorTestCase):
    def test_viewer_is_forbidden(self):
        self.login_as(Role.VIEWER)
        response = self.client.get(reverse("notification-settings"))
        self.assertEqual(response.status_code, 403)

    def test_operator_reads_defaults(self):
        self.login_as(Role.OPERATOR)

        response = self.client.get(reverse("notification-settings"))

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertFalse(body["email_enabled"])
        self.assertEqual(body["utilization_threshold"], 90)
        self.assertEqual(body["cooldown_minutes"], 5)

    def test_operator_updates_settings(self):
        self.login_as(Role.OPERATOR)

        response = self.post_json(
            reverse("notification-settings"),
            {
                "email_enabled": True,
                "email_recipients": ["noc@example.com", " ops@example.com "],
                "utilization_threshold": 75,
                "cooldown_minutes": 0,
            },
        )

        self.assertEqual(response.status_code, 200)
        stored = NotificationSettings.load()
        self.assertTrue(stored.email_enabled)
        self.assertEqual(stored.recipient_list(), ["noc@example.com", "ops@example.com"])
        self.assertEqual(stored.utilization_threshold, 75)
        self.assertEqual(stored.cooldown_minutes, 0)

    def test_invalid_threshold_rejected(self):
        self.login_as(Role.OPERATOR)

        response = self.post_json(
            reverse("notification-settings"), {"utilization_threshold": 150}
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["field"], "utilization_threshold")

    def test_invalid_recipient_rejected(self):
        self.login_as(Role.OPERATOR)

        response = self.post_json(
            reverse("notification-settings"), {"email_recipients": "not-an-address"}
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["field"], "email_recipients")


class SmtpEndpointTests(MonitorTestCase):
    def test_operator_cannot_send_test_email(self):
        self.login_as(Role.OPERATOR)
        response = self.post_json(reverse("test-email"), {"to": "a@example.com"})
        self.assertEqual(response.status_code, 403)

    @override_settings(EMAIL_HOST="smtp.example.com", EMAIL_HOST_USER="alerts@example.com")
    def test_admin_sends_test_email(self):
        self.login_as(Role.ADMIN)

        response = self.post_json(reverse("test-email"), {"to": "a@example.com"})

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["success"])
        self.assertEqual(mail.outbox[0].to, ["a@example.com"])

    @override_settings(EMAIL_HOST="", EMAIL_HOST_USER="")
    def test_test_email_without_smtp(self):
        self.login_as(Role.ADMIN)

        response = self.post_json(reverse("test-email"), {"to": "a@example.com"})

        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()["success"])

    @override_settings(EMAIL_HOST="", EMAIL_HOST_USER="")
    def test_smtp_status(self):
        self.login_as(Role.ADMIN)

        response = self.client.get(reverse("smtp-status"))

        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.json()["configured"])
        self.assertFalse(response.json()["connection"]["success"])


class ActivityLogApiTests(MonitorTestCase):
    def test_newest_first_with_limit(self):
        for i in range(3):
            ActivityLog.record(f"event {i}")
        self.login_as(Role.VIEWER)

        response = self.client.get(reverse("activity-logs"), {"limit": 2})

        body = response.json()
        self.assertEqual(body["count"], 2)
        self.assertEqual([e["message"] for e in body["logs"]], ["event 2", "event 1"])

    def test_limit_is_capped(self):
        ActivityLog.objects.bulk_create(ActivityLog(message=f"e{i}") for i in range(510))
        self.login_as(Role.VIEWER)

        response = self.client.get(reverse("activity-logs"), {"limit": 1000})
        self.assertEqual(response.json()["count"], 500)

        response = self.client.get(reverse("activity-logs"))
        self.assertEqual(response.json()["count"], 100)

    def test_requires_login(self):
        self.assertEqual(self.client.get(reverse("activity-logs")).status_code, 401)


class HealthTests(MonitorTestCase):
    def test_health(self):
        response = self.client.get(reverse("health"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "ok")
