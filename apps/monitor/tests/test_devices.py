from datetime import timedelta
from decimal import Decimal

from django.core import mail
from django.test import override_settings
from django.urls import reverse
from django.utils import timezone

from apps.monitor.models import (
    ActivityLog,
    Device,
    DeviceStatus,
    MetricsHistory,
    NotificationSettings,
    Role,
)
from apps.monitor.notifications import DeviceEvent, check_and_send_device_alerts

from .base import MonitorTestCase, make_device, make_site

SMTP = {"EMAIL_HOST": "smtp.example.com", "EMAIL_HOST_USER": "alerts@example.com"}


class DeviceStatusTests(MonitorTestCase):
    def test_after_poll_transitions(self):
        self.assertEqual(DeviceStatus.after_poll(DeviceStatus.UNKNOWN, True), DeviceStatus.GREEN)
        self.assertEqual(DeviceStatus.after_poll(DeviceStatus.GREEN, False), DeviceStatus.RED)
        self.assertEqual(DeviceStatus.after_poll(DeviceStatus.RED, True), DeviceStatus.BLUE)
        self.assertEqual(DeviceStatus.after_poll(DeviceStatus.BLUE, True), DeviceStatus.GREEN)

    def test_record_metrics_appends_history(self):
        make_site("HQ")
        device = make_device("router", "HQ")

        previous = device.record_metrics(55, Decimal("12.50"))

        self.assertEqual(previous, DeviceStatus.UNKNOWN)
        device.refresh_from_db()
        self.assertEqual(device.status, DeviceStatus.GREEN)
        self.assertEqual(device.utilization, 55)
        self.assertIsNotNone(device.last_seen)
        self.assertEqual(MetricsHistory.objects.filter(device=device).count(), 1)

    def test_last_seen_only_moves_when_green(self):
        make_site("HQ")
        device = make_device("router", "HQ")
        device.record_metrics(10, Decimal("1"))
        seen = device.last_seen

        device.record_metrics(0, Decimal("0"), reachable=False)
        device.record_metrics(10, Decimal("1"))

        device.refresh_from_db()
        self.assertEqual(device.status, DeviceStatus.BLUE)
        self.assertEqual(device.last_seen, seen)


class DeviceApiTests(MonitorTestCase):
    def setUp(self):
        super().setUp()
        make_site("HQ")
        make_site("Branch")

    def test_create_device(self):
        self.login_as(Role.OPERATOR)

        response = self.post_json(
            reverse("devices"),
            {"name": "router", "ip": "10.0.0.1", "site": "HQ", "type": "mikrotik"},
        )

        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body["status"], DeviceStatus.UNKNOWN)
        self.assertEqual(body["community"], "public")
        self.assertEqual(body["max_bandwidth"], 100)

    def test_create_device_on_unknown_site_rejected(self):
        self.login_as(Role.OPERATOR)

        response = self.post_json(
            reverse("devices"), {"name": "router", "ip": "10.0.0.1", "site": "Nowhere"}
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["field"], "site")

    def test_create_device_with_bad_type_rejected(self):
        self.login_as(Role.OPERATOR)

        response = self.post_json(
            reverse("devices"),
            {"name": "router", "ip": "10.0.0.1", "site": "HQ", "type": "cisco"},
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["field"], "type")

    def test_viewer_reads_but_cannot_mutate(self):
        device = make_device("router", "HQ")
        self.login_as(Role.VIEWER)

        self.assertEqual(self.client.get(reverse("devices")).status_code, 200)
        self.assertEqual(
            self.client.get(reverse("device-detail", args=[device.id])).status_code, 200
        )
        self.assertEqual(
            self.post_json(reverse("devices"), {"name": "x", "ip": "1.1.1.1", "site": "HQ"}).status_code,
            403,
        )
        self.assertEqual(
            self.client.delete(reverse("device-detail", args=[device.id])).status_code, 403
        )
        self.assertEqual(
            self.post_json(
                reverse("device-metrics", args=[device.id]),
                {"utilization": 1, "bandwidth_mbps": 1},
            ).status_code,
            403,
        )

    def test_list_filtered_by_site(self):
        make_device("router", "HQ")
        make_device("ap", "Branch")
        self.login_as(Role.VIEWER)

        response = self.client.get(reverse("devices"), {"site": "Branch"})

        self.assertEqual([d["name"] for d in response.json()["devices"]], ["ap"])

    def test_update_and_delete(self):
        device = make_device("router", "HQ")
        self.login_as(Role.OPERATOR)

        response = self.patch_json(
            reverse("device-detail", args=[device.id]), {"site": "Branch", "max_bandwidth": 1000}
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["site"], "Branch")
        self.assertEqual(response.json()["max_bandwidth"], 1000)

        response = self.client.delete(reverse("device-detail", args=[device.id]))
        self.assertEqual(response.status_code, 204)
        self.assertFalse(Device.objects.exists())

    def test_reassign_site(self):
        make_device("router", "HQ")
        make_device("switch", "HQ")
        self.login_as(Role.OPERATOR)

        response = self.post_json(
            reverse("devices-reassign-site"), {"from_site": "HQ", "to_site": "Branch"}
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"updated": 2})
        self.assertEqual(Device.objects.filter(site="Branch").count(), 2)

    def test_reassign_site_without_devices_is_404(self):
        self.login_as(Role.OPERATOR)

        response = self.post_json(
            reverse("devices-reassign-site"), {"from_site": "HQ", "to_site": "Branch"}
        )

        self.assertEqual(response.status_code, 404)

    def test_record_metrics_endpoint(self):
        device = make_device("router", "HQ")
        self.login_as(Role.OPERATOR)

        response = self.post_json(
            reverse("device-metrics", args=[device.id]),
            {"utilization": 42, "bandwidth_mbps": 120.5},
        )

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["previous_status"], DeviceStatus.UNKNOWN)
        self.assertEqual(body["device"]["status"], DeviceStatus.GREEN)
        self.assertEqual(body["device"]["bandwidth_mbps"], 120.5)

    def test_record_metrics_validates_utilization(self):
        device = make_device("router", "HQ")
        self.login_as(Role.OPERATOR)

        response = self.post_json(
            reverse("device-metrics", args=[device.id]),
            {"utilization": 101, "bandwidth_mbps": 1},
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["field"], "utilization")

    def test_invalid_json_is_400(self):
        self.login_as(Role.OPERATOR)

        response = self.client.post(
            reverse("devices"), data="{not json", content_type="application/json"
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Invalid JSON")


@override_settings(**SMTP)
class DeviceAlertTests(MonitorTestCase):
    def setUp(self):
        super().setUp()
        make_site("HQ")
        self.device = make_device("router", "HQ")
        self.alert_settings = NotificationSettings.objects.create(
            email_enabled=True,
            email_recipients="noc@example.com, ops@example.com",
            cooldown_minutes=5,
        )

    def _poll(self, reachable, utilization=10):
        previous = self.device.record_metrics(utilization, Decimal("1"), reachable=reachable)
        return check_and_send_device_alerts(self.device, previous)

    def test_offline_alert_sent_and_logged(self):
        self._poll(True)

        sent = self._poll(False)

        self.assertEqual(sent, [DeviceEvent.OFFLINE])
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn("OFFLINE: router (HQ)", mail.outbox[0].subject)
        self.assertEqual(mail.outbox[0].to, ["noc@example.com", "ops@example.com"])
        self.assertTrue(
            ActivityLog.objects.filter(level=ActivityLog.ERROR, device=self.device).exists()
        )

    def test_cooldown_suppresses_second_alert(self):
        self._poll(False)
        sent = self._poll(True)

        self.assertEqual(sent, [])
        self.assertEqual(len(mail.outbox), 1)
        # The recovery is still recorded even without an email
        self.assertTrue(ActivityLog.objects.filter(message__contains="back online").exists())

    def test_alert_after_cooldown(self):
        self._poll(False)
        self.alert_settings.refresh_from_db()
        self.alert_settings.last_notification_at = timezone.now() - timedelta(minutes=6)
        self.alert_settings.save()

        self.assertEqual(self._poll(True), [DeviceEvent.RECOVERY])
        self.assertEqual(len(mail.outbox), 2)

    def test_disabled_event_not_sent(self):
        self.alert_settings.notify_on_offline = False
        self.alert_settings.save()

        self.assertEqual(self._poll(False), [])
        self.assertEqual(len(mail.outbox), 0)

    def test_high_utilization_alert(self):
        self.alert_settings.notify_on_high_utilization = True
        self.alert_settings.utilization_threshold = 80
        self.alert_settings.save()

        self.assertEqual(self._poll(True, utilization=85), [DeviceEvent.HIGH_UTILIZATION])

    @override_settings(EMAIL_HOST="", EMAIL_HOST_USER="")
    def test_no_email_without_smtp(self):
        self.assertEqual(self._poll(False), [])
        self.assertEqual(len(mail.outbox), 0)
