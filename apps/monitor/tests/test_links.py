from decimal import Decimal

from django.core.exceptions import ValidationError
from django.urls import reverse

from apps.monitor.discovery import auto_discover, core_device, plan_links
from apps.monitor.models import DeviceLink, DeviceStatus, LinkStatus, LinkType, Role

from .base import MonitorTestCase, make_device, make_site


class DeviceLinkModelTests(MonitorTestCase):
    def setUp(self):
        super().setUp()
        make_site("HQ")
        self.router = make_device("router", "HQ", "mikrotik")
        self.switch = make_device("switch", "HQ")

    def test_self_link_rejected(self):
        link = DeviceLink(source_device=self.router, target_device=self.router)
        with self.assertRaises(ValidationError) as ctx:
            link.full_clean()
        self.assertIn("target_device", ctx.exception.message_dict)

    def test_reverse_duplicate_rejected(self):
        DeviceLink.objects.create(source_device=self.router, target_device=self.switch)
        link = DeviceLink(source_device=self.switch, target_device=self.router)
        with self.assertRaises(ValidationError):
            link.full_clean()

    def _set(self, device, status, bandwidth):
        device.status = status
        device.bandwidth_mbps = Decimal(bandwidth)
        device.save()

    def test_status_up_when_both_reachable(self):
        self._set(self.router, DeviceStatus.GREEN, "40")
        self._set(self.switch, DeviceStatus.BLUE, "60")
        link = DeviceLink(source_device=self.router, target_device=self.switch, bandwidth_mbps=100)

        status, traffic = link.compute_status()

        self.assertEqual(status, LinkStatus.UP)
        self.assertEqual(traffic, Decimal("40"))

    def test_status_degraded_near_capacity(self):
        self._set(self.router, DeviceStatus.GREEN, "95")
        self._set(self.switch, DeviceStatus.GREEN, "90")
        link = DeviceLink(source_device=self.router, target_device=self.switch, bandwidth_mbps=100)

        self.assertEqual(link.compute_status()[0], LinkStatus.DEGRADED)

    def test_status_down_when_endpoint_red(self):
        self._set(self.router, DeviceStatus.GREEN, "10")
        self._set(self.switch, DeviceStatus.RED, "0")
        link = DeviceLink(source_device=self.router, target_device=self.switch)

        self.assertEqual(link.compute_status()[0], LinkStatus.DOWN)

    def test_status_unknown_before_first_poll(self):
        link = DeviceLink(source_device=self.router, target_device=self.switch)
        self.assertEqual(link.compute_status()[0], LinkStatus.UNKNOWN)

    def test_metrics_refresh_touching_links(self):
        link = DeviceLink.objects.create(source_device=self.router, target_device=self.switch)
        self.router.record_metrics(10, Decimal("5"))
        self.switch.record_metrics(20, Decimal("8"))

        link.refresh_from_db()
        self.assertEqual(link.status, LinkStatus.UP)
        self.assertEqual(link.current_traffic_mbps, Decimal("5.00"))

        self.switch.record_metrics(0, Decimal("0"), reachable=False)
        link.refresh_from_db()
        self.assertEqual(link.status, LinkStatus.DOWN)


class DeviceLinkApiTests(MonitorTestCase):
    def setUp(self):
        super().setUp()
        make_site("HQ")
        self.router = make_device("router", "HQ", "mikrotik")
        self.switch = make_device("switch", "HQ")
        self.login_as(Role.OPERATOR)

    def test_create_link(self):
        response = self.post_json(
            reverse("device-links"),
            {
                "source_device_id": self.router.id,
                "target_device_id": self.switch.id,
                "link_label": "uplink",
            },
        )

        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body["link_type"], LinkType.MANUAL)
        self.assertEqual(body["bandwidth_mbps"], 1000)
        self.assertEqual(body["link_label"], "uplink")

    def test_equal_endpoints_rejected(self):
        response = self.post_json(
            reverse("device-links"),
            {"source_device_id": self.router.id, "target_device_id": self.router.id},
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Source and target devices must be different.")
        self.assertEqual(DeviceLink.objects.count(), 0)

    def test_reverse_duplicate_rejected(self):
        DeviceLink.objects.create(source_device=self.router, target_device=self.switch)

        response = self.post_json(
            reverse("device-links"),
            {"source_device_id": self.switch.id, "target_device_id": self.router.id},
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["field"], "target_device_id")

    def test_unknown_device_rejected(self):
        response = self.post_json(
            reverse("device-links"),
            {"source_device_id": self.router.id, "target_device_id": 9999},
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["field"], "target_device_id")

    def test_zero_bandwidth_rejected(self):
        response = self.post_json(
            reverse("device-links"),
            {
                "source_device_id": self.router.id,
                "target_device_id": self.switch.id,
                "bandwidth_mbps": 0,
            },
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["field"], "bandwidth_mbps")

    def test_update_and_delete(self):
        link = DeviceLink.objects.create(source_device=self.router, target_device=self.switch)

        response = self.patch_json(
            reverse("device-link-detail", args=[link.id]), {"bandwidth_mbps": 500}
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["bandwidth_mbps"], 500)

        response = self.client.delete(reverse("device-link-detail", args=[link.id]))
        self.assertEqual(response.status_code, 204)
        self.assertFalse(DeviceLink.objects.exists())

    def test_patch_to_self_link_rejected(self):
        link = DeviceLink.objects.create(source_device=self.router, target_device=self.switch)

        response = self.patch_json(
            reverse("device-link-detail", args=[link.id]),
            {"target_device_id": self.router.id},
        )

        self.assertEqual(response.status_code, 400)
        link.refresh_from_db()
        self.assertEqual(link.target_device_id, self.switch.id)


class AutoDiscoveryTests(MonitorTestCase):
    def setUp(self):
        super().setUp()
        make_site("HQ")
        make_site("Branch")
        self.router = make_device("router", "HQ", "mikrotik", max_bandwidth=1000)
        self.ap1 = make_device("ap-1", "HQ", "unifi", max_bandwidth=300)
        self.sw1 = make_device("switch-1", "HQ", "generic", max_bandwidth=1000)
        self.ap2 = make_device("ap-2", "Branch", "unifi", max_bandwidth=300)
        self.sw2 = make_device("switch-2", "Branch", "generic", max_bandwidth=100)

    def _pairs(self):
        return {
            frozenset(pair)
            for pair in DeviceLink.objects.values_list("source_device_id", "target_device_id")
        }

    def test_core_device_prefers_router_then_generic(self):
        self.assertEqual(core_device([self.ap1, self.sw1, self.router]), self.router)
        self.assertEqual(core_device([self.ap2, self.sw2]), self.sw2)

    def test_plan_links_topology(self):
        planned = plan_links(["HQ", "Branch"], [self.router, self.ap1, self.sw1, self.ap2, self.sw2])

        pairs = {frozenset((s.id, t.id)) for s, t in planned}
        self.assertEqual(
            pairs,
            {
                frozenset((self.router.id, self.ap1.id)),
                frozenset((self.router.id, self.sw1.id)),
                frozenset((self.sw2.id, self.ap2.id)),
                frozenset((self.router.id, self.sw2.id)),
            },
        )

    def test_auto_discover_creates_links(self):
        created = auto_discover()

        self.assertEqual(len(created), 4)
        self.assertEqual(DeviceLink.objects.filter(link_type=LinkType.AUTO).count(), 4)
        uplink = DeviceLink.objects.between(self.router.id, self.sw2.id).get()
        self.assertEqual(uplink.bandwidth_mbps, 100)

    def test_auto_discover_is_idempotent(self):
        auto_discover()
        self.assertEqual(auto_discover(), [])
        self.assertEqual(DeviceLink.objects.count(), 4)

    def test_existing_reverse_link_is_skipped(self):
        DeviceLink.objects.create(source_device=self.ap1, target_device=self.router)

        created = auto_discover()

        self.assertEqual(len(created), 3)
        self.assertEqual(len(self._pairs()), 4)

    def test_endpoint_requires_operator(self):
        self.login_as(Role.VIEWER)
        response = self.post_json(reverse("device-links-auto-discover"))
        self.assertEqual(response.status_code, 403)

    def test_endpoint_reports_discovered(self):
        self.login_as(Role.OPERATOR)

        response = self.post_json(reverse("device-links-auto-discover"))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["discovered"], 4)
        self.assertEqual(len(response.json()["links"]), 4)

        response = self.post_json(reverse("device-links-auto-discover"))
        self.assertEqual(response.json()["discovered"], 0)
