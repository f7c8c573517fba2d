"""
SceptView Network Monitor - Database Models

This module defines the data models for the SceptView platform:
    - Role: Role definitions for role-based access control
    - UserProfile: Per-user role assignment
    - Site: Ordered registry of monitoring sites
    - Device: Monitored network device and its current metrics
    - DeviceLink: Monitored connection between two devices
    - MetricsHistory: Append-only utilization/bandwidth samples
    - NotificationSettings: Device alert configuration (singleton)
    - ActivityLog: Event log shown on the dashboard

Author:     Gonzalo Patino
Created:    2025
Course:     Southern New Hampshire University
License:    Academic Use Only - See LICENSE file
"""

import logging
from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models, transaction
from django.db.models import F, Max, Q
from django.utils import timezone


logger = logging.getLogger(__name__)


# ============================================================================
# ROLES
# ============================================================================

class Role:
    """Role definitions. A higher rank includes every lower rank's rights."""
    ADMIN = 'admin'
    OPERATOR = 'operator'
    VIEWER = 'viewer'

    CHOICES = [
        (ADMIN, 'Admin'),
        (OPERATOR, 'Operator'),
        (VIEWER, 'Viewer'),
    ]

    RANKS = {
        VIEWER: 0,
        OPERATOR: 1,
        ADMIN: 2,
    }

    @classmethod
    def is_valid(cls, role):
        return isinstance(role, str) and role in cls.RANKS

    @classmethod
    def satisfies(cls, role, required):
        """True if `role` carries at least the rights of `required`."""
        return cls.RANKS.get(role, -1) >= cls.RANKS[required]


class UserProfile(models.Model):
    """
    Stores the dashboard role of a user.
    """
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
    )

    role = models.CharField(
        max_length=16,
        choices=Role.CHOICES,
        default=Role.VIEWER,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "User Profile"
        verbose_name_plural = "User Profiles"

    def __str__(self):
        return f"{self.user.username} - {self.get_role_display()}"

    @classmethod
    def for_user(cls, user):
        """
        Return the profile for a user, creating it on first access.
        Superusers created from the command line start out as admins.
        """
        profile, _ = cls.objects.get_or_create(
            user=user,
            defaults={"role": Role.ADMIN if user.is_superuser else Role.VIEWER},
        )
        return profile


# ============================================================================
# SITES & DEVICES
# ============================================================================

class Site(models.Model):
    name = models.CharField(max_length=100, unique=True)
    display_order = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["display_order", "name"]

    def __str__(self):
        return self.name

    @classmethod
    def next_display_order(cls):
        current = cls.objects.aggregate(highest=Max("display_order"))["highest"]
        return 0 if current is None else current + 1

    def device_count(self):
        return Device.objects.filter(site=self.name).count()

    def rename(self, new_name):
        """
        Rename this site, moving every device that references the old name.

        The device update and the rename share one transaction, so a failed
        device update leaves the site untouched.

        Returns the number of reassigned devices.
        """
        new_name = str(new_name or "").strip()
        if not new_name:
            raise ValidationError({"name": "Site name is required."})

        if new_name == self.name:
            return 0

        if Site.objects.filter(name=new_name).exclude(pk=self.pk).exists():
            raise ValidationError({"name": "A site with that name already exists."})

        old_name = self.name
        with transaction.atomic():
            reassigned = Device.objects.filter(site=old_name).update(site=new_name)
            self.name = new_name
            self.save(update_fields=["name"])

        logger.info(
            "Renamed site %r to %r (%d device(s) reassigned)",
            old_name, new_name, reassigned,
        )
        return reassigned

    def delete_with_reassignment(self, target_name=None):
        """
        Delete this site. Devices still assigned to it are moved to
        `target_name` first; without a target such a delete is rejected.

        Returns the number of reassigned devices.
        """
        if not Site.objects.exclude(pk=self.pk).exists():
            raise ValidationError("Cannot delete the last remaining site.")

        target_name = str(target_name or "").strip()
        if target_name:
            if target_name == self.name:
                raise ValidationError(
                    {"reassign_to": "Cannot reassign devices to the site being deleted."}
                )
            if not Site.objects.filter(name=target_name).exists():
                raise ValidationError(
                    {"reassign_to": f"Site '{target_name}' does not exist."}
                )

        device_count = self.device_count()
        if device_count and not target_name:
            raise ValidationError(
                {
                    "reassign_to": (
                        f"Site '{self.name}' has {device_count} device(s) assigned. "
                        "Choose a site to reassign them to."
                    )
                }
            )

        reassigned = 0
        with transaction.atomic():
            if target_name:
                reassigned = Device.objects.filter(site=self.name).update(site=target_name)
            self.delete()

        logger.info(
            "Deleted site %r (%d device(s) moved to %r)",
            self.name, reassigned, target_name or None,
        )
        return reassigned

    @classmethod
    def reorder(cls, site_ids):
        """Set each listed site's display_order to its position in `site_ids`."""
        sites = cls.objects.in_bulk(site_ids)
        missing = [site_id for site_id in site_ids if site_id not in sites]
        if missing:
            raise ValidationError(
                {"site_ids": f"Unknown site id(s): {', '.join(str(m) for m in missing)}"}
            )

        for index, site_id in enumerate(site_ids):
            sites[site_id].display_order = index

        with transaction.atomic():
            cls.objects.bulk_update(sites.values(), ["display_order"])

    @classmethod
    def bulk_import(cls, names):
        """
        Create every missing site from `names`, appended after the current
        last site. Blank and already-registered names are skipped.

        Returns (created, skipped) lists of names.
        """
        created = []
        skipped = []
        order = cls.next_display_order()

        with transaction.atomic():
            for raw in names:
                name = str(raw or "").strip()
                if not name or name in created or cls.objects.filter(name=name).exists():
                    skipped.append(name)
                    continue
                cls.objects.create(name=name, display_order=order)
                created.append(name)
                order += 1

        return created, skipped


class DeviceType:
    MIKROTIK = 'mikrotik'
    UNIFI = 'unifi'
    GENERIC = 'generic'

    CHOICES = [
        (MIKROTIK, 'MikroTik'),
        (UNIFI, 'UniFi'),
        (GENERIC, 'Generic'),
    ]


class DeviceStatus:
    GREEN = 'green'      # reachable
    RED = 'red'          # not responding
    BLUE = 'blue'        # reachable again after being down
    UNKNOWN = 'unknown'  # never polled

    CHOICES = [
        (GREEN, 'Online'),
        (RED, 'Offline'),
        (BLUE, 'Recovering'),
        (UNKNOWN, 'Unknown'),
    ]

    REACHABLE = (GREEN, BLUE)

    @classmethod
    def after_poll(cls, previous, reachable):
        """Status a device moves to after a poll with the given outcome."""
        if not reachable:
            return cls.RED
        return cls.BLUE if previous == cls.RED else cls.GREEN


class Device(models.Model):
    name = models.CharField(max_length=100)
    ip = models.CharField(max_length=255)
    community = models.CharField(max_length=64, default="public")
    type = models.CharField(
        max_length=16,
        choices=DeviceType.CHOICES,
        default=DeviceType.GENERIC,
    )

    # Name of the Site this device belongs to
    site = models.CharField(max_length=100, db_index=True)

    status = models.CharField(
        max_length=16,
        choices=DeviceStatus.CHOICES,
        default=DeviceStatus.UNKNOWN,
    )
    utilization = models.PositiveSmallIntegerField(
        default=0,
        validators=[MaxValueValidator(100)],
    )
    bandwidth_mbps = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0"))],
    )
    max_bandwidth = models.PositiveIntegerField(
        default=100,
        validators=[MinValueValidator(1)],
        help_text="Interface capacity in Mbps",
    )

    last_seen = models.DateTimeField(null=True, blank=True)
    last_check = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["site", "name"]

    def __str__(self):
        return f"{self.name} ({self.site})"

    def clean(self):
        if self.site and not Site.objects.filter(name=self.site).exists():
            raise ValidationError({"site": f"Site '{self.site}' does not exist."})

    def record_metrics(self, utilization, bandwidth_mbps, reachable=True):
        """
        Apply one poll result to this device.

        Updates the current values, appends a history sample and refreshes
        every link touching the device.

        Returns the status the device had before the poll.
        """
        previous = self.status
        now = timezone.now()

        self.status = DeviceStatus.after_poll(previous, reachable)
        self.utilization = utilization
        self.bandwidth_mbps = bandwidth_mbps
        self.last_check = now
        update_fields = ["status", "utilization", "bandwidth_mbps", "last_check"]
        if self.status == DeviceStatus.GREEN:
            self.last_seen = now
            update_fields.append("last_seen")

        with transaction.atomic():
            self.save(update_fields=update_fields)
            MetricsHistory.objects.create(
                device=self,
                timestamp=now,
                utilization=utilization,
                bandwidth_mbps=bandwidth_mbps,
            )
            links = DeviceLink.objects.touching(self).select_related(
                "source_device", "target_device"
            )
            for link in links:
                link.refresh_status()

        return previous


# ============================================================================
# DEVICE LINKS
# ============================================================================

class LinkStatus:
    UP = 'up'
    DOWN = 'down'
    DEGRADED = 'degraded'
    UNKNOWN = 'unknown'

    CHOICES = [
        (UP, 'Up'),
        (DOWN, 'Down'),
        (DEGRADED, 'Degraded'),
        (UNKNOWN, 'Unknown'),
    ]

    # Share of link capacity at which an up link is reported as degraded
    DEGRADED_RATIO = Decimal("0.9")


class LinkType:
    MANUAL = 'manual'
    AUTO = 'auto'

    CHOICES = [
        (MANUAL, 'Manual'),
        (AUTO, 'Auto-discovered'),
    ]


DEFAULT_LINK_BANDWIDTH_MBPS = 1000


class DeviceLinkQuerySet(models.QuerySet):
    def touching(self, device):
        return self.filter(Q(source_device=device) | Q(target_device=device))

    def between(self, first_id, second_id):
        """Links joining the two devices, in either direction."""
        return self.filter(
            Q(source_device_id=first_id, target_device_id=second_id)
            | Q(source_device_id=second_id, target_device_id=first_id)
        )


class DeviceLink(models.Model):
    source_device = models.ForeignKey(
        Device,
        on_delete=models.CASCADE,
        related_name="outgoing_links",
    )
    target_device = models.ForeignKey(
        Device,
        on_delete=models.CASCADE,
        related_name="incoming_links",
    )

    link_type = models.CharField(
        max_length=16,
        choices=LinkType.CHOICES,
        default=LinkType.MANUAL,
    )
    link_label = models.CharField(max_length=100, blank=True)
    bandwidth_mbps = models.PositiveIntegerField(
        default=DEFAULT_LINK_BANDWIDTH_MBPS,
        validators=[MinValueValidator(1)],
    )
    current_traffic_mbps = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    status = models.CharField(
        max_length=16,
        choices=LinkStatus.CHOICES,
        default=LinkStatus.UNKNOWN,
    )

    last_check = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = DeviceLinkQuerySet.as_manager()

    class Meta:
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(
                condition=~Q(source_device=F("target_device")),
                name="device_link_distinct_endpoints",
            ),
        ]

    def __str__(self):
        return f"{self.source_device_id} <-> {self.target_device_id} ({self.status})"

    def clean(self):
        if not (self.source_device_id and self.target_device_id):
            return

        if self.source_device_id == self.target_device_id:
            raise ValidationError(
                {"target_device": "Source and target devices must be different."}
            )

        duplicate = (
            DeviceLink.objects
            .between(self.source_device_id, self.target_device_id)
            .exclude(pk=self.pk)
        )
        if duplicate.exists():
            raise ValidationError({"target_device": "These devices are already linked."})

    def compute_status(self):
        """
        Derive (status, current_traffic_mbps) from the two endpoint devices.
        Traffic over a link is bounded by the slower endpoint.
        """
        source = self.source_device
        target = self.target_device
        traffic = min(source.bandwidth_mbps, target.bandwidth_mbps)

        if DeviceStatus.RED in (source.status, target.status):
            status = LinkStatus.DOWN
        elif source.status in DeviceStatus.REACHABLE and target.status in DeviceStatus.REACHABLE:
            if traffic >= self.bandwidth_mbps * LinkStatus.DEGRADED_RATIO:
                status = LinkStatus.DEGRADED
            else:
                status = LinkStatus.UP
        else:
            status = LinkStatus.UNKNOWN

        return status, traffic

    def refresh_status(self, save=True):
        self.status, self.current_traffic_mbps = self.compute_status()
        self.last_check = timezone.now()
        if save:
            self.save(
                update_fields=["status", "current_traffic_mbps", "last_check", "updated_at"]
            )


# ============================================================================
# HISTORY
# ============================================================================

class MetricsHistory(models.Model):
    device = models.ForeignKey(
        Device,
        on_delete=models.CASCADE,
        related_name="history",
    )
    timestamp = models.DateTimeField(default=timezone.now)
    utilization = models.PositiveSmallIntegerField(default=0)
    bandwidth_mbps = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
    )

    class Meta:
        verbose_name_plural = "Metrics history"
        indexes = [
            models.Index(fields=["device", "timestamp"], name="metrics_device_ts_idx"),
        ]

    def __str__(self):
        return f"{self.device_id} @ {self.timestamp.isoformat()}"


# ============================================================================
# NOTIFICATIONS & ACTIVITY
# ============================================================================

class NotificationSettings(models.Model):
    """
    Stores email alert settings for device events.
    A single row holds the configuration for the whole installation.
    """
    email_enabled = models.BooleanField(default=False)
    # Comma separated list of addresses
    email_recipients = models.TextField(blank=True)

    notify_on_offline = models.BooleanField(default=True)
    notify_on_recovery = models.BooleanField(default=True)
    notify_on_high_utilization = models.BooleanField(default=False)
    utilization_threshold = models.PositiveSmallIntegerField(
        default=90,
        validators=[MinValueValidator(1), MaxValueValidator(100)],
    )

    # Rate limiting - don't spam emails
    cooldown_minutes = models.PositiveIntegerField(default=5)
    last_notification_at = models.DateTimeField(null=True, blank=True)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Notification Settings"
        verbose_name_plural = "Notification Settings"

    def __str__(self):
        return "Notification settings"

    @classmethod
    def load(cls):
        obj, _ = cls.objects.get_or_create(pk=1)
        return obj

    def recipient_list(self):
        return [e.strip() for e in self.email_recipients.split(",") if e.strip()]

    def can_notify(self):
        """Check if the cooldown since the last notification has elapsed."""
        if not self.cooldown_minutes or not self.last_notification_at:
            return True
        elapsed = timezone.now() - self.last_notification_at
        return elapsed >= timedelta(minutes=self.cooldown_minutes)


class ActivityLog(models.Model):
    INFO = 'info'
    WARNING = 'warning'
    ERROR = 'error'

    LEVEL_CHOICES = [
        (INFO, 'Info'),
        (WARNING, 'Warning'),
        (ERROR, 'Error'),
    ]

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    level = models.CharField(max_length=16, choices=LEVEL_CHOICES, default=INFO)
    message = models.TextField()
    device = models.ForeignKey(
        Device,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="activity",
    )

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"[{self.level}] {self.message}"

    @classmethod
    def record(cls, message, level=INFO, device=None):
        return cls.objects.create(message=message, level=level, device=device)
