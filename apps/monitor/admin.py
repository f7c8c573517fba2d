from django.contrib import admin
from .models import (
    ActivityLog,
    Device,
    DeviceLink,
    MetricsHistory,
    NotificationSettings,
    Site,
    UserProfile,
)


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ("user", "role", "created_at")
    list_filter = ("role",)
    search_fields = ("user__username", "user__email")


@admin.register(Site)
class SiteAdmin(admin.ModelAdmin):
    list_display = ("name", "display_order", "created_at")
    ordering = ("display_order", "name")


class OutgoingLinkInline(admin.TabularInline):
    model = DeviceLink
    fk_name = "source_device"
    extra = 0
    readonly_fields = ("status", "current_traffic_mbps", "last_check")


@admin.register(Device)
class DeviceAdmin(admin.ModelAdmin):
    list_display = ("name", "ip", "site", "type", "status", "utilization", "last_seen")
    list_filter = ("status", "type", "site")
    search_fields = ("name", "ip", "site")
    inlines = [OutgoingLinkInline]


@admin.register(DeviceLink)
class DeviceLinkAdmin(admin.ModelAdmin):
    list_display = ("id", "source_device", "target_device", "link_type", "status", "bandwidth_mbps")
    list_filter = ("status", "link_type")


# Quick way to eyeball samples in admin
@admin.register(MetricsHistory)
class MetricsHistoryAdmin(admin.ModelAdmin):
    list_display = ("id", "device", "timestamp", "utilization", "bandwidth_mbps")
    ordering = ("-timestamp",)


@admin.register(NotificationSettings)
class NotificationSettingsAdmin(admin.ModelAdmin):
    list_display = ("email_enabled", "cooldown_minutes", "last_notification_at")


@admin.register(ActivityLog)
class ActivityLogAdmin(admin.ModelAdmin):
    list_display = ("created_at", "level", "message", "device")
    list_filter = ("level",)
    search_fields = ("message",)
