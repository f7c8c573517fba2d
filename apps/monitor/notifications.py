"""
Device event alerts: offline, recovery and high utilization.

Alerts honour NotificationSettings: the per-event switches, the utilization
threshold and the cooldown between two notifications.
"""

import logging

from django.utils import timezone

from .emails import send_templated_email, smtp_configured
from .models import ActivityLog, DeviceStatus, NotificationSettings

logger = logging.getLogger(__name__)


class DeviceEvent:
    OFFLINE = 'offline'
    RECOVERY = 'recovery'
    HIGH_UTILIZATION = 'high_utilization'

    LABELS = {
        OFFLINE: "OFFLINE",
        RECOVERY: "RECOVERED",
        HIGH_UTILIZATION: "HIGH UTILIZATION",
    }


def send_device_notification(event, device, message):
    """
    Email a device event to the configured recipients.
    Returns True if an email went out.
    """
    alert_settings = NotificationSettings.objects.first()
    if alert_settings is None:
        logger.info("No notification settings configured")
        return False

    if not alert_settings.email_enabled:
        return False

    if not alert_settings.can_notify():
        logger.info("Skipping %s notification for %s due to cooldown", event, device.name)
        return False

    recipients = alert_settings.recipient_list()
    if not recipients:
        logger.warning("Email alerts enabled but no recipients configured")
        return False

    if not smtp_configured():
        logger.info("SMTP not configured, skipping %s notification", event)
        return False

    label = DeviceEvent.LABELS[event]
    subject = f"[Network Monitor] {label}: {device.name} ({device.site})"
    try:
        send_templated_email(
            recipients,
            subject,
            "device_event",
            {
                "event": event,
                "label": label,
                "device": device,
                "message": message,
                "timestamp": timezone.localtime(),
            },
        )
    except Exception as e:
        logger.error("Failed to send %s notification for %s: %s", event, device.name, e)
        return False

    alert_settings.last_notification_at = timezone.now()
    alert_settings.save(update_fields=["last_notification_at"])
    logger.info("Sent %s notification for %s to %s", event, device.name, ", ".join(recipients))
    return True


def check_and_send_device_alerts(device, previous_status):
    """
    Inspect a device after a poll and send whatever alerts apply.
    Status transitions are also written to the activity log.

    Returns the list of events that were emailed.
    """
    alert_settings = NotificationSettings.objects.first()
    events = []

    went_offline = device.status == DeviceStatus.RED and previous_status != DeviceStatus.RED
    recovered = previous_status == DeviceStatus.RED and device.status != DeviceStatus.RED

    if went_offline:
        ActivityLog.record(f"{device.name} went offline", ActivityLog.ERROR, device)
        if alert_settings and alert_settings.notify_on_offline:
            events.append((
                DeviceEvent.OFFLINE,
                "Device went offline and is not responding to polls",
            ))

    if recovered:
        ActivityLog.record(f"{device.name} is back online", ActivityLog.INFO, device)
        if alert_settings and alert_settings.notify_on_recovery:
            events.append((
                DeviceEvent.RECOVERY,
                "Device is back online and responding to polls",
            ))

    if (alert_settings and alert_settings.notify_on_high_utilization
            and device.utilization >= alert_settings.utilization_threshold):
        events.append((
            DeviceEvent.HIGH_UTILIZATION,
            f"Bandwidth utilization at {device.utilization}% exceeds threshold "
            f"of {alert_settings.utilization_threshold}%",
        ))

    sent = []
    for event, message in events:
        if send_device_notification(event, device, message):
            sent.append(event)
    return sent
