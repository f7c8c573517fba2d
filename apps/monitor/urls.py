from django.urls import path

from . import views

urlpatterns = [
    path("ping/", views.ping, name="api-ping"),

    # Auth
    path("auth/csrf/", views.csrf_token, name="csrf-token"),
    path("auth/needs-setup/", views.needs_setup, name="needs-setup"),
    path("auth/setup/", views.setup_admin, name="setup-admin"),
    path("auth/register/", views.register_user, name="register-user"),
    path("auth/login/", views.login_user, name="login-user"),
    path("auth/logout/", views.logout_user, name="logout-user"),
    path("auth/user/", views.current_user, name="current-user"),
    path("auth/forgot-password/", views.forgot_password, name="forgot-password"),
    path("auth/verify-reset-token/", views.verify_reset_token, name="verify-reset-token"),
    path("auth/reset-password/", views.reset_password, name="reset-password"),
    path("auth/account/", views.delete_account, name="delete-account"),

    # Users
    path("users/", views.users_collection, name="users"),
    path("users/<int:user_id>/", views.user_detail, name="user-detail"),
    path("users/<int:user_id>/role/", views.update_user_role, name="user-role"),

    # Sites
    path("sites/", views.sites_collection, name="sites"),
    path("sites/reorder/", views.reorder_sites, name="sites-reorder"),
    path("sites/bulk-import/", views.bulk_import_sites, name="sites-bulk-import"),
    path("sites/<int:site_id>/", views.site_detail, name="site-detail"),

    # Devices
    path("devices/", views.devices_collection, name="devices"),
    path("devices/reassign-site/", views.reassign_site, name="devices-reassign-site"),
    path("devices/<int:device_id>/", views.device_detail, name="device-detail"),
    path("devices/<int:device_id>/metrics/", views.record_metrics, name="device-metrics"),
    path("devices/<int:device_id>/history/", views.device_history, name="device-history"),

    # Device links
    path("device-links/", views.links_collection, name="device-links"),
    path("device-links/auto-discover/", views.auto_discover_links, name="device-links-auto-discover"),
    path("device-links/<int:link_id>/", views.link_detail, name="device-link-detail"),

    # Settings
    path("settings/notifications/", views.notification_settings, name="notification-settings"),
    path("settings/notifications/test-email/", views.send_test_email_view, name="test-email"),
    path("settings/smtp-status/", views.smtp_status, name="smtp-status"),

    # Activity
    path("logs/", views.activity_logs, name="activity-logs"),
]
