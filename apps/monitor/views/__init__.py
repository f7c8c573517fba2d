"""
Views package for the monitor app.

This module re-exports all views so urls.py can import them from one place.
Views are organized into submodules:
  - helpers: Shared error responses, decorators, parsers and payload builders
  - auth: Setup, login, registration, password reset and account deletion
  - users: User management (admin)
  - sites: Site registry
  - devices: Device inventory, metrics and history
  - links: Device links and auto-discovery
  - system: Notification settings, SMTP checks and the activity log
"""

# Re-export from helpers
from .helpers import (
    api_login_required,
    error_response,
    role_required,
)

# Re-export from auth
from .auth import (
    csrf_token,
    current_user,
    delete_account,
    forgot_password,
    login_user,
    logout_user,
    needs_setup,
    register_user,
    reset_password,
    setup_admin,
    verify_reset_token,
)

# Re-export from users
from .users import (
    update_user_role,
    user_detail,
    users_collection,
)

# Re-export from sites
from .sites import (
    bulk_import_sites,
    reorder_sites,
    site_detail,
    sites_collection,
)

# Re-export from devices
from .devices import (
    device_detail,
    device_history,
    devices_collection,
    reassign_site,
    record_metrics,
)

# Re-export from links
from .links import (
    auto_discover_links,
    link_detail,
    links_collection,
)

# Re-export from system
from .system import (
    activity_logs,
    notification_settings,
    ping,
    send_test_email_view,
    smtp_status,
)

# Re-export ratelimited_error from ratelimits (used as RATELIMIT_VIEW)
from ..ratelimits import ratelimited_error

__all__ = [
    # Helpers
    "api_login_required",
    "error_response",
    "role_required",
    # Auth
    "csrf_token",
    "current_user",
    "delete_account",
    "forgot_password",
    "login_user",
    "logout_user",
    "needs_setup",
    "register_user",
    "reset_password",
    "setup_admin",
    "verify_reset_token",
    # Users
    "update_user_role",
    "user_detail",
    "users_collection",
    # Sites
    "bulk_import_sites",
    "reorder_sites",
    "site_detail",
    "sites_collection",
    # Devices
    "device_detail",
    "device_history",
    "devices_collection",
    "reassign_site",
    "record_metrics",
    # Links
    "auto_discover_links",
    "link_detail",
    "links_collection",
    # System
    "activity_logs",
    "notification_settings",
    "ping",
    "send_test_email_view",
    "smtp_status",
    # Ratelimits
    "ratelimited_error",
]
