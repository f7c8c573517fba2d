from unittest import mock

from django.core import mail
from django.test import SimpleTestCase, override_settings

from apps.monitor import emails

SMTP = {
    "EMAIL_HOST": "smtp.example.com",
    "EMAIL_HOST_USER": "alerts@example.com",
    "DEFAULT_FROM_EMAIL": "alerts@example.com",
}


@override_settings(EMAIL_HOST="", EMAIL_HOST_USER="")
class UnconfiguredEmailTests(SimpleTestCase):
    def test_senders_return_false(self):
        self.assertFalse(emails.smtp_configured())
        self.assertFalse(emails.send_welcome_email("a@example.com", "Ann"))
        self.assertFalse(emails.send_password_reset_email("a@example.com", "tok", "http://x"))
        self.assertFalse(emails.send_account_deletion_email("a@example.com"))
        self.assertEqual(len(mail.outbox), 0)

    def test_test_email_reports_missing_config(self):
        result = emails.send_test_email("a@example.com")
        self.assertFalse(result["success"])
        self.assertIn("SMTP_HOST", result["message"])

    def test_connection_check_reports_missing_config(self):
        self.assertFalse(emails.test_email_connection()["success"])

    @override_settings(EMAIL_HOST="smtp.example.com")
    def test_host_without_user_is_not_configured(self):
        self.assertFalse(emails.smtp_configured())


@override_settings(**SMTP)
class ConfiguredEmailTests(SimpleTestCase):
    def test_welcome_email(self):
        self.assertTrue(emails.send_welcome_email("ann@example.com", "Ann"))

        message = mail.outbox[0]
        self.assertEqual(message.to, ["ann@example.com"])
        self.assertEqual(message.from_email, '"SceptView Network Monitor" <alerts@example.com>')
        self.assertIn("Ann", message.body)
        # Plain text plus an HTML alternative
        self.assertEqual(message.alternatives[0][1], "text/html")

    def test_password_reset_link(self):
        emails.send_password_reset_email("ann@example.com", "abc123", "https://monitor.example.com/")

        self.assertIn(
            "https://monitor.example.com/reset-password?token=abc123", mail.outbox[0].body
        )

    def test_test_email(self):
        result = emails.send_test_email("ann@example.com")

        self.assertTrue(result["success"])
        self.assertEqual(len(mail.outbox), 1)

    def test_connection_check(self):
        self.assertEqual(
            emails.test_email_connection(),
            {"success": True, "message": "SMTP connection successful"},
        )

    def test_transport_failure_returns_false(self):
        with mock.patch.object(emails, "send_mail", side_effect=OSError("connection refused")):
            self.assertFalse(emails.send_welcome_email("ann@example.com"))
            result = emails.send_test_email("ann@example.com")

        self.assertFalse(result["success"])
        self.assertEqual(result["message"], "connection refused")

    def test_missing_recipient_returns_false(self):
        self.assertFalse(emails.send_welcome_email(""))
