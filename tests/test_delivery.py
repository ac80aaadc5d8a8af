import unittest
from unittest.mock import patch

import httpx

from auth.config import AuthConfig
from auth.services.email_service import EmailService, render_code_email
from notifications.notifier import FailureKind, FcmNotifier
from notifications.schemas import PushPayload


PAYLOAD = PushPayload(
    token="device-token",
    title="Bin Collection Reminder",
    body="Your general bin will be collected tomorrow.",
    data={"binType": "general", "collectionDate": "2024-01-16"},
)


def _notifier(handler):
    return FcmNotifier(
        project_id="bins-app",
        access_token="secret",
        transport=httpx.MockTransport(handler),
    )


class TestFcmNotifier(unittest.IsolatedAsyncioTestCase):
    async def test_successful_send(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            return httpx.Response(200, json={"name": "projects/bins-app/messages/1"})

        result = await _notifier(handler).send(PAYLOAD)

        self.assertTrue(result.ok)
        self.assertEqual(seen["url"], "https://fcm.googleapis.com/v1/projects/bins-app/messages:send")
        self.assertEqual(seen["auth"], "Bearer secret")

    async def test_unregistered_token_is_invalid_recipient(self):
        def handler(request):
            return httpx.Response(
                404,
                json={"error": {"status": "NOT_FOUND", "details": [{"errorCode": "UNREGISTERED"}]}},
            )

        result = await _notifier(handler).send(PAYLOAD)

        self.assertFalse(result.ok)
        self.assertEqual(result.failure, FailureKind.INVALID_RECIPIENT)

    async def test_malformed_token_is_invalid_recipient(self):
        def handler(request):
            return httpx.Response(400, json={"error": {"status": "INVALID_ARGUMENT"}})

        result = await _notifier(handler).send(PAYLOAD)
        self.assertEqual(result.failure, FailureKind.INVALID_RECIPIENT)

    async def test_server_error_is_transient(self):
        def handler(request):
            return httpx.Response(503, text="unavailable")

        result = await _notifier(handler).send(PAYLOAD)
        self.assertEqual(result.failure, FailureKind.TRANSIENT)

    async def test_connection_error_is_transient(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        result = await _notifier(handler).send(PAYLOAD)
        self.assertEqual(result.failure, FailureKind.TRANSIENT)

    async def test_fcm_message_shape(self):
        message = PAYLOAD.to_fcm_message()["message"]
        self.assertEqual(message["token"], "device-token")
        self.assertEqual(message["notification"]["title"], "Bin Collection Reminder")
        self.assertEqual(message["data"]["binType"], "general")


class TestEmailService(unittest.IsolatedAsyncioTestCase):
    def test_templates_include_code(self):
        subject, html = render_code_email("password-reset", "042519")
        self.assertEqual(subject, "Reset Your Password")
        self.assertIn("042519", html)
        with self.assertRaises(ValueError):
            render_code_email("welcome", "042519")

    async def test_sends_through_resend(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            return httpx.Response(200, json={"id": "email-1"})

        service = EmailService(transport=httpx.MockTransport(handler))
        with patch.object(AuthConfig, "RESEND_API_KEY", "re_test"), patch.object(
            AuthConfig, "EMAIL_PROVIDER", "resend"
        ):
            sent = await service.send_code("sam@example.com", "verification", "123456")

        self.assertTrue(sent)
        self.assertEqual(seen["url"], "https://api.resend.com/emails")

    async def test_provider_failure_returns_false(self):
        service = EmailService(transport=httpx.MockTransport(lambda request: httpx.Response(500)))
        with patch.object(AuthConfig, "RESEND_API_KEY", "re_test"), patch.object(
            AuthConfig, "EMAIL_PROVIDER", "resend"
        ):
            self.assertFalse(await service.send_code("sam@example.com", "verification", "123456"))

    async def test_missing_api_key_returns_false(self):
        with patch.object(AuthConfig, "RESEND_API_KEY", None):
            self.assertFalse(await EmailService().send_code("sam@example.com", "verification", "1"))


if __name__ == "__main__":
    unittest.main()
