"""Email delivery service."""

from __future__ import annotations

import logging

import httpx

from auth.config import AuthConfig

logger = logging.getLogger(__name__)

RESEND_URL = "https://api.resend.com/emails"

_CODE_BLOCK = (
    '<div style="background-color: #f5f5f5; padding: 15px; border-radius: 5px; '
    'text-align: center; font-size: 24px; letter-spacing: 5px; margin: 20px 0;">'
    "<strong>{code}</strong></div>"
)

TEMPLATES = {
    "verification": {
        "subject": "Verify Your Email Address",
        "html": (
            "<h2>Email Verification</h2>"
            "<p>Thank you for registering! Please use the following code to verify "
            "your email address:</p>"
            + _CODE_BLOCK
            + "<p>This code will expire in {minutes} minutes.</p>"
            "<p>If you didn't request this verification, please ignore this email.</p>"
        ),
    },
    "password-reset": {
        "subject": "Reset Your Password",
        "html": (
            "<h2>Password Reset Request</h2>"
            "<p>We received a request to reset your password. Use the following code "
            "to proceed:</p>"
            + _CODE_BLOCK
            + "<p>This code will expire in {minutes} minutes.</p>"
            "<p>If you didn't request a password reset, please ignore this email.</p>"
        ),
    },
}


def render_code_email(purpose: str, code: str) -> tuple[str, str]:
    """Return (subject, html) for a code email."""
    template = TEMPLATES.get(purpose)
    if template is None:
        raise ValueError(f"Invalid email template type: {purpose}")
    html = template["html"].format(code=code, minutes=AuthConfig.OTP_EXPIRY_MINUTES)
    return template["subject"], html


class EmailService:
    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._transport = transport

    async def send_code(self, email: str, purpose: str, code: str) -> bool:
        if AuthConfig.EMAIL_PROVIDER != "resend":
            logger.warning("Unsupported email provider %s", AuthConfig.EMAIL_PROVIDER)
            return False
        if not AuthConfig.RESEND_API_KEY:
            logger.warning("RESEND_API_KEY not set, cannot send %s email", purpose)
            return False

        subject, html = render_code_email(purpose, code)
        payload = {
            "from": f"{AuthConfig.EMAIL_FROM_NAME} <{AuthConfig.EMAIL_FROM_ADDRESS}>",
            "to": [email],
            "subject": subject,
            "html": html,
        }
        headers = {"Authorization": f"Bearer {AuthConfig.RESEND_API_KEY}"}

        try:
            async with httpx.AsyncClient(
                timeout=AuthConfig.EMAIL_TIMEOUT_SECONDS, transport=self._transport
            ) as client:
                response = await client.post(RESEND_URL, headers=headers, json=payload)
        except httpx.HTTPError as exc:
            logger.error("Email transport error sending %s code: %s", purpose, exc)
            return False
        if response.status_code != 200:
            logger.error("Email provider rejected %s code: %s", purpose, response.status_code)
            return False
        return True
