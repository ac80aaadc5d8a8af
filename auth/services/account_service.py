"""Account flows: registration, device registration, email verification and password reset."""

from __future__ import annotations

import logging
from typing import Any

from auth.interfaces.user_store import UserStore
from auth.security import hash_password, is_strong_password
from auth.services.otp_service import CodeType, OtpService
from exceptions import AlreadyExists, DependencyFailure, InvalidInput, InvalidOrExpired, NotFound
from schedule.constants import JURISDICTIONS

logger = logging.getLogger(__name__)

WEAK_PASSWORD_MESSAGE = (
    "Password must be at least 8 characters long and contain at least one letter and one number"
)


class AccountService:
    def __init__(self, user_store: UserStore, otp_service: OtpService) -> None:
        self._users = user_store
        self._otp = otp_service

    async def register(
        self,
        email: str,
        full_name: str,
        password: str,
        country: str,
    ) -> dict[str, Any]:
        """Create an unverified account and send its email verification code.

        The account is removed again when the code cannot be delivered.
        """
        email = (email or "").strip().lower()
        if not email or "@" not in email:
            raise InvalidInput("A valid email address is required")
        jurisdiction = (country or "").strip().upper()
        if jurisdiction not in JURISDICTIONS:
            raise InvalidInput(
                "Invalid country code. Must be one of: " + ", ".join(JURISDICTIONS)
            )
        if not is_strong_password(password or ""):
            raise InvalidInput(WEAK_PASSWORD_MESSAGE)
        if await self._users.get_by_email(email):
            raise AlreadyExists("Email already registered")

        user = await self._users.create_user(
            {
                "email": email,
                "full_name": full_name,
                "hashed_password": hash_password(password),
                "country": jurisdiction,
            }
        )
        try:
            await self._otp.issue(user, CodeType.EMAIL_VERIFICATION)
        except DependencyFailure:
            await self._users.delete_user(user["id"])
            raise

        logger.info("Registered user %s", user["id"])
        return user

    async def set_device_token(self, user_id: int, device_token: str | None) -> dict[str, Any]:
        """Store the push handle for a user. An empty token clears it."""
        user = await self._users.get_by_id(user_id)
        if not user:
            raise NotFound("User not found")
        return await self._users.update_user(user_id, {"device_token": device_token or None})

    async def _get_unverified(self, email: str) -> dict[str, Any] | None:
        user = await self._users.get_by_email(email)
        if user and user.get("is_email_verified"):
            raise AlreadyExists("Email already verified")
        return user

    async def send_verification(self, email: str) -> None:
        user = await self._get_unverified(email)
        if not user:
            raise InvalidInput("No account registered for this email")
        await self._otp.issue(user, CodeType.EMAIL_VERIFICATION)

    async def resend_verification(self, email: str) -> None:
        user = await self._get_unverified(email)
        if not user:
            raise InvalidInput("No account registered for this email")
        await self._otp.resend(user, CodeType.EMAIL_VERIFICATION)

    async def verify_email(self, email: str, code: str) -> dict[str, Any]:
        user = await self._get_unverified(email)
        if not user:
            raise InvalidOrExpired("Invalid or expired code")
        await self._otp.verify(user, CodeType.EMAIL_VERIFICATION, code)
        return await self._users.update_user(user["id"], {"is_email_verified": True})

    async def forgot_password(self, email: str) -> None:
        # Unknown emails succeed silently so accounts cannot be enumerated
        user = await self._users.get_by_email(email)
        if not user:
            logger.info("Password reset requested for unknown email")
            return
        await self._otp.issue(user, CodeType.PASSWORD_RESET)

    async def resend_password_reset(self, email: str) -> None:
        user = await self._users.get_by_email(email)
        if not user:
            return
        await self._otp.resend(user, CodeType.PASSWORD_RESET)

    async def reset_password(self, email: str, code: str, new_password: str) -> None:
        if not is_strong_password(new_password):
            raise InvalidInput(WEAK_PASSWORD_MESSAGE)
        user = await self._users.get_by_email(email)
        if not user:
            raise InvalidOrExpired("Invalid or expired code")
        await self._otp.verify(user, CodeType.PASSWORD_RESET, code)
        await self._users.update_user(user["id"], {"hashed_password": hash_password(new_password)})
        logger.info("Password reset for user %s", user["id"])
