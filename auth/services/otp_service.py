"""One-time code service.

Each (user, type) pair moves through Absent -> Active -> Consumed | Expired |
Locked. Storage keeps ``is_used``, ``attempts`` and ``expires_at``; the status
is derived from them on every read. A terminal code is never reactivated; a
new Active code may be issued afterwards.

The code row's ``created_at`` is both its issuance time and the anchor for the
resend cooldown.
"""

from __future__ import annotations

import logging
import math
import secrets
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from auth.config import AuthConfig
from auth.interfaces.verification_store import VerificationStore
from auth.security import generate_otp
from auth.services.email_service import EmailService
from exceptions import DependencyFailure, InvalidInput, InvalidOrExpired, LockedOut, RateLimited

logger = logging.getLogger(__name__)


class CodeType(str, Enum):
    EMAIL_VERIFICATION = "EMAIL_VERIFICATION"
    PASSWORD_RESET = "PASSWORD_RESET"


class CodeStatus(str, Enum):
    ACTIVE = "active"
    CONSUMED = "consumed"
    EXPIRED = "expired"
    LOCKED = "locked"


# Purpose names understood by the email templates
CODE_PURPOSES = {
    CodeType.EMAIL_VERIFICATION: "verification",
    CodeType.PASSWORD_RESET: "password-reset",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def code_status(record: dict[str, Any], now: datetime) -> CodeStatus:
    """Lifecycle state of a stored code, derived from is_used, attempts and expires_at."""
    if record.get("is_used"):
        if int(record.get("attempts", 0)) >= AuthConfig.MAX_OTP_ATTEMPTS:
            return CodeStatus.LOCKED
        return CodeStatus.CONSUMED
    if now >= record["expires_at"]:
        return CodeStatus.EXPIRED
    return CodeStatus.ACTIVE


class OtpService:
    def __init__(
        self,
        verification_store: VerificationStore,
        email_service: EmailService,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._codes = verification_store
        self._email_service = email_service
        self._clock = clock

    async def issue(self, user: dict[str, Any], code_type: CodeType) -> dict[str, Any]:
        """Create a fresh Active code and dispatch it to the user's email."""
        code_type = CodeType(code_type)
        now = self._clock()
        record = await self._codes.create(
            {
                "user_id": user["id"],
                "code": generate_otp(),
                "type": code_type.value,
                "created_at": now,
                "expires_at": now + timedelta(minutes=AuthConfig.OTP_EXPIRY_MINUTES),
                "is_used": False,
                "attempts": 0,
            }
        )

        sent = await self._email_service.send_code(
            user["email"], CODE_PURPOSES[code_type], record["code"]
        )
        if not sent:
            # An undelivered code must never become verifiable
            await self._codes.mark_used(record["id"])
            raise DependencyFailure("Failed to send verification code")

        logger.info("Issued %s code for user %s", code_type.value, user["id"])
        return record

    async def resend(self, user: dict[str, Any], code_type: CodeType) -> dict[str, Any]:
        code_type = CodeType(code_type)
        now = self._clock()
        active = await self._codes.get_active(user["id"], code_type.value, now)
        if active:
            elapsed = (now - active["created_at"]).total_seconds()
            cooldown = AuthConfig.OTP_RESEND_COOLDOWN_SECONDS
            if elapsed < cooldown:
                raise RateLimited(
                    "Please wait before requesting a new code",
                    seconds_left=math.ceil(cooldown - elapsed),
                )
            if not await self._codes.mark_used(active["id"]):
                # A concurrent resend superseded this code and issued a new one
                raise RateLimited(
                    "Please wait before requesting a new code",
                    seconds_left=cooldown,
                )
        return await self.issue(user, code_type)

    async def verify(self, user: dict[str, Any], code_type: CodeType, submitted: str) -> None:
        """Consume the active code when ``submitted`` matches it.

        Raises InvalidOrExpired for any mismatch or missing code, and
        LockedOut on the failure that exhausts the attempt budget.
        """
        code_type = CodeType(code_type)
        submitted = (submitted or "").strip()
        if len(submitted) != AuthConfig.OTP_LENGTH or not submitted.isdigit():
            raise InvalidInput(f"Code must be {AuthConfig.OTP_LENGTH} digits")

        now = self._clock()
        active = await self._codes.get_active(user["id"], code_type.value, now)
        if not active or code_status(active, now) is not CodeStatus.ACTIVE:
            raise InvalidOrExpired("Invalid or expired code")

        if secrets.compare_digest(active["code"], submitted):
            if not await self._codes.consume(active["id"], now):
                raise InvalidOrExpired("Invalid or expired code")
            logger.info("Consumed %s code for user %s", code_type.value, user["id"])
            return

        outcome = await self._codes.register_failed_attempt(
            active["id"], AuthConfig.MAX_OTP_ATTEMPTS
        )
        if outcome is None:
            raise InvalidOrExpired("Invalid or expired code")
        if code_status({**active, **outcome}, now) is CodeStatus.LOCKED:
            logger.warning("Locked %s code for user %s", code_type.value, user["id"])
            raise LockedOut("Too many failed attempts")
        raise InvalidOrExpired("Invalid or expired code")
