"""Verification code store interface."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol


class VerificationStore(Protocol):
    async def create(self, data: dict) -> dict:
        ...

    async def get_active(self, user_id: int, code_type: str, now: datetime) -> dict | None:
        """Newest unused, unexpired code for (user, type)."""
        ...

    async def mark_used(self, code_id: int) -> bool:
        """Mark an unused code used. False when it was already used."""
        ...

    async def consume(self, code_id: int, now: datetime) -> bool:
        """Mark an active code used. False when it was no longer active."""
        ...

    async def register_failed_attempt(self, code_id: int, max_attempts: int) -> dict | None:
        """
        Atomically increment attempts and lock the code at ``max_attempts``.

        Returns ``{"attempts": int, "is_used": bool}`` or None when the code
        was already used.
        """
        ...
