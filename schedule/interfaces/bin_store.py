"""Bin schedule store interface."""

from __future__ import annotations

from datetime import date, datetime
from typing import Protocol


class BinStore(Protocol):
    async def create(self, data: dict) -> dict:
        """Persist a bin. Raises AlreadyExists for a duplicate (user_id, bin_type)."""
        ...

    async def get_by_owner_and_type(self, user_id: int, bin_type: str) -> dict | None:
        ...

    async def get_for_owner(self, bin_id: int, user_id: int) -> dict | None:
        ...

    async def list_for_owner(
        self,
        user_id: int,
        start: date | None = None,
        end: date | None = None,
    ) -> list[dict]:
        """Bins ordered by ascending next_collection_date, optionally within [start, end]."""
        ...

    async def update(self, bin_id: int, user_id: int, updates: dict) -> dict | None:
        ...

    async def update_schedule(
        self,
        bin_id: int,
        user_id: int,
        expected_next: date,
        updates: dict,
    ) -> dict | None:
        """Apply ``updates`` only if next_collection_date still equals ``expected_next``."""
        ...

    async def list_due(self, start: date, end: date) -> list[dict]:
        """Notification-enabled bins collected between ``start`` and ``end`` inclusive."""
        ...

    async def mark_notified(self, bin_id: int, notified_at: datetime) -> None:
        ...
