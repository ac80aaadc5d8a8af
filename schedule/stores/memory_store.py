"""In-memory schedule stores."""

from __future__ import annotations

import asyncio
from datetime import date, datetime, timezone
from typing import Any

from exceptions import AlreadyExists


class MemoryHolidayStore:
    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._holidays: dict[tuple[str, int, int, int | None], dict[str, Any]] = {}

    async def add(
        self,
        country_code: str,
        day: int,
        month: int,
        year: int | None = None,
        name: str = "Holiday",
    ) -> dict:
        async with self._lock:
            key = (country_code.upper(), day, month, year)
            payload = {
                "country_code": key[0],
                "day": day,
                "month": month,
                "year": year,
                "name": name,
            }
            self._holidays[key] = payload
            return dict(payload)

    async def exists(self, country_code: str, day: int, month: int, year: int) -> bool:
        async with self._lock:
            code = country_code.upper()
            return (code, day, month, None) in self._holidays or (
                code, day, month, year
            ) in self._holidays


class MemoryBinStore:
    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._bins: dict[int, dict[str, Any]] = {}
        self._next_id = 1

    def _owned(self, bin_id: int, user_id: int) -> dict[str, Any] | None:
        record = self._bins.get(bin_id)
        if record and record["user_id"] == user_id:
            return record
        return None

    async def create(self, data: dict) -> dict:
        async with self._lock:
            for record in self._bins.values():
                if record["user_id"] == data["user_id"] and record["bin_type"] == data["bin_type"]:
                    raise AlreadyExists(f"User already has a {data['bin_type']} bin")
            bin_id = self._next_id
            self._next_id += 1
            payload = dict(data)
            payload["id"] = bin_id
            payload.setdefault("notification_enabled", True)
            payload.setdefault("last_notification_time", None)
            payload["created_at"] = datetime.now(timezone.utc)
            payload["updated_at"] = payload["created_at"]
            self._bins[bin_id] = payload
            return dict(payload)

    async def get_by_owner_and_type(self, user_id: int, bin_type: str) -> dict | None:
        async with self._lock:
            for record in self._bins.values():
                if record["user_id"] == user_id and record["bin_type"] == bin_type:
                    return dict(record)
            return None

    async def get_for_owner(self, bin_id: int, user_id: int) -> dict | None:
        async with self._lock:
            record = self._owned(bin_id, user_id)
            return dict(record) if record else None

    async def list_for_owner(
        self,
        user_id: int,
        start: date | None = None,
        end: date | None = None,
    ) -> list[dict]:
        async with self._lock:
            records = [
                dict(record)
                for record in self._bins.values()
                if record["user_id"] == user_id
                and (start is None or record["next_collection_date"] >= start)
                and (end is None or record["next_collection_date"] <= end)
            ]
        return sorted(records, key=lambda record: (record["next_collection_date"], record["id"]))

    async def update(self, bin_id: int, user_id: int, updates: dict) -> dict | None:
        async with self._lock:
            record = self._owned(bin_id, user_id)
            if not record:
                return None
            record.update(updates)
            record["updated_at"] = datetime.now(timezone.utc)
            return dict(record)

    async def update_schedule(
        self,
        bin_id: int,
        user_id: int,
        expected_next: date,
        updates: dict,
    ) -> dict | None:
        async with self._lock:
            record = self._owned(bin_id, user_id)
            if not record or record["next_collection_date"] != expected_next:
                return None
            record.update(updates)
            record["updated_at"] = datetime.now(timezone.utc)
            return dict(record)

    async def list_due(self, start: date, end: date) -> list[dict]:
        async with self._lock:
            return [
                dict(record)
                for record in self._bins.values()
                if record["notification_enabled"]
                and start <= record["next_collection_date"] <= end
            ]

    async def mark_notified(self, bin_id: int, notified_at: datetime) -> None:
        async with self._lock:
            record = self._bins.get(bin_id)
            if record:
                record["last_notification_time"] = notified_at
