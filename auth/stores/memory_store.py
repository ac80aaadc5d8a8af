"""In-memory auth stores."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any

from exceptions import AlreadyExists


class MemoryUserStore:
    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._users_by_email: dict[str, dict[str, Any]] = {}
        self._users_by_id: dict[int, dict[str, Any]] = {}
        self._next_id = 1

    async def get_by_email(self, email: str) -> dict | None:
        async with self._lock:
            user = self._users_by_email.get(email.lower())
            return dict(user) if user else None

    async def get_by_id(self, user_id: int) -> dict | None:
        async with self._lock:
            user = self._users_by_id.get(user_id)
            return dict(user) if user else None

    async def create_user(self, data: dict) -> dict:
        async with self._lock:
            user_id = self._next_id
            self._next_id += 1
            payload = {
                "full_name": None,
                "hashed_password": None,
                "country": None,
                "device_token": None,
                "is_email_verified": False,
            }
            payload.update(data)
            payload["id"] = user_id
            payload["email"] = payload["email"].lower()
            if payload["email"] in self._users_by_email:
                raise AlreadyExists("Email already registered")
            payload["created_at"] = payload.get("created_at", datetime.now(timezone.utc))
            payload["updated_at"] = payload.get("updated_at", payload["created_at"])
            self._users_by_email[payload["email"]] = payload
            self._users_by_id[user_id] = payload
            return dict(payload)

    async def delete_user(self, user_id: int) -> None:
        async with self._lock:
            user = self._users_by_id.pop(user_id, None)
            if user:
                self._users_by_email.pop(user["email"], None)

    async def update_user(self, user_id: int, updates: dict) -> dict:
        async with self._lock:
            user = self._users_by_id.get(user_id)
            if not user:
                raise ValueError("User not found")
            for key, value in updates.items():
                user[key] = value
            user["updated_at"] = datetime.now(timezone.utc)
            self._users_by_email[user["email"]] = user
            return dict(user)


class MemoryVerificationStore:
    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._codes: dict[int, dict[str, Any]] = {}
        self._next_id = 1

    async def create(self, data: dict) -> dict:
        async with self._lock:
            code_id = self._next_id
            self._next_id += 1
            payload = dict(data)
            payload["id"] = code_id
            payload.setdefault("is_used", False)
            payload.setdefault("attempts", 0)
            self._codes[code_id] = payload
            return dict(payload)

    async def get(self, code_id: int) -> dict | None:
        async with self._lock:
            record = self._codes.get(code_id)
            return dict(record) if record else None

    async def get_active(self, user_id: int, code_type: str, now: datetime) -> dict | None:
        async with self._lock:
            active = [
                record
                for record in self._codes.values()
                if record["user_id"] == user_id
                and record["type"] == code_type
                and not record["is_used"]
                and record["expires_at"] > now
            ]
            if not active:
                return None
            newest = max(active, key=lambda record: (record["created_at"], record["id"]))
            return dict(newest)

    async def mark_used(self, code_id: int) -> bool:
        async with self._lock:
            record = self._codes.get(code_id)
            if not record or record["is_used"]:
                return False
            record["is_used"] = True
            return True

    async def consume(self, code_id: int, now: datetime) -> bool:
        async with self._lock:
            record = self._codes.get(code_id)
            if not record or record["is_used"] or record["expires_at"] <= now:
                return False
            record["is_used"] = True
            return True

    async def register_failed_attempt(self, code_id: int, max_attempts: int) -> dict | None:
        async with self._lock:
            record = self._codes.get(code_id)
            if not record or record["is_used"]:
                return None
            record["attempts"] = int(record.get("attempts", 0)) + 1
            if record["attempts"] >= max_attempts:
                record["is_used"] = True
            return {"attempts": record["attempts"], "is_used": record["is_used"]}
