"""Test doubles shared by the service tests."""

from __future__ import annotations

from datetime import datetime, timedelta

from notifications.notifier import DeliveryResult


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FakeEmailService:
    def __init__(self, succeed: bool = True) -> None:
        self.succeed = succeed
        self.sent: list[tuple[str, str, str]] = []

    async def send_code(self, email: str, purpose: str, code: str) -> bool:
        self.sent.append((email, purpose, code))
        return self.succeed

    @property
    def last_code(self) -> str:
        return self.sent[-1][2]


class FakeNotifier:
    """Returns scripted results per device token, success otherwise."""

    def __init__(self) -> None:
        self.sent = []
        self.results: dict[str, DeliveryResult] = {}
        self.errors: dict[str, Exception] = {}

    async def send(self, payload):
        if payload.token in self.errors:
            raise self.errors[payload.token]
        self.sent.append(payload)
        return self.results.get(payload.token, DeliveryResult(ok=True))
