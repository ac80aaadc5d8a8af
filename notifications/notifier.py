"""Push delivery."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

import httpx

from config import Config
from notifications.schemas import PushPayload

logger = logging.getLogger(__name__)

FCM_SEND_URL = "https://fcm.googleapis.com/v1/projects/{project_id}/messages:send"

# FCM error codes that mean the device token will never work again
_INVALID_TOKEN_CODES = {"UNREGISTERED", "INVALID_ARGUMENT"}


class FailureKind(str, Enum):
    INVALID_RECIPIENT = "invalid_recipient"
    TRANSIENT = "transient"


@dataclass(frozen=True)
class DeliveryResult:
    ok: bool
    failure: FailureKind | None = None
    detail: str | None = None


class Notifier(Protocol):
    async def send(self, payload: PushPayload) -> DeliveryResult:
        ...


def _fcm_error_code(response: httpx.Response) -> str | None:
    try:
        error = response.json().get("error", {})
    except ValueError:
        return None
    for detail in error.get("details", []):
        if detail.get("errorCode"):
            return detail["errorCode"]
    return error.get("status")


class FcmNotifier:
    """Sends reminders through the Firebase Cloud Messaging HTTP v1 API."""

    def __init__(
        self,
        project_id: str | None = None,
        access_token: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._project_id = project_id or Config.FCM_PROJECT_ID
        self._access_token = access_token or Config.FCM_ACCESS_TOKEN
        self._timeout = timeout or Config.FCM_TIMEOUT_SECONDS
        self._transport = transport

    async def send(self, payload: PushPayload) -> DeliveryResult:
        if not self._project_id or not self._access_token:
            return DeliveryResult(ok=False, failure=FailureKind.TRANSIENT, detail="FCM not configured")

        url = FCM_SEND_URL.format(project_id=self._project_id)
        headers = {"Authorization": f"Bearer {self._access_token}"}
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(url, headers=headers, json=payload.to_fcm_message())
        except httpx.HTTPError as exc:
            return DeliveryResult(ok=False, failure=FailureKind.TRANSIENT, detail=str(exc))

        if response.status_code == 200:
            return DeliveryResult(ok=True)

        code = _fcm_error_code(response)
        logger.debug("FCM rejected message with HTTP %s (%s)", response.status_code, code)
        if response.status_code == 404 or code in _INVALID_TOKEN_CODES:
            return DeliveryResult(ok=False, failure=FailureKind.INVALID_RECIPIENT, detail=code)
        return DeliveryResult(
            ok=False,
            failure=FailureKind.TRANSIENT,
            detail=code or f"HTTP {response.status_code}",
        )
