"""Periodic reminder pass.

An external ticker calls ``run(now)`` every minute or so. Outside the 06:00
and 18:00 windows the pass does nothing. Inside a window each due bin is
decided independently by ``should_notify``; a failure on one bin is logged
and never stops the rest of the batch. Undelivered reminders are retried
naturally on the next tick inside the same window.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from auth.interfaces.user_store import UserStore
from config import Config
from notifications.notifier import FailureKind, Notifier
from notifications.schemas import PushPayload
from notifications.windows import MORNING_CUTOFF_HOUR, is_evaluation_window, should_notify
from schedule.interfaces.bin_store import BinStore

logger = logging.getLogger(__name__)

REMINDER_TITLE = "Bin Collection Reminder"


@dataclass
class RunSummary:
    evaluated: int = 0
    sent: int = 0
    skipped: int = 0
    failed: int = 0


def build_payload(user_bin: dict[str, Any], token: str, now: datetime) -> PushPayload:
    bin_type = user_bin["bin_type"]
    if now.hour < MORNING_CUTOFF_HOUR:
        body = f"Final reminder: Your {bin_type} bin will be collected today!"
    else:
        body = f"Your {bin_type} bin will be collected tomorrow."
    return PushPayload(
        token=token,
        title=REMINDER_TITLE,
        body=body,
        data={
            "binType": bin_type,
            "bodyColor": user_bin["body_color"],
            "headColor": user_bin["head_color"],
            "collectionDate": user_bin["next_collection_date"].isoformat(),
            "type": "collection_reminder",
        },
    )


class NotificationScheduler:
    def __init__(
        self,
        bin_store: BinStore,
        user_store: UserStore,
        notifier: Notifier,
        tolerance: timedelta | None = None,
    ) -> None:
        self._bins = bin_store
        self._users = user_store
        self._notifier = notifier
        self._tolerance = tolerance or timedelta(minutes=Config.NOTIFICATION_WINDOW_TOLERANCE_MINUTES)

    async def run(self, now: datetime) -> RunSummary:
        summary = RunSummary()
        if not is_evaluation_window(now, self._tolerance):
            return summary

        today = now.date()
        # Evening heads-ups are for tomorrow, morning reminders for today
        candidates = await self._bins.list_due(today, today + timedelta(days=1))
        for user_bin in candidates:
            if not should_notify(user_bin, now, self._tolerance):
                continue
            summary.evaluated += 1
            try:
                outcome = await self._notify_bin(user_bin, now)
            except Exception:
                logger.exception("Reminder for bin %s failed", user_bin["id"])
                summary.failed += 1
                continue
            if outcome == "sent":
                summary.sent += 1
            elif outcome == "skipped":
                summary.skipped += 1
            else:
                summary.failed += 1

        if summary.evaluated:
            logger.info(
                "Reminder pass at %s: %d sent, %d skipped, %d failed",
                now.isoformat(timespec="minutes"), summary.sent, summary.skipped, summary.failed,
            )
        return summary

    async def _notify_bin(self, user_bin: dict[str, Any], now: datetime) -> str:
        user = await self._users.get_by_id(user_bin["user_id"])
        token = user.get("device_token") if user else None
        if not token:
            return "skipped"

        result = await self._notifier.send(build_payload(user_bin, token, now))
        if result.ok:
            await self._bins.mark_notified(user_bin["id"], now)
            return "sent"

        if result.failure == FailureKind.INVALID_RECIPIENT:
            await self._users.update_user(user["id"], {"device_token": None})
            logger.warning("Cleared invalid device token for user %s", user["id"])
        else:
            logger.warning(
                "Reminder for bin %s not delivered (%s), will retry next pass",
                user_bin["id"], result.detail,
            )
        return "failed"
