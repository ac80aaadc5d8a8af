"""Bin schedule service."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from datetime import date, datetime, time, timedelta
from typing import Any
from zoneinfo import ZoneInfo

from config import Config
from exceptions import AlreadyExists, Conflict, InvalidInput, NotFound
from schedule.calculator import (
    compute_next_collection_date,
    validate_color,
    validate_new_schedule,
    validate_notify_days_before,
    validate_schedule_update,
)
from schedule.constants import (
    BIN_CATEGORY_VALUES,
    DEFAULT_NOTIFY_DAYS_BEFORE,
    MAX_SCHEDULE_UPDATE_RETRIES,
    BinCategory,
)
from schedule.holidays import HolidayLookup
from schedule.interfaces.bin_store import BinStore
from schedule.schemas import UpcomingCollection

logger = logging.getLogger(__name__)


def _local_now() -> datetime:
    return datetime.now(ZoneInfo(Config.TIMEZONE))


def days_until(collection_date: date, now: datetime) -> int:
    start_of_day = datetime.combine(collection_date, time.min, tzinfo=now.tzinfo)
    return max(0, math.ceil((start_of_day - now) / timedelta(days=1)))


class BinScheduleService:
    def __init__(
        self,
        bin_store: BinStore,
        holidays: HolidayLookup,
        clock: Callable[[], datetime] = _local_now,
    ) -> None:
        self._bins = bin_store
        self._holidays = holidays
        self._clock = clock

    async def _get_owned(self, owner: dict[str, Any], bin_id: int) -> dict[str, Any]:
        user_bin = await self._bins.get_for_owner(bin_id, owner["id"])
        if not user_bin:
            raise NotFound("Bin not found")
        return user_bin

    async def add_bin(
        self,
        owner: dict[str, Any],
        bin_type: str,
        body_color: str,
        head_color: str,
        last_collection_date: Any,
        collection_interval: Any,
        notify_days_before: int | None = None,
    ) -> dict[str, Any]:
        if bin_type not in BIN_CATEGORY_VALUES:
            raise InvalidInput(
                f"Invalid bin type. Must be one of: {', '.join(BIN_CATEGORY_VALUES)}"
            )
        bin_type = BinCategory(bin_type).value

        if await self._bins.get_by_owner_and_type(owner["id"], bin_type):
            raise AlreadyExists(f"User already has a {bin_type} bin")

        validate_color(body_color, "Body color")
        validate_color(head_color, "Head color")
        if notify_days_before is None:
            notify_days_before = DEFAULT_NOTIFY_DAYS_BEFORE
        validate_notify_days_before(notify_days_before)

        last, interval = validate_new_schedule(last_collection_date, collection_interval, self._clock())
        next_date = await compute_next_collection_date(
            last, interval, owner.get("country"), self._holidays
        )

        user_bin = await self._bins.create(
            {
                "user_id": owner["id"],
                "bin_type": bin_type,
                "body_color": body_color,
                "head_color": head_color,
                "last_collection_date": last,
                "collection_interval": interval,
                "next_collection_date": next_date,
                "notify_days_before": notify_days_before,
                "notification_enabled": True,
                "last_notification_time": None,
            }
        )
        logger.info(
            "Added %s bin %s for user %s, next collection %s",
            bin_type, user_bin["id"], owner["id"], next_date,
        )
        return user_bin

    async def update_schedule(
        self,
        owner: dict[str, Any],
        bin_id: int,
        last_collection_date: Any,
        collection_interval: Any,
    ) -> dict[str, Any]:
        """Move a bin's schedule, validated against its latest persisted next date."""
        for _ in range(MAX_SCHEDULE_UPDATE_RETRIES):
            user_bin = await self._get_owned(owner, bin_id)
            current_next = user_bin["next_collection_date"]
            last, interval = validate_schedule_update(
                last_collection_date, collection_interval, current_next, self._clock()
            )
            next_date = await compute_next_collection_date(
                last, interval, owner.get("country"), self._holidays
            )
            updated = await self._bins.update_schedule(
                bin_id,
                owner["id"],
                current_next,
                {
                    "last_collection_date": last,
                    "collection_interval": interval,
                    "next_collection_date": next_date,
                },
            )
            if updated:
                logger.info("Rescheduled bin %s, next collection %s", bin_id, next_date)
                return updated
            logger.debug("Bin %s changed during update, retrying", bin_id)
        raise Conflict("Bin schedule was modified concurrently, please retry")

    async def update_appearance(
        self,
        owner: dict[str, Any],
        bin_id: int,
        body_color: str,
        head_color: str,
    ) -> dict[str, Any]:
        await self._get_owned(owner, bin_id)
        validate_color(body_color, "Body color")
        validate_color(head_color, "Head color")
        updated = await self._bins.update(
            bin_id, owner["id"], {"body_color": body_color, "head_color": head_color}
        )
        if not updated:
            raise NotFound("Bin not found")
        return updated

    async def set_notifications(self, owner: dict[str, Any], bin_id: int, enabled: bool) -> dict[str, Any]:
        updated = await self._bins.update(bin_id, owner["id"], {"notification_enabled": bool(enabled)})
        if not updated:
            raise NotFound("Bin not found")
        return updated

    async def list_bins(self, owner: dict[str, Any]) -> list[dict[str, Any]]:
        return await self._bins.list_for_owner(owner["id"])

    async def list_upcoming(
        self,
        owner: dict[str, Any],
        within_days: int = Config.UPCOMING_DEFAULT_DAYS,
    ) -> list[UpcomingCollection]:
        if isinstance(within_days, bool) or not isinstance(within_days, int) or within_days < 0:
            raise InvalidInput("Days must be a non-negative number")
        now = self._clock()
        today = now.date()
        bins = await self._bins.list_for_owner(
            owner["id"], start=today, end=today + timedelta(days=within_days)
        )
        return [
            UpcomingCollection(
                id=user_bin["id"],
                bin_type=user_bin["bin_type"],
                next_collection_date=user_bin["next_collection_date"],
                days_until=days_until(user_bin["next_collection_date"], now),
                body_color=user_bin["body_color"],
                head_color=user_bin["head_color"],
            )
            for user_bin in bins
        ]
