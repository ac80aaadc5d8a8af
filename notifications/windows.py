"""
Reminder timing decisions.

Pure functions of (bin, now) so the periodic pass can be tested at any
instant. ``now`` must be a timezone-aware local datetime.

Each collection gets at most two reminders:
- an evening heads-up in the 18:00 window the day before collection
- a morning final reminder in the 06:00 window on collection day, only
  after the evening heads-up went out
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any

from config import NOTIFICATION_HOURS

DEFAULT_TOLERANCE = timedelta(minutes=5)

MORNING_CUTOFF_HOUR = 12


def is_evaluation_window(now: datetime, tolerance: timedelta = DEFAULT_TOLERANCE) -> bool:
    for hour in NOTIFICATION_HOURS:
        target = now.replace(hour=hour, minute=0, second=0, microsecond=0)
        if abs(now - target) <= tolerance:
            return True
    return False


def _as_local(moment: datetime, now: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=now.tzinfo)
    return moment.astimezone(now.tzinfo)


def last_sent_this_cycle(user_bin: dict[str, Any], now: datetime) -> datetime | None:
    """The bin's last reminder time, ignoring sends from earlier collections.

    Reminders for a collection start on the eve of its date, so anything
    older belongs to a previous cycle.
    """
    last = user_bin.get("last_notification_time")
    if last is None:
        return None
    last = _as_local(last, now)
    cycle_start: date = user_bin["next_collection_date"] - timedelta(days=1)
    if last.date() < cycle_start:
        return None
    return last


def should_notify(
    user_bin: dict[str, Any],
    now: datetime,
    tolerance: timedelta = DEFAULT_TOLERANCE,
) -> bool:
    if not is_evaluation_window(now, tolerance):
        return False

    today = now.date()
    collection_date = user_bin["next_collection_date"]
    last = last_sent_this_cycle(user_bin, now)

    if last is None:
        # Evening heads-up
        return (
            collection_date == today + timedelta(days=1)
            and now.hour >= MORNING_CUTOFF_HOUR
        )

    heads_up_sent = (
        last.date() == collection_date - timedelta(days=1)
        and last.hour >= MORNING_CUTOFF_HOUR
    )
    if heads_up_sent:
        # Morning final reminder; the heads-up may have gone out from 17:55
        return collection_date == today and now.hour < MORNING_CUTOFF_HOUR

    return False
