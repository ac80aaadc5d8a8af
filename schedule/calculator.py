"""
Next-collection date arithmetic and schedule validation.

All functions are pure apart from the awaited holiday lookup. ``now`` is a
timezone-aware local datetime; schedule dates are compared against its
calendar day.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime, timedelta
from typing import Any

from exceptions import DataError, InvalidInput
from schedule.constants import MAX_BACKDATE_DAYS, MAX_HOLIDAY_ADVANCE_DAYS
from schedule.holidays import HolidayLookup

HEX_COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")


def parse_collection_date(value: Any) -> date:
    """Accept a date, a datetime or an ISO-8601 string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            if len(text) > 10:
                return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
            return date.fromisoformat(text)
        except ValueError:
            pass
    raise InvalidInput("Invalid last collection date")


def parse_interval(value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidInput("Collection interval must be a positive number")
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    if not isinstance(value, int) or value <= 0:
        raise InvalidInput("Collection interval must be a positive number")
    return value


def days_between(start: date, end: date) -> int:
    """Whole days from ``start`` to ``end``, rounded up."""
    return math.ceil((end - start) / timedelta(days=1))


def validate_color(value: Any, field: str = "color") -> str:
    if not isinstance(value, str) or not HEX_COLOR_PATTERN.match(value):
        raise InvalidInput(f"{field} must be a valid hex color code")
    return value


def validate_notify_days_before(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidInput("Notify days before must be a non-negative number")
    return value


async def compute_next_collection_date(
    last_collection_date: date,
    interval_days: int,
    jurisdiction: str | None,
    holidays: HolidayLookup,
) -> date:
    """``last + interval``, pushed forward past any holidays in ``jurisdiction``."""
    candidate = last_collection_date + timedelta(days=interval_days)
    for _ in range(MAX_HOLIDAY_ADVANCE_DAYS):
        if not await holidays.is_holiday(candidate, jurisdiction):
            return candidate
        candidate += timedelta(days=1)
    raise DataError(
        f"No non-holiday date within {MAX_HOLIDAY_ADVANCE_DAYS} days for {jurisdiction}"
    )


def validate_new_schedule(last_collection_date: Any, interval_days: Any, now: datetime) -> tuple[date, int]:
    """Check a schedule as entered. Returns the parsed (date, interval)."""
    last = parse_collection_date(last_collection_date)
    interval = parse_interval(interval_days)
    today = now.date()

    if last > today:
        raise InvalidInput("Last collection date cannot be in the future")
    if last < today - timedelta(days=MAX_BACKDATE_DAYS):
        raise InvalidInput(
            f"Last collection date cannot be more than {MAX_BACKDATE_DAYS} days in the past"
        )
    if last + timedelta(days=interval) < today:
        raise InvalidInput("Last collection date plus collection interval cannot be in the past")
    return last, interval


def validate_schedule_update(
    new_last: Any,
    new_interval: Any,
    current_next: date,
    now: datetime,
) -> tuple[date, int]:
    """Base checks plus no regression against the currently promised next date."""
    last, interval = validate_new_schedule(new_last, new_interval, now)

    if last >= current_next:
        raise InvalidInput("Last collection date must be before the current next collection date")
    if interval < days_between(last, current_next):
        raise InvalidInput(
            "Collection interval must be greater than or equal to the difference "
            "between last and next collection dates"
        )
    return last, interval
