"""Holiday lookup by date and jurisdiction."""

from __future__ import annotations

from datetime import date

from schedule.constants import JURISDICTIONS
from schedule.interfaces.holiday_store import HolidayStore


class HolidayLookup:
    def __init__(self, holiday_store: HolidayStore) -> None:
        self._holidays = holiday_store

    async def is_holiday(self, day: date, jurisdiction: str | None) -> bool:
        # Users outside a known jurisdiction have no holiday calendar
        if not jurisdiction or jurisdiction.upper() not in JURISDICTIONS:
            return False
        return await self._holidays.exists(jurisdiction.upper(), day.day, day.month, day.year)
