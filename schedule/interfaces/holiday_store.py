"""Holiday store interface."""

from __future__ import annotations

from typing import Protocol


class HolidayStore(Protocol):
    async def exists(self, country_code: str, day: int, month: int, year: int) -> bool:
        """True when a holiday matches the day and month for ``year`` or every year."""
        ...
