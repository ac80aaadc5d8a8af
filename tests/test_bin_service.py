import unittest
from datetime import date, datetime, timezone

from exceptions import AlreadyExists, Conflict, InvalidInput, NotFound
from schedule.holidays import HolidayLookup
from schedule.services.bin_service import BinScheduleService
from schedule.stores.memory_store import MemoryBinStore, MemoryHolidayStore


NOW = datetime(2024, 1, 10, 9, 0, tzinfo=timezone.utc)
OWNER = {"id": 1, "email": "sam@example.com", "country": "GB-ENG"}
OTHER = {"id": 2, "email": "alex@example.com", "country": "GB-ENG"}


class RacingBinStore(MemoryBinStore):
    """Loses the compare-and-set a fixed number of times."""

    def __init__(self, losses: int) -> None:
        super().__init__()
        self.losses = losses
        self.attempts = 0

    async def update_schedule(self, bin_id, user_id, expected_next, updates):
        self.attempts += 1
        if self.losses > 0:
            self.losses -= 1
            return None
        return await super().update_schedule(bin_id, user_id, expected_next, updates)


class TestBinScheduleService(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.holiday_store = MemoryHolidayStore()
        self.bins = MemoryBinStore()
        self.service = self._service(self.bins)

    def _service(self, bins):
        return BinScheduleService(bins, HolidayLookup(self.holiday_store), clock=lambda: NOW)

    async def _add(self, service=None, bin_type="general", last="2024-01-05", interval=7, owner=OWNER):
        service = service or self.service
        return await service.add_bin(owner, bin_type, "#00FF00", "#333333", last, interval)

    async def test_add_bin_adjusts_for_holiday(self):
        await self.holiday_store.add("GB-ENG", 15, 1, None)
        user_bin = await self._add(bin_type="recycle", last="2024-01-01", interval=14)

        self.assertEqual(user_bin["next_collection_date"], date(2024, 1, 16))
        self.assertEqual(user_bin["last_collection_date"], date(2024, 1, 1))
        self.assertTrue(user_bin["notification_enabled"])
        self.assertIsNone(user_bin["last_notification_time"])
        self.assertEqual(user_bin["notify_days_before"], 1)

    async def test_add_bin_rejects_duplicate_category(self):
        await self._add()
        with self.assertRaises(AlreadyExists):
            await self._add()
        # Another user may have the same category
        await self._add(owner=OTHER)

    async def test_add_bin_rejects_unknown_type(self):
        with self.assertRaises(InvalidInput):
            await self._add(bin_type="compost")

    async def test_add_bin_validates_colors_independently(self):
        with self.assertRaises(InvalidInput):
            await self.service.add_bin(OWNER, "general", "#00FF00", "grey", "2024-01-05", 7)
        with self.assertRaises(InvalidInput):
            await self.service.add_bin(OWNER, "general", "00FF00", "#333333", "2024-01-05", 7)

    async def test_add_bin_rejects_negative_notify_days(self):
        with self.assertRaises(InvalidInput):
            await self.service.add_bin(OWNER, "general", "#00FF00", "#333333", "2024-01-05", 7, -1)

    async def test_add_bin_runs_schedule_validation(self):
        with self.assertRaises(InvalidInput):
            await self._add(last="2024-01-11")
        with self.assertRaises(InvalidInput):
            await self._add(last="2024-01-01", interval=3)

    async def test_update_schedule_recomputes_next_date(self):
        user_bin = await self._add(last="2024-01-05", interval=7)
        self.assertEqual(user_bin["next_collection_date"], date(2024, 1, 12))
        await self.holiday_store.add("GB-ENG", 17, 1, 2024)

        updated = await self.service.update_schedule(OWNER, user_bin["id"], "2024-01-03", 14)

        self.assertEqual(updated["last_collection_date"], date(2024, 1, 3))
        self.assertEqual(updated["collection_interval"], 14)
        self.assertEqual(updated["next_collection_date"], date(2024, 1, 18))

    async def test_update_schedule_rejects_regression(self):
        user_bin = await self._add(last="2024-01-05", interval=7)
        with self.assertRaises(InvalidInput):
            # Gap from 2024-01-09 to the promised 2024-01-12 is three days
            await self.service.update_schedule(OWNER, user_bin["id"], "2024-01-09", 2)
        unchanged = await self.bins.get_for_owner(user_bin["id"], OWNER["id"])
        self.assertEqual(unchanged["next_collection_date"], date(2024, 1, 12))

    async def test_update_schedule_requires_ownership(self):
        user_bin = await self._add()
        with self.assertRaises(NotFound):
            await self.service.update_schedule(OTHER, user_bin["id"], "2024-01-09", 7)
        with self.assertRaises(NotFound):
            await self.service.update_schedule(OWNER, 999, "2024-01-09", 7)

    async def test_update_schedule_retries_lost_race(self):
        bins = RacingBinStore(losses=1)
        service = self._service(bins)
        user_bin = await self._add(service=service)

        updated = await service.update_schedule(OWNER, user_bin["id"], "2024-01-09", 7)

        self.assertEqual(bins.attempts, 2)
        self.assertEqual(updated["next_collection_date"], date(2024, 1, 16))

    async def test_update_schedule_gives_up_after_repeated_conflicts(self):
        bins = RacingBinStore(losses=10)
        service = self._service(bins)
        user_bin = await self._add(service=service)

        with self.assertRaises(Conflict):
            await service.update_schedule(OWNER, user_bin["id"], "2024-01-09", 7)

    async def test_update_appearance_changes_only_colors(self):
        user_bin = await self._add()
        updated = await self.service.update_appearance(OWNER, user_bin["id"], "#ABCDEF", "#123456")

        self.assertEqual(updated["body_color"], "#ABCDEF")
        self.assertEqual(updated["head_color"], "#123456")
        self.assertEqual(updated["next_collection_date"], user_bin["next_collection_date"])

    async def test_update_appearance_validates_and_checks_owner(self):
        user_bin = await self._add()
        with self.assertRaises(InvalidInput):
            await self.service.update_appearance(OWNER, user_bin["id"], "#ABCDEF", "blue")
        with self.assertRaises(NotFound):
            await self.service.update_appearance(OTHER, user_bin["id"], "#ABCDEF", "#123456")

    async def test_set_notifications(self):
        user_bin = await self._add()
        updated = await self.service.set_notifications(OWNER, user_bin["id"], False)
        self.assertFalse(updated["notification_enabled"])

    async def test_list_bins_orders_by_next_collection(self):
        await self._add(bin_type="recycle", last="2024-01-04", interval=21)
        await self._add(bin_type="general", last="2024-01-05", interval=7)
        await self._add(bin_type="garden", last="2024-01-03", interval=7)

        bins = await self.service.list_bins(OWNER)

        self.assertEqual([b["bin_type"] for b in bins], ["garden", "general", "recycle"])

    async def test_list_upcoming_annotates_days_until(self):
        await self._add(bin_type="recycle", last="2024-01-04", interval=21)
        await self._add(bin_type="general", last="2024-01-05", interval=7)
        await self._add(bin_type="garden", last="2024-01-03", interval=7)

        upcoming = await self.service.list_upcoming(OWNER, 7)

        self.assertEqual(
            [(item.bin_type, item.days_until) for item in upcoming],
            [("garden", 0), ("general", 2)],
        )
        self.assertEqual(upcoming[1].next_collection_date, date(2024, 1, 12))

    async def test_list_upcoming_rejects_negative_window(self):
        with self.assertRaises(InvalidInput):
            await self.service.list_upcoming(OWNER, -1)


if __name__ == "__main__":
    unittest.main()
