import asyncio
import unittest
from datetime import datetime, timezone

from auth.services.otp_service import CodeStatus, CodeType, OtpService, code_status
from auth.stores.memory_store import MemoryVerificationStore
from exceptions import DependencyFailure, InvalidInput, InvalidOrExpired, LockedOut, RateLimited
from fakes import FakeClock, FakeEmailService


USER = {"id": 7, "email": "sam@example.com"}


def wrong_code(code: str) -> str:
    return "111111" if code != "111111" else "222222"


class TestOtpService(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.clock = FakeClock(datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc))
        self.store = MemoryVerificationStore()
        self.email = FakeEmailService()
        self.service = OtpService(self.store, self.email, clock=self.clock)

    async def test_issue_creates_active_six_digit_code(self):
        record = await self.service.issue(USER, CodeType.EMAIL_VERIFICATION)

        self.assertRegex(record["code"], r"^\d{6}$")
        self.assertEqual(record["attempts"], 0)
        self.assertEqual((record["expires_at"] - record["created_at"]).total_seconds(), 15 * 60)
        self.assertEqual(code_status(record, self.clock()), CodeStatus.ACTIVE)
        self.assertEqual(self.email.sent, [("sam@example.com", "verification", record["code"])])

    async def test_password_reset_uses_reset_template(self):
        await self.service.issue(USER, CodeType.PASSWORD_RESET)
        self.assertEqual(self.email.sent[0][1], "password-reset")

    async def test_correct_code_verifies_exactly_once(self):
        record = await self.service.issue(USER, CodeType.EMAIL_VERIFICATION)
        self.clock.advance(minutes=14)

        await self.service.verify(USER, CodeType.EMAIL_VERIFICATION, record["code"])
        with self.assertRaises(InvalidOrExpired):
            await self.service.verify(USER, CodeType.EMAIL_VERIFICATION, record["code"])

        stored = await self.store.get(record["id"])
        self.assertEqual(code_status(stored, self.clock()), CodeStatus.CONSUMED)

    async def test_codes_are_scoped_by_type(self):
        record = await self.service.issue(USER, CodeType.EMAIL_VERIFICATION)
        with self.assertRaises(InvalidOrExpired):
            await self.service.verify(USER, CodeType.PASSWORD_RESET, record["code"])

    async def test_expired_code_is_rejected(self):
        record = await self.service.issue(USER, CodeType.EMAIL_VERIFICATION)
        self.clock.advance(minutes=15)

        with self.assertRaises(InvalidOrExpired):
            await self.service.verify(USER, CodeType.EMAIL_VERIFICATION, record["code"])
        stored = await self.store.get(record["id"])
        self.assertEqual(code_status(stored, self.clock()), CodeStatus.EXPIRED)

    async def test_three_wrong_attempts_lock_the_code(self):
        record = await self.service.issue(USER, CodeType.EMAIL_VERIFICATION)
        wrong = wrong_code(record["code"])

        with self.assertRaises(InvalidOrExpired):
            await self.service.verify(USER, CodeType.EMAIL_VERIFICATION, wrong)
        with self.assertRaises(InvalidOrExpired):
            await self.service.verify(USER, CodeType.EMAIL_VERIFICATION, wrong)
        with self.assertRaises(LockedOut):
            await self.service.verify(USER, CodeType.EMAIL_VERIFICATION, wrong)
        # Even the right code is refused once locked
        with self.assertRaises(InvalidOrExpired):
            await self.service.verify(USER, CodeType.EMAIL_VERIFICATION, record["code"])

        stored = await self.store.get(record["id"])
        self.assertEqual(stored["attempts"], 3)
        self.assertEqual(code_status(stored, self.clock()), CodeStatus.LOCKED)

    async def test_concurrent_wrong_guesses_lock_once(self):
        record = await self.service.issue(USER, CodeType.EMAIL_VERIFICATION)
        wrong = wrong_code(record["code"])

        results = await asyncio.gather(
            *[self.service.verify(USER, CodeType.EMAIL_VERIFICATION, wrong) for _ in range(6)],
            return_exceptions=True,
        )

        self.assertEqual(sum(isinstance(r, LockedOut) for r in results), 1)
        self.assertEqual(sum(isinstance(r, InvalidOrExpired) for r in results), 5)
        stored = await self.store.get(record["id"])
        self.assertEqual(stored["attempts"], 3)

    async def test_malformed_code_is_invalid_input(self):
        await self.service.issue(USER, CodeType.EMAIL_VERIFICATION)
        for submitted in ("12345", "1234567", "12a456", ""):
            with self.assertRaises(InvalidInput):
                await self.service.verify(USER, CodeType.EMAIL_VERIFICATION, submitted)

    async def test_verify_without_code_is_invalid_or_expired(self):
        with self.assertRaises(InvalidOrExpired):
            await self.service.verify(USER, CodeType.EMAIL_VERIFICATION, "123456")

    async def test_resend_within_cooldown_is_rate_limited(self):
        await self.service.issue(USER, CodeType.EMAIL_VERIFICATION)
        self.clock.advance(seconds=20)

        with self.assertRaises(RateLimited) as ctx:
            await self.service.resend(USER, CodeType.EMAIL_VERIFICATION)

        self.assertEqual(ctx.exception.seconds_left, 40)
        self.assertEqual(ctx.exception.data, {"seconds_left": 40})
        self.assertEqual(len(self.email.sent), 1)

    async def test_resend_after_cooldown_supersedes_old_code(self):
        first = await self.service.issue(USER, CodeType.EMAIL_VERIFICATION)
        self.clock.advance(seconds=61)

        second = await self.service.resend(USER, CodeType.EMAIL_VERIFICATION)

        self.assertNotEqual(first["id"], second["id"])
        old = await self.store.get(first["id"])
        self.assertTrue(old["is_used"])
        if first["code"] != second["code"]:
            with self.assertRaises(InvalidOrExpired):
                await self.service.verify(USER, CodeType.EMAIL_VERIFICATION, first["code"])
        await self.service.verify(USER, CodeType.EMAIL_VERIFICATION, second["code"])

    async def test_resend_without_active_code_issues(self):
        record = await self.service.resend(USER, CodeType.PASSWORD_RESET)
        self.assertEqual(record["type"], CodeType.PASSWORD_RESET.value)
        self.assertEqual(len(self.email.sent), 1)

    async def test_failed_delivery_is_a_hard_error(self):
        self.email.succeed = False
        with self.assertRaises(DependencyFailure):
            await self.service.issue(USER, CodeType.EMAIL_VERIFICATION)

        active = await self.store.get_active(USER["id"], CodeType.EMAIL_VERIFICATION.value, self.clock())
        self.assertIsNone(active)


    async def test_stale_active_read_is_not_verifiable(self):
        record = await self.service.issue(USER, CodeType.EMAIL_VERIFICATION)
        self.clock.advance(minutes=16)
        store = StaleReadVerificationStore()
        store.stale = record
        service = OtpService(store, self.email, clock=self.clock)

        with self.assertRaises(InvalidOrExpired):
            await service.verify(USER, CodeType.EMAIL_VERIFICATION, record["code"])


class StaleReadVerificationStore(MemoryVerificationStore):
    """Serves a snapshot from get_active, like a read racing another writer."""

    stale = None

    async def get_active(self, user_id, code_type, now):
        if self.stale is not None:
            return dict(self.stale)
        return await super().get_active(user_id, code_type, now)


class TestConcurrentResend(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.clock = FakeClock(datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc))
        self.store = StaleReadVerificationStore()
        self.email = FakeEmailService()
        self.service = OtpService(self.store, self.email, clock=self.clock)

    async def test_only_one_resend_supersedes_a_code(self):
        first = await self.service.issue(USER, CodeType.EMAIL_VERIFICATION)
        self.clock.advance(seconds=61)
        self.store.stale = first

        second = await self.service.resend(USER, CodeType.EMAIL_VERIFICATION)
        # The losing caller still sees the superseded code as active
        with self.assertRaises(RateLimited) as ctx:
            await self.service.resend(USER, CodeType.EMAIL_VERIFICATION)

        self.assertEqual(ctx.exception.seconds_left, 60)
        self.assertEqual(len(self.email.sent), 2)
        self.store.stale = None
        active = await self.store.get_active(USER["id"], CodeType.EMAIL_VERIFICATION.value, self.clock())
        self.assertEqual(active["id"], second["id"])

    async def test_mark_used_only_succeeds_once(self):
        record = await self.service.issue(USER, CodeType.PASSWORD_RESET)
        self.assertTrue(await self.store.mark_used(record["id"]))
        self.assertFalse(await self.store.mark_used(record["id"]))


if __name__ == "__main__":
    unittest.main()
