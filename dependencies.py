"""Service wiring.

Stores are chosen by ``Config.STORE_BACKEND``: PostgreSQL in production,
process-local memory stores for development and tests. Each store is
created once per process.
"""

from __future__ import annotations

from typing import Any

from auth.services.account_service import AccountService
from auth.services.email_service import EmailService
from auth.services.otp_service import OtpService
from auth.stores.memory_store import MemoryUserStore, MemoryVerificationStore
from config import Config
from notifications.notifier import FcmNotifier
from notifications.scheduler import NotificationScheduler
from schedule.holidays import HolidayLookup
from schedule.services.bin_service import BinScheduleService
from schedule.stores.memory_store import MemoryBinStore, MemoryHolidayStore


_memory_stores: dict[str, Any] = {
    "users": MemoryUserStore(),
    "verifications": MemoryVerificationStore(),
    "bins": MemoryBinStore(),
    "holidays": MemoryHolidayStore(),
}

_postgres_stores: dict[str, Any] | None = None


def _get_stores() -> dict[str, Any]:
    """Get stores based on STORE_BACKEND config."""
    if Config.STORE_BACKEND == "postgres":
        global _postgres_stores
        if _postgres_stores is None:
            # Imported lazily so memory mode never touches the database driver
            from auth.stores.postgres_store import PostgresUserStore, PostgresVerificationStore
            from schedule.stores.postgres_store import PostgresBinStore, PostgresHolidayStore

            _postgres_stores = {
                "users": PostgresUserStore(),
                "verifications": PostgresVerificationStore(),
                "bins": PostgresBinStore(),
                "holidays": PostgresHolidayStore(),
            }
        return _postgres_stores
    # Fallback to memory store for development/testing
    return _memory_stores


def get_otp_service() -> OtpService:
    stores = _get_stores()
    return OtpService(verification_store=stores["verifications"], email_service=EmailService())


def get_account_service() -> AccountService:
    return AccountService(user_store=_get_stores()["users"], otp_service=get_otp_service())


def get_bin_schedule_service() -> BinScheduleService:
    stores = _get_stores()
    return BinScheduleService(bin_store=stores["bins"], holidays=HolidayLookup(stores["holidays"]))


def get_notification_scheduler() -> NotificationScheduler:
    stores = _get_stores()
    return NotificationScheduler(
        bin_store=stores["bins"],
        user_store=stores["users"],
        notifier=FcmNotifier(),
    )
