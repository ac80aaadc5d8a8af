"""
Reminder worker.

Ticks every SCHEDULER_TICK_SECONDS and runs the reminder pass with the
current local time. The tick must stay well under the window tolerance or
windows can be skipped entirely.

Usage:
    python -m notifications.worker
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime
from zoneinfo import ZoneInfo

from config import Config
from notifications.scheduler import NotificationScheduler

logger = logging.getLogger(__name__)


def local_now() -> datetime:
    return datetime.now(ZoneInfo(Config.TIMEZONE))


async def run_forever(
    scheduler: NotificationScheduler,
    tick_seconds: float = Config.SCHEDULER_TICK_SECONDS,
    stop_event: asyncio.Event | None = None,
    clock: Callable[[], datetime] = local_now,
) -> None:
    stop_event = stop_event or asyncio.Event()
    logger.info("Reminder worker started, ticking every %ss", tick_seconds)
    while not stop_event.is_set():
        try:
            await scheduler.run(clock())
        except Exception:
            logger.exception("Reminder pass failed")
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=tick_seconds)
        except asyncio.TimeoutError:
            pass
    logger.info("Reminder worker stopped")


def main() -> None:
    logging.basicConfig(
        level=Config.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    Config.validate()

    from dependencies import get_notification_scheduler

    try:
        asyncio.run(run_forever(get_notification_scheduler()))
    except KeyboardInterrupt:
        logger.info("Reminder worker interrupted")


if __name__ == "__main__":
    main()
