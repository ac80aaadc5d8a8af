"""PostgreSQL schedule stores using SQLAlchemy."""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from db.engine import SessionLocal
from db.models.bins import UserBin
from db.models.holidays import Holiday
from exceptions import AlreadyExists


def _bin_to_dict(user_bin: UserBin) -> dict:
    return {
        "id": user_bin.id,
        "user_id": user_bin.user_id,
        "bin_type": user_bin.bin_type,
        "body_color": user_bin.body_color,
        "head_color": user_bin.head_color,
        "last_collection_date": user_bin.last_collection_date,
        "collection_interval": user_bin.collection_interval,
        "next_collection_date": user_bin.next_collection_date,
        "notification_enabled": user_bin.notification_enabled,
        "notify_days_before": user_bin.notify_days_before,
        "last_notification_time": user_bin.last_notification_time,
        "created_at": user_bin.created_at,
        "updated_at": user_bin.updated_at,
    }


class PostgresHolidayStore:
    """Holiday lookups backed by PostgreSQL."""

    def _get_session(self) -> Session:
        return SessionLocal()

    async def exists(self, country_code: str, day: int, month: int, year: int) -> bool:
        with self._get_session() as db:
            holiday_id = db.execute(
                select(Holiday.id)
                .where(
                    Holiday.country_code == country_code.upper(),
                    Holiday.day == day,
                    Holiday.month == month,
                    or_(Holiday.year.is_(None), Holiday.year == year),
                )
                .limit(1)
            ).scalar_one_or_none()
            return holiday_id is not None


class PostgresBinStore:
    """Bin schedule store backed by PostgreSQL."""

    def _get_session(self) -> Session:
        return SessionLocal()

    async def create(self, data: dict) -> dict:
        with self._get_session() as db:
            user_bin = UserBin(
                user_id=data["user_id"],
                bin_type=data["bin_type"],
                body_color=data["body_color"],
                head_color=data["head_color"],
                last_collection_date=data["last_collection_date"],
                collection_interval=data["collection_interval"],
                next_collection_date=data["next_collection_date"],
                notification_enabled=data.get("notification_enabled", True),
                notify_days_before=data.get("notify_days_before", 1),
                last_notification_time=data.get("last_notification_time"),
            )
            db.add(user_bin)
            try:
                db.commit()
            except IntegrityError as exc:
                db.rollback()
                raise AlreadyExists(f"User already has a {data['bin_type']} bin") from exc
            db.refresh(user_bin)
            return _bin_to_dict(user_bin)

    async def get_by_owner_and_type(self, user_id: int, bin_type: str) -> dict | None:
        with self._get_session() as db:
            user_bin = db.execute(
                select(UserBin).where(UserBin.user_id == user_id, UserBin.bin_type == bin_type)
            ).scalar_one_or_none()
            return _bin_to_dict(user_bin) if user_bin else None

    async def get_for_owner(self, bin_id: int, user_id: int) -> dict | None:
        with self._get_session() as db:
            user_bin = db.execute(
                select(UserBin).where(UserBin.id == bin_id, UserBin.user_id == user_id)
            ).scalar_one_or_none()
            return _bin_to_dict(user_bin) if user_bin else None

    async def list_for_owner(
        self,
        user_id: int,
        start: date | None = None,
        end: date | None = None,
    ) -> list[dict]:
        with self._get_session() as db:
            query = select(UserBin).where(UserBin.user_id == user_id)
            if start is not None:
                query = query.where(UserBin.next_collection_date >= start)
            if end is not None:
                query = query.where(UserBin.next_collection_date <= end)
            query = query.order_by(UserBin.next_collection_date.asc(), UserBin.id.asc())
            return [_bin_to_dict(user_bin) for user_bin in db.execute(query).scalars()]

    async def update(self, bin_id: int, user_id: int, updates: dict) -> dict | None:
        with self._get_session() as db:
            user_bin = db.execute(
                select(UserBin).where(UserBin.id == bin_id, UserBin.user_id == user_id)
            ).scalar_one_or_none()
            if not user_bin:
                return None
            for key, value in updates.items():
                if hasattr(user_bin, key):
                    setattr(user_bin, key, value)
            db.commit()
            db.refresh(user_bin)
            return _bin_to_dict(user_bin)

    async def update_schedule(
        self,
        bin_id: int,
        user_id: int,
        expected_next: date,
        updates: dict,
    ) -> dict | None:
        with self._get_session() as db:
            result = db.execute(
                update(UserBin)
                .where(
                    UserBin.id == bin_id,
                    UserBin.user_id == user_id,
                    UserBin.next_collection_date == expected_next,
                )
                .values(**updates)
            )
            db.commit()
            if result.rowcount != 1:
                return None
            user_bin = db.get(UserBin, bin_id)
            return _bin_to_dict(user_bin) if user_bin else None

    async def list_due(self, start: date, end: date) -> list[dict]:
        with self._get_session() as db:
            bins = db.execute(
                select(UserBin).where(
                    UserBin.notification_enabled.is_(True),
                    UserBin.next_collection_date.between(start, end),
                )
            ).scalars()
            return [_bin_to_dict(user_bin) for user_bin in bins]

    async def mark_notified(self, bin_id: int, notified_at: datetime) -> None:
        with self._get_session() as db:
            db.execute(
                update(UserBin)
                .where(UserBin.id == bin_id)
                .values(last_notification_time=notified_at)
            )
            db.commit()
