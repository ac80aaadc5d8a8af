"""PostgreSQL auth stores using SQLAlchemy."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from db.engine import SessionLocal
from db.models.user import User
from db.models.verification import VerificationCode
from exceptions import AlreadyExists


def _user_to_dict(user: User) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "full_name": user.full_name,
        "hashed_password": user.hashed_password,
        "country": user.country,
        "device_token": user.device_token,
        "is_email_verified": user.is_email_verified,
        "created_at": user.created_at,
        "updated_at": user.updated_at,
    }


def _code_to_dict(code: VerificationCode) -> dict:
    return {
        "id": code.id,
        "user_id": code.user_id,
        "code": code.code,
        "type": code.type,
        "created_at": code.created_at,
        "expires_at": code.expires_at,
        "is_used": code.is_used,
        "attempts": code.attempts,
    }


class PostgresUserStore:
    """User store backed by PostgreSQL."""

    def _get_session(self) -> Session:
        return SessionLocal()

    async def get_by_email(self, email: str) -> dict | None:
        with self._get_session() as db:
            user = db.execute(
                select(User).where(User.email == email.lower())
            ).scalar_one_or_none()
            return _user_to_dict(user) if user else None

    async def get_by_id(self, user_id: int) -> dict | None:
        with self._get_session() as db:
            user = db.get(User, user_id)
            return _user_to_dict(user) if user else None

    async def create_user(self, data: dict) -> dict:
        with self._get_session() as db:
            user = User(
                email=data["email"].lower(),
                full_name=data.get("full_name"),
                hashed_password=data.get("hashed_password"),
                country=data.get("country"),
                device_token=data.get("device_token"),
                is_email_verified=data.get("is_email_verified", False),
            )
            db.add(user)
            try:
                db.commit()
            except IntegrityError as exc:
                db.rollback()
                raise AlreadyExists("Email already registered") from exc
            db.refresh(user)
            return _user_to_dict(user)

    async def update_user(self, user_id: int, updates: dict) -> dict:
        with self._get_session() as db:
            user = db.get(User, user_id)
            if not user:
                raise ValueError("User not found")
            for key, value in updates.items():
                if hasattr(user, key):
                    setattr(user, key, value)
            db.commit()
            db.refresh(user)
            return _user_to_dict(user)

    async def delete_user(self, user_id: int) -> None:
        with self._get_session() as db:
            user = db.get(User, user_id)
            if user:
                db.delete(user)
                db.commit()


class PostgresVerificationStore:
    """Verification code store backed by PostgreSQL."""

    def _get_session(self) -> Session:
        return SessionLocal()

    async def create(self, data: dict) -> dict:
        with self._get_session() as db:
            code = VerificationCode(
                user_id=data["user_id"],
                code=data["code"],
                type=data["type"],
                created_at=data["created_at"],
                expires_at=data["expires_at"],
                is_used=data.get("is_used", False),
                attempts=data.get("attempts", 0),
            )
            db.add(code)
            db.commit()
            db.refresh(code)
            return _code_to_dict(code)

    async def get_active(self, user_id: int, code_type: str, now: datetime) -> dict | None:
        with self._get_session() as db:
            code = db.execute(
                select(VerificationCode)
                .where(
                    VerificationCode.user_id == user_id,
                    VerificationCode.type == code_type,
                    VerificationCode.is_used.is_(False),
                    VerificationCode.expires_at > now,
                )
                .order_by(VerificationCode.created_at.desc(), VerificationCode.id.desc())
                .limit(1)
            ).scalar_one_or_none()
            return _code_to_dict(code) if code else None

    async def mark_used(self, code_id: int) -> bool:
        with self._get_session() as db:
            result = db.execute(
                update(VerificationCode)
                .where(
                    VerificationCode.id == code_id,
                    VerificationCode.is_used.is_(False),
                )
                .values(is_used=True)
            )
            db.commit()
            return result.rowcount == 1

    async def consume(self, code_id: int, now: datetime) -> bool:
        # Single conditional UPDATE: only one concurrent caller can flip is_used
        with self._get_session() as db:
            result = db.execute(
                update(VerificationCode)
                .where(
                    VerificationCode.id == code_id,
                    VerificationCode.is_used.is_(False),
                    VerificationCode.expires_at > now,
                )
                .values(is_used=True)
            )
            db.commit()
            return result.rowcount == 1

    async def register_failed_attempt(self, code_id: int, max_attempts: int) -> dict | None:
        with self._get_session() as db:
            row = db.execute(
                update(VerificationCode)
                .where(
                    VerificationCode.id == code_id,
                    VerificationCode.is_used.is_(False),
                )
                .values(
                    attempts=VerificationCode.attempts + 1,
                    is_used=(VerificationCode.attempts + 1) >= max_attempts,
                )
                .returning(VerificationCode.attempts, VerificationCode.is_used)
            ).one_or_none()
            db.commit()
            if row is None:
                return None
            return {"attempts": row.attempts, "is_used": row.is_used}
