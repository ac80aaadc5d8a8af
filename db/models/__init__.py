"""
SQLAlchemy models for the bin-day database.

All models inherit from db.engine.Base for Alembic migrations.
"""

from db.models.user import User
from db.models.bins import UserBin
from db.models.holidays import Holiday
from db.models.verification import VerificationCode

__all__ = [
    "User",
    "UserBin",
    "Holiday",
    "VerificationCode",
]
