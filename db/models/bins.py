"""
UserBin model: one collection schedule per (user, bin type).
"""

from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    Integer,
    String,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from db.engine import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserBin(Base):
    __tablename__ = "user_bins"
    __table_args__ = (
        UniqueConstraint("user_id", "bin_type", name="user_bin_type_unique"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    bin_type = Column(String(20), nullable=False)  # recycle | garden | general

    # Appearance
    body_color = Column(String(7), nullable=False)
    head_color = Column(String(7), nullable=False)

    # Collection schedule
    last_collection_date = Column(Date, nullable=False)
    collection_interval = Column(Integer, nullable=False)  # Days
    next_collection_date = Column(Date, nullable=False, index=True)

    # Notification preferences
    notification_enabled = Column(Boolean, nullable=False, default=True)
    notify_days_before = Column(Integer, nullable=False, default=1)
    last_notification_time = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    user = relationship("User", back_populates="bins")

    def __repr__(self):
        return f"<UserBin(id={self.id}, user_id={self.user_id}, bin_type={self.bin_type})>"
