"""
VerificationCode model: one-time codes for email verification and password reset.

Rows are never deleted. ``created_at`` doubles as the resend rate-limit anchor.
"""

from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    Integer,
    String,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
)
from sqlalchemy.orm import relationship

from db.engine import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class VerificationCode(Base):
    __tablename__ = "verification_codes"
    __table_args__ = (
        Index("ix_verification_codes_user_type", "user_id", "type"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    code = Column(String(6), nullable=False)
    type = Column(String(30), nullable=False)  # EMAIL_VERIFICATION | PASSWORD_RESET
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    is_used = Column(Boolean, nullable=False, default=False)
    attempts = Column(Integer, nullable=False, default=0)

    user = relationship("User", back_populates="verification_codes")

    def __repr__(self):
        return f"<VerificationCode(id={self.id}, user_id={self.user_id}, type={self.type})>"
