"""
Holiday model.

A null year means the holiday falls on the same day every year.
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    Integer,
    String,
    UniqueConstraint,
)

from db.engine import Base


class Holiday(Base):
    __tablename__ = "holidays"
    __table_args__ = (
        UniqueConstraint("country_code", "day", "month", "year", name="country_holiday_date_unique"),
        CheckConstraint("day BETWEEN 1 AND 31", name="holiday_day_range"),
        CheckConstraint("month BETWEEN 1 AND 12", name="holiday_month_range"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    country_code = Column(String(7), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    day = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=True)
    description = Column(String(255), nullable=True)

    def __repr__(self):
        return f"<Holiday(country={self.country_code}, {self.day}/{self.month}/{self.year or '*'})>"
