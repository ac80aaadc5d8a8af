"""
Database module for the bin-day reminder service.

Provides SQLAlchemy models and the engine for PostgreSQL persistence.
"""

from db.engine import SessionLocal, Base

__all__ = ["SessionLocal", "Base"]
