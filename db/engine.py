"""
SQLAlchemy engine and session factory for PostgreSQL.

Usage:
    from db.engine import SessionLocal

    with SessionLocal() as db:
        bins = db.query(UserBin).all()
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from config import Config


# Create engine with connection pooling
engine = create_engine(
    Config.DATABASE_URL,
    pool_pre_ping=True,  # Verify connections before use
    pool_size=10,
    max_overflow=20,
    echo=Config.DB_ECHO,
)

# Session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

# Base class for all models
Base = declarative_base()
