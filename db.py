# db.py
# Role: Database bootstrap for the transactions tracker.
#       Defines the SQLAlchemy engine, session factory, and declarative Base.
#       For the default SQLite file, ensures the on-disk directory exists.

"""
Database setup for the transactions tracker.

- URL comes from config.get_settings().database_url
- Default: SQLite database at <project_root>/database/transactions.db
- In-memory SQLite ("sqlite://") shares a single connection (StaticPool)
"""

import os

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from config import get_settings


def build_engine(database_url: str):
    """
    Create an engine for the given URL.

    SQLite needs check_same_thread=False for FastAPI (threaded request handling).
    """
    url = make_url(database_url)

    if url.get_backend_name() != "sqlite":
        return create_engine(database_url, pool_pre_ping=True)

    if url.database and url.database != ":memory:":
        # ensure folder exists for file-backed SQLite
        db_dir = os.path.dirname(os.path.abspath(url.database))
        os.makedirs(db_dir, exist_ok=True)
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
        )

    return create_engine(
        database_url,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


engine = build_engine(get_settings().database_url)

# Standard session factory used via dependency injection (see app/deps.py:get_db)
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

# Declarative base class for ORM models
Base = declarative_base()
