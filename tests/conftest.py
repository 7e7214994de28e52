"""Root conftest: in-memory database, fresh schema per test, shared helpers."""

import os

# Must be set before db.py builds its engine
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_FORMAT", "text")

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from config import get_settings
from db import Base, SessionLocal, engine
from main import app
from models import Transaction


@pytest.fixture(autouse=True)
def fresh_schema():
    get_settings.cache_clear()
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    get_settings.cache_clear()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def add_records(*records: dict) -> list[str]:
    """Insert records in their own session; returns the assigned ids."""
    session = SessionLocal()
    try:
        rows = []
        for fields in records:
            values = {
                "username": "john.doe",
                "transaction_type": "Stake",
                "token": "ETH",
                "amount": 1.0,
                "date": datetime(2024, 1, 20),
                "status": "waiting",
            }
            values.update(fields)
            rows.append(Transaction(**values))
        session.add_all(rows)
        session.commit()
        return [row.id for row in rows]
    finally:
        session.close()


def count_records() -> int:
    session = SessionLocal()
    try:
        return session.query(Transaction).count()
    finally:
        session.close()


def load_record(record_id: str):
    session = SessionLocal()
    try:
        return session.get(Transaction, record_id)
    finally:
        session.close()
