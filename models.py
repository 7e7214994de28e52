# models.py
# Role: SQLAlchemy ORM models for the transactions tracker.
#       Defines the Transaction model, one Stake/Borrow/Lend event per row.

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, Float, Text
from sqlalchemy.orm import validates

from db import Base


TRANSACTION_TYPES = ("Stake", "Borrow", "Lend")
STATUSES = ("waiting", "successful", "canceled")
DEFAULT_STATUS = "waiting"


def new_record_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    """Current time as naive UTC, the form every stored date takes."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Transaction(Base):
    """
    ORM model representing a single crypto transaction record.

    Enum-valued columns are checked on assignment: a value outside
    TRANSACTION_TYPES / STATUSES raises ValueError before anything is flushed.
    """

    __tablename__ = "transactions"

    # Opaque primary key (uuid4 hex), never reused
    id = Column(String(32), primary_key=True, default=new_record_id)

    username = Column(String, nullable=False, index=True)

    # One of TRANSACTION_TYPES
    transaction_type = Column(String(16), nullable=False, index=True)

    # Free-form token symbol, e.g. "ETH"
    token = Column(String, nullable=False)

    amount = Column(Float, nullable=False)

    # Naive UTC timestamp
    date = Column(DateTime, nullable=False, default=utcnow, index=True)

    # One of STATUSES
    status = Column(String(16), nullable=True, default=DEFAULT_STATUS)

    description = Column(Text, nullable=True)

    @validates("transaction_type")
    def _validate_transaction_type(self, key, value):
        if value not in TRANSACTION_TYPES:
            raise ValueError(f"transactionType must be one of {', '.join(TRANSACTION_TYPES)}")
        return value

    @validates("status")
    def _validate_status(self, key, value):
        if value is not None and value not in STATUSES:
            raise ValueError(f"status must be one of {', '.join(STATUSES)}")
        return value

    def to_dict(self) -> dict:
        """JSON-ready representation with the public camelCase field names."""
        return {
            "id": self.id,
            "username": self.username,
            "transactionType": self.transaction_type,
            "token": self.token,
            "amount": self.amount,
            "date": self.date.isoformat() if self.date else None,
            "status": self.status,
            "description": self.description,
        }
