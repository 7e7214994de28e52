# app/services/mutations.py
#
# Mutation Service
# Create / read / update / delete of single Transaction records.
# Payloads arrive already validated (TransactionCreate / TransactionUpdate).

import logging

from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from models import Transaction, DEFAULT_STATUS, utcnow
from app.errors import NotFoundError, StoreError, StoreUnavailableError
from app.schemas import TransactionCreate, TransactionUpdate

logger = logging.getLogger(__name__)


def _store_failure(db: Session, exc: SQLAlchemyError, action: str) -> StoreError:
    db.rollback()
    if isinstance(exc, OperationalError):
        logger.error("Record store unavailable during %s: %s", action, exc,
                     extra={"error_code": "STORE_UNAVAILABLE"})
        return StoreUnavailableError(str(exc))
    logger.error("Failed to %s transaction: %s", action, exc, exc_info=True,
                 extra={"error_code": "STORE_ERROR"})
    return StoreError(str(exc))


def get_transaction(db: Session, record_id: str) -> Transaction:
    try:
        tx = db.get(Transaction, record_id)
    except SQLAlchemyError as exc:
        raise _store_failure(db, exc, "read") from exc

    if tx is None:
        logger.warning("Transaction %s not found", record_id, extra={"record_id": record_id})
        raise NotFoundError(record_id)
    return tx


def create_transaction(db: Session, data: TransactionCreate) -> Transaction:
    """Persist a new record and return it with its assigned id."""
    tx = Transaction(
        username=data.username,
        transaction_type=data.transaction_type,
        token=data.token,
        amount=float(data.amount),
        date=data.date or utcnow(),
        status=data.status or DEFAULT_STATUS,
        description=data.description,
    )

    try:
        db.add(tx)
        db.commit()
        db.refresh(tx)
    except SQLAlchemyError as exc:
        raise _store_failure(db, exc, "create") from exc

    logger.info(
        "Created %s transaction for %s: %s %s",
        tx.transaction_type, tx.username, tx.amount, tx.token,
        extra={"record_id": tx.id},
    )
    return tx


def update_transaction(db: Session, record_id: str, data: TransactionUpdate) -> Transaction:
    """Merge the supplied fields onto the existing record. Last write wins."""
    tx = get_transaction(db, record_id)

    changes = data.changes()
    for attr, value in changes.items():
        setattr(tx, attr, value)

    try:
        db.commit()
        db.refresh(tx)
    except SQLAlchemyError as exc:
        raise _store_failure(db, exc, "update") from exc

    logger.info(
        "Updated transaction %s (%s)",
        record_id,
        ", ".join(sorted(changes)) or "no changes",
        extra={"record_id": record_id},
    )
    return tx


def delete_transaction(db: Session, record_id: str) -> str:
    """Remove the record and return a confirmation message."""
    tx = get_transaction(db, record_id)

    try:
        db.delete(tx)
        db.commit()
    except SQLAlchemyError as exc:
        raise _store_failure(db, exc, "delete") from exc

    logger.info("Deleted transaction %s", record_id, extra={"record_id": record_id})
    return "Transaction deleted"
