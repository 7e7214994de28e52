# routes_api.py
"""
JSON REST API for transaction records, mounted under /api/transactions.

Errors are raised as TrackerError subclasses and rendered by the global
handlers in app/error_handlers.py.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.deps import get_db
from app.schemas import ListingParams, TransactionCreate, TransactionUpdate
from app.services.listing import list_transactions
from app.services.mutations import (
    create_transaction,
    delete_transaction,
    get_transaction,
    update_transaction,
)
from app.services.query_builder import parse_listing_params

router = APIRouter(prefix="/api/transactions", tags=["transactions"])


def listing_params(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    sort_field: Optional[str] = Query(None, alias="sortField"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
    transaction_type: Optional[str] = Query(None, alias="transactionType"),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
) -> ListingParams:
    """
    Collect the raw query strings and validate them in one go,
    so a single bad value rejects the whole request.
    """
    return parse_listing_params({
        "page": page,
        "limit": limit,
        "search": search,
        "sortField": sort_field,
        "sortOrder": sort_order,
        "transactionType": transaction_type,
        "startDate": start_date,
        "endDate": end_date,
    })


@router.get("")
def list_route(
    params: ListingParams = Depends(listing_params),
    db: Session = Depends(get_db),
):
    """Paginated listing: {data, total, currentPage, totalPages}."""
    return list_transactions(db, params).to_envelope()


@router.get("/{record_id}")
def get_route(record_id: str, db: Session = Depends(get_db)):
    return get_transaction(db, record_id).to_dict()


@router.post("", status_code=status.HTTP_201_CREATED)
def create_route(payload: TransactionCreate, db: Session = Depends(get_db)):
    return create_transaction(db, payload).to_dict()


@router.put("/{record_id}")
def update_route(record_id: str, payload: TransactionUpdate, db: Session = Depends(get_db)):
    """Partial update: fields missing from the body keep their stored values."""
    return update_transaction(db, record_id, payload).to_dict()


@router.delete("/{record_id}")
def delete_route(record_id: str, db: Session = Depends(get_db)):
    return {"msg": delete_transaction(db, record_id)}
