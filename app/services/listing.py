# app/services/listing.py
#
# Listing Service
# Runs the built query against the store and returns one page of records
# together with the total count of matches.

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List

from sqlalchemy import func
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from models import Transaction
from app.errors import StoreError, StoreUnavailableError
from app.schemas import ListingParams
from app.services.query_builder import build_filters, build_ordering

logger = logging.getLogger(__name__)


def count_pages(total: int, limit: int) -> int:
    """ceil(total / limit), never less than 1."""
    return max(1, math.ceil(total / limit))


@dataclass
class ListingPage:
    data: List[Transaction]
    total: int
    current_page: int
    total_pages: int

    def to_envelope(self) -> Dict[str, Any]:
        return {
            "data": [tx.to_dict() for tx in self.data],
            "total": self.total,
            "currentPage": self.current_page,
            "totalPages": self.total_pages,
        }


def list_transactions(db: Session, params: ListingParams) -> ListingPage:
    """
    Return page `params.page` of the records matching `params`.

    The total ignores pagination but uses the same filters as the page query.
    """
    clauses = build_filters(params)

    try:
        records = (
            db.query(Transaction)
            .filter(*clauses)
            .order_by(*build_ordering(params))
            .offset(params.offset)
            .limit(params.limit)
            .all()
        )
        total = (
            db.query(func.count(Transaction.id))
            .filter(*clauses)
            .scalar()
            or 0
        )
    except OperationalError as exc:
        logger.error("Record store unavailable: %s", exc, extra={"error_code": "STORE_UNAVAILABLE"})
        raise StoreUnavailableError(str(exc)) from exc
    except SQLAlchemyError as exc:
        logger.error("Listing query failed: %s", exc, exc_info=True, extra={"error_code": "STORE_ERROR"})
        raise StoreError(str(exc)) from exc

    logger.debug(
        "Listed %d of %d transactions",
        len(records),
        total,
        extra={"total": total, "page": params.page},
    )

    return ListingPage(
        data=records,
        total=int(total),
        current_page=params.page,
        total_pages=count_pages(int(total), params.limit),
    )
