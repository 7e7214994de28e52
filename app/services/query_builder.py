# app/services/query_builder.py
#
# Query Builder
# Translates listing parameters (filters, sort, page) into SQLAlchemy filter
# clauses and an ordering for the Transaction table.

from datetime import datetime, time
from typing import Any, List, Mapping

from sqlalchemy import or_

from models import Transaction
from app.schemas import ListingParams, validate_payload


# Public sort field name -> column
SORT_COLUMNS = {
    "username": Transaction.username,
    "transactionType": Transaction.transaction_type,
    "token": Transaction.token,
    "amount": Transaction.amount,
    "date": Transaction.date,
}

# Columns matched by the free-text search
SEARCH_COLUMNS = (
    Transaction.username,
    Transaction.transaction_type,
    Transaction.token,
)

END_OF_DAY = time(23, 59, 59, 999000)


# ---- Parameter parsing ----

def parse_listing_params(raw: Mapping[str, Any]) -> ListingParams:
    """
    Validate raw query values into ListingParams.

    Empty values count as absent (an HTML form submits "" for untouched inputs).
    Any invalid value rejects the whole request with every failing field listed.
    """
    cleaned = {}
    for key, value in raw.items():
        if value is None:
            continue
        if isinstance(value, str):
            value = value.strip()
            if value == "":
                continue
        cleaned[key] = value
    return validate_payload(ListingParams, cleaned, location="query")


# ---- Filters ----

def end_of_day(value: datetime) -> datetime:
    """Move a timestamp to the last millisecond of its calendar day."""
    return datetime.combine(value.date(), END_OF_DAY)


def build_filters(params: ListingParams) -> List[Any]:
    """
    Build the list of clauses (combined with AND by the caller).

    The date clause is omitted entirely when neither bound is given.
    """
    clauses: List[Any] = []

    if params.search:
        clauses.append(
            or_(*(col.icontains(params.search, autoescape=True) for col in SEARCH_COLUMNS))
        )

    if params.transaction_type:
        clauses.append(Transaction.transaction_type == params.transaction_type)

    if params.start_date is not None:
        clauses.append(Transaction.date >= params.start_date)

    if params.end_date is not None:
        clauses.append(Transaction.date <= end_of_day(params.end_date))

    return clauses


# ---- Ordering ----

def build_ordering(params: ListingParams) -> List[Any]:
    """Sort column in the requested direction, then id so equal keys page stably."""
    column = SORT_COLUMNS.get(params.sort_field, Transaction.date)
    if params.sort_order == "desc":
        return [column.desc(), Transaction.id.desc()]
    return [column.asc(), Transaction.id.asc()]
