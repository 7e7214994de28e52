# routes_transactions.py
"""
HTML routes for the transactions page: list with filters / sort / pagination,
add form, and delete confirmation.

Page state lives in the URL. Every request rebuilds a ListingViewState from
the query string, feeds the interaction through reduce(), then runs the fetch
lifecycle against the listing service.
"""

import logging
from dataclasses import replace
from datetime import date
from typing import Any, Dict, Optional
from urllib.parse import parse_qsl, urlencode

from fastapi import APIRouter, Request, Depends
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from config import get_settings
from models import TRANSACTION_TYPES, STATUSES, DEFAULT_STATUS
from app.deps import get_db, templates
from app.errors import NotFoundError, StoreError, ValidationError
from app.schemas import TransactionCreate, validate_payload
from app.services.listing import list_transactions
from app.services.mutations import create_transaction, delete_transaction
from app.services.query_builder import parse_listing_params
from app.services.view_state import (
    SORTABLE_FIELDS,
    AddOpened,
    FiltersApplied,
    ListingViewState,
    PageChanged,
    SortClicked,
    begin_fetch,
    receive_failure,
    receive_listing,
    reduce,
)

logger = logging.getLogger(__name__)

router = APIRouter()

# Badge colours (CSS classes defined in static/style.css)
TYPE_BADGES = {"Stake": "badge-purple", "Borrow": "badge-red", "Lend": "badge-blue"}
TOKEN_BADGES = {"ETH": "badge-blue", "USDC": "badge-green", "DAI": "badge-yellow", "BTC": "badge-orange"}
STATUS_BADGES = {"successful": "badge-green", "waiting": "badge-yellow", "canceled": "badge-red"}

FORM_FIELDS = ("username", "transactionType", "token", "amount", "date", "status", "description")


def page_url(state: ListingViewState, **extra: str) -> str:
    params = state.to_query()
    params.update(extra)
    return "/transactions?" + urlencode(params)


def empty_form() -> Dict[str, str]:
    return {
        "username": "",
        "transactionType": TRANSACTION_TYPES[0],
        "token": "ETH",
        "amount": "",
        "date": date.today().isoformat(),
        "status": DEFAULT_STATUS,
        "description": "",
    }


def load_listing(db: Session, state: ListingViewState) -> tuple[ListingViewState, int]:
    """Run one fetch for `state`; returns the new state and the HTTP status to render with."""
    state, seq = begin_fetch(state)
    try:
        params = parse_listing_params(state.to_query())
        result = list_transactions(db, params)
    except ValidationError as exc:
        problems = "; ".join(f"{e['field']}: {e['msg']}" for e in exc.errors)
        return receive_failure(state, seq, f"Invalid filters ({problems})"), 400
    except StoreError as exc:
        return receive_failure(state, seq, "Failed to load transactions. Please try again later."), exc.http_status
    return receive_listing(state, seq, result.to_envelope()), 200


def render_page(
    request: Request,
    db: Session,
    state: ListingViewState,
    status_code: int = 200,
    form: Optional[Dict[str, str]] = None,
    error: Optional[str] = None,
) -> HTMLResponse:
    state, listing_status = load_listing(db, state)
    if listing_status != 200 and status_code == 200:
        status_code = listing_status

    return templates.TemplateResponse(
        request,
        "transactions.html",
        {
            "state": state,
            "error": error or state.error,
            "form": form or empty_form(),
            "transaction_types": TRANSACTION_TYPES,
            "statuses": STATUSES,
            "type_badges": TYPE_BADGES,
            "token_badges": TOKEN_BADGES,
            "status_badges": STATUS_BADGES,
            "sort_urls": {f: page_url(reduce(state, SortClicked(f))) for f in SORTABLE_FIELDS},
            "prev_url": page_url(reduce(state, PageChanged(state.page - 1))) if state.page > 1 else None,
            "next_url": page_url(reduce(state, PageChanged(state.page + 1))) if state.page < state.total_pages else None,
            "list_query": urlencode(state.to_query()),
            "add_url": page_url(state, modal="add"),
            "close_url": page_url(state),
        },
        status_code=status_code,
    )


def _query_mapping(raw_query: Any) -> Dict[str, str]:
    return dict(parse_qsl(str(raw_query or "").lstrip("?")))


def _return_url(raw_query: Any) -> str:
    # only ever redirect back to the listing page itself
    query = str(raw_query or "").lstrip("?")
    return "/transactions?" + query if query else "/transactions"


@router.get("/transactions", response_class=HTMLResponse)
def transactions_page(request: Request, db: Session = Depends(get_db)):
    """
    Render the listing.

    The filter form submits with "apply" set; only then are the typed
    filters applied (and the page reset to 1).
    """
    query = request.query_params
    state = ListingViewState.from_query(query, limit=get_settings().page_size)

    if "apply" in query:
        state = reduce(
            state,
            FiltersApplied(
                search=query.get("search", ""),
                transaction_type=query.get("transactionType", ""),
                start_date=query.get("startDate", ""),
                end_date=query.get("endDate", ""),
            ),
        )

    return render_page(request, db, state)


@router.post("/transactions/add", response_class=HTMLResponse)
async def add_transaction_form(request: Request, db: Session = Depends(get_db)):
    """
    Create a record from the add form.

    On invalid input the page is re-rendered with the form open and one
    message per field; nothing is saved.
    """
    form_data = await request.form()
    raw = {name: str(form_data.get(name, "")).strip() for name in FORM_FIELDS}
    return_query = form_data.get("query", "")

    payload = {k: v for k, v in raw.items() if v != "" or k in ("username", "token", "amount")}

    try:
        data = validate_payload(TransactionCreate, payload, location="body")
    except ValidationError as exc:
        logger.warning("Add form rejected: %s", exc.message)
        state = ListingViewState.from_query(_query_mapping(return_query), limit=get_settings().page_size)
        state = replace(
            reduce(state, AddOpened()),
            form_errors={e["field"]: e["msg"] for e in exc.errors},
        )
        return render_page(request, db, state, status_code=400, form=raw)

    try:
        create_transaction(db, data)
    except StoreError:
        state = ListingViewState.from_query(_query_mapping(return_query), limit=get_settings().page_size)
        return render_page(request, db, state, status_code=500, form=raw,
                           error="Failed to add transaction. Please try again.")

    return RedirectResponse(url=_return_url(return_query), status_code=303)


@router.post("/transactions/{record_id}/delete", response_class=HTMLResponse)
async def delete_transaction_form(record_id: str, request: Request, db: Session = Depends(get_db)):
    form_data = await request.form()
    return_query = form_data.get("query", "")

    try:
        delete_transaction(db, record_id)
    except (NotFoundError, StoreError) as exc:
        state = ListingViewState.from_query(_query_mapping(return_query), limit=get_settings().page_size)
        message = (
            "Transaction not found."
            if isinstance(exc, NotFoundError)
            else "Failed to delete transaction. Please try again."
        )
        return render_page(request, db, state, status_code=exc.http_status, error=message)

    return RedirectResponse(url=_return_url(return_query), status_code=303)
