# app/services/view_state.py
"""
Presentation state for the transactions page.

ListingViewState holds everything the page shows: applied filters, sort,
current page, the loaded records, modal visibility and error banners.
UI interactions are events fed through reduce(), which returns a new state.

Fetch lifecycle:
    state, seq = begin_fetch(state)
    state = receive_listing(state, seq, payload)    # or receive_failure(...)

Every fetch gets a sequence number; a response whose number is not the
latest one is dropped, so overlapping fetches cannot overwrite newer results.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError as PydanticValidationError

from app.schemas import ListingEnvelope, TransactionOut

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = ("username", "transactionType", "token", "amount", "date")


@dataclass(frozen=True)
class ListingViewState:
    # applied filters (drive the query)
    search: str = ""
    transaction_type: str = ""
    start_date: str = ""
    end_date: str = ""

    # search box contents, applied only on FiltersApplied
    search_input: str = ""

    # sort / pagination; sort_field None means "server default"
    sort_field: Optional[str] = None
    sort_order: str = "asc"
    page: int = 1
    limit: int = 10

    # loaded data
    records: List[TransactionOut] = field(default_factory=list)
    total: int = 0
    total_pages: int = 1

    # fetch status
    loading: bool = False
    error: Optional[str] = None
    fetch_seq: int = 0

    # modals
    add_open: bool = False
    delete_target: Optional[str] = None
    form_errors: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_query(cls, query: Mapping[str, str], limit: int = 10) -> "ListingViewState":
        """Rebuild the state a page URL encodes (see to_query)."""
        sort_field = query.get("sortField") or None
        if sort_field not in SORTABLE_FIELDS:
            sort_field = None
        try:
            page = max(1, int(query.get("page") or 1))
        except ValueError:
            page = 1
        search = query.get("search", "")
        return cls(
            search=search,
            search_input=search,
            transaction_type=query.get("transactionType", ""),
            start_date=query.get("startDate", ""),
            end_date=query.get("endDate", ""),
            sort_field=sort_field,
            sort_order="desc" if query.get("sortOrder") == "desc" else "asc",
            page=page,
            limit=limit,
            add_open=query.get("modal") == "add",
            delete_target=query.get("confirmDelete") or None,
        )

    def to_query(self) -> Dict[str, Any]:
        """Listing parameters for this state, without empty values."""
        params: Dict[str, Any] = {
            "page": self.page,
            "limit": self.limit,
            "search": self.search,
            "transactionType": self.transaction_type,
            "startDate": self.start_date,
            "endDate": self.end_date,
        }
        if self.sort_field:
            params["sortField"] = self.sort_field
            params["sortOrder"] = self.sort_order
        return {k: v for k, v in params.items() if v not in ("", None)}


# ---- Events ----

@dataclass(frozen=True)
class SearchTyped:
    text: str


@dataclass(frozen=True)
class FiltersApplied:
    search: str = ""
    transaction_type: str = ""
    start_date: str = ""
    end_date: str = ""


@dataclass(frozen=True)
class SortClicked:
    field: str


@dataclass(frozen=True)
class PageChanged:
    page: int


@dataclass(frozen=True)
class AddOpened:
    pass


@dataclass(frozen=True)
class AddClosed:
    pass


@dataclass(frozen=True)
class DeleteRequested:
    record_id: str


@dataclass(frozen=True)
class DeleteCancelled:
    pass


Event = Union[
    SearchTyped, FiltersApplied, SortClicked, PageChanged,
    AddOpened, AddClosed, DeleteRequested, DeleteCancelled,
]


def next_sort(state: ListingViewState, field_name: str) -> Tuple[str, str]:
    """Same column flips the order; any other column starts ascending."""
    if state.sort_field == field_name:
        return field_name, "desc" if state.sort_order == "asc" else "asc"
    return field_name, "asc"


def reduce(state: ListingViewState, event: Event) -> ListingViewState:
    if isinstance(event, SearchTyped):
        return replace(state, search_input=event.text)

    if isinstance(event, FiltersApplied):
        return replace(
            state,
            search=event.search.strip(),
            search_input=event.search,
            transaction_type=event.transaction_type,
            start_date=event.start_date,
            end_date=event.end_date,
            page=1,
        )

    if isinstance(event, SortClicked):
        if event.field not in SORTABLE_FIELDS:
            return state
        sort_field, sort_order = next_sort(state, event.field)
        return replace(state, sort_field=sort_field, sort_order=sort_order)

    if isinstance(event, PageChanged):
        return replace(state, page=max(1, event.page))

    if isinstance(event, AddOpened):
        return replace(state, add_open=True, form_errors={})

    if isinstance(event, AddClosed):
        return replace(state, add_open=False, form_errors={})

    if isinstance(event, DeleteRequested):
        return replace(state, delete_target=event.record_id)

    if isinstance(event, DeleteCancelled):
        return replace(state, delete_target=None)

    raise TypeError(f"Unknown event: {event!r}")


# ---- Fetch lifecycle ----

def begin_fetch(state: ListingViewState) -> Tuple[ListingViewState, int]:
    seq = state.fetch_seq + 1
    return replace(state, loading=True, error=None, fetch_seq=seq), seq


def parse_envelope(payload: Any) -> Optional[ListingEnvelope]:
    """The listing envelope, or None when the payload has any other shape."""
    try:
        return ListingEnvelope.model_validate(payload)
    except PydanticValidationError:
        logger.warning("Unexpected listing response shape; rendering no records")
        return None


def receive_listing(state: ListingViewState, seq: int, payload: Any) -> ListingViewState:
    if seq != state.fetch_seq:
        logger.debug("Dropping stale listing response %d (latest %d)", seq, state.fetch_seq)
        return state

    envelope = parse_envelope(payload)
    if envelope is None:
        return replace(state, loading=False, records=[], total=0, total_pages=1)

    return replace(
        state,
        loading=False,
        records=envelope.data,
        total=envelope.total,
        total_pages=envelope.totalPages,
        page=envelope.currentPage,
    )


def receive_failure(state: ListingViewState, seq: int, message: str) -> ListingViewState:
    """Show the error; previously loaded records stay on screen."""
    if seq != state.fetch_seq:
        return state
    return replace(state, loading=False, error=message)
