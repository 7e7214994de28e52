# app/schemas.py
"""
Pydantic schemas for request payloads, listing parameters and the listing envelope.

Public field names are camelCase (transactionType, sortField, ...); the Python
attributes are snake_case and populated through aliases.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from app.errors import ValidationError

# Keeps (page - 1) * limit inside a 64-bit store integer
MAX_PAGE = 2**31
MAX_LIMIT = 2**31

TransactionType = Literal["Stake", "Borrow", "Lend"]
Status = Literal["waiting", "successful", "canceled"]
SortField = Literal["username", "transactionType", "token", "amount", "date"]
SortOrder = Literal["asc", "desc"]

ModelT = TypeVar("ModelT", bound=BaseModel)


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def parse_timestamp(value: Any) -> Any:
    """
    Accept ISO-8601 dates ("2024-01-10") and datetimes ("2024-01-10T23:00:00Z").

    Non-string values are passed through for pydantic to handle.
    """
    if isinstance(value, str):
        text = value.strip()
        try:
            return to_naive_utc(datetime.fromisoformat(text.replace("Z", "+00:00")))
        except ValueError:
            raise ValueError("must be a valid ISO-8601 date") from None
    if isinstance(value, datetime):
        return to_naive_utc(value)
    return value


def _require_text(value: Optional[str], field: str) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError(f"{field} is required")
    return value


def reject_bool(value: Any) -> Any:
    # bool is an int subclass and would otherwise coerce to 1.0 / 0.0
    if isinstance(value, bool):
        raise ValueError("amount must be a number")
    return value


# ---- Error conversion ----

def errors_from_pydantic(exc: PydanticValidationError, location: str) -> List[Dict[str, Any]]:
    """Flatten pydantic errors into [{field, msg, location, value?}, ...]."""
    errors: List[Dict[str, Any]] = []
    for e in exc.errors():
        msg = e["msg"]
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        error: Dict[str, Any] = {
            "field": ".".join(str(part) for part in e["loc"]) or location,
            "msg": msg,
            "location": location,
        }
        if e["type"] != "missing" and isinstance(e.get("input"), (str, int, float, bool)):
            error["value"] = e["input"]
        errors.append(error)
    return errors


def validate_payload(model: Type[ModelT], raw: Any, location: str = "body") -> ModelT:
    """Validate raw input into `model`, raising ValidationError with every failing field."""
    try:
        return model.model_validate(raw)
    except PydanticValidationError as exc:
        raise ValidationError(errors_from_pydantic(exc, location)) from None


# ---- Transaction payloads ----

class TransactionCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    username: str
    transaction_type: TransactionType = Field(alias="transactionType")
    token: str
    amount: float = Field(allow_inf_nan=False)
    date: Optional[datetime] = None
    status: Optional[Status] = None
    description: Optional[str] = None

    @field_validator("username", "token")
    @classmethod
    def _non_empty(cls, value, info):
        return _require_text(value, info.field_name)

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, value):
        return parse_timestamp(value)

    @field_validator("amount", mode="before")
    @classmethod
    def _amount_not_bool(cls, value):
        return reject_bool(value)


class TransactionUpdate(BaseModel):
    """Partial update: only fields present in the payload are applied."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    username: Optional[str] = None
    transaction_type: Optional[TransactionType] = Field(None, alias="transactionType")
    token: Optional[str] = None
    amount: Optional[float] = Field(None, allow_inf_nan=False)
    date: Optional[datetime] = None
    status: Optional[Status] = None
    description: Optional[str] = None

    @field_validator("username", "token", "transaction_type", "amount", "date")
    @classmethod
    def _not_null(cls, value, info):
        # defaults are not validated, so None here means an explicit null
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        if info.field_name in ("username", "token"):
            return _require_text(value, info.field_name)
        return value

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, value):
        return parse_timestamp(value)

    @field_validator("amount", mode="before")
    @classmethod
    def _amount_not_bool(cls, value):
        return reject_bool(value)

    def changes(self) -> Dict[str, Any]:
        """ORM attribute -> new value, for explicitly supplied fields only."""
        return self.model_dump(exclude_unset=True)


# ---- Listing ----

class ListingParams(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    page: int = Field(1, ge=1, le=MAX_PAGE)
    limit: int = Field(10, gt=0, le=MAX_LIMIT)
    search: Optional[str] = None
    transaction_type: Optional[TransactionType] = Field(None, alias="transactionType")
    sort_field: SortField = Field("date", alias="sortField")
    sort_order: SortOrder = Field("asc", alias="sortOrder")
    start_date: Optional[datetime] = Field(None, alias="startDate")
    end_date: Optional[datetime] = Field(None, alias="endDate")

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _parse_bounds(cls, value):
        return parse_timestamp(value)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class TransactionOut(BaseModel):
    id: str
    username: str
    transactionType: TransactionType
    token: str
    amount: float
    date: datetime
    status: Optional[Status] = None
    description: Optional[str] = None


class ListingEnvelope(BaseModel):
    """The one documented shape of a listing response."""

    data: List[TransactionOut]
    total: int = Field(ge=0)
    currentPage: int = Field(ge=1)
    totalPages: int = Field(ge=1)
