# app/errors.py
"""
Error hierarchy for the transactions tracker.

Every error carries a code and an HTTP status, and renders its own
response body via to_response(). The global handlers in
app/error_handlers.py turn any TrackerError into a JSON response.

- ValidationError        400  {"errors": [{field, msg, location, value?}, ...]}
- NotFoundError          404  {"msg": ...}
- StoreError             500  {"msg": "Server Error"}
- StoreUnavailableError  503  {"msg": "Service Unavailable"}
"""

from typing import Any, Dict, List


class TrackerError(Exception):
    """Base exception for all tracker errors."""

    def __init__(self, message: str, code: str, http_status: int = 500):
        super().__init__(message)
        self.message = message
        self.code = code
        self.http_status = http_status

    def to_response(self) -> Dict[str, Any]:
        return {"msg": self.message}


# ---- Request errors (400-level) ----

class ValidationError(TrackerError):
    """Bad or missing input. Carries one entry per offending field."""

    def __init__(self, errors: List[Dict[str, Any]]):
        fields = ", ".join(str(e.get("field")) for e in errors)
        super().__init__(f"Invalid fields: {fields}", "VALIDATION_ERROR", 400)
        self.errors = errors

    def to_response(self) -> Dict[str, Any]:
        return {"errors": self.errors}


class NotFoundError(TrackerError):
    """Unknown record id."""

    def __init__(self, record_id: str):
        super().__init__("Transaction not found", "NOT_FOUND", 404)
        self.record_id = record_id


# ---- Store errors (500-level) ----

class StoreError(TrackerError):
    """Backend failure on read or write. Details are logged, never returned."""

    def __init__(self, detail: str = "", code: str = "STORE_ERROR", http_status: int = 500):
        super().__init__("Server Error", code, http_status)
        self.detail = detail


class StoreUnavailableError(StoreError):
    """Backend could not be reached."""

    def __init__(self, detail: str = ""):
        super().__init__(detail, "STORE_UNAVAILABLE", 503)
        self.message = "Service Unavailable"
