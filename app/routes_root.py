# routes_root.py
"""
Root / landing endpoint.
"""

from fastapi import APIRouter
from fastapi.responses import RedirectResponse

router = APIRouter()


@router.get("/")
def read_root():
    """
    Landing endpoint: the transactions page is the whole UI.
    """
    return RedirectResponse(url="/transactions", status_code=302)
