# app/deps.py
# Role: Shared application-level dependencies.
#       Provides the Jinja2 templates loader and the standard SQLAlchemy
#       database session dependency.

"""
Shared dependencies for the transactions tracker app.
"""

import os
from typing import Generator

from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from db import SessionLocal

APP_DIR = os.path.dirname(os.path.abspath(__file__))

# -------------------------------------------------------------------
# Templates
# -------------------------------------------------------------------

# Jinja2 templates loader (used by all HTML-rendering routes)
templates = Jinja2Templates(directory=os.path.join(APP_DIR, "templates"))

# -------------------------------------------------------------------
# Database dependency
# -------------------------------------------------------------------

def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency that yields a database session and ensures it is closed.

    Typical usage in routes:
        db: Session = Depends(get_db)
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
