# main.py
# Role: Application entry point for the transactions tracker.
#       Configures logging, creates database tables, installs middleware and
#       error handlers, mounts static assets, and registers all route modules.

"""
Main FastAPI app for the crypto transactions tracker.

Here we only:
- set up logging
- create the FastAPI app
- set up CORS, error handlers and static files
- create DB tables
- include route modules

Run with:  uvicorn main:app --reload
"""

import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from config import get_settings
from db import Base, engine
from app.deps import APP_DIR
from app.error_handlers import register_error_handlers
from app.logging_setup import setup_logging
from app.routes_api import router as api_router
from app.routes_root import router as root_router
from app.routes_transactions import router as transactions_router


settings = get_settings()

setup_logging(settings.log_level, settings.log_format)

# -------------------------------------------------------------------
# App & DB setup
# -------------------------------------------------------------------

# Create database tables (only if they don't exist yet).
Base.metadata.create_all(bind=engine)

# FastAPI application instance
app = FastAPI(title="Crypto Transactions Tracker")

# The REST API is consumed by browsers on other origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Serve static files (CSS) from /static
app.mount("/static", StaticFiles(directory=os.path.join(APP_DIR, "static")), name="static")

# -------------------------------------------------------------------
# Include routers
# -------------------------------------------------------------------

# Root / landing routes
app.include_router(root_router)

# JSON REST API: /api/transactions
app.include_router(api_router)

# HTML transactions page: list, filters, add and delete forms
app.include_router(transactions_router)
