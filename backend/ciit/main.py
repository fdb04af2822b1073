"""FastAPI application entry point."""
from __future__ import annotations
import logging
import os

import yaml
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from ciit import __version__
from ciit.api import catalog, sessions
from ciit.api.errors import ApiError, api_error_handler, internal_error_handler
from ciit.container import get_catalog_repo, get_catalog_watcher, get_session_repo
from ciit.core import config
from ciit.core.logging_config import setup_logging

logger = logging.getLogger(__name__)

# ------------------------------------------------------------------
# App creation
# ------------------------------------------------------------------
app = FastAPI(
    title="CIIT Interview API",
    description="Catalog and session storage for guided concept interviews",
    version=__version__,
)

# CORS: allow everything for local dev (restrict for production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ------------------------------------------------------------------
# Error handling: expected failures carry their own status, storage
# and parse failures become a generic 500
# ------------------------------------------------------------------
app.add_exception_handler(ApiError, api_error_handler)
for _exc_type in (OSError, yaml.YAMLError, ValueError, TypeError, AttributeError, KeyError):
    app.add_exception_handler(_exc_type, internal_error_handler)


# ------------------------------------------------------------------
# Startup / shutdown: storage directories and the catalog watcher
# ------------------------------------------------------------------
@app.on_event("startup")
def on_startup():
    setup_logging()
    for directory in (config.CONCEPTS_DIR, config.SESSIONS_DIR, config.IMAGES_DIR):
        os.makedirs(directory, exist_ok=True)
    get_catalog_repo()
    get_session_repo()
    get_catalog_watcher().start()
    logger.info("Serving data from %s", config.DATA_DIR)


@app.on_event("shutdown")
def on_shutdown():
    get_catalog_watcher().stop()


# ------------------------------------------------------------------
# Routers
# ------------------------------------------------------------------
@app.get("/health")
def health():
    return {"status": "ok"}


app.include_router(catalog.router)
app.include_router(sessions.router)

# Uploaded concept images
app.mount(
    "/images/concepts",
    StaticFiles(directory=config.IMAGES_DIR, check_dir=False),
    name="concept-images",
)
