"""Application lifespan: startup and shutdown.

Single place for startup/shutdown logic. Used by main.py; no business logic
here, only wiring of infrastructure (logging, blob store, DB engine dispose).
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.core.config import get_settings
from app.infrastructure.external.storage import StorageFactory
from app.infrastructure.persistence.database import dispose_engine
from app.shared.telemetry.logging import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup: logging, blob store (one client per process, stored on
    app.state.blob_store). Shutdown: SQL engine dispose.
    """
    settings = get_settings()

    # ---- Startup ----
    setup_logging()
    if getattr(app.state, "blob_store", None) is None:
        app.state.blob_store = StorageFactory.create_blob_store(settings)
    logger.info(
        "%s %s started (storage backend: %s)",
        settings.app_name,
        settings.app_version,
        settings.storage_backend,
    )

    yield

    # ---- Shutdown ----
    await dispose_engine()
    app.state.blob_store = None
