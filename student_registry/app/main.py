"""
Main entrypoint for the Student Registry API.

This module assembles the FastAPI application: it sets up logging,
builds the record store, wires the repository and service together
and includes the versioned routers.  ``create_app`` does the work and
is called once at import time to expose ``app``, so the service can be
run with uvicorn::

    uvicorn student_registry.app.main:app --reload

Tests call ``create_app`` with their own store instead.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI

from .api.v1.router import router as v1_router
from .core.config import Settings, settings
from .core.db import RecordStore, get_record_store
from .core.logging_config import setup_logging
from .services.student_repository import StudentRepository
from .services.student_service import StudentService


def create_app(
    store: Optional[RecordStore] = None,
    app_settings: Optional[Settings] = None,
) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    store : Optional[RecordStore]
        Record store to serve from.  Defaults to the backend selected
        by ``app_settings.store_backend``.
    app_settings : Optional[Settings]
        Settings to use instead of the module-level ``settings``.

    Returns
    -------
    FastAPI
        A configured application.  The store is initialised (tables
        created, migrations applied) when the application starts.
    """
    app_settings = app_settings or settings
    # Initialise logging before anything else so that everything below
    # can log.
    setup_logging(app_settings.log_level, app_settings.log_file or None)

    record_store = store if store is not None else get_record_store(app_settings)
    repository = StudentRepository(record_store, id_pattern=app_settings.student_id_pattern)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        record_store.init()
        yield

    app = FastAPI(
        title=app_settings.project_name,
        version=app_settings.api_version,
        debug=app_settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.record_store = record_store
    app.state.student_service = StudentService(repository)

    # Mount versioned routes under /api/v1.
    app.include_router(v1_router, prefix="/api/v1")
    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
