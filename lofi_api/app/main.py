"""
Main entrypoint for the Lofi API.

This module assembles the FastAPI application: it sets up logging,
creates the ``Database`` handle, registers the error handlers and
mounts the API router under ``/api``.  ``create_app`` builds and
configures the app, which is then instantiated at module import time
as ``app`` so it can be served with uvicorn::

    uvicorn lofi_api.app.main:app --reload

The database is opened on startup and closed on shutdown.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api.router import router as api_router
from .core.config import Settings, settings as default_settings
from .core.db import Database
from .core.exceptions import ServiceError
from .core.logging_config import setup_logging

logger = logging.getLogger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    """Describe the first validation error, e.g. ``body.name: Field required``."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


def register_exception_handlers(app: FastAPI) -> None:
    """Render every error as ``{"message": ...}``."""

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.message},
            headers=exc.headers,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"message": _validation_message(exc)})


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    app_settings : Optional[Settings]
        Settings to build the application with.  Defaults to the
        process-wide settings read from the environment.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    app_settings = app_settings or default_settings
    # Initialise logging before anything else so that startup can log.
    setup_logging(app_settings)

    app = FastAPI(
        title=app_settings.project_name,
        version=app_settings.api_version,
        debug=app_settings.debug,
    )
    app.state.settings = app_settings
    app.state.db = Database(app_settings.database_url)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origin_list,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)
    app.include_router(api_router, prefix="/api")

    @app.get("/", tags=["health"])
    async def health() -> dict:
        return {"message": app_settings.project_name}

    @app.on_event("startup")
    async def startup_event() -> None:
        # Opening applies pending migrations.
        app.state.db.open()
        logger.info("%s %s started", app_settings.project_name, app_settings.api_version)

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        app.state.db.close()

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
