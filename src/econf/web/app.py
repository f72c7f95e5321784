"""FastAPI application for the conference service.

``create_app`` wires a document store, the session verifier and the
assignment engine onto ``app.state``, includes the API routes and
registers the handlers that turn errors into JSON responses.  It also
provides a convenience function to launch the server via Uvicorn.
"""

from __future__ import annotations

from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..auth import SessionVerifier
from ..config.settings import Settings, settings as default_settings
from ..core.errors import EconfError, Internal, InvalidArgument
from ..papers import AssignmentEngine
from ..store import DocumentStore, create_store
from ..utils.logging import get_logger
from .routes import router

logger = get_logger(__name__)


async def _econf_error(request: Request, exc: EconfError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    error = InvalidArgument()
    return JSONResponse(status_code=error.status_code, content={"error": error.message})


async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    # Full detail stays in the server log; the caller gets the generic message
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    error = Internal()
    return JSONResponse(status_code=error.status_code, content={"error": error.message})


def create_app(store: Optional[DocumentStore] = None, settings: Optional[Settings] = None) -> FastAPI:
    """Build the application around ``store`` (default: from ``settings``)."""
    settings = settings or default_settings
    store = store or create_store(settings)

    app = FastAPI(
        title="e-Conference",
        description="Paper submission, reviewer assignment and conference management",
        version="0.1.0",
    )
    app.state.settings = settings
    app.state.store = store
    app.state.verifier = SessionVerifier(settings.session_secret.get_secret_value(), settings.session_algorithm)
    app.state.engine = AssignmentEngine(
        store,
        reviewers_per_paper=settings.reviewers_per_paper,
        rollback_attempts=settings.rollback_attempts,
    )

    app.add_exception_handler(EconfError, _econf_error)
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(Exception, _unexpected_error)

    app.include_router(router)
    return app


app = create_app()


def start_server(host: str = "0.0.0.0", port: int = 8000, reload: bool = True) -> None:
    """Start the Uvicorn web server.

    Parameters
    ----------
    host: str
        Host to bind the server to. Defaults to ``0.0.0.0``.
    port: int
        Port to listen on. Defaults to 8000.
    reload: bool
        Whether to enable auto-reload. Useful during development.
    """
    uvicorn.run(
        "econf.web.app:app",
        host=host,
        port=port,
        reload=reload,
    )


if __name__ == "__main__":
    start_server()
