"""
FastAPI application factory for PostWall.

This module creates the main FastAPI app with:
- CORS configuration for the frontend
- Post store lifecycle management (pool opened once at startup)
- Exception handlers mapping errors to JSON responses
- Post routes and a health endpoint
"""

import logging
from collections.abc import AsyncGenerator, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from .config import Settings
from .db import PostStore, StorageError, create_store
from .errors import BadRequestError, PostWallError
from .routes import router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage post store lifecycle.

    A store passed to create_app() is connected but left open on shutdown;
    its owner closes it.
    """
    settings: Settings = app.state.settings
    owned = app.state.store is None
    if owned:
        app.state.store = create_store(settings)

    store: PostStore = app.state.store
    try:
        await store.connect()
    except StorageError:
        # Requests still get a JSON 500 while the database is unreachable.
        logger.error("Post store unavailable at startup", exc_info=True)
    else:
        logger.info(f"PostWall ready ({settings.store_backend} store)")

    yield

    if owned:
        await store.close()


async def handle_postwall_error(request: Request, exc: PostWallError) -> JSONResponse:
    """Map PostWallError subclasses to their status and JSON body."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}", exc_info=exc)
    return JSONResponse(exc.to_dict(), status_code=exc.status_code)


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report unparseable bodies and path parameters as 400 instead of 422."""
    errors = [
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    ]
    bad_request = BadRequestError(errors=errors)
    return JSONResponse(bad_request.to_dict(), status_code=bad_request.status_code)


async def error_middleware(request: Request, call_next: Callable) -> Response:
    """Turn any exception the handlers did not map into a generic 500.

    Registered inside CORSMiddleware so the 500 still carries CORS headers.
    """
    try:
        return await call_next(request)
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} failed unexpectedly: {e}", exc_info=True)
        return JSONResponse(StorageError(str(e)).to_dict(), status_code=500)


def create_app(settings: Settings | None = None, store: PostStore | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Service settings (loaded from environment if not provided)
        store: Post store to use instead of building one from settings
    """
    settings = settings or Settings()

    app = FastAPI(
        title="PostWall",
        description="Posts with like counters, backed by PostgreSQL.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store

    app.middleware("http")(error_middleware)

    # CORS for frontend, outside the error middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    app.add_exception_handler(PostWallError, handle_postwall_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)

    app.include_router(router)

    @app.get("/health")
    async def health(request: Request):
        healthy = await request.app.state.store.ping()
        body = {"status": "healthy" if healthy else "unhealthy", "service": "postwall"}
        return JSONResponse(body, status_code=200 if healthy else 503)

    return app


# Default app instance
app = create_app()
