# src/rankladder/main.py

"""Main FastAPI application for RankLadder."""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .api import match, player, ranking, season
from .db.session import engine
from .exceptions import (
    ConflictError,
    LadderError,
    ResourceNotFoundError,
    StorageError,
    ValidationError,
)
from .middleware.logging import RequestLoggingMiddleware

logger = logging.getLogger(__name__)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Set our log level on startup, release DB connections on shutdown."""
    # Startup: the server configures root handlers; we only set our level.
    logging.getLogger("rankladder").setLevel(LOG_LEVEL)
    yield
    await engine.dispose()


app = FastAPI(title="RankLadder API", lifespan=lifespan)

# Add middleware (order matters - first added = outermost)
app.add_middleware(RequestLoggingMiddleware)


# =============================================================================
# Global Exception Handlers
# =============================================================================


def _error_response(status_code: int, exc: LadderError) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "error_type": type(exc).__name__},
    )


@app.exception_handler(ResourceNotFoundError)
async def not_found_handler(
    request: Request, exc: ResourceNotFoundError
) -> JSONResponse:
    """Unknown season or player -> 404."""
    logger.warning("Not found: %s", exc.message, extra=exc.details)
    return _error_response(404, exc)


@app.exception_handler(ValidationError)
async def invalid_input_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Blank names, bad ranks, self-matches, missing seeds -> 422."""
    logger.warning("Rejected input: %s", exc.message, extra=exc.details)
    return _error_response(422, exc)


@app.exception_handler(ConflictError)
async def conflict_error_handler(request: Request, exc: ConflictError) -> JSONResponse:
    """Handle uniqueness conflicts -> 409."""
    logger.warning("Conflict: %s", exc.message, extra=exc.details)
    return _error_response(409, exc)


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    """Handle storage failures (lock timeouts, I/O) -> 503."""
    logger.error("Storage error: %s", exc.message, extra=exc.details, exc_info=True)
    return _error_response(503, exc)


@app.exception_handler(LadderError)
async def ladder_error_handler(request: Request, exc: LadderError) -> JSONResponse:
    """Catch-all for any other RankLadder errors -> 500."""
    logger.error("RankLadder error: %s", exc.message, extra=exc.details, exc_info=True)
    return _error_response(500, exc)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(
    request: Request, exc: SQLAlchemyError
) -> JSONResponse:
    """Database errors that escaped the service layer.

    Ladder writes go through run_atomic, which already turns these into
    ConflictError or StorageError; anything arriving here came from a read.
    """
    if isinstance(exc, IntegrityError):
        logger.warning("Constraint violation: %s", exc.orig or exc)
        return JSONResponse(
            status_code=409,
            content={"detail": "Ladder constraint violated", "error_type": "Conflict"},
        )
    logger.error("Database failure: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Database failure", "error_type": type(exc).__name__},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s: %s", request.url.path, exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "error_type": "InternalError"},
    )


app.include_router(season.router)
app.include_router(player.router)
app.include_router(ranking.router)
app.include_router(match.router)


@app.get("/", tags=["Root"])
async def read_root() -> dict[str, str]:
    """Service banner."""
    return {"message": "Welcome to the RankLadder API"}


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint for monitoring."""
    return {"status": "healthy"}
