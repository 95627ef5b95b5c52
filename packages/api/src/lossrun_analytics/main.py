# This project was developed with assistance from AI tools.
"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from lossrun_db import DatabaseService, StoreConnectionError
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .core.config import settings
from .errors import AnalyticsError, NotFoundError
from .routes import analytics, health
from .schemas.error import ErrorResponse

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the shared store handle; a store that cannot be reached is fatal."""
    db_service = DatabaseService()
    try:
        await db_service.connect()
    except StoreConnectionError:
        logger.critical("Analytics store unavailable at startup -- shutting down")
        raise
    app.state.db_service = db_service
    yield
    await db_service.dispose()


app = FastAPI(
    title="Loss Run Analytics API",
    description="Read-only analytics over the loss run processing pipeline",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_HOSTS,
    allow_credentials=True,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)


def _error(status_code: int, error: str, exc: BaseException | None = None) -> JSONResponse:
    """Render ``{error, message?}``; ``message`` only in development mode."""
    message = None
    if exc is not None and settings.is_development:
        message = str(exc)
    body = ErrorResponse(error=error, message=message)
    return JSONResponse(status_code=status_code, content=body.to_content())


@app.exception_handler(AnalyticsError)
async def analytics_exception_handler(request: Request, exc: AnalyticsError):
    """Not-found outcomes are routine; anything else is logged with its cause."""
    if isinstance(exc, NotFoundError):
        logger.info("%s: %s %s", exc.error, request.method, request.url.path)
        return _error(exc.status_code, exc.error)
    cause = exc.__cause__ or exc
    logger.error("%s (%s %s)", exc.error, request.method, request.url.path, exc_info=cause)
    return _error(exc.status_code, exc.error, cause)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Unmatched routes and methods collapse into a single 404."""
    if exc.status_code in (404, 405):
        return _error(404, "Endpoint not found")
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return _error(422, "Invalid request", exc)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Catch-all for unhandled exceptions -- log and return 500."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error(500, "Internal server error", exc)


app.include_router(health.router, tags=["health"])
app.include_router(analytics.router, prefix=settings.API_PREFIX, tags=["analytics"])


def run() -> None:
    """Console entry point: configure logging and serve with uvicorn."""
    import uvicorn

    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("%s listening on %s:%s%s", settings.APP_NAME, settings.HOST, settings.PORT, settings.API_PREFIX)
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=None)
