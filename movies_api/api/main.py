"""
FastAPI application entry point for the Movies API.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from movies_api import __version__
from movies_api.api.config import get_settings
from movies_api.api.dependencies import close_enrichment
from movies_api.api.routers import movies, ratings, system
from movies_api.database.connection import reset_db_manager
from movies_api.database.init_db import init_database
from movies_api.exceptions import MoviesAPIError
from movies_api.utils.logging_config import configure_api_logging

logger = logging.getLogger(__name__)


def error_body(code: str, message: str, details=None) -> dict:
    body = {"code": code, "message": message}
    if details is not None:
        body["details"] = details
    return body


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    configure_api_logging(level=settings.log_level, log_file=settings.log_file)
    init_database(
        database_url=settings.database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_recycle=settings.db_pool_recycle_secs,
        pool_timeout=settings.db_pool_timeout_secs,
    )
    logger.info("Movies API %s started", __version__)
    yield
    close_enrichment()
    reset_db_manager()


app = FastAPI(
    title="Movies API",
    description="Movie catalogue with per-user ratings and box-office enrichment",
    version=__version__,
    lifespan=lifespan,
)


@app.exception_handler(MoviesAPIError)
async def movies_api_error_handler(request: Request, exc: MoviesAPIError):
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.code, exc.message, jsonable_encoder(exc.details)),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "; ".join(str(e.get("msg", "")) for e in errors) or "Invalid request"
    return JSONResponse(
        status_code=422,
        content=error_body("VALIDATION_ERROR", message, jsonable_encoder(errors)),
    )


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=error_body("INTERNAL_ERROR", "Internal server error"),
    )


app.include_router(movies.router)
app.include_router(ratings.router)
app.include_router(system.router)


def run():
    """Serve the API with uvicorn using host and port from settings."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    run()
