from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging

from fastapi import FastAPI, Request

from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.config import setup_logging
from app.database import close_db, init_db
from app.exceptions import PlaylistImportError
from app.schemas import ErrorDetail, StandardErrorResponse

from app.routers import main_router


setup_logging()
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events"""
    logger.info("Starting Playlist Service...")

    try:
        logger.info("Initializing database...")
        await init_db()
        logger.info("Playlist Service started successfully")
    except Exception as e:
        logger.error(f"Failed to start Playlist Service: {e}", exc_info=True)
        raise

    yield

    logger.info("Shutting down Playlist Service...")

    try:
        await close_db()
    except Exception as e:
        logger.error(f"Error during database shutdown: {e}", exc_info=True)

    logger.info("Playlist Service stopped")


app = FastAPI(
    title="Playlist Service",
    version="0.1.0",
    lifespan=lifespan
)

app.include_router(main_router)


def _error_response(status_code: int, code: str, message: str, context: dict | None = None) -> JSONResponse:
    payload = StandardErrorResponse(
        timestamp=datetime.now(timezone.utc).isoformat(),
        error=ErrorDetail(code=code, message=message, context=context),
    )
    return JSONResponse(status_code=status_code, content=payload.model_dump())


@app.exception_handler(PlaylistImportError)
async def playlist_import_exception_handler(request: Request, exc: PlaylistImportError):
    """Render domain errors as standard error responses"""
    logger.warning(
        f"{request.method} {request.url.path} failed: {exc.code} - {exc.message}"
    )
    return _error_response(exc.status_code, exc.code, exc.message, exc.context)


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    """Persistence failures surface as internal errors after rollback"""
    logger.error(f"Database error for {request.method} {request.url.path}: {exc}", exc_info=True)
    return _error_response(500, "INTERNAL_ERROR", "Internal server error")


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Log validation errors with details"""
    logger.error(f"Validation error for {request.method} {request.url.path}")
    logger.error(f"Validation details: {exc.errors()}")

    # Create a properly serializable error response
    errors = []
    for error in exc.errors():
        error_dict = {
            "type": error.get("type"),
            "loc": error.get("loc"),
            "msg": error.get("msg"),
            "input": str(error.get("input", ""))[:100]
        }
        errors.append(error_dict)

    return JSONResponse(
        status_code=422,
        content={
            "detail": errors
        }
    )
