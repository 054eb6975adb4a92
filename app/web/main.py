"""
Listing Extractor Web Interface
FastAPI JSON API
"""
import traceback
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

from app.web.routers import api
from src.exceptions import AuthenticationFailed, ExtractionError, MissingIdentifier
from src.models import ErrorResponse
from src.services.extraction_service import ExtractionService
from src.utils.logging_config import setup_default_logging
from src.utils.settings import get_settings

SERVICE_NAME = "listing-extractor"
FAILURE_TITLE = "Failed to extract listing data"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load settings once (startup fails if keys are missing) and build the service."""
    settings = get_settings()
    setup_default_logging(debug=settings.debug)
    if getattr(app.state, "extraction_service", None) is None:
        app.state.extraction_service = ExtractionService(settings)
    logger.info("Listing Extractor starting up (debug={})...", settings.debug)
    yield
    logger.info("Listing Extractor shutting down...")


app = FastAPI(
    title="Listing Extractor",
    description="Agent profile -> first listing address, days on market and room photo",
    version="0.1.0",
    lifespan=lifespan
)

app.include_router(api.router)


# =============================================================================
# Error Handlers
# =============================================================================

def _generate_error_id() -> str:
    """Generate a short error ID for tracking."""
    return str(uuid.uuid4())[:8].upper()


@app.exception_handler(ExtractionError)
async def extraction_error_handler(request: Request, exc: ExtractionError):
    """Caller mistakes get a bare error string; pipeline failures get kind + message."""
    error_id = _generate_error_id()

    if isinstance(exc, (AuthenticationFailed, MissingIdentifier)):
        logger.warning(f"HTTP {exc.status_code} [ID: {error_id}]: {exc.message} - {request.method} {request.url}")
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    logger.error(f"Extraction failed [ID: {error_id}] at {exc.stage}: {exc.kind}: {exc.message} - {request.url}")
    body = ErrorResponse(error=FAILURE_TITLE, message=exc.message, kind=exc.kind, error_id=error_id)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions with detailed logging."""
    error_id = _generate_error_id()

    tb = traceback.format_exc()
    logger.error(
        f"Unhandled exception [ID: {error_id}]\n"
        f"Request: {request.method} {request.url}\n"
        f"Exception: {type(exc).__name__}: {exc}\n"
        f"Traceback:\n{tb}"
    )

    body = ErrorResponse(error=FAILURE_TITLE, message=str(exc), kind="internal_error", error_id=error_id)
    return JSONResponse(status_code=500, content=body.model_dump())


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "service": SERVICE_NAME}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.web.main:app",
        host="0.0.0.0",
        port=get_settings().port,
        reload=False
    )
