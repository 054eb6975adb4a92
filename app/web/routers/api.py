from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from src.models import ExtractionRequest
from src.services.extraction_service import ExtractionService

router = APIRouter(tags=["api"])


def get_extraction_service(request: Request) -> ExtractionService:
    """Service built once at startup (see lifespan in app.web.main)."""
    return request.app.state.extraction_service


@router.post("/extract-listing")
async def extract_listing(
    payload: Optional[ExtractionRequest] = None,
    service: ExtractionService = Depends(get_extraction_service),
):
    """
    Extract address, days on market and first room photo for an agent's first listing.
    Errors are raised as ExtractionError and rendered by the handlers in app.web.main.
    """
    payload = payload or ExtractionRequest()
    record = await service.extract(payload.agent_name, payload.endpointkey)
    return JSONResponse(record.to_response())
