"""
ColorMatch v1 API Routes
Implements the /v1/analyze endpoint and its health probe.
"""
import time
from typing import Any, Dict

from fastapi import APIRouter, File, Form, HTTPException, Query, UploadFile

from colormatch import __version__
from colormatch.config import config
from colormatch.schemas import AnalysisResult, ErrorResponse
from colormatch.services.imaging import validate_file_upload
from colormatch.services.orchestrator import AnalysisOrchestrator
from colormatch.utils.ids import generate_request_id
from colormatch.utils.logging import get_logger

logger = get_logger()
router = APIRouter(prefix="/v1", tags=["Color Analysis"])

# Initialize orchestrator
orchestrator = AnalysisOrchestrator()


@router.post("/analyze",
             response_model=AnalysisResult,
             responses={400: {"model": ErrorResponse}, 415: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
             summary="Outfit Color Analysis",
             description="Classify the dominant colors of an outfit photo and decide whether they match")
async def analyze_outfit(
    file: UploadFile = File(..., description="Outfit photo (JPEG or PNG)"),
    worn: bool = Form(False, description="Whether the garment is worn by a person"),
    include_diagnostic: bool = Query(True, description="Return the diagnostic classification image")
) -> AnalysisResult:
    """
    Analyze an outfit photo.

    Upload problems are rejected with 400/415. Problems with the photo itself
    (unreadable image, no or several subjects) are reported in the result's
    ``feedback_message`` with ``is_match`` left unset.
    """
    request_id = generate_request_id()
    validate_file_upload(file)

    try:
        content = await file.read()
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to read file: {str(e)}")

    if len(content) > config.max_file_bytes():
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Maximum size: {config.MAX_FILE_MB}MB"
        )

    try:
        return await orchestrator.analyze_image_async(
            content,
            worn=worn,
            include_diagnostic=include_diagnostic and config.ENABLE_DIAGNOSTIC_IMAGE,
            request_id=request_id
        )
    except Exception as e:
        logger.error(f"[{request_id}] Analysis failed", extra={
            'request_id': request_id,
            'error': str(e)
        })
        raise HTTPException(status_code=500, detail="Internal analysis error")


@router.get("/healthz",
            summary="Health Check",
            description="Liveness probe for the analysis service")
async def health_check() -> Dict[str, Any]:
    """Health check endpoint."""
    return {
        "status": "ok",
        "service": "colormatch-analysis",
        "version": __version__,
        "analyzing": orchestrator.is_analyzing,
        "timestamp": int(time.time())
    }
