"""
Analysis route: /analyze-deepfake

Accepts JSON { "imageBase64": "data:...", "fileName"?: str, "framesBase64"?: [str] }
and always answers with a best-effort verdict when any media was supplied.
"""

import logging
import random
import time

from fastapi import APIRouter, Depends

from app.core.dependencies import get_registry, get_rng
from app.core.file_validator import sanitize_log_message
from app.detection.pipeline import analyze_media
from app.detection.registry import ClassifierRegistry
from app.schemas.analysis import AnalyzeRequest, AnalyzeResponse, ErrorResponse
from app.services.analysis_service import log_memory

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Analysis"])


@router.post(
    "/analyze-deepfake",
    response_model=AnalyzeResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 413: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def analyze_deepfake(
    payload: AnalyzeRequest,
    registry: ClassifierRegistry = Depends(get_registry),
    rng: random.Random = Depends(get_rng),
):
    """
    Classify an image, or a video given as frames or raw bytes.
    """
    name = payload.file_name or "unnamed"
    log_memory(f"Pre-Analyze: {name}")

    start_time = time.time()
    result = await analyze_media(payload, registry, rng)
    duration = time.time() - start_time

    log_memory(f"Post-Analyze: {name}")
    logger.info(
        sanitize_log_message(
            f"[ROUTE] {name}: analysisType={result.analysis_type}, "
            f"isDeepfake={result.is_deepfake}, confidence={result.confidence} in {duration:.2f}s"
        )
    )
    return result
