"""
Top-level analysis pipeline — public entry point for the /analyze-deepfake route.

`analyze_media` orchestrates:
  1. Payload decoding and validation (data URL → bytes, size limits)
  2. Video path → client frames or server-side sampling → multi-frame aggregation
  3. Image path → single-image fallback chain

Only a missing, empty or oversized payload raises (MalformedInput). Data that
cannot be decoded, and every classifier failure, degrades to a heuristic verdict.
"""

import asyncio
import logging
import random
from typing import List, Optional

from app.config import settings
from app.core.file_validator import media_kind, validate_payload
from app.detection.aggregator import AggregateResult, aggregate_frames
from app.detection.errors import MalformedInput, UndecodablePayload
from app.detection.orchestrator import (
    ChainResult,
    ClassificationRequest,
    apply_webcam_override,
    classify_image,
    heuristic_result,
)
from app.detection.preprocess import prepare_image
from app.detection.registry import ClassifierRegistry
from app.detection.video_sampler import sample_video_frames
from app.schemas.analysis import (
    AnalyzeRequest,
    AnalyzeResponse,
    Features,
    FrameResult,
    RawPrediction,
    SourceAttempt,
)
from app.services.analysis_service import decode_data_url, suffix_for

logger = logging.getLogger(__name__)


def _features(verdict) -> Features:
    return Features(**verdict.features.as_dict())


def _image_response(result: ChainResult) -> AnalyzeResponse:
    verdict = result.verdict
    return AnalyzeResponse(
        is_deepfake=verdict.is_synthetic,
        confidence=verdict.confidence,
        features=_features(verdict),
        analysis_type=f"image_{result.tier}",
        source=result.source,
        override=result.override,
        raw_predictions=(
            [RawPrediction(label=item.label, score=item.score) for item in result.raw_labels]
            if result.tier == "ml" else None
        ),
        attempts=[SourceAttempt(**a) for a in result.attempts],
    )


def _video_response(result: AggregateResult) -> AnalyzeResponse:
    verdict = result.verdict
    sources = sorted({f.source for f in result.frames}) or ["heuristic"]
    return AnalyzeResponse(
        is_deepfake=verdict.is_synthetic,
        confidence=verdict.confidence,
        features=_features(verdict),
        analysis_type=f"video_{result.tier}",
        source=",".join(sources),
        override=result.override,
        frames_analyzed=result.frames_analyzed,
        frames_failed=result.frames_failed,
        flagged_frames=result.flagged_frames,
        quorum=result.quorum,
        mean_fake_probability=round(result.mean_fake_probability, 4),
        frame_results=[
            FrameResult(
                index=i,
                is_deepfake=f.verdict.is_synthetic,
                fake_probability=round(f.verdict.fake_probability, 4),
                source=f.source,
            )
            for i, f in enumerate(result.frames)
        ],
    )


def _decode_frames(frames_base64: List[str]) -> List[bytes]:
    """Decode at most `max_video_frames` client frames, skipping bad ones."""
    if len(frames_base64) > settings.max_video_frames:
        logger.info(
            f"[PIPELINE] Received {len(frames_base64)} frames, keeping the first {settings.max_video_frames}"
        )
    frames = []
    for index, frame in enumerate(frames_base64[: settings.max_video_frames]):
        try:
            content, _ = decode_data_url(frame)
        except (MalformedInput, UndecodablePayload) as e:
            logger.warning(f"[PIPELINE] Skipping undecodable frame {index}: {e.message}")
            continue
        frames.append(content)
    return frames


async def analyze_media(
    payload: AnalyzeRequest,
    registry: ClassifierRegistry,
    rng: Optional[random.Random] = None,
) -> AnalyzeResponse:
    if not payload.image_base64 and not payload.frames_base64:
        raise MalformedInput("No image data provided")

    file_name = payload.file_name
    content = b""
    mime_type = None
    undecodable = False
    if payload.image_base64:
        try:
            content, mime_type = decode_data_url(payload.image_base64)
        except UndecodablePayload as e:
            logger.warning(f"[PIPELINE] {file_name or 'unnamed'}: {e.message}, skipping classifiers")
            mime_type = e.mime_type
            undecodable = True

    # Undecodable data: approximate decoded length from the base64 text
    byte_length = len(payload.image_base64) * 3 // 4 if undecodable else len(content)

    kind = media_kind(mime_type, file_name, has_frames=bool(payload.frames_base64))
    if content:
        validate_payload(kind, len(content))

    if kind == "video":
        logger.info(f"[PIPELINE] Analyzing video: {file_name or 'unnamed'}")
        frames = _decode_frames(payload.frames_base64 or [])
        if frames:
            validate_payload("video", sum(len(f) for f in frames))

        if not frames and content and not (mime_type or "").startswith("image/"):
            suffix = suffix_for(mime_type, file_name, default=".mp4")
            frames = await asyncio.to_thread(sample_video_frames, content, suffix)
        elif not frames and content:
            # Only a still (e.g. a poster frame) was sent for a video-named asset
            frames = [content]

        prepared = [await asyncio.to_thread(prepare_image, f) for f in frames]
        result = await aggregate_frames(
            prepared, file_name, registry, rng, byte_length=byte_length
        )
        return _video_response(result)

    if undecodable:
        result = apply_webcam_override(
            heuristic_result(ClassificationRequest(b"", file_name, original_size=byte_length), rng),
            file_name,
            rng,
        )
        return _image_response(result)

    logger.info(f"[PIPELINE] Analyzing image: {file_name or 'unnamed'} ({len(content)} bytes)")
    prepared = await asyncio.to_thread(prepare_image, content)
    result = await classify_image(
        ClassificationRequest(prepared, file_name, original_size=len(content)),
        registry,
        rng,
    )
    return _image_response(result)
