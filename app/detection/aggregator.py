"""
Multi-frame aggregation for video.

Each frame goes through the single-image fallback chain on its own; the
per-frame fake probabilities are then fused with an order-independent rule:

    synthetic  if  flagged_frames >= max(min_quorum, ceil(n / quorum_divisor))
               or  mean(fake_probability) > mean_fake_threshold

The first signal catches one clearly manipulated segment, the second a
clip that is mildly suspicious throughout.
"""

import asyncio
import logging
import math
import random
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from app.config import settings
from app.detection import heuristic
from app.detection.features import NormalizedVerdict, build_features, clamp_confidence
from app.detection.orchestrator import (
    WEBCAM_OVERRIDE,
    ChainResult,
    ClassificationRequest,
    classify_image,
)
from app.detection.registry import ClassifierRegistry

logger = logging.getLogger(__name__)


@dataclass
class AggregateResult:
    verdict: NormalizedVerdict
    tier: str                       # "ml" or "heuristic"
    frames: List[ChainResult] = field(default_factory=list)
    frames_failed: int = 0
    flagged_frames: int = 0
    mean_fake_probability: float = 0.0
    quorum: int = 0
    override: Optional[str] = None

    @property
    def frames_analyzed(self) -> int:
        return len(self.frames)


def quorum_for(frame_count: int) -> int:
    return max(settings.min_quorum, math.ceil(frame_count / settings.quorum_divisor))


def fuse(
    probabilities: Sequence[float],
    rng: Optional[random.Random] = None,
) -> tuple:
    """
    Fuse per-frame fake probabilities into one verdict.

    Returns (verdict, flagged_count, mean_probability, quorum).
    """
    n = len(probabilities)
    mean = sum(probabilities) / n
    flagged = sum(1 for p in probabilities if p > settings.frame_fake_threshold)
    quorum = quorum_for(n)

    is_synthetic = flagged >= quorum or mean > settings.mean_fake_threshold

    if is_synthetic:
        raw_confidence = 60 + 40 * max(mean, flagged / n)
        fake_pct = max(mean, flagged / n) * 100
        features = build_features(True, max(fake_pct, 60.0), 0.0, rng)
    else:
        raw_confidence = 100 * (1 - mean)
        features = build_features(False, 0.0, raw_confidence, rng)

    verdict = NormalizedVerdict(
        is_synthetic=is_synthetic,
        confidence=clamp_confidence(raw_confidence),
        features=features,
        fake_probability=mean,
    )
    return verdict, flagged, mean, quorum


async def aggregate_frames(
    frames: Sequence[bytes],
    file_name: Optional[str],
    registry: ClassifierRegistry,
    rng: Optional[random.Random] = None,
    byte_length: int = 0,
) -> AggregateResult:
    """Classify up to `max_video_frames` frames concurrently and fuse the results."""
    frames = list(frames)[: settings.max_video_frames]
    semaphore = asyncio.Semaphore(settings.frame_concurrency)

    async def _run(frame: bytes) -> ChainResult:
        async with semaphore:
            return await classify_image(ClassificationRequest(frame, file_name), registry, rng)

    outcomes = await asyncio.gather(*(_run(f) for f in frames), return_exceptions=True)

    results: List[ChainResult] = []
    failed = 0
    for index, outcome in enumerate(outcomes):
        if isinstance(outcome, asyncio.CancelledError):
            raise outcome
        if isinstance(outcome, BaseException):
            logger.error(f"[FRAMES] Frame {index} failed: {outcome!r}")
            failed += 1
            continue
        results.append(outcome)

    if not results:
        logger.warning(f"[FRAMES] No frame could be classified ({failed} failed), using filename heuristic")
        result = AggregateResult(
            verdict=heuristic.estimate(byte_length, file_name, rng),
            tier="heuristic",
            frames_failed=failed,
        )
        if heuristic.is_webcam_capture(file_name):
            result.override = WEBCAM_OVERRIDE
        return result

    verdict, flagged, mean, quorum = fuse([r.verdict.fake_probability for r in results], rng)
    tier = "ml" if any(r.tier == "ml" for r in results) else "heuristic"

    logger.info(
        f"[FRAMES] {len(results)} frame(s): flagged={flagged}/{quorum} quorum, "
        f"mean={mean:.3f}, synthetic={verdict.is_synthetic}, tier={tier}"
    )

    result = AggregateResult(
        verdict=verdict,
        tier=tier,
        frames=results,
        frames_failed=failed,
        flagged_frames=flagged,
        mean_fake_probability=mean,
        quorum=quorum,
    )

    if heuristic.is_webcam_capture(file_name):
        logger.info("[FRAMES] Webcam capture filename, forcing authentic verdict")
        result.verdict = heuristic.webcam_verdict(rng)
        result.override = WEBCAM_OVERRIDE

    return result
