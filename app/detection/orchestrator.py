"""
Fallback chain for a single image.

Sources are tried in configured priority order; the first one that answers
decides the verdict and the rest are skipped. When every source fails the
heuristic estimator answers instead, so this never raises for a
well-formed request.

The webcam override is applied last, on top of whatever tier answered.
"""

import asyncio
import logging
import random
from dataclasses import dataclass, field
from typing import List, Optional, Union

from app.config import settings
from app.detection import heuristic
from app.detection.errors import AllSourcesExhausted, ClassifierUnavailable
from app.detection.features import NormalizedVerdict, build_features, clamp_confidence
from app.detection.labels import LabelScore, normalize_labels
from app.detection.registry import ClassifierRegistry
from app.detection.sources import ClassifierSource

logger = logging.getLogger(__name__)

HEURISTIC_SOURCE = "heuristic"
WEBCAM_OVERRIDE = "webcam_capture"


@dataclass(frozen=True)
class ClassificationRequest:
    image_bytes: bytes
    file_name: Optional[str] = None
    original_size: Optional[int] = None     # pre-resize byte length, for the heuristic

    @property
    def byte_length(self) -> int:
        return self.original_size if self.original_size is not None else len(self.image_bytes)


@dataclass(frozen=True)
class SourceSuccess:
    source: ClassifierSource
    labels: List[LabelScore]


@dataclass(frozen=True)
class SourceUnavailable:
    source: ClassifierSource
    cause: str


SourceOutcome = Union[SourceSuccess, SourceUnavailable]


@dataclass
class ChainResult:
    verdict: NormalizedVerdict
    source: str
    tier: str                                   # "ml" or "heuristic"
    attempts: List[dict] = field(default_factory=list)
    raw_labels: List[LabelScore] = field(default_factory=list)
    override: Optional[str] = None


async def _attempt(
    registry: ClassifierRegistry,
    source: ClassifierSource,
    image_bytes: bytes,
    timeout: float,
) -> SourceOutcome:
    adapter = registry.adapter_for(source)
    if adapter is None:
        return SourceUnavailable(source, f"no adapter registered for kind '{source.kind}'")
    try:
        labels = await asyncio.wait_for(adapter.classify(image_bytes, source.model_id), timeout=timeout)
    except asyncio.TimeoutError:
        return SourceUnavailable(source, f"timed out after {timeout:.0f}s")
    except ClassifierUnavailable as e:
        return SourceUnavailable(source, e.cause)
    return SourceSuccess(source, list(labels))


def verdict_from_labels(
    labels: List[LabelScore],
    source: ClassifierSource,
    rng: Optional[random.Random] = None,
) -> NormalizedVerdict:
    scores = normalize_labels(labels, source.fake_markers, source.real_markers)
    fake, real = scores.fake, scores.real
    if scores.inconclusive:
        # Unrecognized vocabulary resolves to authentic
        logger.info(f"[CHAIN] {source.name} returned no recognizable label, treating as authentic")
        real = 1.0

    fake_pct = fake * 100
    real_pct = real * 100
    is_synthetic = fake_pct > real_pct

    return NormalizedVerdict(
        is_synthetic=is_synthetic,
        confidence=clamp_confidence(max(fake_pct, real_pct)),
        features=build_features(is_synthetic, fake_pct, real_pct, rng),
        fake_probability=fake,
    )


async def classify_image(
    request: ClassificationRequest,
    registry: ClassifierRegistry,
    rng: Optional[random.Random] = None,
    timeout: Optional[float] = None,
) -> ChainResult:
    """Run the fallback chain for one image and return the first usable verdict."""
    if timeout is None:
        timeout = settings.classifier_timeout_sec

    attempts: List[dict] = []
    failures: List[SourceUnavailable] = []
    result: Optional[ChainResult] = None

    for source in registry.sources:
        outcome = await _attempt(registry, source, request.image_bytes, timeout)

        if isinstance(outcome, SourceUnavailable):
            logger.warning(f"[CHAIN] {source.name} unavailable: {outcome.cause}")
            failures.append(outcome)
            attempts.append({"source": source.name, "error": outcome.cause})
            continue

        logger.info(f"[CHAIN] {source.name} answered with {len(outcome.labels)} label(s)")
        attempts.append({"source": source.name, "error": None})
        result = ChainResult(
            verdict=verdict_from_labels(outcome.labels, source, rng),
            source=source.model_id,
            tier="ml",
            attempts=attempts,
            raw_labels=outcome.labels,
        )
        break

    if result is None:
        exhausted = AllSourcesExhausted(failures)
        logger.warning(f"[CHAIN] {exhausted}; falling back to heuristic estimator")
        result = heuristic_result(request, rng, attempts)

    return apply_webcam_override(result, request.file_name, rng)


def heuristic_result(
    request: ClassificationRequest,
    rng: Optional[random.Random] = None,
    attempts: Optional[List[dict]] = None,
) -> ChainResult:
    """Heuristic-tier result for an image no classifier answered."""
    return ChainResult(
        verdict=heuristic.estimate(request.byte_length, request.file_name, rng),
        source=HEURISTIC_SOURCE,
        tier="heuristic",
        attempts=list(attempts or []),
    )


def apply_webcam_override(
    result: ChainResult,
    file_name: Optional[str],
    rng: Optional[random.Random] = None,
) -> ChainResult:
    if heuristic.is_webcam_capture(file_name):
        logger.info("[CHAIN] Webcam capture filename, forcing authentic verdict")
        result.verdict = heuristic.webcam_verdict(rng)
        result.override = WEBCAM_OVERRIDE
    return result
