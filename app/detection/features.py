"""
Verdict types and the cosmetic feature scores shown next to a verdict.

Feature scores are derived from the verdict and carry no signal of their own.
Jitter comes from an injected random.Random so tests can seed it; it never
feeds back into `is_synthetic`.
"""

import random
from dataclasses import dataclass
from typing import Optional

from app.config import settings


@dataclass(frozen=True)
class FeatureVector:
    artificial_patterns: float
    natural_features: float
    texture_consistency: float
    lighting: float

    def as_dict(self) -> dict:
        return {
            "artificial_patterns": self.artificial_patterns,
            "natural_features": self.natural_features,
            "texture_consistency": self.texture_consistency,
            "lighting": self.lighting,
        }


@dataclass(frozen=True)
class NormalizedVerdict:
    is_synthetic: bool
    confidence: float           # percent, already clamped for reporting
    features: FeatureVector
    fake_probability: float     # 0..1, consumed by the frame aggregator


def clamp_confidence(value: float) -> float:
    """Keep reported confidence inside [floor, ceiling]; extremes are never reported."""
    return round(max(settings.confidence_floor, min(settings.confidence_ceiling, value)), 1)


def _finish(value: float, rng: Optional[random.Random], jitter: float) -> float:
    if rng is not None and jitter > 0:
        value += rng.uniform(-jitter, jitter)
    return round(max(0.0, min(100.0, value)), 1)


def build_features(
    is_synthetic: bool,
    fake_pct: float,
    real_pct: float,
    rng: Optional[random.Random] = None,
    jitter: Optional[float] = None,
) -> FeatureVector:
    if jitter is None:
        jitter = settings.feature_jitter

    if is_synthetic:
        raw = (fake_pct, 100 - fake_pct, (100 - fake_pct) * 0.85, (100 - fake_pct) * 0.8)
    else:
        raw = (100 - real_pct, real_pct, real_pct * 0.9, real_pct * 0.88)

    return FeatureVector(*(_finish(v, rng, jitter) for v in raw))


def fixed_features(
    artificial: float,
    natural: float,
    texture: float,
    lighting: float,
    rng: Optional[random.Random] = None,
    jitter: Optional[float] = None,
) -> FeatureVector:
    """Feature vector from preset values (heuristic and override paths)."""
    if jitter is None:
        jitter = settings.feature_jitter
    return FeatureVector(*(_finish(v, rng, jitter) for v in (artificial, natural, texture, lighting)))
