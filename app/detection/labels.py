"""
Label normalization.

Remote classifiers share no label schema, so each label is matched by
case-insensitive substring against a source's fake and real vocabularies.
"""

from dataclasses import dataclass
from typing import Iterable, Sequence


@dataclass(frozen=True)
class LabelScore:
    label: str
    score: float


@dataclass(frozen=True)
class NormalizedScores:
    fake: float
    real: float

    @property
    def inconclusive(self) -> bool:
        """No label matched either vocabulary."""
        return self.fake == 0.0 and self.real == 0.0


def _clamp_unit(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


def normalize_labels(
    labels: Iterable[LabelScore],
    fake_markers: Sequence[str],
    real_markers: Sequence[str],
) -> NormalizedScores:
    """
    Collapse raw (label, score) pairs into one fake score and one real score.

    Each bucket takes the highest-scoring label that matches it; a label that
    matches a fake marker is not considered for the real bucket.
    """
    fake_markers = [m.lower() for m in fake_markers]
    real_markers = [m.lower() for m in real_markers]

    fake = 0.0
    real = 0.0
    for item in labels:
        label = item.label.lower()
        score = _clamp_unit(item.score)
        if any(marker in label for marker in fake_markers):
            fake = max(fake, score)
        elif any(marker in label for marker in real_markers):
            real = max(real, score)

    return NormalizedScores(fake=fake, real=real)
