"""
Classifier source definitions.

A source is one remote endpoint the fallback chain may try, tagged with the
label vocabulary that endpoint is expected to emit. Sources are configuration
data: built once from settings and never mutated during a request.
"""

from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_FAKE_MARKERS = ("fake", "deepfake", "synthetic", "manipulated")
DEFAULT_REAL_MARKERS = ("real", "authentic", "genuine")


class ClassifierSource(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    kind: Literal["inference", "space"] = "inference"
    model_id: str = Field(description="Hub model id, or full endpoint URL for a Space")
    fake_markers: tuple[str, ...] = DEFAULT_FAKE_MARKERS
    real_markers: tuple[str, ...] = DEFAULT_REAL_MARKERS


# Priority order: specialized deepfake detector, generic AI-image classifier,
# alternate specialized detector.
DEFAULT_SOURCES: List[ClassifierSource] = [
    ClassifierSource(
        name="av_deepfake_detection",
        model_id="maggleboy/av_deepfake_detection",
    ),
    ClassifierSource(
        name="ai_image_detector",
        model_id="umm-maybe/AI-image-detector",
        fake_markers=("artificial", "fake", "synthetic"),
        real_markers=("human", "real"),
    ),
    ClassifierSource(
        name="fakebuster",
        model_id="shreyankbr/FakeBuster",
    ),
]


def space_source(url: str) -> ClassifierSource:
    """Source entry for a hosted multimodal Space reached by form upload."""
    return ClassifierSource(name="multimodal_space", kind="space", model_id=url)
