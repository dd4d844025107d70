from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AnalyzeRequest(CamelModel):
    image_base64: Optional[str] = None          # data URL; required in practice
    file_name: Optional[str] = None             # advisory only
    frames_base64: Optional[List[str]] = None   # pre-sampled video frames (data URLs)


class Features(CamelModel):
    artificial_patterns: float = Field(ge=0, le=100)
    natural_features: float = Field(ge=0, le=100)
    texture_consistency: float = Field(ge=0, le=100)
    lighting: float = Field(ge=0, le=100)


class RawPrediction(CamelModel):
    label: str
    score: float


class SourceAttempt(CamelModel):
    source: str
    error: Optional[str] = None     # None on the attempt that answered


class FrameResult(CamelModel):
    index: int
    is_deepfake: bool
    fake_probability: float
    source: str


class AnalyzeResponse(CamelModel):
    is_deepfake: bool
    confidence: float = Field(ge=60, le=98)
    features: Features
    analysis_type: str      # image_ml | image_heuristic | video_ml | video_heuristic
    source: str             # model id, or "heuristic"
    override: Optional[str] = None
    raw_predictions: Optional[List[RawPrediction]] = None
    attempts: List[SourceAttempt] = []
    frames_analyzed: Optional[int] = None
    frames_failed: Optional[int] = None
    flagged_frames: Optional[int] = None
    quorum: Optional[int] = None
    mean_fake_probability: Optional[float] = None
    frame_results: Optional[List[FrameResult]] = None


class ErrorResponse(BaseModel):
    error: str
    details: str


class SourceInfo(CamelModel):
    name: str
    kind: str
    model_id: str
    fake_markers: List[str]
    real_markers: List[str]
