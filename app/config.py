"""
Central application configuration.

Every tunable value lives here as a typed, documented field.
Any field can be overridden at runtime via an environment variable of the
same name (case-insensitive), e.g.:

    FRAME_FAKE_THRESHOLD=0.2 uvicorn app.main:app    # stricter per-frame flag
    export CLASSIFIER_TIMEOUT_SEC=10                 # staging override

List-valued fields take JSON, e.g.
    CLASSIFIER_SOURCES='[{"name": "a", "model_id": "org/model"}]'

A `.env` file at the project root is loaded automatically.

The decision thresholds below were tuned by hand and are not empirically
validated; treat them as knobs.
"""

from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.detection.sources import DEFAULT_SOURCES, ClassifierSource, space_source


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,   # HF_INFERENCE_BASE_URL == hf_inference_base_url
        extra="ignore",         # silently drop unknown env vars
    )

    # ------------------------------------------------------------------ #
    # Remote classifiers                                                  #
    # ------------------------------------------------------------------ #
    hugging_face_access_token: Optional[str] = Field(
        None, description="Bearer token for the hosted inference API"
    )
    hf_inference_base_url: str = Field(
        "https://router.huggingface.co/hf-inference/models",
        description="Prefix joined with a model id to form the inference URL",
    )
    classifier_sources: List[ClassifierSource] = Field(
        default_factory=lambda: list(DEFAULT_SOURCES),
        description="Ordered fallback chain; first success wins",
    )
    space_url: Optional[str] = Field(
        None, description="Optional multimodal Space endpoint, tried last"
    )

    # ------------------------------------------------------------------ #
    # Timeouts & concurrency                                              #
    # ------------------------------------------------------------------ #
    classifier_timeout_sec: float = Field(
        15.0, description="Per-call timeout; expiry counts as source unavailable"
    )
    http_timeout_sec: float = Field(
        30.0, description="Total timeout on the shared HTTP session"
    )
    http_connection_limit: int = Field(
        32, description="Max open connections on the shared HTTP session"
    )
    frame_concurrency: int = Field(
        4, description="Max per-frame classifications in flight for one video"
    )

    # ------------------------------------------------------------------ #
    # Multi-frame quorum                                                  #
    # ------------------------------------------------------------------ #
    max_video_frames: int = Field(
        16, description="Cap on frames analyzed per video"
    )
    sampled_video_frames: int = Field(
        6, description="Frames pulled server-side when the client sent none"
    )
    frame_fake_threshold: float = Field(
        0.15, description="Frame is flagged when its fake probability exceeds this"
    )
    mean_fake_threshold: float = Field(
        0.12, description="Video is synthetic when mean fake probability exceeds this"
    )
    min_quorum: int = Field(
        2, description="Lower bound on flagged frames needed for a synthetic verdict"
    )
    quorum_divisor: int = Field(
        8, description="Quorum grows as ceil(frame_count / divisor)"
    )

    # ------------------------------------------------------------------ #
    # Reporting                                                           #
    # ------------------------------------------------------------------ #
    confidence_floor: float = Field(
        60.0, description="Lowest confidence ever reported (percent)"
    )
    confidence_ceiling: float = Field(
        98.0, description="Highest confidence ever reported (percent)"
    )
    feature_jitter: float = Field(
        3.0, description="Cosmetic ± jitter on feature scores; 0 disables"
    )

    # ------------------------------------------------------------------ #
    # Payload limits                                                      #
    # ------------------------------------------------------------------ #
    max_image_upload_mb: int = Field(
        20, description="Max decoded MB for an image payload"
    )
    max_video_upload_mb: int = Field(
        200, description="Max decoded MB for a video payload"
    )

    # ------------------------------------------------------------------ #
    # Image / frame processing                                            #
    # ------------------------------------------------------------------ #
    max_upload_side: int = Field(
        1024, description="Long side (px) images are downscaled to before upload"
    )
    upload_jpeg_quality: int = Field(
        90, description="JPEG quality when re-encoding images for upload"
    )
    video_jpeg_quality: int = Field(
        90, description="JPEG quality when encoding sampled video frames"
    )
    frame_min_brightness: float = Field(
        20.0, description="Reject frame if mean brightness is below this"
    )
    frame_min_sharpness: float = Field(
        50.0, description="Reject frame if Laplacian variance is below this"
    )

    # ------------------------------------------------------------------ #
    # CORS                                                                #
    # ------------------------------------------------------------------ #
    cors_allow_origins: List[str] = Field(
        default_factory=lambda: ["*"], description="Allowed browser origins"
    )

    # ------------------------------------------------------------------ #
    # Derived properties                                                  #
    # ------------------------------------------------------------------ #
    @property
    def max_image_upload_bytes(self) -> int:
        return self.max_image_upload_mb * 1024 * 1024

    @property
    def max_video_upload_bytes(self) -> int:
        return self.max_video_upload_mb * 1024 * 1024

    @property
    def resolved_sources(self) -> List[ClassifierSource]:
        """Configured chain plus the optional Space source at the end."""
        sources = list(self.classifier_sources)
        if self.space_url:
            sources.append(space_source(self.space_url))
        return sources


# Single shared instance, imported everywhere
settings = Settings()
