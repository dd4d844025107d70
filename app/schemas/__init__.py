from app.schemas.analysis import (
    AnalyzeRequest,
    AnalyzeResponse,
    ErrorResponse,
    Features,
    FrameResult,
    RawPrediction,
    SourceAttempt,
    SourceInfo,
)

__all__ = [
    "AnalyzeRequest",
    "AnalyzeResponse",
    "ErrorResponse",
    "Features",
    "FrameResult",
    "RawPrediction",
    "SourceAttempt",
    "SourceInfo",
]
