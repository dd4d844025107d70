"""
Error taxonomy for the analysis path.

ClassifierUnavailable, AllSourcesExhausted and UndecodablePayload are
recovered inside the detection package and never reach the client.
MalformedInput (nothing to analyze, or too much of it) is surfaced as a 4xx
by the API layer.
"""

from typing import Optional


class ClassifierUnavailable(Exception):
    """One remote source failed: network, HTTP status, timeout or bad payload."""

    def __init__(self, model_id: str, cause: str):
        super().__init__(f"{model_id}: {cause}")
        self.model_id = model_id
        self.cause = cause


class AllSourcesExhausted(Exception):
    """Every configured source failed for one image."""

    def __init__(self, failures: list):
        super().__init__(f"{len(failures)} source(s) unavailable")
        self.failures = failures


class MalformedInput(Exception):
    """Missing or empty media payload, or one above the size limits."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class UndecodablePayload(Exception):
    """Media data was supplied but could not be decoded. Answered by the heuristic."""

    def __init__(self, message: str, mime_type: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.mime_type = mime_type
