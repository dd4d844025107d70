"""
FastAPI dependencies for the analysis routes.

The classifier registry is process-scoped: built in the app lifespan and
stored on `app.state`. When it is absent (lifespan not run, e.g. a bare
TestClient) a request-scoped registry is built from settings instead.
"""

import random

from fastapi import Request

from app.config import settings
from app.detection.registry import ClassifierRegistry, build_default_registry


def get_registry(request: Request) -> ClassifierRegistry:
    registry = getattr(request.app.state, "registry", None)
    if registry is None:
        registry = build_default_registry(settings)
    return registry


def get_rng() -> random.Random:
    """Per-request randomness for cosmetic feature jitter."""
    return random.Random()
