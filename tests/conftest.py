"""
Shared pytest fixtures for all test modules.

Remote classifiers are replaced by in-process fake adapters injected through
the ClassifierRegistry, so no test touches the network.
"""

import base64
import io
import random

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from app.core.dependencies import get_registry, get_rng
from app.detection.errors import ClassifierUnavailable
from app.detection.labels import LabelScore
from app.detection.registry import ClassifierAdapter, ClassifierRegistry
from app.detection.sources import ClassifierSource
from app.main import app


# ---------------------------------------------------------------------------
# Fake sources & adapters
# ---------------------------------------------------------------------------

SOURCE_A = ClassifierSource(name="detector_a", model_id="org/detector-a")
SOURCE_B = ClassifierSource(
    name="generic_b",
    model_id="org/generic-b",
    fake_markers=("artificial",),
    real_markers=("human",),
)
SOURCE_C = ClassifierSource(name="detector_c", model_id="org/detector-c")

CHAIN = [SOURCE_A, SOURCE_B, SOURCE_C]


def fake_real(fake: float) -> list:
    return [LabelScore("Fake", fake), LabelScore("Real", round(1 - fake, 6))]


class FakeAdapter(ClassifierAdapter):
    """
    Answers per model id from a preset table.

    A table value may be a label list, an Exception instance (raised), or a
    callable taking the image bytes and returning a label list.
    Unlisted model ids are unavailable.
    """

    kind = "inference"

    def __init__(self, responses: dict = None):
        self.responses = responses or {}
        self.calls = []

    async def classify(self, image_bytes: bytes, model_id: str):
        self.calls.append(model_id)
        response = self.responses.get(model_id)
        if response is None:
            raise ClassifierUnavailable(model_id, "service unavailable")
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(image_bytes)
        return response


def make_registry(responses: dict = None, sources=None) -> tuple:
    adapter = FakeAdapter(responses)
    registry = ClassifierRegistry(sources or CHAIN, {"inference": adapter})
    return registry, adapter


# ---------------------------------------------------------------------------
# Shared test-data helpers
# ---------------------------------------------------------------------------


def make_tiny_jpeg(color=(128, 128, 128)) -> bytes:
    """Create a minimal 10×10 JPEG in memory — fast and valid."""
    buf = io.BytesIO()
    Image.new("RGB", (10, 10), color=color).save(buf, format="JPEG")
    return buf.getvalue()


def data_url(content: bytes, mime: str = "image/jpeg") -> str:
    return f"data:{mime};base64,{base64.b64encode(content).decode()}"


# ---------------------------------------------------------------------------
# App fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def override_registry():
    """
    Install a fake registry for the duration of a test.

    Usage: adapter = override_registry({"org/detector-a": fake_real(0.9)})
    """
    def _install(responses: dict = None, sources=None) -> FakeAdapter:
        registry, adapter = make_registry(responses, sources)
        app.dependency_overrides[get_registry] = lambda: registry
        return adapter

    yield _install
    app.dependency_overrides.pop(get_registry, None)


@pytest.fixture
def client():
    """
    FastAPI TestClient with seeded feature jitter.

    Server exceptions are turned into responses so the 500 handler is exercised.
    """
    app.dependency_overrides[get_rng] = lambda: random.Random(1234)
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
    app.dependency_overrides.pop(get_rng, None)
