"""
Classifier adapter interface and the registry handed to the orchestrator.

The registry is constructed explicitly by its owner (the app lifespan, a
request, or a test) and maps a source `kind` to the adapter that serves it.
Nothing here is a module-level singleton.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from app.detection.labels import LabelScore
from app.detection.sources import ClassifierSource

logger = logging.getLogger(__name__)


class ClassifierAdapter(ABC):
    """Wraps one style of remote classification call."""

    kind: str = ""

    @abstractmethod
    async def classify(self, image_bytes: bytes, model_id: str) -> List[LabelScore]:
        """
        Classify one image with the given model.

        Returns the raw (label, score) pairs, or raises ClassifierUnavailable.
        No retries; the caller owns the timeout.
        """


class ClassifierRegistry:
    def __init__(self, sources: List[ClassifierSource], adapters: Optional[Dict[str, ClassifierAdapter]] = None):
        self.sources = list(sources)
        self._adapters: Dict[str, ClassifierAdapter] = dict(adapters or {})

    def register(self, kind: str, adapter: ClassifierAdapter) -> None:
        self._adapters[kind] = adapter
        logger.info(f"[REGISTRY] Registered classifier adapter: {kind}")

    def adapter_for(self, source: ClassifierSource) -> Optional[ClassifierAdapter]:
        return self._adapters.get(source.kind)

    @property
    def kinds(self) -> List[str]:
        return sorted(self._adapters)


def build_default_registry(settings) -> ClassifierRegistry:
    """Registry wired to the hosted adapters, using the configured source chain."""
    from app.integrations.huggingface import InferenceClassifierAdapter, SpaceClassifierAdapter

    registry = ClassifierRegistry(settings.resolved_sources)
    registry.register(
        "inference",
        InferenceClassifierAdapter(
            settings.hf_inference_base_url,
            token=settings.hugging_face_access_token,
        ),
    )
    registry.register("space", SpaceClassifierAdapter())
    return registry
