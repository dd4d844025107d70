"""
Hosted classifier adapters.

`InferenceClassifierAdapter` posts raw image bytes to a hosted
image-classification model and expects a list of {label, score}.
`SpaceClassifierAdapter` posts a multipart form to a hosted Space that
answers with a free-text prediction and an optional confidence.

Both raise ClassifierUnavailable on any failure and never retry; timeouts
are enforced by the caller.
"""

import logging
from typing import Any, List, Optional

import aiohttp

from app.detection.errors import ClassifierUnavailable
from app.detection.labels import LabelScore
from app.detection.registry import ClassifierAdapter
from app.integrations import http_client as http_module

logger = logging.getLogger(__name__)


def _parse_label_scores(model_id: str, payload: Any) -> List[LabelScore]:
    # Some endpoints wrap the list once more: [[{label, score}, ...]]
    if isinstance(payload, list) and len(payload) == 1 and isinstance(payload[0], list):
        payload = payload[0]

    if not isinstance(payload, list):
        if isinstance(payload, dict) and "error" in payload:
            raise ClassifierUnavailable(model_id, f"remote error: {payload['error']}")
        raise ClassifierUnavailable(model_id, f"unexpected payload type {type(payload).__name__}")

    results = []
    for item in payload:
        if not isinstance(item, dict) or "label" not in item or "score" not in item:
            raise ClassifierUnavailable(model_id, f"malformed prediction entry: {item!r}")
        try:
            results.append(LabelScore(label=str(item["label"]), score=float(item["score"])))
        except (TypeError, ValueError) as e:
            raise ClassifierUnavailable(model_id, f"non-numeric score: {e}") from e
    return results


class InferenceClassifierAdapter(ClassifierAdapter):
    kind = "inference"

    def __init__(self, base_url: str, token: Optional[str] = None):
        self.base_url = base_url.rstrip("/")
        self.token = token

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/octet-stream"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def classify(self, image_bytes: bytes, model_id: str) -> List[LabelScore]:
        url = f"{self.base_url}/{model_id}"
        try:
            async with http_module.request_session() as sess:
                async with sess.post(url, data=image_bytes, headers=self._headers()) as response:
                    if response.status != 200:
                        body = await response.text()
                        raise ClassifierUnavailable(model_id, f"HTTP {response.status}: {body[:200]}")
                    payload = await response.json(content_type=None)
        except aiohttp.ClientError as e:
            raise ClassifierUnavailable(model_id, f"network error: {e}") from e
        except ValueError as e:
            raise ClassifierUnavailable(model_id, f"invalid JSON: {e}") from e

        labels = _parse_label_scores(model_id, payload)
        logger.info(f"[HF] {model_id} returned {len(labels)} label(s)")
        return labels


def _parse_space_prediction(model_id: str, payload: Any) -> List[LabelScore]:
    prediction = None
    confidence = None

    if isinstance(payload, dict) and "prediction" in payload:
        prediction = payload.get("prediction")
        confidence = payload.get("confidence")
    elif isinstance(payload, dict) and isinstance(payload.get("data"), list) and payload["data"]:
        data = payload["data"]
        prediction = data[0]
        confidence = data[1] if len(data) > 1 else None

    if not isinstance(prediction, str) or not prediction.strip():
        raise ClassifierUnavailable(model_id, "no prediction text in Space response")

    if confidence is None:
        score = 1.0
    else:
        try:
            score = float(confidence)
        except (TypeError, ValueError) as e:
            raise ClassifierUnavailable(model_id, f"non-numeric confidence: {e}") from e
        if score > 1.0:
            score = score / 100.0

    return [LabelScore(label=prediction.strip(), score=score)]


class SpaceClassifierAdapter(ClassifierAdapter):
    """`model_id` is the full Space prediction URL."""

    kind = "space"

    async def classify(self, image_bytes: bytes, model_id: str) -> List[LabelScore]:
        form = aiohttp.FormData()
        form.add_field("image", image_bytes, filename="image.jpg", content_type="image/jpeg")
        try:
            async with http_module.request_session() as sess:
                async with sess.post(model_id, data=form) as response:
                    if response.status != 200:
                        body = await response.text()
                        raise ClassifierUnavailable(model_id, f"HTTP {response.status}: {body[:200]}")
                    payload = await response.json(content_type=None)
        except aiohttp.ClientError as e:
            raise ClassifierUnavailable(model_id, f"network error: {e}") from e
        except ValueError as e:
            raise ClassifierUnavailable(model_id, f"invalid JSON: {e}") from e

        labels = _parse_space_prediction(model_id, payload)
        logger.info(f"[SPACE] {model_id} predicted '{labels[0].label}' ({labels[0].score:.2f})")
        return labels
