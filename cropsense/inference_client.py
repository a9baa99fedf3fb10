"""Thin client for the hosted LSTM sequence-prediction service."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Sequence

import requests

from .config import Settings, settings as default_settings
from utils.logging_utils import get_tagged_logger, mask_url

logger = get_tagged_logger(__name__, tag="inference_client")


class InferenceError(RuntimeError):
    """Base class for any failure talking to the inference service."""


class InferenceUnavailableError(InferenceError):
    """Timeout, connection failure or non-2xx status."""


class MalformedInferenceResponse(InferenceError):
    """The service answered but the payload is unusable."""


@dataclass
class InferenceResponse:
    """Validated prediction payload."""
    predictions: List[float]
    confidence: float | None
    status: str | None


class InferenceClient:
    """Minimal client for the prediction API: one POST per call, no retries."""
    def __init__(self, config: Settings | None = None, session: requests.Session | None = None):
        """Initialize client configuration from settings."""
        config = config or default_settings
        self.base_url = str(config.inference_base_url).rstrip("/")
        self.timeout = config.inference_timeout_seconds
        self.session = session or requests.Session()

    def url_for(self, route: str) -> str:
        """Return the absolute URL for a prediction route."""
        return f"{self.base_url}/{route.lstrip('/')}"

    def predict(self, route: str, inputs: Sequence[float], min_predictions: int = 1) -> InferenceResponse:
        """POST an input window and return the parsed prediction payload."""
        url = self.url_for(route)
        payload = {
            "inputs": list(inputs),
            "parameters": {"return_confidence": True},
        }

        try:
            logger.debug("Inference POST", extra={"url": mask_url(url), "input_length": len(payload["inputs"])})
            r = self.session.post(url, json=payload, timeout=self.timeout)
        except requests.exceptions.Timeout as exc:
            raise InferenceUnavailableError(f"Inference call timed out after {self.timeout}s ({url})") from exc
        except requests.exceptions.RequestException as exc:
            raise InferenceUnavailableError(f"Inference call failed: {exc}") from exc

        logger.info(
            "Inference POST took %.2fs, status %s",
            r.elapsed.total_seconds(),
            r.status_code,
        )
        if not 200 <= r.status_code < 300:
            error_text = (r.text or "")[:200]
            raise InferenceUnavailableError(f"HTTP {r.status_code}: {error_text} (url={url})")

        try:
            data = r.json()
        except ValueError as exc:
            raise MalformedInferenceResponse(f"Inference returned non-JSON response: {r.text[:200]}") from exc

        return parse_response(data, min_predictions=min_predictions)


def parse_response(data: object, *, min_predictions: int) -> InferenceResponse:
    """Validate a decoded response body."""
    if not isinstance(data, dict):
        raise MalformedInferenceResponse("Inference response is not a JSON object")

    predictions = data.get("predictions")
    if not isinstance(predictions, list) or len(predictions) < min_predictions:
        raise MalformedInferenceResponse(
            f"Expected at least {min_predictions} predictions, got {predictions!r:.100}"
        )
    values: List[float] = []
    for item in predictions[:min_predictions]:
        if isinstance(item, bool) or not isinstance(item, (int, float)) or not math.isfinite(item):
            raise MalformedInferenceResponse(f"Non-numeric prediction value: {item!r}")
        values.append(float(item))

    confidence = data.get("confidence")
    if isinstance(confidence, bool) or not isinstance(confidence, (int, float)) or not math.isfinite(confidence):
        confidence = None

    status = data.get("status")
    return InferenceResponse(
        predictions=values,
        confidence=float(confidence) if confidence is not None else None,
        status=str(status) if status is not None else None,
    )
