# cropsense/check_inference.py
"""Health probes for the hosted weather and soil prediction models."""

import sys
from datetime import datetime, timezone
from typing import Any, Dict

import requests

from .config import Settings, settings as default_settings
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="check_inference")

HEALTH_ROUTES = {
    "weather": "/health/clima",
    "soil": "/health/suelo",
}


def _probe(url: str, timeout: float) -> bool:
    """Return True when a health route answers 2xx; raises on transport errors."""
    resp = requests.get(url, timeout=timeout)
    # some test doubles may not expose .text; fall back gracefully
    body_text = getattr(resp, "text", "<no-body>")
    logger.debug(f"Inference health response from {url}: {body_text}")
    return 200 <= resp.status_code < 300


def get_inference_status(config: Settings | None = None) -> Dict[str, Any]:
    """
    Non-fatal probe of the inference service.

    Returns a dict like:
    {
      "ok": bool,            # both models healthy
      "reachable": bool,     # at least one route answered
      "base_url": "...",
      "models": {"weather": bool, "soil": bool},
      "last_check": "2025-01-01T00:00:00+00:00",
      "error": "...",        # present if something went wrong
    }

    This NEVER raises or exits. Suitable for health checks.
    """
    config = config or default_settings
    base_url = str(config.inference_base_url).rstrip("/")
    status: Dict[str, Any] = {
        "ok": False,
        "reachable": False,
        "base_url": base_url,
        "models": {name: False for name in HEALTH_ROUTES},
        "last_check": datetime.now(timezone.utc).isoformat(),
        "error": None,
    }

    errors = []
    for name, route in HEALTH_ROUTES.items():
        try:
            healthy = _probe(f"{base_url}{route}", config.health_timeout_seconds)
        except requests.exceptions.RequestException as e:
            errors.append(f"{name}: {e}")
            continue
        status["reachable"] = True
        status["models"][name] = healthy
        if not healthy:
            errors.append(f"{name}: unhealthy")

    status["ok"] = all(status["models"].values())
    if errors:
        status["error"] = "; ".join(errors)
    return status


def check_inference(strict: bool = False, config: Settings | None = None) -> Dict[str, Any]:
    """
    Startup preflight.

    Logs the state of both models. Only exits with sys.exit(1) when `strict`
    is set and a model is down; the API itself degrades to local fallbacks.
    """
    status = get_inference_status(config)

    if status["ok"]:
        logger.info(f"Inference service reachable at {status['base_url']}; weather and soil models healthy")
        return status

    if not status["reachable"]:
        logger.error(f"Inference service unreachable at {status['base_url']}")
    else:
        down = [name for name, healthy in status["models"].items() if not healthy]
        logger.warning(f"Inference models not healthy: {', '.join(down)}")
    if status["error"]:
        logger.error(f"   Details: {status['error']}")

    if strict:
        sys.exit(1)
    logger.warning("Continuing without a healthy inference service; predictions will use local fallbacks")
    return status
