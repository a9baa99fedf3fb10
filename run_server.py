import os

import uvicorn

from cropsense.check_inference import check_inference
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="server")


def maybe_check_inference() -> None:
    """
    Optionally run the inference preflight. Controlled by:
    - CROPSENSE_SKIP_INFERENCE_CHECK=true to skip entirely (useful in dev/tests)
    - CROPSENSE_STRICT_INFERENCE_CHECK=true to refuse to start when a model is down.
    """
    if os.getenv("CROPSENSE_SKIP_INFERENCE_CHECK", "false").lower() in ("1", "true", "yes"):
        logger.info("Skipping inference preflight (CROPSENSE_SKIP_INFERENCE_CHECK=true)")
        return

    strict = os.getenv("CROPSENSE_STRICT_INFERENCE_CHECK", "false").lower() in ("1", "true", "yes")
    try:
        check_inference(strict=strict)
    except SystemExit:
        # Allow caller to see the exit, but log a clear message first.
        logger.error("Inference preflight failed; unset CROPSENSE_STRICT_INFERENCE_CHECK to start degraded.")
        raise


if __name__ == "__main__":
    maybe_check_inference()

    uvicorn.run(
        "cropsense.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8000)),
        reload=False,
    )
