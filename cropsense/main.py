"""FastAPI application setup and lifecycle for CropSense."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from .api import router as api_router
from .cache_manager import build_snapshot_cache
from .cache_store import ExpiringCacheStore
from .config import settings
from .orchestrator import build_orchestrator
from utils.logging_utils import get_tagged_logger, setup_logging

logger = get_tagged_logger(__name__, tag="cropsense/main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the cache and orchestrator on startup; stop the cache sweeper on shutdown."""
    setup_logging(level=settings.log_level, service_name="cropsense")
    store = ExpiringCacheStore()
    cache = build_snapshot_cache(settings, store=store)
    app.state.orchestrator = build_orchestrator(settings, cache)
    store.start_sweeper(settings.cache_sweep_interval_seconds)
    logger.info("CropSense started", extra={"inference_base_url": settings.inference_base_url,
                                            "weather_source": settings.weather_source})
    try:
        yield
    finally:
        store.stop_sweeper()
        logger.info("CropSense stopped")


app = FastAPI(title="CropSense", lifespan=lifespan)


@app.get("/")
def root():
    """Service banner with the API entry points."""
    return {"service": "CropSense", "endpoints": ["/v1/weather", "/v1/soil-data", "/v1/models/status"]}


# API routes
app.include_router(api_router, prefix="/v1")
