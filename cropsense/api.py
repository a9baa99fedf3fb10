"""HTTP API for the CropSense weather and soil dashboard."""

from typing import Any, Dict, List, Literal

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from cropsense.domain import Domain, SoilSnapshot, WeatherSnapshot
from .orchestrator import Orchestrator
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="cropsense/api")

router = APIRouter()


class ModelStatusResponse(BaseModel):
    """Inference service health as reported by the status probe."""
    ok: bool
    reachable: bool = False
    base_url: str | None = None
    models: Dict[str, bool] = {}
    last_check: str | None = None
    error: str | None = None


class CacheStatsResponse(BaseModel):
    """Serialized cache statistics."""
    total_entries: int
    valid_entries: int
    expired_entries: int
    keys: List[str]


class InvalidateResponse(BaseModel):
    """Result of an explicit cache invalidation."""
    invalidated: str
    remaining_entries: int


def get_orchestrator(request: Request) -> Orchestrator:
    """Return the orchestrator built during application startup."""
    return request.app.state.orchestrator


@router.get("/weather", response_model=WeatherSnapshot)
def get_weather(orchestrator: Orchestrator = Depends(get_orchestrator)):
    """Current weather, predicted next values, alerts and a three-day outlook."""
    return orchestrator.get_weather_snapshot()


@router.get("/soil-data", response_model=SoilSnapshot)
def get_soil_data(orchestrator: Orchestrator = Depends(get_orchestrator)):
    """Current soil reading, predicted nutrients, levels, alerts and recommendations."""
    return orchestrator.get_soil_snapshot()


@router.get("/models/status", response_model=ModelStatusResponse)
def get_models_status(orchestrator: Orchestrator = Depends(get_orchestrator)):
    """Health of the weather and soil prediction models."""
    status: Dict[str, Any] = orchestrator.get_model_status()
    return ModelStatusResponse(**status)


@router.get("/cache/stats", response_model=CacheStatsResponse)
def get_cache_stats(orchestrator: Orchestrator = Depends(get_orchestrator)):
    """Entry counts of the process cache."""
    stats = orchestrator.cache_stats()
    return CacheStatsResponse(
        total_entries=stats.total_entries,
        valid_entries=stats.valid_entries,
        expired_entries=stats.expired_entries,
        keys=stats.keys,
    )


@router.delete("/cache/{domain}", response_model=InvalidateResponse)
def invalidate_cache(domain: Literal["weather", "soil", "all"],
                     orchestrator: Orchestrator = Depends(get_orchestrator)):
    """Drop cached snapshots for one domain, or all entries."""
    target = None if domain == "all" else Domain(domain)
    logger.info(f"Cache invalidation requested for {domain}")
    orchestrator.invalidate(target)
    return InvalidateResponse(invalidated=domain, remaining_entries=orchestrator.cache_stats().total_entries)
