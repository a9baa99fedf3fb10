"""Application configuration pulled from environment variables via pydantic."""
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="config")


class Settings(BaseSettings):
    """Environment-driven configuration for the CropSense prediction service."""
    model_config = SettingsConfigDict(env_prefix="CROPSENSE_", extra="ignore")

    weather_source: str = "open_meteo"  # options: open_meteo, openweathermap
    openweather_api_key: str | None = None
    latitude: float = -0.9352
    longitude: float = -78.6155
    timezone: str = "America/Guayaquil"

    inference_base_url: str = "https://roca22-api-predicciones-agricolas.hf.space"
    inference_weather_path: str = "/predict/clima"
    inference_soil_path: str = "/predict/suelo"
    inference_timeout_seconds: float = 15.0
    health_timeout_seconds: float = 5.0
    fallback_confidence: float = 0.6

    weather_ttl_seconds: int = 600
    soil_ttl_seconds: int = 1800
    status_ttl_seconds: int = 300
    cache_sweep_interval_seconds: float = 300.0

    trend_threshold_ratio: float = 0.05
    log_level: str = "INFO"

    @field_validator("inference_base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs to avoid double slashes."""
        return str(v).rstrip("/")

    @field_validator("fallback_confidence", mode="after")
    @classmethod
    def check_fallback_confidence(cls, v: float) -> float:
        """Degraded predictions must report reduced but non-trivial trust."""
        if not 0.6 <= v <= 0.7:
            raise ValueError("fallback_confidence must be between 0.6 and 0.7")
        return v


settings = Settings()


if __name__ == "__main__":
    logger.setLevel("DEBUG")
    logger.debug(f"Loaded settings: {settings.model_dump_json(indent=4)}")
