"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from local_estimation.domain.reference import ReferenceObjectType

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Estimation settings loaded from environment variables."""

    max_processing_dimension: int = 800
    edge_threshold: float = 50.0
    default_pixels_per_mm: float = 3.0
    assumed_coin_type: str = ReferenceObjectType.COIN_AU_DOLLAR.value
    detection_timeout_seconds: float | None = 10.0
    calibration_backend: str = "file"
    calibration_dir: str = ".calibration"
    calibration_storage_key: str = "food_volume_calibration"
    debug: bool = False
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_reference_type(raw: str) -> ReferenceObjectType:
    """Parse a reference object type name from config."""
    cleaned = raw.strip().lower()
    try:
        return ReferenceObjectType(cleaned)
    except ValueError:
        known = ", ".join(item.value for item in ReferenceObjectType)
        raise ValueError(
            f"Unknown reference type {raw!r}; expected one of: {known}"
        ) from None
