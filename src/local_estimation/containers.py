"""Dependency container wiring for the estimation core."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

from local_estimation.adapters.file_key_value_store import FileKeyValueStore
from local_estimation.adapters.image_decoder import PillowImageDecoder
from local_estimation.adapters.memory_key_value_store import InMemoryKeyValueStore
from local_estimation.app_logging import configure_logging
from local_estimation.config import Settings, parse_reference_type
from local_estimation.services.calibration import CalibrationStore, KeyValueStore
from local_estimation.services.estimation import EstimationEngine
from local_estimation.services.foods import FoodDensityLookup
from local_estimation.services.reference import ReferenceDetector
from local_estimation.services.sessions import EstimationSession
from local_estimation.services.volume import VolumeCalculator


@dataclass
class AppContainer:
    """Holds estimation dependencies."""

    settings: Settings
    reference_detector: ReferenceDetector
    volume_calculator: VolumeCalculator
    food_lookup: FoodDensityLookup
    calibration_store: CalibrationStore
    estimation_engine: EstimationEngine
    close_resources: Callable[[], Awaitable[None]]

    def new_session(self) -> EstimationSession:
        """Start an interactive estimation session."""
        return EstimationSession(self.estimation_engine)


def build_storage(settings: Settings) -> KeyValueStore:
    """Create the durable slot selected by settings."""
    backend = settings.calibration_backend.strip().lower()
    if backend == "file":
        return FileKeyValueStore(Path(settings.calibration_dir))
    if backend == "memory":
        return InMemoryKeyValueStore()
    raise ValueError(f"Unknown calibration backend: {settings.calibration_backend}")


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    configure_logging(logging.DEBUG if resolved_settings.debug else logging.INFO)
    reference_detector = ReferenceDetector(
        max_dimension=resolved_settings.max_processing_dimension,
        edge_threshold=resolved_settings.edge_threshold,
        coin_type=parse_reference_type(resolved_settings.assumed_coin_type),
        debug=resolved_settings.debug,
    )
    volume_calculator = VolumeCalculator(
        default_pixels_per_mm=resolved_settings.default_pixels_per_mm
    )
    food_lookup = FoodDensityLookup()
    calibration_store = CalibrationStore(
        storage=build_storage(resolved_settings),
        storage_key=resolved_settings.calibration_storage_key,
    )
    estimation_engine = EstimationEngine(
        reference_detector=reference_detector,
        volume_calculator=volume_calculator,
        food_lookup=food_lookup,
        calibration_store=calibration_store,
        image_decoder=PillowImageDecoder(),
        detection_timeout_seconds=resolved_settings.detection_timeout_seconds,
        debug=resolved_settings.debug,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=resolved_settings,
        reference_detector=reference_detector,
        volume_calculator=volume_calculator,
        food_lookup=food_lookup,
        calibration_store=calibration_store,
        estimation_engine=estimation_engine,
        close_resources=close_resources,
    )
