"""Shared test fixtures."""

from dataclasses import dataclass, field

import numpy as np
import pytest

from local_estimation.adapters.image_decoder import ImageDecoder
from local_estimation.adapters.memory_key_value_store import InMemoryKeyValueStore
from local_estimation.config import Settings
from local_estimation.domain.reference import (
    DetectedReference,
    PixelBuffer,
    Point,
    ReferenceObjectType,
)
from local_estimation.domain.volume import FoodRegion
from local_estimation.services.calibration import CalibrationStore
from local_estimation.services.estimation import EstimationEngine
from local_estimation.services.foods import FoodDensityLookup
from local_estimation.services.reference import ReferenceDetector
from local_estimation.services.volume import VolumeCalculator


def blank_image(width: int = 200, height: int = 150) -> PixelBuffer:
    """Uniform black image with no edges."""
    return PixelBuffer.from_array(np.zeros((height, width, 3), dtype=np.uint8))


def draw_card(  # noqa: PLR0913
    width: int = 640,
    height: int = 480,
    x: int = 100,
    y: int = 100,
    card_width: int = 254,
    card_height: int = 160,
) -> PixelBuffer:
    """White filled rectangle on black."""
    pixels = np.zeros((height, width, 3), dtype=np.uint8)
    pixels[y : y + card_height, x : x + card_width] = 255
    return PixelBuffer.from_array(pixels)


def draw_coin(
    width: int = 400, height: int = 400, cx: int = 200, cy: int = 200, radius: int = 30
) -> PixelBuffer:
    """White filled disc on black."""
    ys, xs = np.mgrid[0:height, 0:width]
    mask = (xs - cx) ** 2 + (ys - cy) ** 2 <= radius**2
    pixels = np.zeros((height, width, 3), dtype=np.uint8)
    pixels[mask] = 255
    return PixelBuffer.from_array(pixels)


def square_region(size: float = 160.0, region_id: str = "region-1") -> FoodRegion:
    return FoodRegion(
        id=region_id,
        boundary=[
            Point(0.0, 0.0),
            Point(size, 0.0),
            Point(size, size),
            Point(0.0, size),
        ],
    )


def fixed_reference(
    pixels_per_mm: float = 4.0,
    confidence: float = 1.0,
    reference_type: ReferenceObjectType = ReferenceObjectType.CREDIT_CARD,
) -> DetectedReference:
    return DetectedReference(
        type=reference_type,
        corners=(Point(0, 0), Point(10, 0), Point(10, 10), Point(0, 10)),
        pixels_per_mm=pixels_per_mm,
        confidence=confidence,
    )


@dataclass
class FakeImageDecoder(ImageDecoder):
    """Fake decoder that returns a fixed image and records calls."""

    image: PixelBuffer = field(default_factory=draw_card)
    calls: list[bytes] = field(default_factory=list)

    async def decode(self, image_bytes: bytes) -> PixelBuffer:
        self.calls.append(image_bytes)
        return self.image


@pytest.fixture
def settings() -> Settings:
    return Settings(
        calibration_backend="memory",
        detection_timeout_seconds=None,
    )


@pytest.fixture
def storage() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def calibration_store(storage: InMemoryKeyValueStore) -> CalibrationStore:
    return CalibrationStore(storage)


@pytest.fixture
def image_decoder() -> FakeImageDecoder:
    return FakeImageDecoder()


@pytest.fixture
def engine(
    calibration_store: CalibrationStore, image_decoder: FakeImageDecoder
) -> EstimationEngine:
    return EstimationEngine(
        reference_detector=ReferenceDetector(),
        volume_calculator=VolumeCalculator(),
        food_lookup=FoodDensityLookup(),
        calibration_store=calibration_store,
        image_decoder=image_decoder,
    )
