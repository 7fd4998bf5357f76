"""Domain models for reference objects and pixel buffers."""

from dataclasses import dataclass
from enum import StrEnum

import numpy as np

RGB_CHANNELS = 3
RGBA_CHANNELS = 4


class ReferenceObjectType(StrEnum):
    """Physical objects that can establish image scale."""

    CREDIT_CARD = "credit-card"
    COIN_AU_DOLLAR = "coin-au-dollar"
    COIN_AU_50C = "coin-au-50c"
    CUSTOM = "custom"


@dataclass(frozen=True)
class ReferenceDimensions:
    """Physical size of a reference object in millimeters."""

    width_mm: float
    height_mm: float


REFERENCE_DIMENSIONS: dict[ReferenceObjectType, ReferenceDimensions] = {
    # ISO/IEC 7810 ID-1
    ReferenceObjectType.CREDIT_CARD: ReferenceDimensions(85.6, 53.98),
    ReferenceObjectType.COIN_AU_DOLLAR: ReferenceDimensions(25.0, 25.0),
    ReferenceObjectType.COIN_AU_50C: ReferenceDimensions(31.65, 31.65),
    ReferenceObjectType.CUSTOM: ReferenceDimensions(0.0, 0.0),
}

COIN_TYPES = frozenset(
    {ReferenceObjectType.COIN_AU_DOLLAR, ReferenceObjectType.COIN_AU_50C}
)


@dataclass(frozen=True)
class Point:
    """A 2D point in image pixel coordinates."""

    x: float
    y: float


Corners = tuple[Point, Point, Point, Point]


@dataclass(frozen=True)
class DetectedReference:
    """A located reference object and the scale derived from it."""

    type: ReferenceObjectType
    corners: Corners
    pixels_per_mm: float
    confidence: float


@dataclass(frozen=True)
class PixelBuffer:
    """Decoded raster image with tightly packed RGBA bytes."""

    width: int
    height: int
    data: bytes

    def __post_init__(self) -> None:
        expected = self.width * self.height * RGBA_CHANNELS
        if self.width <= 0 or self.height <= 0:
            raise ValueError("Pixel buffer dimensions must be positive")
        if len(self.data) != expected:
            raise ValueError(
                f"Pixel buffer holds {len(self.data)} bytes, expected {expected}"
            )

    @classmethod
    def from_array(cls, pixels: np.ndarray) -> "PixelBuffer":
        """Build a buffer from an (H, W, 4) or (H, W, 3) uint8 array."""
        array = np.asarray(pixels, dtype=np.uint8)
        if array.ndim != 3 or array.shape[2] not in (RGB_CHANNELS, RGBA_CHANNELS):
            raise ValueError("Expected an (H, W, 3) or (H, W, 4) array")
        if array.shape[2] == RGB_CHANNELS:
            alpha = np.full(array.shape[:2] + (1,), 255, dtype=np.uint8)
            array = np.concatenate([array, alpha], axis=2)
        height, width = array.shape[:2]
        return cls(width=width, height=height, data=array.tobytes())

    def to_array(self) -> np.ndarray:
        """Return a read-only (H, W, 4) view of the pixels."""
        return np.frombuffer(self.data, dtype=np.uint8).reshape(
            self.height, self.width, RGBA_CHANNELS
        )
