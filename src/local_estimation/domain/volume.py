"""Domain models for food regions and volume estimates."""

from dataclasses import dataclass, field

from local_estimation.domain.reference import DetectedReference, Point


@dataclass
class FoodRegion:
    """A caller-marked food outline, enriched in place with computed fields."""

    id: str
    boundary: list[Point]
    estimated_area_mm2: float = 0.0
    estimated_height_mm: float | None = None
    estimated_volume_ml: float | None = None


@dataclass(frozen=True)
class VolumeEstimationResult:
    """Aggregated volume estimate for a set of regions."""

    regions: list[FoodRegion]
    total_volume_ml: float
    confidence: float
    reference_used: DetectedReference | None = None
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class UncertaintyBand:
    """Symmetric bounds around an estimated total volume."""

    low: float
    high: float
    percentage: int
