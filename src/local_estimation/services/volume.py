"""Volume estimation from 2D food regions using shape templates."""

import math
from dataclasses import dataclass, replace
from enum import StrEnum

from local_estimation.domain.reference import DetectedReference, Point
from local_estimation.domain.volume import (
    FoodRegion,
    UncertaintyBand,
    VolumeEstimationResult,
)
from local_estimation.numeric import round_half_up, round_int

DEFAULT_PIXELS_PER_MM = 3.0
LARGE_VOLUME_ML = 2000
SMALL_VOLUME_ML = 10

NO_REFERENCE_WARNING = "No reference object detected. Using estimated scale."
LARGE_VOLUME_WARNING = "Large volume estimated. Please verify regions."
SMALL_VOLUME_WARNING = "Very small volume. Reference may be incorrect."
_SANITY_WARNINGS = frozenset(
    {NO_REFERENCE_WARNING, LARGE_VOLUME_WARNING, SMALL_VOLUME_WARNING}
)


class ShapeTemplate(StrEnum):
    """Height heuristics for common food shapes."""

    FLAT = "flat"
    DOME = "dome"
    PILE = "pile"
    BOWL = "bowl"
    CYLINDER = "cylinder"
    IRREGULAR = "irregular"


@dataclass(frozen=True)
class ShapeParams:
    """Height multiplier relative to equivalent radius and volume correction."""

    height_ratio: float
    volume_multiplier: float
    description: str


SHAPE_TEMPLATES: dict[ShapeTemplate, ShapeParams] = {
    ShapeTemplate.FLAT: ShapeParams(0.1, 1.0, "Flat food (sandwich, pizza slice)"),
    # Hemisphere is two thirds of its bounding cylinder.
    ShapeTemplate.DOME: ShapeParams(0.4, 0.67, "Dome shape (rice, mashed potato)"),
    ShapeTemplate.PILE: ShapeParams(0.6, 0.5, "Pile/mound (chips, salad)"),
    ShapeTemplate.BOWL: ShapeParams(0.8, 0.85, "Bowl contents (soup, cereal)"),
    ShapeTemplate.CYLINDER: ShapeParams(1.0, 1.0, "Cylindrical (drink, container)"),
    ShapeTemplate.IRREGULAR: ShapeParams(0.35, 0.6, "Irregular shape (mixed plate)"),
}

_SHAPE_KEYWORDS: tuple[tuple[ShapeTemplate, tuple[str, ...]], ...] = (
    (
        ShapeTemplate.FLAT,
        ("pizza", "sandwich", "toast", "bread", "pancake", "flatbread"),
    ),
    (ShapeTemplate.DOME, ("rice", "mash", "potato", "pasta", "noodle", "oatmeal")),
    (ShapeTemplate.PILE, ("chip", "fries", "salad", "veg", "fruit", "berr")),
    (ShapeTemplate.BOWL, ("soup", "stew", "curry", "cereal", "yogurt")),
)


def calculate_polygon_area(points: list[Point]) -> float:
    """Return the absolute polygon area via the shoelace formula."""
    if len(points) < 3:  # noqa: PLR2004
        return 0.0
    twice_area = 0.0
    for index, point in enumerate(points):
        following = points[(index + 1) % len(points)]
        twice_area += point.x * following.y - following.x * point.y
    return abs(twice_area / 2)


def calculate_centroid(points: list[Point]) -> Point:
    """Return the mean of the polygon vertices."""
    if not points:
        return Point(0.0, 0.0)
    return Point(
        sum(point.x for point in points) / len(points),
        sum(point.y for point in points) / len(points),
    )


def _shape_volume(area_mm2: float, shape: ShapeParams) -> tuple[float, float]:
    """Return (height_mm, volume_ml) for an area under a shape template."""
    equivalent_radius = math.sqrt(area_mm2 / math.pi)
    height_mm = equivalent_radius * shape.height_ratio
    volume_mm3 = area_mm2 * height_mm * shape.volume_multiplier
    return height_mm, volume_mm3 / 1000


def _volume_warnings(total_volume_ml: float, region_count: int) -> list[str]:
    warnings = []
    if total_volume_ml > LARGE_VOLUME_ML:
        warnings.append(LARGE_VOLUME_WARNING)
    if total_volume_ml < SMALL_VOLUME_ML and region_count > 0:
        warnings.append(SMALL_VOLUME_WARNING)
    return warnings


@dataclass
class VolumeCalculator:
    """Converts region outlines and a reference scale into a volume estimate."""

    default_pixels_per_mm: float = DEFAULT_PIXELS_PER_MM

    def estimate_volume(
        self,
        regions: list[FoodRegion],
        reference: DetectedReference | None,
        shape: ShapeTemplate = ShapeTemplate.DOME,
    ) -> VolumeEstimationResult:
        """Estimate volume for regions, filling their computed fields in place."""
        warnings: list[str] = []
        if reference is None:
            pixels_per_mm = self.default_pixels_per_mm
            warnings.append(NO_REFERENCE_WARNING)
        else:
            pixels_per_mm = reference.pixels_per_mm

        params = SHAPE_TEMPLATES[ShapeTemplate(shape)]
        total_volume_ml = 0.0
        for region in regions:
            area_mm2 = calculate_polygon_area(region.boundary) / pixels_per_mm**2
            height_mm, volume_ml = _shape_volume(area_mm2, params)
            total_volume_ml += volume_ml
            region.estimated_area_mm2 = round_int(area_mm2)
            region.estimated_height_mm = round_int(height_mm)
            region.estimated_volume_ml = round_int(volume_ml)

        reference_confidence = reference.confidence if reference else 0.5
        region_confidence = min(1.0, 0.7 + len(regions) * 0.1) if regions else 0.0
        confidence = reference_confidence * 0.6 + region_confidence * 0.4

        warnings.extend(_volume_warnings(total_volume_ml, len(regions)))
        return VolumeEstimationResult(
            regions=list(regions),
            total_volume_ml=round_int(total_volume_ml),
            confidence=round_half_up(confidence, 2),
            reference_used=reference,
            warnings=warnings,
        )

    def reestimate_with_shape(
        self, previous: VolumeEstimationResult, shape: ShapeTemplate
    ) -> VolumeEstimationResult:
        """Recompute volumes from stored region areas under another template."""
        params = SHAPE_TEMPLATES[ShapeTemplate(shape)]
        total_volume_ml = 0.0
        updated: list[FoodRegion] = []
        for region in previous.regions:
            if not region.estimated_area_mm2:
                continue
            height_mm, volume_ml = _shape_volume(region.estimated_area_mm2, params)
            total_volume_ml += volume_ml
            updated.append(
                replace(
                    region,
                    estimated_height_mm=round_int(height_mm),
                    estimated_volume_ml=round_int(volume_ml),
                )
            )

        warnings = [] if previous.reference_used else [NO_REFERENCE_WARNING]
        warnings.extend(_volume_warnings(total_volume_ml, len(updated)))
        warnings.extend(
            warning
            for warning in previous.warnings
            if warning not in _SANITY_WARNINGS
        )
        return replace(
            previous,
            regions=updated,
            total_volume_ml=round_int(total_volume_ml),
            warnings=warnings,
        )

    def calculate_uncertainty(self, result: VolumeEstimationResult) -> UncertaintyBand:
        """Return symmetric bounds reflecting reference quality."""
        band = 0.3
        if result.reference_used is None:
            band = 0.5
        elif result.reference_used.confidence < 0.7:  # noqa: PLR2004
            band = 0.4
        if result.confidence > 0.8:  # noqa: PLR2004
            band *= 0.9

        return UncertaintyBand(
            low=round_int(result.total_volume_ml * (1 - band)),
            high=round_int(result.total_volume_ml * (1 + band)),
            percentage=round_int(band * 100),
        )

    @staticmethod
    def suggest_shape(food_name: str) -> ShapeTemplate:
        """Pick a shape template from keywords in the food name."""
        name = food_name.lower()
        for shape, keywords in _SHAPE_KEYWORDS:
            if any(keyword in name for keyword in keywords):
                return shape
        return ShapeTemplate.IRREGULAR

    @staticmethod
    def get_shape_templates() -> list[tuple[ShapeTemplate, ShapeParams]]:
        """Return all shape templates with their parameters."""
        return list(SHAPE_TEMPLATES.items())
