"""Tests for volume estimation."""

import pytest

from local_estimation.domain.reference import Point
from local_estimation.domain.volume import VolumeEstimationResult
from local_estimation.services.volume import (
    LARGE_VOLUME_WARNING,
    NO_REFERENCE_WARNING,
    SMALL_VOLUME_WARNING,
    ShapeTemplate,
    VolumeCalculator,
    calculate_centroid,
    calculate_polygon_area,
)
from tests.conftest import fixed_reference, square_region


def test_polygon_area_and_degenerate_outline() -> None:
    triangle = [Point(0, 0), Point(4, 0), Point(0, 3)]

    assert calculate_polygon_area(triangle) == 6.0
    assert calculate_polygon_area(list(reversed(triangle))) == 6.0
    assert calculate_polygon_area([Point(0, 0), Point(1, 1)]) == 0.0


def test_centroid_is_vertex_mean() -> None:
    assert calculate_centroid([Point(0, 0), Point(4, 0), Point(4, 2)]) == Point(
        8 / 3, 2 / 3
    )
    assert calculate_centroid([]) == Point(0.0, 0.0)


def test_dome_volume_with_reference() -> None:
    region = square_region()

    result = VolumeCalculator().estimate_volume([region], fixed_reference(4.0))

    assert region.estimated_area_mm2 == 1600
    assert region.estimated_height_mm == 9
    assert region.estimated_volume_ml == 10
    assert result.total_volume_ml == 10
    assert result.confidence == 0.92
    assert result.warnings == [SMALL_VOLUME_WARNING]
    assert result.reference_used is not None


def test_missing_reference_uses_default_scale() -> None:
    result = VolumeCalculator().estimate_volume([square_region()], None)

    assert result.total_volume_ml == 23
    assert result.confidence == 0.62
    assert result.warnings == [NO_REFERENCE_WARNING]
    assert result.reference_used is None


def test_shape_changes_volume() -> None:
    calculator = VolumeCalculator()
    reference = fixed_reference(4.0)

    flat = calculator.estimate_volume([square_region()], reference, ShapeTemplate.FLAT)
    cylinder = calculator.estimate_volume(
        [square_region()], reference, ShapeTemplate.CYLINDER
    )

    assert flat.total_volume_ml == 4
    assert cylinder.total_volume_ml == 36


def test_large_volume_warning() -> None:
    result = VolumeCalculator().estimate_volume(
        [square_region(1000.0)], fixed_reference(1.0)
    )

    assert LARGE_VOLUME_WARNING in result.warnings
    assert SMALL_VOLUME_WARNING not in result.warnings


def test_empty_regions() -> None:
    result = VolumeCalculator().estimate_volume([], fixed_reference(4.0))

    assert result.total_volume_ml == 0
    assert result.confidence == 0.6
    assert result.warnings == []


def test_region_confidence_caps_at_three_regions() -> None:
    regions = [square_region(region_id=f"r{index}") for index in range(5)]

    result = VolumeCalculator().estimate_volume(regions, fixed_reference(4.0))

    assert result.confidence == 1.0
    assert result.total_volume_ml == 48


def test_reestimate_with_shape_uses_stored_areas() -> None:
    calculator = VolumeCalculator()
    original = calculator.estimate_volume([square_region()], fixed_reference(4.0))

    updated = calculator.reestimate_with_shape(original, ShapeTemplate.CYLINDER)

    assert updated.total_volume_ml == 36
    assert updated.regions[0].estimated_volume_ml == 36
    assert updated.warnings == []
    assert original.regions[0].estimated_volume_ml == 10


def test_reestimate_recomputes_sanity_warnings_and_keeps_others() -> None:
    calculator = VolumeCalculator()
    original = calculator.estimate_volume([square_region()], fixed_reference(4.0))
    original.warnings.append("Check the plate edge.")

    updated = calculator.reestimate_with_shape(original, ShapeTemplate.CYLINDER)

    assert SMALL_VOLUME_WARNING not in updated.warnings
    assert updated.warnings == ["Check the plate edge."]


def test_reestimate_skips_regions_without_area() -> None:
    calculator = VolumeCalculator()
    original = calculator.estimate_volume(
        [square_region(), square_region(0.0, region_id="empty")], fixed_reference(4.0)
    )

    updated = calculator.reestimate_with_shape(original, ShapeTemplate.DOME)

    assert [region.id for region in updated.regions] == ["region-1"]


def test_uncertainty_bands() -> None:
    calculator = VolumeCalculator()
    without_reference = VolumeEstimationResult(
        regions=[], total_volume_ml=100, confidence=0.62
    )
    confident = VolumeEstimationResult(
        regions=[],
        total_volume_ml=100,
        confidence=0.92,
        reference_used=fixed_reference(confidence=1.0),
    )
    weak_reference = VolumeEstimationResult(
        regions=[],
        total_volume_ml=100,
        confidence=0.5,
        reference_used=fixed_reference(confidence=0.5),
    )

    band = calculator.calculate_uncertainty(without_reference)
    assert (band.low, band.high, band.percentage) == (50, 150, 50)

    band = calculator.calculate_uncertainty(confident)
    assert (band.low, band.high, band.percentage) == (73, 127, 27)

    band = calculator.calculate_uncertainty(weak_reference)
    assert (band.low, band.high, band.percentage) == (60, 140, 40)


def test_suggest_shape_from_name() -> None:
    assert VolumeCalculator.suggest_shape("White Rice (cooked)") == ShapeTemplate.DOME
    assert VolumeCalculator.suggest_shape("Pizza") == ShapeTemplate.FLAT
    assert VolumeCalculator.suggest_shape("Soup (thick/creamy)") == ShapeTemplate.BOWL
    assert VolumeCalculator.suggest_shape("Mixed Salad") == ShapeTemplate.PILE
    assert VolumeCalculator.suggest_shape("Salmon (cooked)") == ShapeTemplate.IRREGULAR


def test_shape_templates_listed() -> None:
    templates = dict(VolumeCalculator.get_shape_templates())

    assert set(templates) == set(ShapeTemplate)
    assert templates[ShapeTemplate.DOME].volume_multiplier == 0.67


def test_area_scales_with_pixel_area_and_volume_with_its_power() -> None:
    calculator = VolumeCalculator()
    small = square_region(100.0)
    large = square_region(200.0)

    calculator.estimate_volume([small, large], fixed_reference(1.0))

    assert large.estimated_area_mm2 == 4 * small.estimated_area_mm2
    ratio = large.estimated_volume_ml / small.estimated_volume_ml
    assert ratio == pytest.approx(8, rel=0.01)


def test_missing_reference_is_never_more_certain() -> None:
    calculator = VolumeCalculator()
    with_reference = calculator.estimate_volume([square_region()], fixed_reference(3.0))
    without_reference = calculator.estimate_volume([square_region()], None)

    assert (
        calculator.calculate_uncertainty(without_reference).percentage
        >= calculator.calculate_uncertainty(with_reference).percentage
    )
