"""Tests for the estimation pipeline."""

import asyncio

import pytest

from local_estimation.domain.calibration import CalibrationEntry, CorrectionInput
from local_estimation.domain.estimation import EstimationStep
from local_estimation.domain.reference import Point, ReferenceObjectType
from local_estimation.numeric import round_int
from local_estimation.services.estimation import (
    DETECTION_TIMEOUT_WARNING,
    EstimationEngine,
)
from local_estimation.services.volume import NO_REFERENCE_WARNING, ShapeTemplate
from tests.conftest import (
    blank_image,
    draw_coin,
    fixed_reference,
    square_region,
)


def test_estimate_decodes_and_detects_card(engine, image_decoder) -> None:
    rice = engine.food_lookup.get_by_id("rice-white-cooked")

    result = asyncio.run(engine.estimate(b"photo", [square_region()], rice))

    assert image_decoder.calls == [b"photo"]
    assert result.volume.reference_used is not None
    assert result.volume.reference_used.type == ReferenceObjectType.CREDIT_CARD
    assert NO_REFERENCE_WARNING not in result.volume.warnings
    assert result.estimated_weight_grams == round_int(
        result.volume.total_volume_ml * rice.density_g_per_ml
    )
    assert result.confidence == result.volume.confidence
    assert result.processing_time_ms >= 0


def test_estimate_without_reference_warns(engine, image_decoder) -> None:
    rice = engine.food_lookup.get_by_id("rice-white-cooked")

    result = asyncio.run(engine.estimate(blank_image(), [square_region()], rice))

    assert image_decoder.calls == []
    assert result.volume.reference_used is None
    assert result.volume.total_volume_ml == 23
    assert NO_REFERENCE_WARNING in result.volume.warnings


def test_detection_timeout_degrades_to_default_scale(engine) -> None:
    engine.detection_timeout_seconds = 1e-9

    volume = asyncio.run(engine.estimate_volume(b"photo", [square_region()]))

    assert volume.reference_used is None
    assert DETECTION_TIMEOUT_WARNING in volume.warnings
    assert NO_REFERENCE_WARNING in volume.warnings


def test_coin_reference_names_denomination(engine) -> None:
    volume = asyncio.run(engine.estimate_volume(draw_coin(), [square_region()]))

    assert volume.reference_used is not None
    assert volume.reference_used.type == ReferenceObjectType.COIN_AU_DOLLAR
    assert any("coin-au-dollar (25.0 mm)" in warning for warning in volume.warnings)


def test_reshaping_coin_estimate_keeps_denomination_warning(engine) -> None:
    volume = asyncio.run(engine.estimate_volume(draw_coin(), [square_region()]))

    reshaped = engine.volume_calculator.reestimate_with_shape(
        volume, ShapeTemplate.FLAT
    )

    coin_warnings = [w for w in reshaped.warnings if "coin-au-dollar" in w]
    assert len(coin_warnings) == 1
    assert NO_REFERENCE_WARNING not in reshaped.warnings


def test_reshaping_timed_out_estimate_keeps_timeout_warning(engine) -> None:
    engine.detection_timeout_seconds = 1e-9
    volume = asyncio.run(engine.estimate_volume(b"photo", [square_region()]))

    reshaped = engine.volume_calculator.reestimate_with_shape(
        volume, ShapeTemplate.CYLINDER
    )

    assert reshaped.warnings.count(DETECTION_TIMEOUT_WARNING) == 1
    assert reshaped.warnings.count(NO_REFERENCE_WARNING) == 1


def test_detect_reference_returns_none_for_blank_image(engine) -> None:
    assert asyncio.run(engine.detect_reference(blank_image())) is None


def test_estimate_from_reference_applies_calibration(engine) -> None:
    rice = engine.food_lookup.get_by_id("rice-white-cooked")
    asyncio.run(
        engine.calibration_store.record_correction(
            CorrectionInput(
                food_type_id=rice.id, estimated_value=10, corrected_value=20
            )
        )
    )

    result = asyncio.run(
        engine.estimate_from_reference(
            fixed_reference(4.0), [square_region()], rice, ShapeTemplate.DOME
        )
    )

    assert result.volume.total_volume_ml == 10
    assert result.estimated_weight_grams == 22
    assert result.estimated_macros.calories == 28
    assert result.estimated_macros.carbs_g == 6.2


def test_estimate_from_reference_suggests_shape(engine) -> None:
    soup = engine.food_lookup.get_by_id("soup-broth")

    bowl = asyncio.run(
        engine.estimate_from_reference(fixed_reference(4.0), [square_region()], soup)
    )
    flat = asyncio.run(
        engine.estimate_from_reference(
            fixed_reference(4.0), [square_region()], soup, ShapeTemplate.FLAT
        )
    )

    assert bowl.volume.total_volume_ml == 25
    assert flat.volume.total_volume_ml == 4


def test_calculate_macros_without_calibration(engine) -> None:
    rice = engine.food_lookup.get_by_id("rice-white-cooked")
    volume = engine.volume_calculator.estimate_volume(
        [square_region()], fixed_reference(4.0)
    )

    result = engine.calculate_macros(volume, rice)

    assert result.estimated_weight_grams == 11
    assert result.estimated_macros.calories == 14
    assert asyncio.run(engine.apply_calibration(result)) is result


def test_record_user_correction_learns_carb_ratio(engine) -> None:
    rice = engine.food_lookup.get_by_id("rice-white-cooked")
    result = asyncio.run(
        engine.estimate_from_reference(fixed_reference(4.0), [square_region()], rice)
    )

    corrected_carbs = result.estimated_macros.carbs_g * 2
    asyncio.run(engine.record_user_correction(result, corrected_carbs))

    factor = asyncio.run(engine.calibration_store.get_correction_factor(rice.id))
    assert factor == pytest.approx(2.0)


def test_record_user_correction_skips_zero_carb_foods(engine) -> None:
    chicken = engine.food_lookup.get_by_id("chicken-breast")
    result = asyncio.run(
        engine.estimate_from_reference(fixed_reference(4.0), [square_region()], chicken)
    )

    asyncio.run(engine.record_user_correction(result, 5))

    assert asyncio.run(engine.calibration_store.get(chicken.id)) is None


def test_save_calibration_records_factor(engine) -> None:
    asyncio.run(
        engine.save_calibration(
            CalibrationEntry(
                food_type_id="pasta-cooked", correction_factor=1.25, sample_count=1
            )
        )
    )

    stats = asyncio.run(engine.get_calibration_stats())
    assert stats.total_foods == 1
    assert asyncio.run(
        engine.calibration_store.get_correction_factor("pasta-cooked")
    ) == pytest.approx(1.25)


def test_calibration_export_import(engine) -> None:
    asyncio.run(
        engine.calibration_store.record_correction(
            CorrectionInput(food_type_id="rice", estimated_value=10, corrected_value=12)
        )
    )
    exported = asyncio.run(engine.export_calibration())

    asyncio.run(engine.calibration_store.clear())
    asyncio.run(engine.import_calibration(exported))

    assert asyncio.run(engine.calibration_store.get_correction_factor("rice")) == (
        pytest.approx(1.2)
    )


def test_quick_estimate(engine) -> None:
    outline = [Point(0, 0), Point(160, 0), Point(160, 160), Point(0, 160)]

    result = asyncio.run(engine.quick_estimate(blank_image(), "pasta-cooked", outline))
    missing = asyncio.run(engine.quick_estimate(blank_image(), "unknown", outline))

    assert result is not None
    assert result.food_type.id == "pasta-cooked"
    assert len(result.volume.regions) == 1
    assert result.volume.regions[0].estimated_area_mm2 > 0
    assert missing is None


def test_lookup_and_uncertainty_helpers(engine) -> None:
    foods = engine.lookup_food_density("rice", limit=2)
    volume = engine.volume_calculator.estimate_volume([square_region()], None)

    assert [food.id for food in foods] == ["rice-white-cooked", "rice-brown-cooked"]
    assert engine.calculate_uncertainty(volume).percentage == 50
    assert EstimationEngine.create_initial_state().step == EstimationStep.CAPTURE
