"""Estimation pipeline orchestrating detection, volume, macros and calibration."""

import asyncio
import logging
import time
from dataclasses import dataclass, replace
from uuid import uuid4

from local_estimation.adapters.image_decoder import ImageDecoder
from local_estimation.domain.calibration import (
    CalibrationEntry,
    CalibrationStats,
    CorrectionInput,
)
from local_estimation.domain.errors import DetectionTimeoutError
from local_estimation.domain.estimation import EstimationState, LocalEstimationResult
from local_estimation.domain.nutrition import FoodDensityEntry, MacroData
from local_estimation.domain.reference import (
    COIN_TYPES,
    REFERENCE_DIMENSIONS,
    DetectedReference,
    PixelBuffer,
    Point,
)
from local_estimation.domain.volume import (
    FoodRegion,
    UncertaintyBand,
    VolumeEstimationResult,
)
from local_estimation.numeric import round_half_up, round_int
from local_estimation.services.calibration import CalibrationStore
from local_estimation.services.foods import FoodDensityLookup
from local_estimation.services.reference import ReferenceDetector
from local_estimation.services.volume import ShapeTemplate, VolumeCalculator

DETECTION_TIMEOUT_WARNING = "Reference detection timed out. Using estimated scale."

_logger = logging.getLogger(__name__)


@dataclass
class EstimationEngine:
    """Runs the local estimation pipeline over injected collaborators."""

    reference_detector: ReferenceDetector
    volume_calculator: VolumeCalculator
    food_lookup: FoodDensityLookup
    calibration_store: CalibrationStore
    image_decoder: ImageDecoder
    detection_timeout_seconds: float | None = None
    debug: bool = False

    async def load_image(self, image: bytes | PixelBuffer) -> PixelBuffer:
        """Return decoded pixels, decoding encoded bytes when needed."""
        if isinstance(image, PixelBuffer):
            return image
        return await self.image_decoder.decode(image)

    async def detect_reference(
        self, image: bytes | PixelBuffer
    ) -> DetectedReference | None:
        """Detect a reference object; absence or timeout yields None."""
        reference, _ = await self._detect(await self.load_image(image))
        return reference

    async def estimate_volume(
        self,
        image: bytes | PixelBuffer,
        regions: list[FoodRegion],
        shape: ShapeTemplate | None = None,
    ) -> VolumeEstimationResult:
        """Detect a reference and estimate the volume of the regions."""
        reference, warnings = await self._detect(await self.load_image(image))
        volume = self.volume_calculator.estimate_volume(
            regions, reference, shape or ShapeTemplate.DOME
        )
        return _with_warnings(volume, [*_coin_warnings(reference), *warnings])

    def lookup_food_density(
        self, query: str, limit: int = 10
    ) -> list[FoodDensityEntry]:
        """Return foods matching a query, best first."""
        return [result.entry for result in self.food_lookup.search(query, limit)]

    def calculate_macros(
        self, volume: VolumeEstimationResult, food: FoodDensityEntry
    ) -> LocalEstimationResult:
        """Convert a volume estimate into weight and macros for a food."""
        started = time.perf_counter()
        weight_grams = self.food_lookup.volume_to_weight(food, volume.total_volume_ml)
        macros = self.food_lookup.calculate_macros(food, weight_grams)
        return LocalEstimationResult(
            volume=volume,
            food_type=food,
            estimated_weight_grams=round_int(weight_grams),
            estimated_macros=macros,
            confidence=volume.confidence,
            processing_time_ms=_elapsed_ms(started),
        )

    async def apply_calibration(
        self, result: LocalEstimationResult
    ) -> LocalEstimationResult:
        """Scale weight and macros by the food's learned correction factor."""
        factor = await self.calibration_store.get_correction_factor(
            result.food_type.id
        )
        if factor == 1.0:
            return result
        return replace(
            result,
            estimated_weight_grams=round_int(result.estimated_weight_grams * factor),
            estimated_macros=_scale_macros(result.estimated_macros, factor),
        )

    async def save_calibration(self, entry: CalibrationEntry) -> None:
        """Record an externally supplied factor as a correction."""
        await self.calibration_store.record_correction(
            CorrectionInput(
                food_type_id=entry.food_type_id,
                estimated_value=1,
                corrected_value=entry.correction_factor,
                field="carbs",
            )
        )

    async def record_user_correction(
        self, result: LocalEstimationResult, corrected_carbs: float
    ) -> None:
        """Learn from the user's corrected carbohydrate amount."""
        if result.estimated_macros.carbs_g == 0:
            return
        await self.calibration_store.record_correction(
            CorrectionInput(
                food_type_id=result.food_type.id,
                estimated_value=result.estimated_macros.carbs_g,
                corrected_value=corrected_carbs,
                field="carbs",
            )
        )

    async def estimate(
        self,
        image: bytes | PixelBuffer,
        regions: list[FoodRegion],
        food: FoodDensityEntry,
        shape: ShapeTemplate | None = None,
    ) -> LocalEstimationResult:
        """Run detection, volume, macros and calibration end to end."""
        started = time.perf_counter()
        pixels = await self.load_image(image)
        reference, warnings = await self._detect(pixels)
        result = await self.estimate_from_reference(reference, regions, food, shape)
        result = replace(
            result,
            volume=_with_warnings(result.volume, warnings),
            processing_time_ms=_elapsed_ms(started),
        )
        if self.debug:
            _logger.info(
                "Estimated %s: volume=%sml weight=%sg confidence=%s in %sms",
                food.id,
                result.volume.total_volume_ml,
                result.estimated_weight_grams,
                result.confidence,
                result.processing_time_ms,
            )
        return result

    async def estimate_from_reference(
        self,
        reference: DetectedReference | None,
        regions: list[FoodRegion],
        food: FoodDensityEntry,
        shape: ShapeTemplate | None = None,
    ) -> LocalEstimationResult:
        """Run the pipeline after the reference step has been resolved."""
        started = time.perf_counter()
        resolved_shape = shape or self.volume_calculator.suggest_shape(food.name)
        volume = self.volume_calculator.estimate_volume(
            regions, reference, resolved_shape
        )
        volume = _with_warnings(volume, _coin_warnings(reference))
        result = await self.apply_calibration(self.calculate_macros(volume, food))
        return replace(result, processing_time_ms=_elapsed_ms(started))

    async def quick_estimate(
        self,
        image: bytes | PixelBuffer,
        food_id: str,
        region_points: list[Point],
    ) -> LocalEstimationResult | None:
        """Estimate a single outlined region for a food id."""
        food = self.food_lookup.get_by_id(food_id)
        if food is None:
            return None
        region = FoodRegion(id=str(uuid4()), boundary=list(region_points))
        return await self.estimate(image, [region], food)

    def calculate_uncertainty(self, volume: VolumeEstimationResult) -> UncertaintyBand:
        """Return the uncertainty band for a volume estimate."""
        return self.volume_calculator.calculate_uncertainty(volume)

    async def get_calibration_stats(self) -> CalibrationStats:
        """Return calibration statistics."""
        return await self.calibration_store.get_stats()

    async def export_calibration(self) -> str:
        """Export the calibration snapshot as JSON."""
        return await self.calibration_store.export()

    async def import_calibration(self, payload: str | bytes) -> None:
        """Import a calibration snapshot."""
        await self.calibration_store.import_snapshot(payload)

    @staticmethod
    def create_initial_state() -> EstimationState:
        """Return a fresh state at the capture step."""
        return EstimationState()

    async def _detect(
        self, pixels: PixelBuffer
    ) -> tuple[DetectedReference | None, list[str]]:
        deadline = None
        if self.detection_timeout_seconds and self.detection_timeout_seconds > 0:
            deadline = time.monotonic() + self.detection_timeout_seconds
        try:
            reference = await asyncio.to_thread(
                self.reference_detector.detect, pixels, deadline=deadline
            )
        except DetectionTimeoutError:
            _logger.warning(
                "Reference detection exceeded %ss on %sx%s image",
                self.detection_timeout_seconds,
                pixels.width,
                pixels.height,
            )
            return None, [DETECTION_TIMEOUT_WARNING]
        return reference, []


def _with_warnings(
    volume: VolumeEstimationResult, warnings: list[str]
) -> VolumeEstimationResult:
    """Return the volume with extra warnings appended."""
    if not warnings:
        return volume
    return replace(volume, warnings=[*volume.warnings, *warnings])


def _coin_warnings(reference: DetectedReference | None) -> list[str]:
    """Name the assumed coin denomination so the scale can be confirmed."""
    if reference is None or reference.type not in COIN_TYPES:
        return []
    diameter = REFERENCE_DIMENSIONS[reference.type].width_mm
    return [
        f"Coin assumed to be {reference.type.value} ({diameter} mm). "
        "Confirm the coin type if the estimate looks wrong."
    ]


def _scale_macros(macros: MacroData, factor: float) -> MacroData:
    alcohol = None
    if macros.alcohol_g is not None:
        alcohol = round_half_up(macros.alcohol_g * factor, 1)
    return MacroData(
        calories=round_int(macros.calories * factor),
        carbs_g=round_half_up(macros.carbs_g * factor, 1),
        protein_g=round_half_up(macros.protein_g * factor, 1),
        fat_g=round_half_up(macros.fat_g * factor, 1),
        alcohol_g=alcohol,
    )


def _elapsed_ms(started: float) -> int:
    return round_int((time.perf_counter() - started) * 1000)
