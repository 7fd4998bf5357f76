"""Domain models for pipeline results and interactive state."""

from dataclasses import dataclass, field
from enum import StrEnum

from local_estimation.domain.nutrition import FoodDensityEntry, MacroData
from local_estimation.domain.reference import DetectedReference, PixelBuffer
from local_estimation.domain.volume import FoodRegion, VolumeEstimationResult


@dataclass(frozen=True)
class LocalEstimationResult:
    """Final output of one on-device estimation run."""

    volume: VolumeEstimationResult
    food_type: FoodDensityEntry
    estimated_weight_grams: int
    estimated_macros: MacroData
    confidence: float
    processing_time_ms: int


class EstimationStep(StrEnum):
    """Steps of the interactive estimation flow, in order."""

    CAPTURE = "capture"
    REFERENCE = "reference"
    REGION = "region"
    FOOD_TYPE = "food-type"
    RESULT = "result"


@dataclass
class EstimationState:
    """Progress of an interactive estimation."""

    step: EstimationStep = EstimationStep.CAPTURE
    image: PixelBuffer | None = None
    reference: DetectedReference | None = None
    regions: list[FoodRegion] = field(default_factory=list)
    selected_food: FoodDensityEntry | None = None
    volume_result: VolumeEstimationResult | None = None
    final_result: LocalEstimationResult | None = None
