"""Session state machine for interactive estimation."""

from dataclasses import dataclass, field

from local_estimation.domain.errors import InvalidTransitionError
from local_estimation.domain.estimation import (
    EstimationState,
    EstimationStep,
    LocalEstimationResult,
)
from local_estimation.domain.nutrition import FoodDensityEntry
from local_estimation.domain.reference import (
    Corners,
    DetectedReference,
    PixelBuffer,
    ReferenceObjectType,
)
from local_estimation.domain.volume import FoodRegion
from local_estimation.services.estimation import EstimationEngine
from local_estimation.services.volume import ShapeTemplate

_STEP_ORDER = list(EstimationStep)


@dataclass
class EstimationSession:
    """Guides one estimation through capture, reference, regions and food.

    Each step may only run once, in order; going back means starting a new
    session.
    """

    engine: EstimationEngine
    state: EstimationState = field(default_factory=EstimationState)

    @property
    def step(self) -> EstimationStep:
        return self.state.step

    async def capture(self, image: bytes | PixelBuffer) -> None:
        """Store the decoded photo."""
        self._require(EstimationStep.CAPTURE)
        self.state.image = await self.engine.load_image(image)
        self._advance()

    async def detect_reference(self) -> DetectedReference | None:
        """Look for a reference object in the captured photo."""
        self._require(EstimationStep.REFERENCE)
        if self.state.image is None:
            raise InvalidTransitionError("No captured image to search for a reference")
        reference = await self.engine.detect_reference(self.state.image)
        self.state.reference = reference
        self._advance()
        return reference

    def use_manual_reference(
        self,
        corners: Corners,
        reference_type: ReferenceObjectType,
        width_mm: float | None = None,
    ) -> DetectedReference:
        """Use operator-marked corners instead of detection."""
        self._require(EstimationStep.REFERENCE)
        reference = self.engine.reference_detector.create_manual_reference(
            corners, reference_type, width_mm
        )
        self.state.reference = reference
        self._advance()
        return reference

    def skip_reference(self) -> None:
        """Continue without a reference; the default scale will apply."""
        self._require(EstimationStep.REFERENCE)
        self.state.reference = None
        self._advance()

    def mark_regions(self, regions: list[FoodRegion]) -> None:
        """Store the food outlines drawn on the photo."""
        self._require(EstimationStep.REGION)
        self.state.regions = list(regions)
        self._advance()

    async def select_food(
        self, food: FoodDensityEntry, shape: ShapeTemplate | None = None
    ) -> LocalEstimationResult:
        """Pick the food type and compute the final estimate."""
        self._require(EstimationStep.FOOD_TYPE)
        result = await self.engine.estimate_from_reference(
            self.state.reference, self.state.regions, food, shape
        )
        self.state.selected_food = food
        self.state.volume_result = result.volume
        self.state.final_result = result
        self._advance()
        return result

    def _require(self, step: EstimationStep) -> None:
        if self.state.step != step:
            raise InvalidTransitionError(
                f"Cannot run {step.value} step while at {self.state.step.value}"
            )

    def _advance(self) -> None:
        self.state.step = _STEP_ORDER[_STEP_ORDER.index(self.state.step) + 1]
