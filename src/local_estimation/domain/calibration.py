"""Models for learned calibration factors."""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

CorrectionField = Literal["carbs", "calories", "protein", "fat", "volume"]


class CalibrationEntry(BaseModel):
    """Learned correction factor for a single food type.

    Serialized with camelCase keys so that exported snapshots stay compatible
    with previously stored data.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    food_type_id: str = Field(min_length=1)
    correction_factor: float = Field(gt=0.0)
    sample_count: int = Field(ge=1)
    last_updated: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))


@dataclass(frozen=True)
class CorrectionInput:
    """A user correction of an estimated value."""

    food_type_id: str
    estimated_value: float
    corrected_value: float
    field: CorrectionField = "carbs"


@dataclass(frozen=True)
class CalibrationStats:
    """Aggregate statistics over all calibration entries."""

    total_foods: int
    total_corrections: int
    average_deviation_percent: int
