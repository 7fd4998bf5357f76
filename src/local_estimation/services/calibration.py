"""Learned per-food calibration from user corrections."""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol

from pydantic import TypeAdapter, ValidationError

from local_estimation.domain.calibration import (
    CalibrationEntry,
    CalibrationStats,
    CorrectionInput,
)
from local_estimation.domain.errors import InvalidCalibrationDataError
from local_estimation.numeric import round_half_up, round_int

DEFAULT_STORAGE_KEY = "food_volume_calibration"
SMOOTHING_ALPHA = 0.3

_SNAPSHOT = TypeAdapter(list[CalibrationEntry])
_logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Durable string slot keyed by name."""

    async def read(self, key: str) -> str | None:
        """Return the stored value, if any."""

    async def write(self, key: str, value: str) -> None:
        """Persist a value, replacing any previous one."""

    async def delete(self, key: str) -> None:
        """Remove a stored value."""


@dataclass
class CalibrationStore:
    """Correction factors per food type, cached after the first read."""

    storage: KeyValueStore
    storage_key: str = DEFAULT_STORAGE_KEY
    _entries: dict[str, CalibrationEntry] = field(default_factory=dict, init=False)
    _loaded: bool = field(default=False, init=False)

    async def get(self, food_type_id: str) -> CalibrationEntry | None:
        """Return the calibration entry for a food type, if any."""
        await self._load()
        return self._entries.get(food_type_id)

    async def get_correction_factor(self, food_type_id: str) -> float:
        """Return the learned factor for a food type, 1.0 when uncalibrated."""
        entry = await self.get(food_type_id)
        return entry.correction_factor if entry else 1.0

    async def record_correction(self, correction: CorrectionInput) -> None:
        """Fold a user correction into the food type's factor and persist."""
        await self._load()
        if correction.estimated_value == 0:
            _logger.warning(
                "Skipping correction for %s: estimated %s is zero",
                correction.food_type_id,
                correction.field,
            )
            return

        ratio = correction.corrected_value / correction.estimated_value
        if ratio <= 0:
            _logger.warning(
                "Skipping correction for %s: non-positive ratio %s",
                correction.food_type_id,
                ratio,
            )
            return
        now = datetime.now(tz=UTC)
        existing = self._entries.get(correction.food_type_id)
        if existing is None:
            entry = CalibrationEntry(
                food_type_id=correction.food_type_id,
                correction_factor=ratio,
                sample_count=1,
                last_updated=now,
            )
        else:
            smoothed = (
                SMOOTHING_ALPHA * ratio
                + (1 - SMOOTHING_ALPHA) * existing.correction_factor
            )
            entry = CalibrationEntry(
                food_type_id=existing.food_type_id,
                correction_factor=round_half_up(smoothed, 3),
                sample_count=existing.sample_count + 1,
                last_updated=now,
            )
        self._entries[entry.food_type_id] = entry
        _logger.info(
            "Calibration updated: food=%s field=%s factor=%s samples=%s",
            entry.food_type_id,
            correction.field,
            entry.correction_factor,
            entry.sample_count,
        )
        await self._save()

    async def apply_calibration(self, food_type_id: str, value: float) -> float:
        """Scale a value by the food type's factor, rounded to one decimal."""
        factor = await self.get_correction_factor(food_type_id)
        return round_half_up(value * factor, 1)

    async def get_all(self) -> list[CalibrationEntry]:
        """Return every calibration entry."""
        await self._load()
        return list(self._entries.values())

    async def clear(self) -> None:
        """Forget all calibrations and delete the stored snapshot."""
        self._entries.clear()
        self._loaded = True
        await self.storage.delete(self.storage_key)

    async def export(self) -> str:
        """Serialize all entries as a JSON snapshot."""
        await self._load()
        return _dump(list(self._entries.values()), indent=2)

    async def import_snapshot(self, payload: str | bytes) -> None:
        """Merge a JSON snapshot, overwriting entries with matching food types.

        Raises ``InvalidCalibrationDataError`` without changing anything when
        the payload is not a valid snapshot.
        """
        try:
            imported = _SNAPSHOT.validate_json(payload)
        except ValidationError as exc:
            raise InvalidCalibrationDataError(
                "Invalid calibration data format"
            ) from exc

        await self._load()
        for entry in imported:
            self._entries[entry.food_type_id] = entry
        await self._save()

    async def get_stats(self) -> CalibrationStats:
        """Summarize how many foods were calibrated and by how much."""
        entries = await self.get_all()
        if not entries:
            return CalibrationStats(
                total_foods=0, total_corrections=0, average_deviation_percent=0
            )
        deviation = sum(abs(entry.correction_factor - 1) for entry in entries) / len(
            entries
        )
        return CalibrationStats(
            total_foods=len(entries),
            total_corrections=sum(entry.sample_count for entry in entries),
            average_deviation_percent=round_int(deviation * 100),
        )

    async def _load(self) -> None:
        if self._loaded:
            return
        stored = await self.storage.read(self.storage_key)
        if stored:
            try:
                entries = _SNAPSHOT.validate_json(stored)
            except ValidationError as exc:
                _logger.warning("Failed to load calibration data: %s", exc)
            else:
                self._entries = {entry.food_type_id: entry for entry in entries}
        self._loaded = True

    async def _save(self) -> None:
        await self.storage.write(self.storage_key, _dump(list(self._entries.values())))


def _dump(entries: list[CalibrationEntry], indent: int | None = None) -> str:
    return _SNAPSHOT.dump_json(entries, by_alias=True, indent=indent).decode("utf-8")
