"""Nutrition domain models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class MacroData:
    """Macronutrient amounts, either totals or per gram of food."""

    calories: float
    carbs_g: float
    protein_g: float
    fat_g: float
    alcohol_g: float | None = None


@dataclass(frozen=True)
class FoodDensityEntry:
    """Reference record for a food's density and per-gram macros."""

    id: str
    name: str
    category: str
    density_g_per_ml: float
    macros_per_gram: MacroData
    external_code: str | None = None


@dataclass(frozen=True)
class FoodSearchResult:
    """A food entry with its search relevance score."""

    entry: FoodDensityEntry
    score: int


@dataclass(frozen=True)
class MacroEstimate:
    """Weight and macros derived from a food volume."""

    weight_grams: int
    macros: MacroData
