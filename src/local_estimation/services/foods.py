"""Food density search and volume-to-macro conversion."""

import re
from dataclasses import dataclass

from local_estimation.data.food_density import FOOD_DENSITY_DATABASE
from local_estimation.domain.nutrition import (
    FoodDensityEntry,
    FoodSearchResult,
    MacroData,
    MacroEstimate,
)
from local_estimation.numeric import round_half_up, round_int

_MIN_TERM_LENGTH = 2


@dataclass
class FoodDensityLookup:
    """Searchable view over the bundled food density dataset."""

    database: tuple[FoodDensityEntry, ...] = FOOD_DENSITY_DATABASE

    def search(self, query: str, limit: int = 10) -> list[FoodSearchResult]:
        """Rank foods by how well their name and category match the query."""
        normalized = query.strip().lower() if query else ""
        if not normalized:
            return []

        terms = normalized.split()
        scored = [
            FoodSearchResult(entry=food, score=_score(food, terms, normalized))
            for food in self.database
        ]
        matches = [result for result in scored if result.score > 0]
        matches.sort(key=lambda result: result.score, reverse=True)
        return matches[:limit]

    def get_by_id(self, food_id: str) -> FoodDensityEntry | None:
        """Return a food by id, if present."""
        for food in self.database:
            if food.id == food_id:
                return food
        return None

    def get_categories(self) -> list[str]:
        """Return categories in first-seen order."""
        return list(dict.fromkeys(food.category for food in self.database))

    def get_by_category(self, category: str) -> list[FoodDensityEntry]:
        """Return all foods in a category."""
        return [food for food in self.database if food.category == category]

    def get_all(self) -> list[FoodDensityEntry]:
        """Return every food for browsing."""
        return list(self.database)

    def get_popular(self, count: int = 12) -> list[FoodDensityEntry]:
        """Return the first food of each category, topped up in dataset order."""
        popular: list[FoodDensityEntry] = []
        for category in self.get_categories():
            items = self.get_by_category(category)
            if items and len(popular) < count:
                popular.append(items[0])
        for food in self.database:
            if len(popular) >= count:
                break
            if food not in popular:
                popular.append(food)
        return popular

    @staticmethod
    def volume_to_weight(food: FoodDensityEntry, volume_ml: float) -> float:
        """Convert a volume to grams using the food's density."""
        return volume_ml * food.density_g_per_ml

    @staticmethod
    def calculate_macros(food: FoodDensityEntry, weight_grams: float) -> MacroData:
        """Scale per-gram macros to a weight.

        Calories are rounded to whole numbers, other macros to one decimal.
        """
        per_gram = food.macros_per_gram
        alcohol = None
        if per_gram.alcohol_g is not None:
            alcohol = round_half_up(per_gram.alcohol_g * weight_grams, 1)
        return MacroData(
            calories=round_int(per_gram.calories * weight_grams),
            carbs_g=round_half_up(per_gram.carbs_g * weight_grams, 1),
            protein_g=round_half_up(per_gram.protein_g * weight_grams, 1),
            fat_g=round_half_up(per_gram.fat_g * weight_grams, 1),
            alcohol_g=alcohol,
        )

    def estimate_macros_from_volume(
        self, food: FoodDensityEntry, volume_ml: float
    ) -> MacroEstimate:
        """Convert volume to weight and macros in one step."""
        weight_grams = self.volume_to_weight(food, volume_ml)
        return MacroEstimate(
            weight_grams=round_int(weight_grams),
            macros=self.calculate_macros(food, weight_grams),
        )


def _score(food: FoodDensityEntry, terms: list[str], full_query: str) -> int:
    """Score name and category matches for a normalized query."""
    name = food.name.lower()
    category = food.category.lower()
    score = 0

    if name == full_query:
        score += 100
    elif name.startswith(full_query):
        score += 50
    elif full_query in name:
        score += 25

    for term in terms:
        if len(term) < _MIN_TERM_LENGTH:
            continue
        if term in name:
            score += 10
            if re.search(rf"\b{re.escape(term)}", name):
                score += 5
        if term in category:
            score += 5
    return score
