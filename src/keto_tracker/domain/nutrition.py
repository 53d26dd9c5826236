"""Nutrition domain models."""

from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True)
class FoodItem:
    """One identified food with its nutrition estimate.

    ``net_carbs`` is derived from ``carbs`` and ``fiber`` on every access.
    """

    name: str
    calories: float
    carbs: float
    protein: float
    fat: float
    fiber: float
    serving_size: float
    unit: str

    @property
    def net_carbs(self) -> float:
        return max(0.0, self.carbs - self.fiber)

    def to_dict(self) -> dict[str, object]:
        """Serialize with the camelCase keys used on the wire."""
        return {
            "name": self.name,
            "calories": self.calories,
            "carbs": self.carbs,
            "protein": self.protein,
            "fat": self.fat,
            "fiber": self.fiber,
            "netCarbs": self.net_carbs,
            "servingSize": self.serving_size,
            "unit": self.unit,
        }


@dataclass(frozen=True)
class NutritionTotals:
    """Field-wise sum over a collection of food items."""

    calories: float = 0.0
    carbs: float = 0.0
    protein: float = 0.0
    fat: float = 0.0
    fiber: float = 0.0
    net_carbs: float = 0.0

    @classmethod
    def from_items(cls, items: Iterable[FoodItem]) -> "NutritionTotals":
        materialized = list(items)
        return cls(
            calories=sum(item.calories for item in materialized),
            carbs=sum(item.carbs for item in materialized),
            protein=sum(item.protein for item in materialized),
            fat=sum(item.fat for item in materialized),
            fiber=sum(item.fiber for item in materialized),
            net_carbs=sum(item.net_carbs for item in materialized),
        )

    def to_dict(self) -> dict[str, float]:
        return {
            "calories": self.calories,
            "carbs": self.carbs,
            "protein": self.protein,
            "fat": self.fat,
            "fiber": self.fiber,
            "netCarbs": self.net_carbs,
        }


@dataclass(frozen=True)
class AnalysisResult:
    """Food items and totals produced by one pipeline run."""

    foods: tuple[FoodItem, ...]
    totals: NutritionTotals

    @classmethod
    def from_items(cls, items: Iterable[FoodItem]) -> "AnalysisResult":
        """Build a result whose totals are recomputed from the items."""
        foods = tuple(items)
        return cls(foods=foods, totals=NutritionTotals.from_items(foods))

    def add_item(self, item: FoodItem) -> "AnalysisResult":
        return AnalysisResult.from_items((*self.foods, item))

    def remove_item(self, index: int) -> "AnalysisResult":
        foods = list(self.foods)
        del foods[index]
        return AnalysisResult.from_items(foods)

    def to_dict(self) -> dict[str, object]:
        return {
            "foods": [item.to_dict() for item in self.foods],
            "totalNutrition": self.totals.to_dict(),
        }
