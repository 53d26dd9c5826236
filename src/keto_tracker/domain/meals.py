"""Domain models for logged meals."""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from uuid import uuid4

from keto_tracker.domain.nutrition import AnalysisResult, FoodItem


class MealSource(StrEnum):
    """How a meal entered the log."""

    PHOTO = "photo"
    VOICE = "voice"
    TEXT = "text"
    MANUAL = "manual"


@dataclass(frozen=True)
class MealRecord:
    """Persisted meal entry owned by the storage collaborator."""

    id: str
    name: str
    calories: float
    carbs: float
    protein: float
    fat: float
    fiber: float
    source: MealSource
    created_at: datetime

    @property
    def net_carbs(self) -> float:
        return max(0.0, self.carbs - self.fiber)

    @classmethod
    def from_food_item(
        cls, item: FoodItem, source: MealSource, now: datetime | None = None
    ) -> "MealRecord":
        return cls(
            id=uuid4().hex,
            name=item.name,
            calories=item.calories,
            carbs=item.carbs,
            protein=item.protein,
            fat=item.fat,
            fiber=item.fiber,
            source=source,
            created_at=now or datetime.now(tz=UTC),
        )


def to_meal_records(
    result: AnalysisResult, source: MealSource, now: datetime | None = None
) -> list[MealRecord]:
    """Convert accepted analysis items into meal records."""
    created_at = now or datetime.now(tz=UTC)
    return [
        MealRecord.from_food_item(item, source, now=created_at)
        for item in result.foods
    ]
