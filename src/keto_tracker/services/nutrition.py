"""Coercion of untrusted model output into nutrition records."""

import logging
import math

from pydantic import BaseModel, ConfigDict, Field, field_validator

from keto_tracker.domain.errors import MalformedResponseError, NoItemsDetectedError
from keto_tracker.domain.nutrition import AnalysisResult, FoodItem

_logger = logging.getLogger(__name__)

DEFAULT_FOOD_NAME = "Alimento"
DEFAULT_SERVING_SIZE = 100.0
DEFAULT_UNIT = "g"


def _to_amount(value: object, default: float) -> float:
    """Coerce a loosely typed number, clamping negatives to zero."""
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, str):
        cleaned = value.strip().replace(",", ".")
        try:
            number = float(cleaned)
        except ValueError:
            return default
    elif isinstance(value, int | float):
        try:
            number = float(value)
        except OverflowError:
            return default
    else:
        return default
    if not math.isfinite(number):
        return default
    return max(0.0, number)


class RawFoodItem(BaseModel):
    """One entry of the model's ``foods`` list after coercion.

    Any ``netCarbs`` sent by the model is ignored; it is derived later.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str = DEFAULT_FOOD_NAME
    calories: float = 0.0
    carbs: float = 0.0
    protein: float = 0.0
    fat: float = 0.0
    fiber: float = 0.0
    serving_size: float = Field(default=DEFAULT_SERVING_SIZE, alias="servingSize")
    unit: str = DEFAULT_UNIT

    @field_validator("name", mode="before")
    @classmethod
    def coerce_name(cls, value: object) -> str:
        if isinstance(value, str) and value.strip():
            return value.strip()
        return DEFAULT_FOOD_NAME

    @field_validator("calories", "carbs", "protein", "fat", "fiber", mode="before")
    @classmethod
    def coerce_amount(cls, value: object) -> float:
        return _to_amount(value, 0.0)

    @field_validator("serving_size", mode="before")
    @classmethod
    def coerce_serving_size(cls, value: object) -> float:
        size = _to_amount(value, DEFAULT_SERVING_SIZE)
        return size if size > 0 else DEFAULT_SERVING_SIZE

    @field_validator("unit", mode="before")
    @classmethod
    def coerce_unit(cls, value: object) -> str:
        if isinstance(value, str) and value.strip():
            return value.strip()
        return DEFAULT_UNIT

    def to_food_item(self) -> FoodItem:
        return FoodItem(
            name=self.name,
            calories=self.calories,
            carbs=self.carbs,
            protein=self.protein,
            fat=self.fat,
            fiber=self.fiber,
            serving_size=self.serving_size,
            unit=self.unit,
        )


def normalize_item(raw: object) -> FoodItem:
    """Coerce a single untyped entry into a well-formed food item."""
    if isinstance(raw, FoodItem):
        raw = raw.to_dict()
    if not isinstance(raw, dict):
        raise MalformedResponseError(f"Food entry is not an object: {raw!r}")
    return RawFoodItem.model_validate(raw).to_food_item()


def normalize_foods(payload: dict[str, object]) -> AnalysisResult:
    """Build an analysis result from a parsed foods payload.

    Totals supplied by the model are discarded and recomputed from the
    normalized items.
    """
    foods = payload.get("foods")
    if not isinstance(foods, list):
        raise MalformedResponseError("Payload 'foods' is not a list")
    items = [normalize_item(entry) for entry in foods]
    if not items:
        raise NoItemsDetectedError("Payload listed no foods")
    if "totalNutrition" in payload:
        _logger.debug("Discarding model-supplied totals")
    return AnalysisResult.from_items(items)
