"""Domain models for daily statistics."""

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class DailyTargets:
    """User-configured daily goals; carbs are net carbs."""

    calories: float = 2000
    net_carbs: float = 20
    protein: float = 100
    fat: float = 150
    fiber: float = 30


@dataclass(frozen=True)
class DayTotals:
    """Daily total macros."""

    day: date
    calories: float = 0.0
    net_carbs: float = 0.0
    protein: float = 0.0
    fat: float = 0.0
    fiber: float = 0.0
    meal_count: int = 0
