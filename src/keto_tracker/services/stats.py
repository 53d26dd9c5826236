"""Day and week aggregation over logged meals."""

from collections.abc import Iterable
from datetime import date, timedelta
from zoneinfo import ZoneInfo

from keto_tracker.domain.meals import MealRecord
from keto_tracker.domain.stats import DailyTargets, DayTotals

WEEK_DAYS = 7


def day_totals(
    meals: Iterable[MealRecord], day: date, timezone_name: str = "UTC"
) -> DayTotals:
    """Sum the meals logged on ``day`` in the given timezone."""
    tz = ZoneInfo(timezone_name)
    selected = [meal for meal in meals if meal.created_at.astimezone(tz).date() == day]
    return DayTotals(
        day=day,
        calories=sum(meal.calories for meal in selected),
        net_carbs=sum(meal.net_carbs for meal in selected),
        protein=sum(meal.protein for meal in selected),
        fat=sum(meal.fat for meal in selected),
        fiber=sum(meal.fiber for meal in selected),
        meal_count=len(selected),
    )


def week_totals(
    meals: Iterable[MealRecord], end_day: date, timezone_name: str = "UTC"
) -> list[DayTotals]:
    """Return totals for the seven days ending at ``end_day``, oldest first."""
    materialized = list(meals)
    return [
        day_totals(materialized, end_day - timedelta(days=offset), timezone_name)
        for offset in range(WEEK_DAYS - 1, -1, -1)
    ]


def remaining(targets: DailyTargets, totals: DayTotals) -> DailyTargets:
    """Return what is left of each target, never below zero."""
    return DailyTargets(
        calories=max(0.0, targets.calories - totals.calories),
        net_carbs=max(0.0, targets.net_carbs - totals.net_carbs),
        protein=max(0.0, targets.protein - totals.protein),
        fat=max(0.0, targets.fat - totals.fat),
        fiber=max(0.0, targets.fiber - totals.fiber),
    )
