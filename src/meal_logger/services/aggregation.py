"""Rounding and aggregation of nutrient totals."""

import math
from collections.abc import Iterable
from datetime import UTC, datetime, timedelta
from zoneinfo import ZoneInfo

from meal_logger.domain.meals import MealItem, MealLog, NutrientTotals
from meal_logger.domain.stats import DailyTotals, Last7Avg
from meal_logger.services.timezones import as_aware, bucket_date

TRAILING_DAYS = 7

ZERO_TOTALS = NutrientTotals(
    calories=0, protein_g=0.0, carbs_g=0.0, fat_g=0.0, fiber_g=0.0
)


def round_calories(value: float) -> int:
    """Round calories to a whole number, clamping negatives to zero."""
    return math.floor(max(0.0, value) + 0.5)


def round_macro(value: float) -> float:
    """Round a gram or milligram amount to one decimal, clamping negatives."""
    return math.floor(max(0.0, value) * 10 + 0.5) / 10


def sum_totals(totals: Iterable[NutrientTotals]) -> NutrientTotals:
    """Field-wise sum without rounding.

    An optional field stays None unless at least one input carries it.
    """
    calories = protein = carbs = fat = fiber = 0.0
    sugar: float | None = None
    sodium: float | None = None
    for entry in totals:
        calories += entry.calories
        protein += entry.protein_g
        carbs += entry.carbs_g
        fat += entry.fat_g
        fiber += entry.fiber_g
        if entry.sugar_g is not None:
            sugar = (sugar or 0.0) + entry.sugar_g
        if entry.sodium_mg is not None:
            sodium = (sodium or 0.0) + entry.sodium_mg
    return NutrientTotals(
        calories=calories,
        protein_g=protein,
        carbs_g=carbs,
        fat_g=fat,
        fiber_g=fiber,
        sugar_g=sugar,
        sodium_mg=sodium,
    )


def sum_items(items: Iterable[MealItem]) -> NutrientTotals:
    """Recompute meal totals from its items and round them."""
    summed = sum_totals(
        NutrientTotals(
            calories=item.calories,
            protein_g=item.protein_g,
            carbs_g=item.carbs_g,
            fat_g=item.fat_g,
            fiber_g=item.fiber_g,
            sugar_g=item.sugar_g,
            sodium_mg=item.sodium_mg,
        )
        for item in items
    )
    return round_totals(summed)


def round_totals(totals: NutrientTotals) -> NutrientTotals:
    """Apply the rounding discipline, keeping optional fields as they are."""
    return NutrientTotals(
        calories=round_calories(totals.calories),
        protein_g=round_macro(totals.protein_g),
        carbs_g=round_macro(totals.carbs_g),
        fat_g=round_macro(totals.fat_g),
        fiber_g=round_macro(totals.fiber_g),
        sugar_g=_round_optional(totals.sugar_g),
        sodium_mg=_round_optional(totals.sodium_mg),
    )


def daily_totals(logs: Iterable[MealLog], tz: ZoneInfo) -> list[DailyTotals]:
    """Group logs by local meal date and return rounded totals, oldest first."""
    by_date: dict[str, list[NutrientTotals]] = {}
    for log in logs:
        by_date.setdefault(bucket_date(log.meal_time, tz), []).append(log.totals)

    daily = []
    for day, totals in by_date.items():
        rolled = _rollup(sum_totals(totals))
        daily.append(
            DailyTotals(
                date=day,
                calories=rolled.calories,
                protein_g=rolled.protein_g,
                carbs_g=rolled.carbs_g,
                fat_g=rolled.fat_g,
                fiber_g=rolled.fiber_g,
                sugar_g=rolled.sugar_g,
                sodium_mg=rolled.sodium_mg,
            )
        )
    return sorted(daily, key=lambda entry: entry.date)


def today_totals(
    logs: Iterable[MealLog], tz: ZoneInfo, now: datetime | None = None
) -> NutrientTotals:
    """Return rounded totals of the logs whose local date is today in ``tz``."""
    today = bucket_date(now or datetime.now(tz=UTC), tz)
    todays = [log.totals for log in logs if bucket_date(log.meal_time, tz) == today]
    if not todays:
        return ZERO_TOTALS
    return _rollup(sum_totals(todays))


def last_7_avg(
    logs: Iterable[MealLog], tz: ZoneInfo, now: datetime | None = None
) -> Last7Avg:
    """Average calories, fiber and protein over logged days of the past week.

    The window is measured in absolute server time; the denominator is the
    number of distinct local days that had at least one meal.
    """
    current = as_aware(now or datetime.now(tz=UTC))
    cutoff = current - timedelta(days=TRAILING_DAYS)
    recent = [log for log in logs if as_aware(log.meal_time) >= cutoff]
    daily = daily_totals(recent, tz)
    if not daily:
        return Last7Avg(calories=0, fiber_g=0.0, protein_g=0.0)

    days = len(daily)
    return Last7Avg(
        calories=round_calories(sum(day.calories for day in daily) / days),
        fiber_g=round_macro(sum(day.fiber_g for day in daily) / days),
        protein_g=round_macro(sum(day.protein_g for day in daily) / days),
    )


def _rollup(totals: NutrientTotals) -> NutrientTotals:
    # Display boundary: optional fields summing to zero are reported as absent.
    rounded = round_totals(totals)
    return NutrientTotals(
        calories=rounded.calories,
        protein_g=rounded.protein_g,
        carbs_g=rounded.carbs_g,
        fat_g=rounded.fat_g,
        fiber_g=rounded.fiber_g,
        sugar_g=_positive_or_none(totals.sugar_g),
        sodium_mg=_positive_or_none(totals.sodium_mg),
    )


def _round_optional(value: float | None) -> float | None:
    if value is None:
        return None
    return round_macro(value)


def _positive_or_none(value: float | None) -> float | None:
    if value is None or value <= 0:
        return None
    return round_macro(value)
