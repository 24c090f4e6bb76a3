"""Domain models for aggregated statistics."""

from dataclasses import dataclass
from datetime import datetime

from meal_logger.domain.meals import MealLog, NutrientTotals


@dataclass(frozen=True)
class DailyTotals:
    """Totals for one timezone-local calendar date (``YYYY-MM-DD``)."""

    date: str
    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    fiber_g: float
    sugar_g: float | None = None
    sodium_mg: float | None = None


@dataclass(frozen=True)
class Last7Avg:
    """Average of daily totals over the days logged in the trailing week."""

    calories: float
    fiber_g: float
    protein_g: float


@dataclass(frozen=True)
class DateRange:
    """Inclusive reporting window."""

    start: datetime
    end: datetime


@dataclass(frozen=True)
class LogsReport:
    """Meal logs of a window with their aggregates."""

    logs: list[MealLog]
    today_totals: NutrientTotals
    daily_totals: list[DailyTotals]
    last_7_avg: Last7Avg
