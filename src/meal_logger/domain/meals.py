"""Domain models for meal logging."""

from dataclasses import asdict, dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class NutrientTotals:
    """Summed nutrients for a meal or a day.

    ``sugar_g`` and ``sodium_mg`` are None when no contributing item reported
    them; None means unknown, not zero.
    """

    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    fiber_g: float
    sugar_g: float | None = None
    sodium_mg: float | None = None


@dataclass(frozen=True)
class MealItem:
    """Single food item of a meal."""

    name: str
    qty: str
    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    fiber_g: float
    sugar_g: float | None = None
    sodium_mg: float | None = None


@dataclass(frozen=True)
class MealLog:
    """Persisted meal log record."""

    id: str
    created_at: datetime | None
    meal_time: datetime
    raw_text: str
    meal_type: str | None
    totals: NutrientTotals
    items: list[MealItem] = field(default_factory=list)
    confidence: float = 0.5
    assumptions: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class NewMealLog:
    """Meal log payload before the store assigns an id."""

    meal_time: datetime
    raw_text: str
    meal_type: str | None
    totals: NutrientTotals
    items: list[MealItem]
    confidence: float
    assumptions: list[str]


@dataclass(frozen=True)
class ParsedMeal:
    """Normalized nutrition data extracted from a meal description."""

    meal_summary: str
    items: list[MealItem]
    totals: NutrientTotals
    confidence: float
    assumptions: list[str]


@dataclass(frozen=True)
class MealCreated:
    """Result of logging a new meal."""

    id: str
    meal_time: datetime
    totals: NutrientTotals
    confidence: float
    assumptions: list[str]
    speech: str


OPTIONAL_NUTRIENTS = ("sugar_g", "sodium_mg")


def drop_unknown_nutrients(record: object) -> dict[str, object]:
    """Serialize a nutrient dataclass, leaving out optional fields that are None."""
    payload = asdict(record)  # type: ignore[call-overload]
    for name in OPTIONAL_NUTRIENTS:
        if payload.get(name) is None:
            payload.pop(name, None)
    return payload
