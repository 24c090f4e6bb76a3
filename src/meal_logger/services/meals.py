"""Meal logging service."""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from meal_logger.domain.meals import MealCreated, MealLog, NewMealLog, NutrientTotals
from meal_logger.domain.stats import DateRange
from meal_logger.services.aggregation import round_calories, round_macro
from meal_logger.services.parsing import MealParsingService

LOW_CONFIDENCE = 0.5

_MACRO_FIELDS = ("protein_g", "carbs_g", "fat_g", "fiber_g", "sugar_g", "sodium_mg")


class MealLogRepository(Protocol):
    """Persistence interface for meal logs."""

    def insert(self, meal: NewMealLog) -> MealLog:
        """Persist a meal log and return it with its id."""

    def select_by_time_range(
        self, window: DateRange, *, descending: bool = True, limit: int = 200
    ) -> list[MealLog]:
        """Return meal logs whose meal time falls inside the window."""

    def select_by_id(self, meal_id: str) -> MealLog:
        """Return a meal log or raise NotFound."""

    def update_totals(self, meal_id: str, totals: NutrientTotals) -> MealLog:
        """Replace the stored totals of a meal log or raise NotFound."""

    def delete(self, meal_id: str) -> None:
        """Delete a meal log or raise NotFound."""


@dataclass
class MealLogService:
    """Service that parses, persists and edits meal logs."""

    parsing_service: MealParsingService
    repository: MealLogRepository

    async def log_meal(
        self, text: str, meal_time: datetime | None = None, meal_type: str | None = None
    ) -> MealCreated:
        """Parse a meal description and persist the resulting log."""
        description = text.strip()
        resolved_time = meal_time or datetime.now(tz=UTC)
        parsed = await self.parsing_service.parse(description)
        stored = self.repository.insert(
            NewMealLog(
                meal_time=resolved_time,
                raw_text=description,
                meal_type=meal_type or None,
                totals=parsed.totals,
                items=parsed.items,
                confidence=parsed.confidence,
                assumptions=parsed.assumptions,
            )
        )
        return MealCreated(
            id=stored.id,
            meal_time=stored.meal_time,
            totals=parsed.totals,
            confidence=parsed.confidence,
            assumptions=parsed.assumptions,
            speech=speech_for(parsed.totals, parsed.confidence),
        )

    def update_totals(self, meal_id: str, patch: dict[str, float]) -> MealLog:
        """Merge a partial nutrient patch into a meal's stored totals."""
        existing = self.repository.select_by_id(meal_id)
        merged = merge_totals(existing.totals, patch)
        return self.repository.update_totals(meal_id, merged)

    def delete_meal(self, meal_id: str) -> None:
        """Delete a meal log."""
        self.repository.delete(meal_id)


def merge_totals(current: NutrientTotals, patch: dict[str, float]) -> NutrientTotals:
    """Overlay rounded patch values; fields missing from the patch keep theirs.

    Only the known nutrients are carried; other stored keys are not kept.
    """
    values = {
        "calories": current.calories,
        "protein_g": current.protein_g,
        "carbs_g": current.carbs_g,
        "fat_g": current.fat_g,
        "fiber_g": current.fiber_g,
        "sugar_g": current.sugar_g,
        "sodium_mg": current.sodium_mg,
    }
    if patch.get("calories") is not None:
        values["calories"] = round_calories(patch["calories"])
    for name in _MACRO_FIELDS:
        if patch.get(name) is not None:
            values[name] = round_macro(patch[name])
    return NutrientTotals(**values)


def speech_for(totals: NutrientTotals, confidence: float) -> str:
    """Spoken confirmation for a logged meal."""
    calories, protein, fiber = (
        round_calories(value)
        for value in (totals.calories, totals.protein_g, totals.fiber_g)
    )
    if confidence < LOW_CONFIDENCE:
        return (
            f"Logged approximately {calories} calories, about {protein} grams "
            f"protein, {fiber} grams fiber."
        )
    return f"Logged {calories} calories, {protein} grams protein, {fiber} grams fiber."
