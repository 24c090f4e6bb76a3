"""Supabase repository for meal logs."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from meal_logger.domain.errors import ConfigurationError, NotFound, StoreError
from meal_logger.domain.meals import (
    MealItem,
    MealLog,
    NewMealLog,
    NutrientTotals,
    drop_unknown_nutrients,
)
from meal_logger.domain.stats import DateRange
from meal_logger.services.meals import MealLogRepository


@dataclass
class SupabaseMealLogRepository(MealLogRepository):
    """Supabase implementation for meal logs."""

    client: Client | None
    table_name: str = "meal_logs"

    def insert(self, meal: NewMealLog) -> MealLog:
        """Insert a meal log row and return the stored record."""
        table = self._table()
        payload = {
            "meal_time": meal.meal_time.isoformat(),
            "raw_text": meal.raw_text,
            "meal_type": meal.meal_type,
            "totals": drop_unknown_nutrients(meal.totals),
            "items": [drop_unknown_nutrients(item) for item in meal.items],
            "confidence": meal.confidence,
            "assumptions": meal.assumptions,
        }
        try:
            response = table.insert(payload).execute()
        except Exception as exc:
            raise StoreError("Failed to save meal log", details=str(exc)) from exc
        if not response.data:
            raise StoreError("Failed to save meal log", details="No row returned")
        return _parse_row(response.data[0])

    def select_by_time_range(
        self, window: DateRange, *, descending: bool = True, limit: int = 200
    ) -> list[MealLog]:
        """Return meal logs with a meal time inside the window."""
        table = self._table()
        try:
            response = (
                table.select("*")
                .gte("meal_time", window.start.isoformat())
                .lte("meal_time", window.end.isoformat())
                .order("meal_time", desc=descending)
                .limit(limit)
                .execute()
            )
        except Exception as exc:
            raise StoreError("Failed to fetch logs", details=str(exc)) from exc
        return [_parse_row(row) for row in response.data or []]

    def select_by_id(self, meal_id: str) -> MealLog:
        """Return a meal log by id."""
        table = self._table()
        try:
            response = table.select("*").eq("id", meal_id).limit(1).execute()
        except Exception as exc:
            raise StoreError("Failed to fetch logs", details=str(exc)) from exc
        if not response.data:
            raise NotFound()
        return _parse_row(response.data[0])

    def update_totals(self, meal_id: str, totals: NutrientTotals) -> MealLog:
        """Replace the totals of a meal log."""
        table = self._table()
        try:
            response = (
                table.update({"totals": drop_unknown_nutrients(totals)})
                .eq("id", meal_id)
                .execute()
            )
        except Exception as exc:
            raise StoreError("Failed to update meal log", details=str(exc)) from exc
        if not response.data:
            raise NotFound()
        return _parse_row(response.data[0])

    def delete(self, meal_id: str) -> None:
        """Delete a meal log row."""
        table = self._table()
        try:
            response = table.delete().eq("id", meal_id).execute()
        except Exception as exc:
            raise StoreError("Failed to delete meal log", details=str(exc)) from exc
        if not response.data:
            raise NotFound()

    def _table(self):  # type: ignore[no-untyped-def]
        if self.client is None:
            raise ConfigurationError("Supabase credentials not configured")
        return self.client.table(self.table_name)


def _parse_row(row: dict[str, object]) -> MealLog:
    created_raw = row.get("created_at")
    items_raw = row.get("items")
    assumptions_raw = row.get("assumptions")
    return MealLog(
        id=str(row["id"]),
        created_at=(
            datetime.fromisoformat(created_raw)
            if isinstance(created_raw, str) and created_raw
            else None
        ),
        meal_time=datetime.fromisoformat(str(row["meal_time"])),
        raw_text=str(row.get("raw_text") or ""),
        meal_type=row.get("meal_type") or None,
        totals=_parse_totals(row.get("totals")),
        items=(
            [_parse_item(item) for item in items_raw if isinstance(item, dict)]
            if isinstance(items_raw, list)
            else []
        ),
        confidence=_to_float(row.get("confidence"), default=0.5),
        assumptions=(
            [str(entry) for entry in assumptions_raw]
            if isinstance(assumptions_raw, list)
            else []
        ),
    )


def _parse_totals(raw: object) -> NutrientTotals:
    values = raw if isinstance(raw, dict) else {}
    return NutrientTotals(
        calories=_to_float(values.get("calories")),
        protein_g=_to_float(values.get("protein_g")),
        carbs_g=_to_float(values.get("carbs_g")),
        fat_g=_to_float(values.get("fat_g")),
        fiber_g=_to_float(values.get("fiber_g")),
        sugar_g=_optional_float(values.get("sugar_g")),
        sodium_mg=_optional_float(values.get("sodium_mg")),
    )


def _parse_item(raw: dict[str, object]) -> MealItem:
    return MealItem(
        name=str(raw.get("name") or "Unknown"),
        qty=str(raw.get("qty") or "1 serving"),
        calories=_to_float(raw.get("calories")),
        protein_g=_to_float(raw.get("protein_g")),
        carbs_g=_to_float(raw.get("carbs_g")),
        fat_g=_to_float(raw.get("fat_g")),
        fiber_g=_to_float(raw.get("fiber_g")),
        sugar_g=_optional_float(raw.get("sugar_g")),
        sodium_mg=_optional_float(raw.get("sodium_mg")),
    )


def _to_float(value: object, default: float = 0.0) -> float:
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return default
    return default


def _optional_float(value: object) -> float | None:
    if value is None:
        return None
    return _to_float(value)
