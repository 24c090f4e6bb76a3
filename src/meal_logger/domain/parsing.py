"""Models for untrusted nutrition parser output."""

from typing import Any

from pydantic import BaseModel, ConfigDict


class RawMealItem(BaseModel):
    """Item as returned by the model, before normalization."""

    model_config = ConfigDict(
        extra="ignore", coerce_numbers_to_str=True, allow_inf_nan=False
    )

    name: str | None = None
    qty: str | None = None
    calories: float | None = None
    protein_g: float | None = None
    carbs_g: float | None = None
    fat_g: float | None = None
    fiber_g: float | None = None
    sugar_g: float | None = None
    sodium_mg: float | None = None


class RawMealResponse(BaseModel):
    """Top-level parser output. Model-reported totals are ignored."""

    model_config = ConfigDict(
        extra="ignore", coerce_numbers_to_str=True, allow_inf_nan=False
    )

    meal_summary: str | None = None
    items: list[RawMealItem]
    confidence: float | None = None
    assumptions: Any = None
