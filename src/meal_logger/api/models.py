"""Request payload models for the HTTP API."""

from pydantic import BaseModel, ConfigDict


class CreateMealRequest(BaseModel):
    """Body of a create-meal request."""

    text: str | None = None
    timestamp: str | None = None
    meal_type: str | None = None


class TotalsPatch(BaseModel):
    """Partial nutrient totals; omitted fields keep their stored value."""

    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)

    calories: float | None = None
    protein_g: float | None = None
    carbs_g: float | None = None
    fat_g: float | None = None
    fiber_g: float | None = None
    sugar_g: float | None = None
    sodium_mg: float | None = None


class UpdateMealRequest(BaseModel):
    """Body of an update-meal request."""

    id: str | None = None
    totals: TotalsPatch | None = None


class DeleteMealRequest(BaseModel):
    """Body of a delete-meal request."""

    id: str | None = None


class HealthProbeRequest(BaseModel):
    """Body of a timestamp parsing probe."""

    timestamp: str | None = None
