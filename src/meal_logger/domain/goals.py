"""Nutrition goal models."""

from pydantic import BaseModel, ConfigDict, Field


class NutritionGoals(BaseModel):
    """User-configured daily targets."""

    model_config = ConfigDict(allow_inf_nan=False)

    calories_goal: float = Field(default=2500, ge=0)
    protein_goal_g: float = Field(default=180, ge=0)
    carbs_goal_g: float = Field(default=250, ge=0)
    fat_goal_g: float = Field(default=80, ge=0)
    fiber_goal_g: float = Field(default=30, ge=0)
    sugar_goal_g: float | None = Field(default=None, ge=0)
    sodium_goal_mg: float | None = Field(default=None, ge=0)
