"""Nutrition goal settings with change notifications."""

import json
import logging
import math
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

import pydantic

from meal_logger.domain.goals import NutritionGoals
from meal_logger.domain.meals import NutrientTotals

GOALS_STORAGE_KEY = "NUTRITION_GOALS_V1"

_logger = logging.getLogger(__name__)

GoalsListener = Callable[[NutritionGoals], None]


class KeyValueStore(Protocol):
    """Interface for simple string key-value persistence."""

    def get(self, key: str) -> str | None:
        """Return the stored value, if any."""

    def set(self, key: str, value: str) -> None:
        """Store a value under a key."""


@dataclass
class InMemoryKeyValueStore(KeyValueStore):
    """Process-local key-value store."""

    values: dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> str | None:
        """Return the stored value, if any."""
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        """Store a value under a key."""
        self.values[key] = value


@dataclass
class GoalsService:
    """Reads and writes goals and notifies subscribers of changes."""

    store: KeyValueStore
    _listeners: list[GoalsListener] = field(default_factory=list)

    def get(self) -> NutritionGoals:
        """Return stored goals, or defaults when missing or unreadable."""
        raw = self.store.get(GOALS_STORAGE_KEY)
        if raw is None:
            return NutritionGoals()
        try:
            return NutritionGoals.model_validate(json.loads(raw))
        except (json.JSONDecodeError, pydantic.ValidationError):
            _logger.exception("Failed to load stored goals, using defaults")
            return NutritionGoals()

    def set(self, goals: NutritionGoals) -> NutritionGoals:
        """Persist goals and notify every subscriber."""
        self.store.set(GOALS_STORAGE_KEY, goals.model_dump_json())
        for listener in list(self._listeners):
            listener(goals)
        return goals

    def subscribe(self, listener: GoalsListener) -> Callable[[], None]:
        """Register a change listener and return its unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def progress(self, totals: NutrientTotals) -> dict[str, int]:
        """Percent of each goal reached by the given totals."""
        goals = self.get()
        result = {
            "calories": goal_progress(totals.calories, goals.calories_goal),
            "protein_g": goal_progress(totals.protein_g, goals.protein_goal_g),
            "carbs_g": goal_progress(totals.carbs_g, goals.carbs_goal_g),
            "fat_g": goal_progress(totals.fat_g, goals.fat_goal_g),
            "fiber_g": goal_progress(totals.fiber_g, goals.fiber_goal_g),
        }
        if goals.sugar_goal_g is not None:
            result["sugar_g"] = goal_progress(totals.sugar_g or 0.0, goals.sugar_goal_g)
        if goals.sodium_goal_mg is not None:
            result["sodium_mg"] = goal_progress(
                totals.sodium_mg or 0.0, goals.sodium_goal_mg
            )
        return result


def goal_progress(current: float, goal: float) -> int:
    """Whole-number percent of a goal, capped at 100."""
    if goal == 0:
        return 0
    return min(100, math.floor(current / goal * 100 + 0.5))
