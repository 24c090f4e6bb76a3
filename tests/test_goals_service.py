"""Tests for goals settings service."""

from meal_logger.domain.goals import NutritionGoals
from meal_logger.domain.meals import NutrientTotals
from meal_logger.services.goals import (
    GOALS_STORAGE_KEY,
    GoalsService,
    InMemoryKeyValueStore,
    goal_progress,
)


def test_get_returns_defaults_when_unset() -> None:
    service = GoalsService(InMemoryKeyValueStore())

    goals = service.get()

    assert goals.calories_goal == 2500
    assert goals.protein_goal_g == 180
    assert goals.sugar_goal_g is None


def test_get_returns_defaults_when_stored_value_is_corrupt() -> None:
    store = InMemoryKeyValueStore(values={GOALS_STORAGE_KEY: "{broken"})
    service = GoalsService(store)

    assert service.get() == NutritionGoals()


def test_set_persists_and_notifies_subscribers() -> None:
    service = GoalsService(InMemoryKeyValueStore())
    seen: list[NutritionGoals] = []
    unsubscribe = service.subscribe(seen.append)

    service.set(NutritionGoals(calories_goal=2000))
    unsubscribe()
    service.set(NutritionGoals(calories_goal=1800))

    assert [goals.calories_goal for goals in seen] == [2000]
    assert service.get().calories_goal == 1800


def test_goal_progress_caps_and_handles_zero_goal() -> None:
    assert goal_progress(50, 200) == 25
    assert goal_progress(300, 200) == 100
    assert goal_progress(10, 0) == 0


def test_progress_includes_optional_goals_only_when_set() -> None:
    service = GoalsService(InMemoryKeyValueStore())
    totals = NutrientTotals(
        calories=1250, protein_g=90, carbs_g=125, fat_g=40, fiber_g=15, sugar_g=10
    )

    progress = service.progress(totals)
    assert progress == {
        "calories": 50,
        "protein_g": 50,
        "carbs_g": 50,
        "fat_g": 50,
        "fiber_g": 50,
    }

    service.set(NutritionGoals(sugar_goal_g=40, sodium_goal_mg=2300))
    progress = service.progress(totals)
    assert progress["sugar_g"] == 25
    assert progress["sodium_mg"] == 0


def test_goal_progress_rounds_half_up() -> None:
    assert goal_progress(1, 8) == 13
    assert goal_progress(1, 3) == 33
