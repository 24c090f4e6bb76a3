"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from uuid import uuid4

import pytest

from meal_logger.config import Settings
from meal_logger.containers import AppContainer
from meal_logger.domain.errors import NotFound
from meal_logger.domain.meals import MealLog, NewMealLog, NutrientTotals
from meal_logger.domain.stats import DateRange
from meal_logger.services.goals import GoalsService, InMemoryKeyValueStore
from meal_logger.services.meals import MealLogRepository, MealLogService
from meal_logger.services.parsing import CompletionClient, MealParsingService
from meal_logger.services.stats import StatsService

EGGS_AND_TOAST = """{
  "meal_summary": "Two eggs and toast",
  "items": [
    {"name": "Egg", "qty": "2 large", "calories": 143, "protein_g": 12.6,
     "carbs_g": 0.7, "fat_g": 9.5, "fiber_g": 0, "sodium_mg": 142},
    {"name": "Toast", "qty": "1 slice", "calories": 79, "protein_g": 2.7,
     "carbs_g": 14.7, "fat_g": 1.0, "fiber_g": 0.8}
  ],
  "totals": {"calories": 9999, "protein_g": 0, "carbs_g": 0, "fat_g": 0,
             "fiber_g": 0},
  "confidence": 0.8,
  "assumptions": ["Large eggs", "White bread"]
}"""


def make_log(  # noqa: PLR0913
    meal_time: datetime,
    calories: float = 0,
    protein_g: float = 0.0,
    carbs_g: float = 0.0,
    fat_g: float = 0.0,
    fiber_g: float = 0.0,
    sugar_g: float | None = None,
    sodium_mg: float | None = None,
    raw_text: str = "meal",
) -> MealLog:
    """Build a stored meal log with the given totals."""
    return MealLog(
        id=str(uuid4()),
        created_at=meal_time,
        meal_time=meal_time,
        raw_text=raw_text,
        meal_type=None,
        totals=NutrientTotals(
            calories=calories,
            protein_g=protein_g,
            carbs_g=carbs_g,
            fat_g=fat_g,
            fiber_g=fiber_g,
            sugar_g=sugar_g,
            sodium_mg=sodium_mg,
        ),
    )


@dataclass
class InMemoryMealLogRepository(MealLogRepository):
    """In-memory meal log repository for tests."""

    meals: dict[str, MealLog] = field(default_factory=dict)
    windows: list[DateRange] = field(default_factory=list)

    def add(self, log: MealLog) -> MealLog:
        self.meals[log.id] = log
        return log

    def insert(self, meal: NewMealLog) -> MealLog:
        log = MealLog(
            id=str(uuid4()),
            created_at=datetime.now(tz=UTC),
            meal_time=meal.meal_time,
            raw_text=meal.raw_text,
            meal_type=meal.meal_type,
            totals=meal.totals,
            items=list(meal.items),
            confidence=meal.confidence,
            assumptions=list(meal.assumptions),
        )
        return self.add(log)

    def select_by_time_range(
        self, window: DateRange, *, descending: bool = True, limit: int = 200
    ) -> list[MealLog]:
        self.windows.append(window)
        matching = [
            log
            for log in self.meals.values()
            if window.start <= log.meal_time <= window.end
        ]
        matching.sort(key=lambda log: log.meal_time, reverse=descending)
        return matching[:limit]

    def select_by_id(self, meal_id: str) -> MealLog:
        if meal_id not in self.meals:
            raise NotFound()
        return self.meals[meal_id]

    def update_totals(self, meal_id: str, totals: NutrientTotals) -> MealLog:
        log = replace(self.select_by_id(meal_id), totals=totals)
        self.meals[meal_id] = log
        return log

    def delete(self, meal_id: str) -> None:
        if self.meals.pop(meal_id, None) is None:
            raise NotFound()


@dataclass
class FakeCompletionClient(CompletionClient):
    """Completion client replaying queued responses or errors."""

    responses: list[str | Exception] = field(default_factory=lambda: [EGGS_AND_TOAST])
    prompts: list[tuple[str, str]] = field(default_factory=list)

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        self.prompts.append((system_prompt, user_prompt))
        response = self.responses.pop(0) if self.responses else EGGS_AND_TOAST
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url=None,
        supabase_service_key=None,
        openai_api_key="openai-key",
    )


@pytest.fixture
def repository() -> InMemoryMealLogRepository:
    return InMemoryMealLogRepository()


@pytest.fixture
def completion_client() -> FakeCompletionClient:
    return FakeCompletionClient()


@pytest.fixture
def container(
    settings: Settings,
    repository: InMemoryMealLogRepository,
    completion_client: FakeCompletionClient,
) -> AppContainer:
    parsing_service = MealParsingService(client=completion_client)
    meal_log_service = MealLogService(
        parsing_service=parsing_service,
        repository=repository,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        parsing_service=parsing_service,
        meal_log_service=meal_log_service,
        stats_service=StatsService(repository),
        goals_service=GoalsService(InMemoryKeyValueStore()),
        close_resources=close_resources,
    )

