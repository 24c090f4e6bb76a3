"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import Client, create_client

from meal_logger.adapters.openai_completion_client import OpenAICompletionClient
from meal_logger.adapters.supabase_meal_log_repository import (
    SupabaseMealLogRepository,
)
from meal_logger.config import Settings
from meal_logger.services.goals import GoalsService, InMemoryKeyValueStore
from meal_logger.services.meals import MealLogService
from meal_logger.services.parsing import MealParsingService
from meal_logger.services.stats import StatsService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    parsing_service: MealParsingService
    meal_log_service: MealLogService
    stats_service: StatsService
    goals_service: GoalsService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client: Client | None = None
    if resolved_settings.supabase_url and resolved_settings.supabase_service_key:
        supabase_client = create_client(
            resolved_settings.supabase_url, resolved_settings.supabase_service_key
        )
    meal_log_repository = SupabaseMealLogRepository(
        supabase_client, table_name=resolved_settings.meal_logs_table
    )
    completion_client = OpenAICompletionClient.create(
        api_key=resolved_settings.openai_api_key,
        model=resolved_settings.openai_model,
        temperature=resolved_settings.openai_temperature,
    )
    parsing_service = MealParsingService(client=completion_client)
    meal_log_service = MealLogService(
        parsing_service=parsing_service,
        repository=meal_log_repository,
    )
    stats_service = StatsService(
        meal_log_repository,
        limit=resolved_settings.logs_limit,
        default_timezone=resolved_settings.default_timezone,
    )
    goals_service = GoalsService(InMemoryKeyValueStore())

    async def close_resources() -> None:
        await completion_client.close()

    return AppContainer(
        settings=resolved_settings,
        parsing_service=parsing_service,
        meal_log_service=meal_log_service,
        stats_service=stats_service,
        goals_service=goals_service,
        close_resources=close_resources,
    )
