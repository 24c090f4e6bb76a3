"""Statistics service for meal logs."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from meal_logger.domain.meals import NutrientTotals
from meal_logger.domain.stats import DateRange, LogsReport
from meal_logger.services.aggregation import daily_totals, last_7_avg, today_totals
from meal_logger.services.meals import MealLogRepository
from meal_logger.services.ranges import resolve_range
from meal_logger.services.timezones import DEFAULT_TIMEZONE, resolve_timezone


@dataclass
class StatsService:
    """Service for fetching meal logs with timezone-aware aggregates."""

    repository: MealLogRepository
    limit: int = 200
    default_timezone: str = DEFAULT_TIMEZONE

    def get_logs(  # noqa: PLR0913
        self,
        *,
        range_token: str | None = None,
        from_date: str | None = None,
        to_date: str | None = None,
        timezone_name: str | None = None,
        query: str | None = None,
        now: datetime | None = None,
    ) -> LogsReport:
        """Return logs of the resolved window with today, daily and weekly stats.

        ``query`` narrows the returned logs by description; aggregates always
        cover the whole window.
        """
        tz = resolve_timezone(timezone_name or self.default_timezone)
        current = now or datetime.now(tz=UTC)
        window = resolve_range(
            range_token, from_date, to_date, now=current.astimezone()
        )
        logs = self.repository.select_by_time_range(
            window, descending=True, limit=self.limit
        )
        listed = logs
        if query:
            needle = query.lower()
            listed = [log for log in logs if needle in log.raw_text.lower()]
        return LogsReport(
            logs=listed,
            today_totals=today_totals(logs, tz, now=current),
            daily_totals=daily_totals(logs, tz),
            last_7_avg=last_7_avg(logs, tz, now=current),
        )

    def get_today(
        self, timezone_name: str | None = None, now: datetime | None = None
    ) -> NutrientTotals:
        """Return today's totals in the given timezone."""
        tz = resolve_timezone(timezone_name or self.default_timezone)
        local_now = (now or datetime.now(tz=UTC)).astimezone(tz)
        start = local_now.replace(hour=0, minute=0, second=0, microsecond=0)
        end = start + timedelta(days=1) - timedelta(milliseconds=1)
        logs = self.repository.select_by_time_range(
            DateRange(start=start.astimezone(UTC), end=end.astimezone(UTC)),
            descending=False,
            limit=self.limit,
        )
        return today_totals(logs, tz, now=local_now)
