"""Tests for stats service."""

from datetime import UTC, datetime

import pytest

from meal_logger.domain.errors import InvalidTimezone
from meal_logger.services.stats import StatsService
from tests.conftest import InMemoryMealLogRepository, make_log

NOW = datetime(2024, 1, 10, 18, 0, tzinfo=UTC)


def _repository() -> InMemoryMealLogRepository:
    repository = InMemoryMealLogRepository()
    repository.add(make_log(datetime(2024, 1, 10, 12, 0, tzinfo=UTC), 700, raw_text="Pasta"))
    repository.add(make_log(datetime(2024, 1, 9, 12, 0, tzinfo=UTC), 500, raw_text="Salad"))
    repository.add(make_log(datetime(2024, 1, 8, 12, 0, tzinfo=UTC), 900, raw_text="pasta bake"))
    return repository


def test_get_logs_builds_report() -> None:
    service = StatsService(_repository())

    report = service.get_logs(range_token="7d", timezone_name="UTC", now=NOW)

    assert [log.raw_text for log in report.logs] == ["Pasta", "Salad", "pasta bake"]
    assert report.today_totals.calories == 700
    assert [day.date for day in report.daily_totals] == [
        "2024-01-08",
        "2024-01-09",
        "2024-01-10",
    ]
    assert report.last_7_avg.calories == 700


def test_get_logs_query_filters_listed_logs_only() -> None:
    service = StatsService(_repository())

    report = service.get_logs(timezone_name="UTC", query="PASTA", now=NOW)

    assert [log.raw_text for log in report.logs] == ["Pasta", "pasta bake"]
    assert len(report.daily_totals) == 3


def test_get_logs_explicit_dates_override_range() -> None:
    repository = _repository()
    service = StatsService(repository)

    service.get_logs(
        range_token="90d",
        from_date="2024-01-01",
        to_date="2024-01-03",
        timezone_name="UTC",
        now=NOW,
    )

    window = repository.windows[-1]
    assert window.start.replace(tzinfo=None) == datetime(2024, 1, 1)
    assert window.end.replace(tzinfo=None) == datetime(2024, 1, 3, 23, 59, 59, 999000)


def test_get_logs_rejects_unknown_timezone() -> None:
    service = StatsService(_repository())

    with pytest.raises(InvalidTimezone):
        service.get_logs(timezone_name="Invalid/Zone", now=NOW)


def test_get_logs_defaults_timezone() -> None:
    repository = InMemoryMealLogRepository()
    repository.add(make_log(datetime(2024, 1, 10, 3, 0, tzinfo=UTC), 400))
    service = StatsService(repository)

    report = service.get_logs(now=NOW)

    assert report.daily_totals[0].date == "2024-01-09"


def test_get_today_uses_local_day_window() -> None:
    repository = _repository()
    service = StatsService(repository)

    totals = service.get_today("Asia/Tokyo", now=NOW)

    window = repository.windows[-1]
    assert window.start == datetime(2024, 1, 10, 15, 0, tzinfo=UTC)
    assert totals.calories == 0
