"""Tests for timezone date bucketing."""

from datetime import UTC, datetime
from zoneinfo import ZoneInfo

import pytest

from meal_logger.domain.errors import InvalidTimezone
from meal_logger.services.timezones import bucket_date, resolve_timezone, wall_clock

CHICAGO = ZoneInfo("America/Chicago")


def test_bucket_date_uses_requested_timezone() -> None:
    instant = datetime(2024, 1, 2, 3, 0, tzinfo=UTC)

    assert bucket_date(instant, ZoneInfo("UTC")) == "2024-01-02"
    assert bucket_date(instant, CHICAGO) == "2024-01-01"
    assert bucket_date(instant, ZoneInfo("Asia/Tokyo")) == "2024-01-02"


def test_bucket_date_splits_records_straddling_local_midnight() -> None:
    before = datetime(2024, 1, 2, 5, 59, tzinfo=UTC)
    after = datetime(2024, 1, 2, 6, 1, tzinfo=UTC)

    assert bucket_date(before, CHICAGO) == "2024-01-01"
    assert bucket_date(after, CHICAGO) == "2024-01-02"


def test_bucket_date_groups_distant_instants_on_same_local_day() -> None:
    early = datetime(2024, 1, 1, 6, 0, tzinfo=UTC)
    late = datetime(2024, 1, 2, 5, 59, tzinfo=UTC)

    assert bucket_date(early, CHICAGO) == bucket_date(late, CHICAGO) == "2024-01-01"


def test_bucket_date_is_independent_of_input_offset() -> None:
    utc_instant = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)
    same_instant = utc_instant.astimezone(ZoneInfo("Pacific/Auckland"))

    assert bucket_date(utc_instant, CHICAGO) == bucket_date(same_instant, CHICAGO)


def test_wall_clock_reexpresses_local_reading_as_utc() -> None:
    instant = datetime(2024, 7, 4, 15, 30, 45, tzinfo=UTC)

    local = wall_clock(instant, CHICAGO)

    assert local == datetime(2024, 7, 4, 10, 30, 45, tzinfo=UTC)


def test_resolve_timezone_defaults_to_chicago() -> None:
    assert resolve_timezone(None).key == "America/Chicago"


def test_resolve_timezone_rejects_unknown_zone() -> None:
    with pytest.raises(InvalidTimezone) as excinfo:
        resolve_timezone("Invalid/Zone")

    assert excinfo.value.status_code == 400
    assert excinfo.value.message == "Invalid timezone"
