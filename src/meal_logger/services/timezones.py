"""Timezone-aware date bucketing."""

from datetime import UTC, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from meal_logger.domain.errors import InvalidTimezone

DEFAULT_TIMEZONE = "America/Chicago"


def resolve_timezone(timezone_name: str | None) -> ZoneInfo:
    """Return the zone for an IANA identifier, defaulting when omitted.

    An unknown identifier raises ``InvalidTimezone``; there is no fallback.
    """
    if timezone_name is None:
        return ZoneInfo(DEFAULT_TIMEZONE)
    try:
        return ZoneInfo(timezone_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise InvalidTimezone(timezone_name) from exc


def bucket_date(instant: datetime, tz: ZoneInfo) -> str:
    """Return the ``YYYY-MM-DD`` date the instant falls on in ``tz``."""
    return wall_clock(instant, tz).date().isoformat()


def wall_clock(instant: datetime, tz: ZoneInfo) -> datetime:
    """Return the wall-clock reading in ``tz`` re-expressed as a UTC instant.

    Only useful for ordering by local wall-clock time.
    """
    local = as_aware(instant).astimezone(tz)
    return datetime(
        local.year,
        local.month,
        local.day,
        local.hour,
        local.minute,
        local.second,
        tzinfo=UTC,
    )


def as_aware(instant: datetime) -> datetime:
    """Attach UTC to a naive datetime; aware values pass through."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=UTC)
    return instant
