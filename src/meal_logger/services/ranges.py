"""Reporting window resolution."""

from datetime import date, datetime, time, timedelta

from meal_logger.domain.stats import DateRange

RANGE_DAYS = {"7d": 7, "14d": 14, "30d": 30, "90d": 90}
DEFAULT_RANGE_DAYS = 14

_END_OF_DAY = time(23, 59, 59, 999000)


def resolve_range(
    range_token: str | None,
    from_date: str | None = None,
    to_date: str | None = None,
    now: datetime | None = None,
) -> DateRange:
    """Resolve the window for a logs query.

    An explicit ``from``/``to`` pair wins when both parse as calendar dates.
    Otherwise the named window applies, counted back from ``now`` in server
    local time; unknown tokens mean 14 days.
    """
    current = now or datetime.now().astimezone()
    explicit = parse_date_range(from_date, to_date, current)
    if explicit is not None:
        return explicit
    days = RANGE_DAYS.get(range_token or "", DEFAULT_RANGE_DAYS)
    start = (current - timedelta(days=days)).replace(
        hour=0, minute=0, second=0, microsecond=0
    )
    end = datetime.combine(current.date(), _END_OF_DAY, tzinfo=current.tzinfo)
    return DateRange(start=start, end=end)


def parse_date_range(
    from_date: str | None, to_date: str | None, now: datetime
) -> DateRange | None:
    """Expand two calendar dates to full-day bounds, or None if either fails."""
    if not from_date or not to_date:
        return None
    start_day = _parse_calendar_date(from_date)
    end_day = _parse_calendar_date(to_date)
    if start_day is None or end_day is None:
        return None
    return DateRange(
        start=datetime.combine(start_day, time.min, tzinfo=now.tzinfo),
        end=datetime.combine(end_day, _END_OF_DAY, tzinfo=now.tzinfo),
    )


def _parse_calendar_date(value: str) -> date | None:
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(value.strip()).date()
    except ValueError:
        return None
