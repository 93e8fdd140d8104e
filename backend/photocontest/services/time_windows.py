from __future__ import annotations
from datetime import datetime, timezone as dt_tz
from typing import Literal

Timeframe = Literal["all", "monthly", "yearly"]
TIMEFRAMES: tuple[str, ...] = ("all", "monthly", "yearly")


def as_utc(dt: datetime) -> datetime:
    """Normalize to an aware UTC datetime. Naive values are taken to be UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=dt_tz.utc)
    return dt.astimezone(dt_tz.utc)


def month_start_utc(now: datetime) -> datetime:
    now = as_utc(now)
    return datetime(now.year, now.month, 1, tzinfo=dt_tz.utc)


def year_start_utc(now: datetime) -> datetime:
    now = as_utc(now)
    return datetime(now.year, 1, 1, tzinfo=dt_tz.utc)


def timeframe_window(timeframe: str, now: datetime) -> tuple[datetime | None, datetime | None]:
    """
    Return the (start, end) UTC window for a leaderboard timeframe.

    - "all":     (None, None), no date filter at all
    - "monthly": first instant of the current calendar month (UTC) up to `now`
    - "yearly":  first instant of the current calendar year (UTC) up to `now`

    Examples:
        >>> from datetime import datetime, timezone
        >>> timeframe_window("monthly", datetime(2026, 3, 15, 12, tzinfo=timezone.utc))[0].isoformat()
        '2026-03-01T00:00:00+00:00'
    """
    if timeframe == "all":
        return None, None
    now = as_utc(now)
    if timeframe == "monthly":
        return month_start_utc(now), now
    if timeframe == "yearly":
        return year_start_utc(now), now
    raise ValueError(f"unknown timeframe {timeframe!r}; expected one of {', '.join(TIMEFRAMES)}")
