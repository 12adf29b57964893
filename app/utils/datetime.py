"""Timestamps for notification rows.

Rows are stored as naive datetimes in the configured ``APP_TIMEZONE`` and are
made timezone-aware again when read back into domain entities.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone, tzinfo
from functools import lru_cache

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.config import get_settings

_UTC_PREFIXES = ("UTC", "GMT")


@lru_cache(maxsize=1)
def get_app_timezone() -> tzinfo:
    """Return the configured timezone, accepting IANA names or ``UTC+HH:MM``."""

    name = (get_settings().app_timezone or "").strip() or "UTC"
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return _fixed_offset(name) or timezone.utc


def now_in_app_timezone() -> datetime:
    return datetime.now(tz=get_app_timezone())


def now_in_app_naive_datetime() -> datetime:
    """Current time in the app timezone with ``tzinfo`` stripped for storage."""

    return now_in_app_timezone().replace(tzinfo=None)


def ensure_app_timezone(value: datetime | None) -> datetime | None:
    """Attach the app timezone to stored naive values or convert aware ones."""

    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=get_app_timezone())
    return value.astimezone(get_app_timezone())


def _fixed_offset(name: str) -> tzinfo | None:
    upper = name.upper()
    prefix = next((item for item in _UTC_PREFIXES if upper.startswith(item)), None)
    if prefix is None:
        return None
    sign, rest = upper[len(prefix) : len(prefix) + 1], upper[len(prefix) + 1 :]
    if sign not in ("+", "-") or not rest:
        return None
    if ":" in rest:
        hours, minutes = rest.split(":", 1)
    elif len(rest) > 2:
        hours, minutes = rest[:-2], rest[-2:]
    else:
        hours, minutes = rest, "0"
    if not (hours.isdigit() and minutes.isdigit()):
        return None
    delta = timedelta(hours=int(hours), minutes=int(minutes))
    if delta >= timedelta(hours=24):
        return None
    return timezone(-delta if sign == "-" else delta)
