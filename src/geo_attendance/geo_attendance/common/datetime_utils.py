from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from functools import lru_cache
from typing import Optional
from zoneinfo import ZoneInfo

from ..core.constants import DEFAULT_BUSINESS_TIMEZONE

DATE_KEY_FORMAT = "%Y-%m-%d"


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, DATE_KEY_FORMAT).date()


def now_utc() -> datetime:
    """Current time, timezone-aware.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc)


@lru_cache
def business_timezone(name: str = DEFAULT_BUSINESS_TIMEZONE) -> ZoneInfo:
    return ZoneInfo(name)


def as_aware(value: datetime, tz: ZoneInfo) -> datetime:
    """Naive datetimes are taken to be wall-clock time in the business timezone."""
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value


def to_utc(value: datetime, tz: ZoneInfo) -> datetime:
    return as_aware(value, tz).astimezone(timezone.utc)


def date_key_for(value: datetime, tz: ZoneInfo) -> str:
    """Calendar day of ``value`` in the business timezone, as YYYY-MM-DD."""
    return as_aware(value, tz).astimezone(tz).strftime(DATE_KEY_FORMAT)


def minutes_since_midnight(value: datetime, tz: ZoneInfo) -> int:
    local = as_aware(value, tz).astimezone(tz)
    return local.hour * 60 + local.minute


def validate_date_key(value: str) -> str:
    """Return the canonical form of a YYYY-MM-DD key, raising ValueError when malformed."""
    return parse_iso_date(value.strip()).strftime(DATE_KEY_FORMAT)


def hours_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 3600


def round2(value: Optional[float]) -> Optional[float]:
    """Round half-up to two decimals, keeping None."""
    if value is None:
        return None
    return float(Decimal(repr(float(value))).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def format_minutes(minutes: int) -> str:
    return f"{minutes // 60}:{minutes % 60:02d}"
