"""
Date and time helpers used by the ledger and its presentation layer.
All ledger timestamps are timezone-aware UTC.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional


DEFAULT_FORMAT = "%Y-%m-%d %H:%M:%S"
DATE_FORMAT = "%Y-%m-%d"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_datetime(value: datetime) -> str:
    return value.strftime(DEFAULT_FORMAT)


def format_date(value: datetime) -> str:
    return value.strftime(DATE_FORMAT)


def parse_datetime(text: str) -> datetime:
    """Parse a "YYYY-MM-DD HH:MM:SS" string as a UTC datetime"""
    return datetime.strptime(text, DEFAULT_FORMAT).replace(tzinfo=timezone.utc)


def days_between(start: datetime, end: datetime) -> int:
    """Whole days from start to end, negative when end precedes start"""
    delta = ensure_utc(end) - ensure_utc(start)
    return delta.days if delta >= timedelta(0) else -((-delta).days)


def is_within_range(target: datetime, start: Optional[datetime], end: Optional[datetime]) -> bool:
    """Inclusive range check; a missing bound is open"""
    target = ensure_utc(target)
    if start is not None and target < ensure_utc(start):
        return False
    if end is not None and target > ensure_utc(end):
        return False
    return True


def start_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.min, tzinfo=value.tzinfo)


def end_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.max, tzinfo=value.tzinfo)


def years_between(born: date, today: date) -> int:
    """Completed years between two dates"""
    years = today.year - born.year
    # Birthday not reached yet this year
    if (today.month, today.day) < (born.month, born.day):
        years -= 1
    return years
