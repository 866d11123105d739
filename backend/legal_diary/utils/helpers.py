"""
Utility helper functions
"""
import calendar
import re
from datetime import date, datetime, time, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from legal_diary.core.config import settings
from legal_diary.utils.exceptions import ValidationError

_TIME_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*([AaPp][Mm])?\s*$")


def parse_hearing_time(value: Optional[str]) -> Optional[time]:
    """
    Parse a hearing time string.
    Accepts "14:30", "9:05", "10:30 AM", "2:15pm". Blank means no time.
    """
    if value is None or not value.strip():
        return None
    match = _TIME_RE.match(value)
    if not match:
        raise ValidationError(f"Invalid hearing time: {value!r}")
    hours, minutes, meridiem = int(match.group(1)), int(match.group(2)), match.group(3)
    if meridiem:
        if not 1 <= hours <= 12:
            raise ValidationError(f"Invalid hearing time: {value!r}")
        hours = hours % 12 + (12 if meridiem.lower() == "pm" else 0)
    if hours > 23 or minutes > 59:
        raise ValidationError(f"Invalid hearing time: {value!r}")
    return time(hours, minutes)


def to_day(value) -> date:
    """Calendar day of a date or datetime (time of day dropped)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise ValidationError(f"Expected a date, got {type(value).__name__}")


def month_range(year: int, month: int) -> tuple[date, date]:
    """First and last day of a month"""
    if not 1 <= month <= 12:
        raise ValidationError(f"Invalid month: {month}")
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Inclusive start/end datetimes covering one calendar day"""
    return datetime.combine(day, datetime.min.time()), datetime.combine(day, datetime.max.time())


def iter_days(date_from: date, date_to: date):
    current = date_from
    while current <= date_to:
        yield current
        current += timedelta(days=1)


def today_local(tz: Optional[str] = None) -> date:
    """Today's date in the court's timezone"""
    return datetime.now(ZoneInfo(tz or settings.CALENDAR_TIMEZONE)).date()
