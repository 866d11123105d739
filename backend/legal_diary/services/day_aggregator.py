"""
services/day_aggregator.py

Buckets hearings by calendar day and builds calendar-grid cells.

Input hearings must already be narrowed by AccessScope. A hearing lands in
exactly one bucket, keyed by its hearing_date with the time of day dropped.
Inside a bucket hearings are ordered by hearing_time; hearings without a time
go last in the order they were given.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from typing import Callable, Iterable, Optional

from legal_diary.services.calendar_sync_service import is_synced as hearing_is_synced
from legal_diary.services.judicial_calendar import DayStatus, JudicialCalendar, default_calendar
from legal_diary.utils.exceptions import ValidationError
from legal_diary.utils.helpers import iter_days, parse_hearing_time, to_day


@dataclass
class CalendarDay:
    date: date
    day_status: DayStatus
    hearings: list = field(default_factory=list)
    synced_count: int = 0
    unsynced_count: int = 0

    @property
    def hearing_count(self) -> int:
        return len(self.hearings)


def _validate_range(date_from: Optional[date], date_to: Optional[date]) -> None:
    if (date_from is None) != (date_to is None):
        raise ValidationError("Both date_from and date_to are required for a range")
    if date_from is not None and date_from > date_to:
        raise ValidationError("date_from must not be after date_to")


def _bucket_order(hearings: list) -> list:
    # Stable sort: untimed hearings keep insertion order at the end
    keyed = [(parse_hearing_time(h.hearing_time), h) for h in hearings]
    keyed.sort(key=lambda pair: (pair[0] is None, pair[0] or time.min))
    return [h for _, h in keyed]


def aggregate_by_date(
    hearings: Iterable,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> dict:
    """
    Returns {date: [hearing, ...]}.

    With a range, every day in it gets a key (possibly empty) and a hearing
    outside the range is rejected.
    """
    _validate_range(date_from, date_to)

    buckets: dict = {}
    if date_from is not None:
        for day in iter_days(date_from, date_to):
            buckets[day] = []

    seen: set = set()
    for hearing in hearings:
        if hearing.hearing_date is None:
            raise ValidationError(f"Hearing {hearing.id} has no hearing date")
        if hearing.id in seen:
            raise ValidationError(f"Hearing {hearing.id} given more than once")
        seen.add(hearing.id)

        day = to_day(hearing.hearing_date)
        if date_from is not None and not date_from <= day <= date_to:
            raise ValidationError(
                f"Hearing {hearing.id} on {day.isoformat()} is outside "
                f"{date_from.isoformat()}..{date_to.isoformat()}"
            )
        buckets.setdefault(day, []).append(hearing)

    return {day: _bucket_order(items) for day, items in sorted(buckets.items())}


def build_calendar_days(
    hearings: Iterable,
    date_from: date,
    date_to: date,
    calendar: Optional[JudicialCalendar] = None,
    is_synced: Optional[Callable[[object], bool]] = None,
) -> list[CalendarDay]:
    """One CalendarDay per date in the range, merged with court day status."""
    if date_from is None or date_to is None:
        raise ValidationError("A date range is required")
    calendar = calendar or default_calendar()
    is_synced = is_synced or hearing_is_synced

    buckets = aggregate_by_date(hearings, date_from, date_to)

    days: list[CalendarDay] = []
    for day, items in buckets.items():
        synced = sum(1 for h in items if is_synced(h))
        days.append(
            CalendarDay(
                date=day,
                day_status=calendar.resolve_day_status(day),
                hearings=items,
                synced_count=synced,
                unsynced_count=len(items) - synced,
            )
        )
    return days
