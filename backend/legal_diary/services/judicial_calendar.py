"""
services/judicial_calendar.py

Court working-day resolution.

Given a date, answers "do the courts sit today, and if not, why?" from the
static court calendar tables. Everything here is pure: no database, no clock,
safe to call from any request or thread.

Resolution order for a single date (later steps override the working flag
and the kind, earlier steps win the label):

    vacation        -> non-working, label = vacation name
    general holiday -> non-working, label = holiday name (if unset)
    Sunday          -> non-working, label = "Sunday" (if unset)
    2nd Saturday    -> non-working, label = "2nd Saturday" (if unset),
                       skipped when the Saturday is a sitting day
    sitting day     -> working, label = "Sitting Day"
    restricted      -> label only, and only on an otherwise plain working day
"""

from __future__ import annotations

import calendar as _calendar
import enum
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, Optional

from legal_diary.data import court_calendar_2026 as cal2026
from legal_diary.utils.exceptions import UnsupportedCalendarYearError, ValidationError

SUNDAY_LABEL = "Sunday"
SECOND_SATURDAY_LABEL = "2nd Saturday"
SITTING_DAY_LABEL = "Sitting Day"


class DayKind(str, enum.Enum):
    working = "working"
    holiday = "holiday"
    vacation = "vacation"
    restricted = "restricted"
    sitting = "sitting"


class CourtLevel(str, enum.Enum):
    high_court = "high_court"
    district_court = "district_court"


@dataclass(frozen=True)
class VacationPeriod:
    name: str
    start: date
    end: date

    def __contains__(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass(frozen=True)
class CourtHoliday:
    date: date
    name: str
    type: str  # "general" | "restricted"


@dataclass(frozen=True)
class CourtCalendarTable:
    """Static calendar data for one year."""
    year: int
    general_holidays: dict = field(default_factory=dict)
    restricted_holidays: dict = field(default_factory=dict)
    vacations: tuple = ()
    sitting_days_high_court: frozenset = frozenset()
    sitting_days_district_court: frozenset = frozenset()

    def vacation_for(self, day: date) -> Optional[VacationPeriod]:
        for vacation in self.vacations:
            if day in vacation:
                return vacation
        return None

    def sitting_days(self, court_level: Optional[CourtLevel] = None) -> frozenset:
        if court_level == CourtLevel.high_court:
            return self.sitting_days_high_court
        if court_level == CourtLevel.district_court:
            return self.sitting_days_district_court
        return self.sitting_days_high_court | self.sitting_days_district_court


@dataclass(frozen=True)
class DayStatus:
    date: date
    is_working_day: bool
    kind: DayKind
    label: Optional[str]
    is_holiday: bool
    is_vacation: bool
    is_sunday: bool
    is_second_saturday: bool
    is_sitting_day: bool
    is_restricted_holiday: bool
    holiday_name: Optional[str] = None
    vacation_name: Optional[str] = None
    year_supported: bool = True

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "is_working_day": self.is_working_day,
            "kind": self.kind.value,
            "label": self.label,
            "is_holiday": self.is_holiday,
            "is_vacation": self.is_vacation,
            "is_sunday": self.is_sunday,
            "is_second_saturday": self.is_second_saturday,
            "is_sitting_day": self.is_sitting_day,
            "is_restricted_holiday": self.is_restricted_holiday,
            "holiday_name": self.holiday_name,
            "vacation_name": self.vacation_name,
            "year_supported": self.year_supported,
        }


def is_second_saturday(day: date) -> bool:
    # Saturdays falling on the 8th..14th are the second of the month
    return day.weekday() == _calendar.SATURDAY and 8 <= day.day <= 14


def is_sunday(day: date) -> bool:
    return day.weekday() == _calendar.SUNDAY


class JudicialCalendar:
    """
    Resolves DayStatus from a set of per-year tables.

    Years without a table still get the Sunday / 2nd Saturday rules and are
    flagged ``year_supported=False``; with ``strict=True`` they raise
    UnsupportedCalendarYearError instead.
    """

    def __init__(
        self,
        tables: Iterable[CourtCalendarTable],
        strict: bool = False,
        court_level: Optional[CourtLevel] = None,
    ):
        self._tables = {t.year: t for t in tables}
        self.strict = strict
        self.court_level = court_level

    @property
    def supported_years(self) -> list[int]:
        return sorted(self._tables)

    def table_for(self, year: int) -> Optional[CourtCalendarTable]:
        table = self._tables.get(year)
        if table is None and self.strict:
            raise UnsupportedCalendarYearError(year)
        return table

    # Single-rule predicates; resolve_day_status combines them

    def in_vacation(self, day: date) -> bool:
        table = self.table_for(day.year)
        return bool(table) and table.vacation_for(day) is not None

    def is_general_holiday(self, day: date) -> bool:
        table = self.table_for(day.year)
        return bool(table) and day in table.general_holidays

    def is_restricted_holiday(self, day: date) -> bool:
        table = self.table_for(day.year)
        return bool(table) and day in table.restricted_holidays

    def is_sitting_day(self, day: date) -> bool:
        table = self.table_for(day.year)
        return bool(table) and day in table.sitting_days(self.court_level)

    def resolve_day_status(self, day: date) -> DayStatus:
        if not isinstance(day, date):
            raise ValidationError(f"Expected a date, got {type(day).__name__}")
        # datetime is a date subclass; only the calendar day matters
        if isinstance(day, datetime):
            day = day.date()

        table = self.table_for(day.year)

        vacation = table.vacation_for(day) if table else None
        general_name = table.general_holidays.get(day) if table else None
        restricted_name = table.restricted_holidays.get(day) if table else None
        sitting = bool(table) and day in table.sitting_days(self.court_level)
        sunday = is_sunday(day)
        second_sat = is_second_saturday(day)

        working = True
        kind = DayKind.working
        label: Optional[str] = None

        if vacation:
            working = False
            kind = DayKind.vacation
            label = vacation.name

        if general_name:
            working = False
            kind = DayKind.holiday
            label = label or general_name

        if sunday:
            working = False
            kind = DayKind.holiday
            label = label or SUNDAY_LABEL

        if second_sat and not sitting:
            working = False
            kind = DayKind.holiday
            label = label or SECOND_SATURDAY_LABEL

        if sitting:
            working = True
            kind = DayKind.sitting
            label = SITTING_DAY_LABEL

        if restricted_name and kind == DayKind.working:
            kind = DayKind.restricted
            label = restricted_name

        return DayStatus(
            date=day,
            is_working_day=working,
            kind=kind,
            label=label,
            is_holiday=bool(general_name) or sunday or (second_sat and not sitting),
            is_vacation=vacation is not None,
            is_sunday=sunday,
            is_second_saturday=second_sat,
            is_sitting_day=sitting,
            is_restricted_holiday=restricted_name is not None,
            holiday_name=general_name,
            vacation_name=vacation.name if vacation else None,
            year_supported=table is not None,
        )

    def month_day_statuses(self, year: int, month: int) -> list[DayStatus]:
        _validate_month(year, month)
        days_in_month = _calendar.monthrange(year, month)[1]
        return [self.resolve_day_status(date(year, month, d)) for d in range(1, days_in_month + 1)]

    def working_days_in_month(self, year: int, month: int) -> int:
        return sum(1 for status in self.month_day_statuses(year, month) if status.is_working_day)

    def holidays_in_month(self, year: int, month: int) -> list[CourtHoliday]:
        """General holidays of the month, in date order."""
        _validate_month(year, month)
        table = self.table_for(year)
        if table is None:
            return []
        return [
            CourtHoliday(date=d, name=name, type="general")
            for d, name in sorted(table.general_holidays.items())
            if d.month == month
        ]


def _validate_month(year: int, month: int) -> None:
    if not 1 <= month <= 12:
        raise ValidationError(f"Invalid month: {month}")
    if not 1 <= year <= 9999:
        raise ValidationError(f"Invalid year: {year}")


KARNATAKA_2026 = CourtCalendarTable(
    year=2026,
    general_holidays=dict(cal2026.GENERAL_HOLIDAYS_2026),
    restricted_holidays=dict(cal2026.RESTRICTED_HOLIDAYS_2026),
    vacations=tuple(VacationPeriod(name, start, end) for name, start, end in cal2026.VACATIONS_2026),
    sitting_days_high_court=cal2026.SITTING_DAYS_HIGH_COURT_2026,
    sitting_days_district_court=cal2026.SITTING_DAYS_DISTRICT_COURT_2026,
)

DEFAULT_TABLES = (KARNATAKA_2026,)


def default_calendar(strict: bool = False, court_level: Optional[CourtLevel] = None) -> JudicialCalendar:
    return JudicialCalendar(DEFAULT_TABLES, strict=strict, court_level=court_level)


_default = default_calendar()


def resolve_day_status(day: date) -> DayStatus:
    """Module-level shortcut over the bundled, non-strict calendar."""
    return _default.resolve_day_status(day)
