"""
api/v1/endpoints/calendar.py

Court calendar views.

Endpoints:
  GET /api/v1/calendar/month?year=&month=          - grid cells with hearings and day status
  GET /api/v1/calendar/day-status/{date}           - status of one day
  GET /api/v1/calendar/working-days?year=&month=   - working-day count and holidays
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from legal_diary.api.v1.deps import get_calendar, get_scope
from legal_diary.db.database import get_db
from legal_diary.db import schemas
from legal_diary.services.access_scope import AccessScope
from legal_diary.services.day_aggregator import build_calendar_days
from legal_diary.services.hearing_service import find_hearings
from legal_diary.services.judicial_calendar import JudicialCalendar
from legal_diary.utils.helpers import month_range, today_local

router = APIRouter()


@router.get("/month", response_model=schemas.CalendarMonthResponse)
def get_month(
    year: Optional[int] = Query(default=None, ge=1, le=9999),
    month: Optional[int] = Query(default=None, ge=1, le=12),
    scope: AccessScope = Depends(get_scope),
    calendar: JudicialCalendar = Depends(get_calendar),
    db: Session = Depends(get_db),
):
    """
    One cell per day of the month. Defaults to the current month.
    """
    today = today_local()
    year = year or today.year
    month = month or today.month
    date_from, date_to = month_range(year, month)

    hearings = find_hearings(db, scope, date_from=date_from, date_to=date_to)
    days = build_calendar_days(hearings, date_from, date_to, calendar=calendar)

    return schemas.CalendarMonthResponse(
        year=year,
        month=month,
        working_days=sum(1 for d in days if d.day_status.is_working_day),
        days=[schemas.CalendarDayResponse.from_day(d) for d in days],
    )


@router.get("/day-status/{day}")
def get_day_status(
    day: date,
    calendar: JudicialCalendar = Depends(get_calendar),
):
    return calendar.resolve_day_status(day).to_dict()


@router.get("/working-days", response_model=schemas.WorkingDaysResponse)
def get_working_days(
    year: int = Query(..., ge=1, le=9999),
    month: int = Query(..., ge=1, le=12),
    calendar: JudicialCalendar = Depends(get_calendar),
):
    return schemas.WorkingDaysResponse(
        year=year,
        month=month,
        working_days=calendar.working_days_in_month(year, month),
        holidays=[
            {"date": h.date.isoformat(), "name": h.name, "type": h.type}
            for h in calendar.holidays_in_month(year, month)
        ],
    )
