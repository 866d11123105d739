"""
Dashboard endpoints: today's hearings with previous/next dates, upcoming
hearings and open cases.
"""
from datetime import timedelta
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from legal_diary.api.v1.deps import get_calendar, get_scope
from legal_diary.db.database import get_db
from legal_diary.db.models import OPEN_CASE_STATUSES
from legal_diary.db import schemas
from legal_diary.services.access_scope import AccessScope
from legal_diary.services.case_service import find_cases
from legal_diary.services.hearing_service import find_hearings, hearings_on_day_with_neighbors
from legal_diary.services.judicial_calendar import JudicialCalendar
from legal_diary.utils.helpers import today_local

router = APIRouter()

UPCOMING_LIMIT = 10


def _today_hearings(db: Session, scope: AccessScope, today) -> List[schemas.HearingResponse]:
    return [
        schemas.HearingResponse.from_hearing(item.hearing, neighbors=item)
        for item in hearings_on_day_with_neighbors(db, scope, today)
    ]


@router.get("", response_model=schemas.DashboardResponse)
def get_dashboard(
    scope: AccessScope = Depends(get_scope),
    calendar: JudicialCalendar = Depends(get_calendar),
    db: Session = Depends(get_db),
):
    """
    Everything the dashboard renders, in one call.
    """
    today = today_local()

    upcoming = find_hearings(db, scope, date_from=today + timedelta(days=1), limit=UPCOMING_LIMIT)
    cases, total = find_cases(db, scope, statuses=OPEN_CASE_STATUSES, limit=None)
    cases.sort(key=lambda c: c.case_number)

    return schemas.DashboardResponse(
        today=today,
        today_status=calendar.resolve_day_status(today).to_dict(),
        todays_hearings=_today_hearings(db, scope, today),
        upcoming_hearings=[schemas.HearingResponse.from_hearing(h) for h in upcoming],
        active_cases=[schemas.CaseSummary.model_validate(c) for c in cases],
        active_case_count=total,
    )


@router.get("/today", response_model=List[schemas.HearingResponse])
def get_today(
    scope: AccessScope = Depends(get_scope),
    db: Session = Depends(get_db),
):
    """Today's hearings only; same shape as the dashboard's ``todays_hearings``."""
    return _today_hearings(db, scope, today_local())
