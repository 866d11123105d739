"""
services/hearing_service.py

Hearing reads and writes. Every read takes an AccessScope; callers never
filter by firm or role themselves.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session, joinedload

from legal_diary.db.models import (
    Case,
    Hearing,
    HearingStatus,
    HearingType,
    Reminder,
    ReminderType,
)
from legal_diary.services.access_scope import AccessScope
from legal_diary.services.day_aggregator import aggregate_by_date
from legal_diary.services.hearing_sequencer import HearingWithNeighbors, attach_neighbors
from legal_diary.utils.exceptions import CaseNotFoundError, HearingNotFoundError, ValidationError
from legal_diary.utils.helpers import day_bounds, parse_hearing_time, to_day

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("hearing_date", "hearing_time", "hearing_type", "court_room", "notes", "status")
REQUIRED_FIELDS = ("hearing_date", "hearing_type", "status")


def _normalise_date(value) -> datetime:
    # Stored at midnight; time of day lives in hearing_time
    return datetime.combine(to_day(value), datetime.min.time())


def find_hearings(
    db: Session,
    scope: AccessScope,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    case_id: Optional[UUID] = None,
    case_ids: Optional[Iterable[UUID]] = None,
    statuses: Optional[Iterable[HearingStatus]] = None,
    limit: Optional[int] = None,
) -> List[Hearing]:
    """Scoped hearings ordered by date, with their case and sync record loaded."""
    query = scope.scope_hearings(
        db.query(Hearing).options(
            joinedload(Hearing.case),
            joinedload(Hearing.calendar_sync),
        )
    )
    if date_from is not None:
        query = query.filter(Hearing.hearing_date >= day_bounds(date_from)[0])
    if date_to is not None:
        query = query.filter(Hearing.hearing_date <= day_bounds(date_to)[1])
    if case_id is not None:
        query = query.filter(Hearing.case_id == case_id)
    if case_ids is not None:
        query = query.filter(Hearing.case_id.in_(list(case_ids)))
    if statuses is not None:
        query = query.filter(Hearing.status.in_(list(statuses)))

    query = query.order_by(Hearing.hearing_date.asc(), Hearing.id.asc())
    if limit is not None:
        query = query.limit(limit)
    return query.all()


def get_hearing(db: Session, scope: AccessScope, hearing_id: UUID) -> Hearing:
    hearing = (
        scope.scope_hearings(db.query(Hearing))
        .filter(Hearing.id == hearing_id)
        .first()
    )
    if hearing is None:
        raise HearingNotFoundError(str(hearing_id))
    return hearing


def create_hearing(db: Session, scope: AccessScope, data: Dict[str, Any]) -> Hearing:
    """
    Create a hearing under an accessible case, with a reminder one day
    before the hearing date.
    """
    case = (
        scope.scope_cases(db.query(Case))
        .filter(Case.id == data["case_id"])
        .first()
    )
    if case is None:
        raise CaseNotFoundError(str(data["case_id"]))

    # Reject bad times up front rather than on first calendar render
    parse_hearing_time(data.get("hearing_time"))

    hearing_date = _normalise_date(data["hearing_date"])
    hearing = Hearing(
        case_id=case.id,
        hearing_date=hearing_date,
        hearing_time=data.get("hearing_time") or None,
        hearing_type=data.get("hearing_type") or HearingType.ARGUMENTS,
        court_room=data.get("court_room"),
        notes=data.get("notes"),
        status=data.get("status") or HearingStatus.SCHEDULED,
    )
    hearing.reminder = Reminder(
        reminder_type=ReminderType.ONE_DAY_BEFORE,
        reminder_time=hearing_date - timedelta(days=1),
    )
    db.add(hearing)
    db.commit()
    db.refresh(hearing)

    logger.info("Hearing created: %s (case=%s, date=%s)", hearing.id, case.case_number, hearing_date.date())
    return hearing


def update_hearing(db: Session, scope: AccessScope, hearing_id: UUID, data: Dict[str, Any]) -> Hearing:
    hearing = get_hearing(db, scope, hearing_id)

    for key in REQUIRED_FIELDS:
        if key in data and data[key] is None:
            raise ValidationError(f"{key} cannot be null")
    if "hearing_time" in data:
        parse_hearing_time(data["hearing_time"])

    for key in UPDATABLE_FIELDS:
        if key not in data:
            continue
        value = data[key]
        if key == "hearing_date":
            value = _normalise_date(value)
            if hearing.reminder is not None:
                hearing.reminder.reminder_time = value - timedelta(days=1)
                hearing.reminder.is_sent = False
        setattr(hearing, key, value)

    db.commit()
    db.refresh(hearing)
    logger.info("Hearing updated: %s", hearing.id)
    return hearing


def delete_hearing(db: Session, scope: AccessScope, hearing_id: UUID) -> Dict[str, Any]:
    """Delete a hearing; its reminder and CalendarSync go with it. Returns a snapshot."""
    hearing = get_hearing(db, scope, hearing_id)
    snapshot = {"id": hearing.id, "case_id": hearing.case_id, "case_number": hearing.case.case_number}
    db.delete(hearing)
    db.commit()
    logger.info("Hearing deleted: %s", hearing_id)
    return snapshot


def hearings_on_day_with_neighbors(db: Session, scope: AccessScope, day: date) -> List[HearingWithNeighbors]:
    """
    Hearings on ``day`` ordered by time, each with the previous/next hearing
    date of its case. Shared by the dashboard and the "today" view.
    """
    todays = aggregate_by_date(find_hearings(db, scope, date_from=day, date_to=day), day, day)[day]
    if not todays:
        return []
    related = find_hearings(db, scope, case_ids={h.case_id for h in todays})
    return attach_neighbors(todays, related)
