"""
Hearing endpoints
"""
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from legal_diary.api.v1.deps import get_activity_logger, get_current_user, get_scope
from legal_diary.db.database import get_db
from legal_diary.db.models import User
from legal_diary.db import schemas
from legal_diary.services.access_scope import AccessScope
from legal_diary.services.activity_log import ActivityLogger
from legal_diary.services.hearing_sequencer import compute_neighbors_by_case
from legal_diary.services import hearing_service

router = APIRouter()


@router.get("")
def list_hearings(
    calendar: bool = Query(default=False, description="Minimal fields for calendar views"),
    date_from: Optional[date] = Query(default=None),
    date_to: Optional[date] = Query(default=None),
    case_id: Optional[UUID] = Query(default=None),
    scope: AccessScope = Depends(get_scope),
    db: Session = Depends(get_db),
):
    """
    Hearings visible to the caller, oldest first.

    With ``case_id`` each hearing also carries the previous/next hearing date
    of that case.
    """
    hearings = hearing_service.find_hearings(
        db, scope, date_from=date_from, date_to=date_to, case_id=case_id
    )
    if calendar:
        return [schemas.CalendarHearing.from_hearing(h) for h in hearings]

    neighbors = compute_neighbors_by_case(hearings) if case_id else {}
    return [schemas.HearingResponse.from_hearing(h, neighbors=neighbors.get(h.id)) for h in hearings]


@router.post("", response_model=schemas.HearingResponse, status_code=status.HTTP_201_CREATED)
def create_hearing(
    req: schemas.HearingCreate,
    request: Request,
    current_user: User = Depends(get_current_user),
    scope: AccessScope = Depends(get_scope),
    activity: ActivityLogger = Depends(get_activity_logger),
    db: Session = Depends(get_db),
):
    hearing = hearing_service.create_hearing(db, scope, req.model_dump())
    activity.hearing_created(current_user, hearing, hearing.case, request)
    return schemas.HearingResponse.from_hearing(hearing)


@router.get("/{hearing_id}", response_model=schemas.HearingResponse)
def get_hearing(
    hearing_id: UUID,
    scope: AccessScope = Depends(get_scope),
    db: Session = Depends(get_db),
):
    """Single hearing with previous/next dates of its case."""
    hearing = hearing_service.get_hearing(db, scope, hearing_id)
    siblings = hearing_service.find_hearings(db, scope, case_id=hearing.case_id)
    neighbors = compute_neighbors_by_case(siblings)
    return schemas.HearingResponse.from_hearing(hearing, neighbors=neighbors.get(hearing.id))


@router.put("/{hearing_id}", response_model=schemas.HearingResponse)
def update_hearing(
    hearing_id: UUID,
    req: schemas.HearingUpdate,
    request: Request,
    current_user: User = Depends(get_current_user),
    scope: AccessScope = Depends(get_scope),
    activity: ActivityLogger = Depends(get_activity_logger),
    db: Session = Depends(get_db),
):
    """Only provided fields are changed."""
    changes = req.model_dump(exclude_unset=True)
    hearing = hearing_service.update_hearing(db, scope, hearing_id, changes)
    activity.hearing_updated(current_user, hearing, changes, request)
    return schemas.HearingResponse.from_hearing(hearing)


@router.delete("/{hearing_id}")
def delete_hearing(
    hearing_id: UUID,
    request: Request,
    current_user: User = Depends(get_current_user),
    scope: AccessScope = Depends(get_scope),
    activity: ActivityLogger = Depends(get_activity_logger),
    db: Session = Depends(get_db),
):
    deleted = hearing_service.delete_hearing(db, scope, hearing_id)
    activity.hearing_deleted(current_user, deleted["id"], deleted["case_number"], request)
    return {"message": "Hearing deleted successfully"}
