"""
Case endpoints
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from legal_diary.api.v1.deps import get_activity_logger, get_current_user, get_scope, require_admin
from legal_diary.db.database import get_db
from legal_diary.db.models import CasePriority, CaseStatus, User
from legal_diary.db import schemas
from legal_diary.services.access_scope import AccessScope
from legal_diary.services.activity_log import ActivityLogger
from legal_diary.services import case_service

router = APIRouter()


@router.get("", response_model=schemas.CaseListResponse)
def list_cases(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    search: Optional[str] = Query(default=None),
    status_filter: Optional[CaseStatus] = Query(default=None, alias="status"),
    priority: Optional[CasePriority] = Query(default=None),
    scope: AccessScope = Depends(get_scope),
    db: Session = Depends(get_db),
):
    """
    Cases visible to the caller (admins: whole firm, advocates: assigned),
    newest first.
    """
    cases, total = case_service.find_cases(
        db,
        scope,
        statuses=[status_filter] if status_filter else None,
        priority=priority,
        search=search,
        page=page,
        limit=limit,
    )
    return schemas.CaseListResponse(
        data=[schemas.CaseResponse.from_case(c) for c in cases],
        page=page,
        limit=limit,
        total=total,
    )


@router.post("", response_model=schemas.CaseResponse, status_code=status.HTTP_201_CREATED)
def create_case(
    req: schemas.CaseCreate,
    request: Request,
    current_user: User = Depends(get_current_user),
    activity: ActivityLogger = Depends(get_activity_logger),
    db: Session = Depends(get_db),
):
    case = case_service.create_case(db, current_user, req.model_dump())
    activity.case_created(current_user, case, request)
    return schemas.CaseResponse.from_case(case)


@router.delete("/{case_id}")
def delete_case(
    case_id: UUID,
    request: Request,
    current_user: User = Depends(get_current_user),
    scope: AccessScope = Depends(require_admin),
    activity: ActivityLogger = Depends(get_activity_logger),
    db: Session = Depends(get_db),
):
    """Admin only. Hearings and assignments go with the case."""
    deleted = case_service.delete_case(db, scope, case_id)
    activity.case_deleted(current_user, deleted["id"], deleted["case_number"], request)
    return {"message": "Case deleted successfully"}


@router.put("/{case_id}/assignments", response_model=schemas.AssignmentResult)
def set_case_assignments(
    case_id: UUID,
    req: schemas.AssignmentUpdate,
    request: Request,
    current_user: User = Depends(get_current_user),
    scope: AccessScope = Depends(require_admin),
    activity: ActivityLogger = Depends(get_activity_logger),
    db: Session = Depends(get_db),
):
    """
    Admin only. Replace the set of users assigned to a case; users must
    belong to the case's firm.
    """
    case = case_service.get_case(db, scope, case_id)
    added, removed = case_service.set_assignments(db, case, req.user_ids)
    if added:
        activity.case_assigned(current_user, case, added, request)
    if removed:
        activity.case_unassigned(current_user, case, removed, request)
    return schemas.AssignmentResult(
        case=schemas.CaseResponse.from_case(case),
        added=added,
        removed=removed,
    )
