"""
services/case_service.py

Case reads/writes and advocate assignments.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from legal_diary.db.models import (
    Case,
    CaseAssignment,
    CasePriority,
    CaseStatus,
    User,
)
from legal_diary.services.access_scope import AccessScope
from legal_diary.utils.exceptions import CaseNotFoundError, ValidationError

logger = logging.getLogger(__name__)


def find_cases(
    db: Session,
    scope: AccessScope,
    statuses: Optional[Iterable[CaseStatus]] = None,
    priority: Optional[CasePriority] = None,
    search: Optional[str] = None,
    page: int = 1,
    limit: Optional[int] = 20,
) -> Tuple[List[Case], int]:
    """Scoped cases, newest first. Returns (page_of_cases, total)."""
    query = scope.scope_cases(db.query(Case))
    if statuses is not None:
        query = query.filter(Case.status.in_(list(statuses)))
    if priority is not None:
        query = query.filter(Case.priority == priority)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(
            Case.case_number.ilike(pattern),
            Case.case_title.ilike(pattern),
            Case.client_name.ilike(pattern),
        ))

    total = query.count()
    query = query.options(selectinload(Case.assignments)).order_by(Case.created_at.desc(), Case.id)
    if limit is not None:
        query = query.offset((max(page, 1) - 1) * limit).limit(limit)
    return query.all(), total


def get_case(db: Session, scope: AccessScope, case_id: UUID) -> Case:
    case = scope.scope_cases(db.query(Case)).filter(Case.id == case_id).first()
    if case is None:
        raise CaseNotFoundError(str(case_id))
    return case


def create_case(db: Session, user: User, data: Dict[str, Any]) -> Case:
    """Create a case in the user's firm; the creator is assigned to it."""
    if user.firm_id is None:
        raise ValidationError("Join or create a firm before adding cases")

    duplicate = (
        db.query(Case.id)
        .filter(Case.firm_id == user.firm_id, Case.case_number == data["case_number"])
        .first()
    )
    if duplicate:
        raise ValidationError(f"Case number {data['case_number']} already exists")

    case = Case(
        firm_id=user.firm_id,
        created_by_id=user.id,
        case_number=data["case_number"],
        case_title=data["case_title"],
        client_name=data["client_name"],
        client_contact=data.get("client_contact"),
        court_name=data.get("court_name"),
        judge_name=data.get("judge_name"),
        status=data.get("status") or CaseStatus.ACTIVE,
        priority=data.get("priority") or CasePriority.MEDIUM,
    )
    case.assignments.append(CaseAssignment(user_id=user.id))
    db.add(case)
    db.commit()
    db.refresh(case)

    logger.info("Case created: %s (firm=%s)", case.case_number, case.firm_id)
    return case


def delete_case(db: Session, scope: AccessScope, case_id: UUID) -> Dict[str, Any]:
    """Delete a case with its hearings and assignments. Returns a snapshot."""
    case = get_case(db, scope, case_id)
    snapshot = {"id": case.id, "case_number": case.case_number}
    db.delete(case)
    db.commit()
    logger.info("Case deleted: %s", snapshot["case_number"])
    return snapshot


# ============================================================================
# Assignments
# ============================================================================

def _firm_user_ids(db: Session, firm_id: UUID, user_ids: Iterable[UUID]) -> set:
    wanted = set(user_ids)
    if not wanted:
        return set()
    found = {
        row.id
        for row in db.query(User.id).filter(User.id.in_(wanted), User.firm_id == firm_id)
    }
    if found != wanted:
        raise ValidationError("One or more users do not belong to your firm")
    return found


def assign_users(db: Session, case: Case, user_ids: Iterable[UUID]) -> List[UUID]:
    """Grant access; users already assigned are skipped. Returns newly assigned ids."""
    wanted = _firm_user_ids(db, case.firm_id, user_ids)
    existing = {a.user_id for a in case.assignments}
    added = [uid for uid in wanted if uid not in existing]
    for uid in added:
        case.assignments.append(CaseAssignment(user_id=uid))
    db.commit()
    db.refresh(case)
    return added


def unassign_users(db: Session, case: Case, user_ids: Iterable[UUID]) -> List[UUID]:
    """Revoke access. Returns ids actually removed."""
    targets = set(user_ids)
    removed = [a for a in case.assignments if a.user_id in targets]
    removed_ids = [a.user_id for a in removed]
    for assignment in removed:
        case.assignments.remove(assignment)
    db.commit()
    db.refresh(case)
    return removed_ids


def set_assignments(db: Session, case: Case, user_ids: Iterable[UUID]) -> Tuple[List[UUID], List[UUID]]:
    """Make the case's assignee set exactly ``user_ids``. Returns (added, removed)."""
    wanted = set(user_ids)
    _firm_user_ids(db, case.firm_id, wanted)
    current = {a.user_id for a in case.assignments}
    removed = unassign_users(db, case, current - wanted) if current - wanted else []
    added = assign_users(db, case, wanted - current) if wanted - current else []
    logger.info("Assignments for case %s: +%s -%s", case.case_number, len(added), len(removed))
    return added, removed
