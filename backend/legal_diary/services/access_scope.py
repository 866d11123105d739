"""
services/access_scope.py

Role-based visibility of cases and hearings.

  ADMIN    -> every case in the user's firm
  ADVOCATE -> only cases the user is assigned to

Handlers build one AccessScope per request and narrow every case/hearing
query through it; nothing downstream filters by firm or role again.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional
from uuid import UUID

from sqlalchemy import false
from sqlalchemy.orm import Query

from legal_diary.db.models import Case, CaseAssignment, Hearing, User, UserRole
from legal_diary.utils.exceptions import ValidationError


@dataclass(frozen=True)
class AccessScope:
    user_id: UUID
    firm_id: Optional[UUID]
    role: UserRole

    @classmethod
    def for_user(cls, user: User) -> "AccessScope":
        try:
            role = UserRole(getattr(user.role, "value", user.role))
        except ValueError:
            raise ValidationError(f"Unknown role: {user.role!r}")
        return cls(user_id=user.id, firm_id=user.firm_id, role=role)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    # ------------------------------------------------------------------
    # Query narrowing
    # ------------------------------------------------------------------

    def scope_cases(self, query: Query) -> Query:
        """Narrow a query selecting Case."""
        if self.firm_id is None:
            return query.filter(false())
        query = query.filter(Case.firm_id == self.firm_id)
        if not self.is_admin:
            query = query.filter(
                Case.assignments.any(CaseAssignment.user_id == self.user_id)
            )
        return query

    def scope_hearings(self, query: Query) -> Query:
        """Narrow a query selecting Hearing."""
        if self.firm_id is None:
            return query.filter(false())
        if self.is_admin:
            return query.filter(Hearing.case.has(Case.firm_id == self.firm_id))
        return query.filter(
            Hearing.case.has(
                (Case.firm_id == self.firm_id)
                & Case.assignments.any(CaseAssignment.user_id == self.user_id)
            )
        )

    # ------------------------------------------------------------------
    # In-memory narrowing (already loaded rows)
    # ------------------------------------------------------------------

    def can_access_case(self, case: Case) -> bool:
        if self.firm_id is None or case.firm_id != self.firm_id:
            return False
        if self.is_admin:
            return True
        return any(a.user_id == self.user_id for a in case.assignments)

    def filter_cases(self, cases: Iterable[Case]) -> list[Case]:
        return [c for c in cases if self.can_access_case(c)]

    def filter_hearings(self, hearings: Iterable[Hearing]) -> list[Hearing]:
        return [h for h in hearings if self.can_access_case(h.case)]
