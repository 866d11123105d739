"""
services/activity_log.py

Firm audit trail. Writing an activity row must never break the request that
triggered it, so ``record`` catches and logs its own failures.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

from sqlalchemy.orm import Session

from legal_diary.db.models import ActivityLog

logger = logging.getLogger(__name__)


class ActivityAction:
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    ASSIGN = "ASSIGN"
    UNASSIGN = "UNASSIGN"
    CONNECT = "CONNECT"
    DISCONNECT = "DISCONNECT"
    SYNC = "SYNC"


class EntityType:
    CASE = "CASE"
    HEARING = "HEARING"
    CALENDAR = "CALENDAR"


def request_info(request) -> Dict[str, Optional[str]]:
    """Client IP and user agent from request headers."""
    if request is None:
        return {"ip_address": None, "user_agent": None}
    headers = request.headers
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        ip = forwarded.split(",")[0].strip()
    else:
        ip = headers.get("x-real-ip") or (request.client.host if request.client else None)
    return {"ip_address": ip, "user_agent": headers.get("user-agent")}


class ActivityLogger:
    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def record(
        self,
        user,
        action: str,
        entity_type: str,
        entity_id: Any = None,
        entity_name: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        request=None,
    ) -> bool:
        """Write one activity row in its own session. Returns False on failure."""
        if user is None or user.firm_id is None:
            return False

        db = self.session_factory()
        try:
            db.add(ActivityLog(
                firm_id=user.firm_id,
                user_id=user.id,
                action=action,
                entity_type=entity_type,
                entity_id=str(entity_id) if entity_id is not None else None,
                entity_name=entity_name,
                details=details,
                **request_info(request),
            ))
            db.commit()
            return True
        except Exception as e:
            db.rollback()
            logger.error("Failed to record activity %s %s: %s", action, entity_type, e)
            return False
        finally:
            db.close()

    # ------------------------------------------------------------------
    # Convenience wrappers
    # ------------------------------------------------------------------

    def hearing_created(self, user, hearing, case, request=None) -> bool:
        return self.record(
            user, ActivityAction.CREATE, EntityType.HEARING, hearing.id,
            f"{case.case_number} hearing",
            {"hearing_date": hearing.hearing_date.date().isoformat(), "case_id": str(case.id)},
            request,
        )

    def hearing_updated(self, user, hearing, changes: Dict[str, Any], request=None) -> bool:
        return self.record(
            user, ActivityAction.UPDATE, EntityType.HEARING, hearing.id,
            f"{hearing.case.case_number} hearing", {"changed": sorted(changes)}, request,
        )

    def hearing_deleted(self, user, hearing_id, case_number: str, request=None) -> bool:
        return self.record(
            user, ActivityAction.DELETE, EntityType.HEARING, hearing_id,
            f"{case_number} hearing", None, request,
        )

    def case_created(self, user, case, request=None) -> bool:
        return self.record(
            user, ActivityAction.CREATE, EntityType.CASE, case.id, case.case_number,
            {"case_title": case.case_title}, request,
        )

    def case_deleted(self, user, case_id, case_number: str, request=None) -> bool:
        return self.record(user, ActivityAction.DELETE, EntityType.CASE, case_id, case_number, None, request)

    def case_assigned(self, user, case, user_ids, request=None) -> bool:
        return self.record(
            user, ActivityAction.ASSIGN, EntityType.CASE, case.id, case.case_number,
            {"user_ids": [str(u) for u in user_ids]}, request,
        )

    def case_unassigned(self, user, case, user_ids, request=None) -> bool:
        return self.record(
            user, ActivityAction.UNASSIGN, EntityType.CASE, case.id, case.case_number,
            {"user_ids": [str(u) for u in user_ids]}, request,
        )

    def calendar_connected(self, user, request=None) -> bool:
        return self.record(user, ActivityAction.CONNECT, EntityType.CALENDAR, user.id, "Google Calendar", None, request)

    def calendar_disconnected(self, user, request=None) -> bool:
        return self.record(user, ActivityAction.DISCONNECT, EntityType.CALENDAR, user.id, "Google Calendar", None, request)

    def calendar_synced(self, user, synced: int, failed: int, request=None) -> bool:
        return self.record(
            user, ActivityAction.SYNC, EntityType.CALENDAR, user.id, "Google Calendar",
            {"synced": synced, "failed": failed}, request,
        )
