"""
api/v1/endpoints/google.py

Google Calendar connection and hearing sync.

Endpoints:
  GET  /api/v1/google/auth-url                     - Google OAuth consent URL
  POST /api/v1/google/callback                     - exchange code for tokens
  GET  /api/v1/google/status                       - connection status and sync counts
  POST /api/v1/google/calendar/sync                - sync every unsynced upcoming hearing
  POST /api/v1/google/calendar/sync/{hearing_id}   - sync one hearing
  DELETE /api/v1/google/calendar/sync/{hearing_id} - remove one hearing's event
  POST /api/v1/google/disconnect                   - revoke and forget the connection
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from legal_diary.api.v1.deps import (
    get_activity_logger,
    get_credential_store,
    get_current_user,
    get_provider,
    get_scope,
    get_tracker,
)
from legal_diary.db.database import get_db
from legal_diary.db.models import SYNCABLE_HEARING_STATUSES, User
from legal_diary.db import schemas
from legal_diary.services.access_scope import AccessScope
from legal_diary.services.activity_log import ActivityLogger
from legal_diary.services.calendar_sync_service import CalendarSyncTracker, unsynced
from legal_diary.services.credential_store import CredentialStore
from legal_diary.services.hearing_service import find_hearings, get_hearing
from legal_diary.utils.helpers import today_local

router = APIRouter()


@router.get("/auth-url")
def google_auth_url(
    current_user: User = Depends(get_current_user),
    provider=Depends(get_provider),
):
    """
    Returns the Google OAuth consent URL. State = user ID, checked in the callback.
    """
    return {"auth_url": provider.build_auth_url(state=str(current_user.id))}


@router.post("/callback")
def google_oauth_callback(
    req: schemas.GoogleCallbackRequest,
    request: Request,
    current_user: User = Depends(get_current_user),
    tracker: CalendarSyncTracker = Depends(get_tracker),
    activity: ActivityLogger = Depends(get_activity_logger),
):
    """
    Exchanges the OAuth authorization code for tokens.
    State must match the authenticated user (CSRF check).
    """
    if req.state != str(current_user.id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid state parameter",
        )

    tracker.connect(current_user, req.code)
    activity.calendar_connected(current_user, request)
    return {"message": "Google Calendar connected successfully"}


@router.get("/status", response_model=schemas.GoogleStatusResponse)
def google_connection_status(
    current_user: User = Depends(get_current_user),
    scope: AccessScope = Depends(get_scope),
    tracker: CalendarSyncTracker = Depends(get_tracker),
):
    """Used by the settings page to show connect/disconnect."""
    return tracker.sync_status(current_user, scope)


@router.post("/calendar/sync", response_model=schemas.SyncSummaryResponse)
def sync_all_hearings(
    request: Request,
    current_user: User = Depends(get_current_user),
    scope: AccessScope = Depends(get_scope),
    tracker: CalendarSyncTracker = Depends(get_tracker),
    activity: ActivityLogger = Depends(get_activity_logger),
    db: Session = Depends(get_db),
):
    """
    Pushes every upcoming, still-scheduled hearing that is not yet synced.
    Individual failures are counted, not raised.
    """
    upcoming = find_hearings(
        db, scope, date_from=today_local(), statuses=SYNCABLE_HEARING_STATUSES
    )
    summary = tracker.sync_all(current_user, unsynced(upcoming))
    activity.calendar_synced(current_user, summary.synced, summary.failed, request)
    return summary.to_dict()


@router.post("/calendar/sync/{hearing_id}", response_model=schemas.SyncResultResponse)
def sync_one_hearing(
    hearing_id: UUID,
    current_user: User = Depends(get_current_user),
    scope: AccessScope = Depends(get_scope),
    tracker: CalendarSyncTracker = Depends(get_tracker),
    db: Session = Depends(get_db),
):
    hearing = get_hearing(db, scope, hearing_id)
    result = tracker.sync_one(current_user, hearing)
    return schemas.SyncResultResponse(
        hearing_id=result.hearing_id,
        event_id=result.event_id,
        created=result.created,
        synced_at=result.synced_at,
    )


@router.delete("/calendar/sync/{hearing_id}")
def unsync_one_hearing(
    hearing_id: UUID,
    current_user: User = Depends(get_current_user),
    scope: AccessScope = Depends(get_scope),
    tracker: CalendarSyncTracker = Depends(get_tracker),
    db: Session = Depends(get_db),
):
    """Removes the hearing's event from Google Calendar; the hearing itself stays."""
    hearing = get_hearing(db, scope, hearing_id)
    removed = tracker.unsync(current_user, hearing)
    return {"removed": removed}


@router.post("/disconnect")
def disconnect_google(
    request: Request,
    current_user: User = Depends(get_current_user),
    credentials: CredentialStore = Depends(get_credential_store),
    tracker: CalendarSyncTracker = Depends(get_tracker),
    activity: ActivityLogger = Depends(get_activity_logger),
):
    """Revokes Google OAuth, drops stored tokens and this user's sync records."""
    if credentials.get_credential(current_user.id) is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Google Calendar not connected",
        )
    removed = tracker.disconnect(current_user)
    activity.calendar_disconnected(current_user, request)
    return {"message": "Google Calendar disconnected", "sync_records_removed": removed}
