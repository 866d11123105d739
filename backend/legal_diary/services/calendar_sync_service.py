"""
services/calendar_sync_service.py

Pushes hearings to the user's Google Calendar and tracks the result in
CalendarSync rows.

A CalendarSync row is only written after the provider confirmed the event.
When a later push fails the existing row is marked FAILED; no row is ever
created for a failed first push. There is no automatic retry.

Two concurrent syncs of the same hearing are not serialised; whichever commits
last wins the CalendarSync row.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from legal_diary.core.config import settings
from legal_diary.db.models import (
    Case,
    CalendarSync,
    Hearing,
    HearingType,
    SyncStatus,
    User,
)
from legal_diary.services.access_scope import AccessScope
from legal_diary.services.credential_store import CredentialStore, ProviderCredential
from legal_diary.utils.exceptions import (
    AuthExpiredError,
    CalendarNotConnectedError,
    ProviderError,
    ValidationError,
)
from legal_diary.utils.helpers import parse_hearing_time, to_day

logger = logging.getLogger(__name__)

# Google Calendar colour ids
HEARING_TYPE_COLORS = {
    HearingType.ARGUMENTS: "9",           # blue
    HearingType.EVIDENCE_RECORDING: "6",  # orange
    HearingType.FINAL_HEARING: "11",      # red
    HearingType.INTERIM_HEARING: "10",    # green
    HearingType.JUDGMENT_DELIVERY: "3",   # purple
    HearingType.PRE_HEARING: "7",         # cyan
    HearingType.OTHER: "8",               # gray
}

REMINDER_OVERRIDES = [
    {"method": "popup", "minutes": 1440},
    {"method": "popup", "minutes": 60},
]

_EVENT_DT_FORMAT = "%Y-%m-%dT%H:%M:%S"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


# ============================================================================
# Pure helpers
# ============================================================================

def is_synced(hearing) -> bool:
    record = getattr(hearing, "calendar_sync", None)
    return record is not None and record.sync_status == SyncStatus.SYNCED


def unsynced(hearings: Iterable) -> list:
    """Hearings without a SYNCED CalendarSync record, in input order."""
    return [h for h in hearings if not is_synced(h)]


def build_event_payload(
    hearing: Hearing,
    case: Optional[Case] = None,
    tz: Optional[str] = None,
    default_time: Optional[str] = None,
    duration_minutes: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Google Calendar event body for a hearing.

    Start is the hearing day at hearing_time (or the default time) in the
    calendar timezone; the event lasts ``duration_minutes``.
    """
    case = case or hearing.case
    if case is None:
        raise ValidationError(f"Hearing {hearing.id} has no case")
    tz = tz or settings.CALENDAR_TIMEZONE
    duration = duration_minutes or settings.HEARING_EVENT_DURATION_MINUTES

    start_time = parse_hearing_time(hearing.hearing_time) or parse_hearing_time(
        default_time or settings.DEFAULT_HEARING_TIME
    )
    start = datetime.combine(to_day(hearing.hearing_date), start_time)
    end = start + timedelta(minutes=duration)

    hearing_type = HearingType(getattr(hearing.hearing_type, "value", hearing.hearing_type))

    description = [f"Case: {case.case_title}", f"Client: {case.client_name}"]
    if hearing.court_room:
        description.append(f"Court Room: {hearing.court_room}")
    if hearing.notes:
        description.append(f"\nNotes: {hearing.notes}")
    description.extend(["\n---", "Created by Legal Diary"])

    payload: Dict[str, Any] = {
        "summary": f"{case.case_number} - {hearing_type.value.replace('_', ' ')}",
        "description": "\n".join(description),
        "start": {"dateTime": start.strftime(_EVENT_DT_FORMAT), "timeZone": tz},
        "end": {"dateTime": end.strftime(_EVENT_DT_FORMAT), "timeZone": tz},
        "colorId": HEARING_TYPE_COLORS.get(hearing_type, HEARING_TYPE_COLORS[HearingType.OTHER]),
        "reminders": {"useDefault": False, "overrides": list(REMINDER_OVERRIDES)},
    }
    if hearing.court_room:
        payload["location"] = hearing.court_room
    return payload


# ============================================================================
# Persistence collaborators
# ============================================================================

def upsert_calendar_sync(
    db: Session,
    hearing_id: UUID,
    google_event_id: str,
    synced_at: datetime,
    status: SyncStatus = SyncStatus.SYNCED,
) -> CalendarSync:
    record = db.query(CalendarSync).filter(CalendarSync.hearing_id == hearing_id).first()
    if record is None:
        record = CalendarSync(hearing_id=hearing_id)
        db.add(record)
    record.google_event_id = google_event_id
    record.sync_status = status
    record.last_synced_at = synced_at
    record.error_message = None
    db.commit()
    db.refresh(record)
    return record


def delete_calendar_sync(db: Session, hearing_id: UUID) -> bool:
    deleted = (
        db.query(CalendarSync)
        .filter(CalendarSync.hearing_id == hearing_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    return bool(deleted)


# ============================================================================
# Tracker
# ============================================================================

@dataclass(frozen=True)
class SyncResult:
    hearing_id: UUID
    event_id: str
    created: bool
    synced_at: datetime


@dataclass
class SyncSummary:
    synced: int = 0
    failed: int = 0
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"synced": self.synced, "failed": self.failed, "errors": list(self.errors)}


class CalendarSyncTracker:
    """
    Per-request sync facade. ``provider`` is the process-wide
    GoogleCalendarProvider (or anything with the same methods).
    """

    def __init__(
        self,
        db: Session,
        provider,
        credentials: CredentialStore,
        refresh_margin_seconds: Optional[int] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.db = db
        self.provider = provider
        self.credentials = credentials
        self.refresh_margin = timedelta(
            seconds=settings.GOOGLE_TOKEN_REFRESH_MARGIN_SECONDS
            if refresh_margin_seconds is None
            else refresh_margin_seconds
        )
        self.clock = clock

    # ------------------------------------------------------------------
    # Credentials
    # ------------------------------------------------------------------

    def connect(self, user: User, code: str) -> ProviderCredential:
        """Finish the OAuth flow and store the user's tokens."""
        grant = self.provider.exchange_code(code)
        credential = self.credentials.save_credential(
            user.id,
            access_token=grant.access_token,
            refresh_token=grant.refresh_token,
            expires_at=grant.expires_at,
        )
        logger.info("Google Calendar connected for user=%s", user.id)
        return credential

    def _fresh_credential(self, user_id: UUID) -> ProviderCredential:
        credential = self.credentials.get_credential(user_id)
        if credential is None:
            raise CalendarNotConnectedError()
        if credential.expires_at - self.clock() > self.refresh_margin:
            return credential

        try:
            grant = self.provider.refresh_credential(credential.refresh_token)
        except ProviderError as e:
            logger.warning("Token refresh failed for user=%s: %s", user_id, e.message)
            self.credentials.delete_credential(user_id)
            raise AuthExpiredError() from e

        return self.credentials.save_credential(
            user_id,
            access_token=grant.access_token,
            refresh_token=grant.refresh_token or credential.refresh_token,
            expires_at=grant.expires_at,
            calendar_id=credential.calendar_id,
        )

    # ------------------------------------------------------------------
    # Sync
    # ------------------------------------------------------------------

    def sync_one(self, user: User, hearing: Hearing) -> SyncResult:
        credential = self._fresh_credential(user.id)
        payload = build_event_payload(hearing)

        record = hearing.calendar_sync
        existing_event_id = record.google_event_id if record else None
        try:
            event = self.provider.create_or_update_event(
                credential.access_token,
                payload,
                event_id=existing_event_id,
                calendar_id=credential.calendar_id,
            )
        except ProviderError as e:
            if record is not None:
                record.sync_status = SyncStatus.FAILED
                record.error_message = e.message
                self.db.commit()
            logger.warning("Sync failed for hearing=%s: %s", hearing.id, e.message)
            raise

        upsert_calendar_sync(self.db, hearing.id, event.event_id, event.updated_at)
        self.db.refresh(hearing)
        logger.info(
            "Hearing %s synced to Google Calendar (event=%s, %s)",
            hearing.id, event.event_id, "updated" if existing_event_id else "created",
        )
        return SyncResult(
            hearing_id=hearing.id,
            event_id=event.event_id,
            created=existing_event_id is None,
            synced_at=event.updated_at,
        )

    def sync_all(self, user: User, hearings: Iterable[Hearing]) -> SyncSummary:
        """
        Sync each hearing independently. A provider or auth failure on one
        hearing is counted and the batch carries on.
        """
        if self.credentials.get_credential(user.id) is None:
            raise CalendarNotConnectedError()

        summary = SyncSummary()
        for hearing in hearings:
            try:
                self.sync_one(user, hearing)
            except (ProviderError, AuthExpiredError, CalendarNotConnectedError, ValidationError) as e:
                summary.failed += 1
                label = hearing.case.case_number if hearing.case else str(hearing.id)
                summary.errors.append(f"{label}: {e.message}")
            else:
                summary.synced += 1

        logger.info(
            "Bulk sync for user=%s: synced=%s failed=%s",
            user.id, summary.synced, summary.failed,
        )
        return summary

    def unsync(self, user: User, hearing: Hearing) -> bool:
        """
        Delete the hearing's Google event and its CalendarSync row.
        Returns False when the hearing was never synced.
        """
        credential = self._fresh_credential(user.id)
        record = hearing.calendar_sync
        if record is None:
            return False

        if record.google_event_id:
            self.provider.delete_event(
                credential.access_token, record.google_event_id, calendar_id=credential.calendar_id
            )
        delete_calendar_sync(self.db, hearing.id)
        self.db.expire(hearing, ["calendar_sync"])
        logger.info("Hearing %s removed from Google Calendar", hearing.id)
        return True

    # ------------------------------------------------------------------
    # Status / disconnect
    # ------------------------------------------------------------------

    def sync_status(self, user: User, scope: AccessScope) -> Dict[str, Any]:
        credential = self.credentials.get_credential(user.id)
        if credential is None:
            return {"connected": False}

        counts_query = (
            self.db.query(CalendarSync.sync_status, func.count(CalendarSync.id))
            .join(Hearing, CalendarSync.hearing_id == Hearing.id)
        )
        counts = dict(scope.scope_hearings(counts_query).group_by(CalendarSync.sync_status).all())

        last_query = (
            self.db.query(func.max(CalendarSync.last_synced_at))
            .join(Hearing, CalendarSync.hearing_id == Hearing.id)
            .filter(CalendarSync.sync_status == SyncStatus.SYNCED)
        )
        last_sync = scope.scope_hearings(last_query).scalar()

        return {
            "connected": True,
            "calendar_id": credential.calendar_id,
            "expires_at": credential.expires_at,
            "synced_count": counts.get(SyncStatus.SYNCED, 0),
            "failed_count": counts.get(SyncStatus.FAILED, 0),
            "last_sync": last_sync,
        }

    def disconnect(self, user: User) -> int:
        """
        Revoke (best effort) and drop the user's credential, then remove the
        CalendarSync rows of hearings under cases the user created.
        Returns the number of CalendarSync rows removed.
        """
        credential = self.credentials.get_credential(user.id)
        if credential is not None:
            try:
                self.provider.revoke(credential.access_token)
            except ProviderError as e:
                logger.warning("Token revoke failed for user=%s: %s", user.id, e.message)
            self.credentials.delete_credential(user.id)

        own_hearings = (
            select(Hearing.id)
            .join(Case, Hearing.case_id == Case.id)
            .where(Case.created_by_id == user.id)
        )
        removed = (
            self.db.query(CalendarSync)
            .filter(CalendarSync.hearing_id.in_(own_hearings))
            .delete(synchronize_session=False)
        )
        self.db.commit()
        self.db.expire_all()
        logger.info("Google Calendar disconnected for user=%s (%s sync records removed)", user.id, removed)
        return removed
