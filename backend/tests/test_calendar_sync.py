"""
Tests for Google Calendar sync tracking
=======================================
"""

from datetime import date, datetime, timedelta

import pytest

from legal_diary.db.models import CalendarSync, GoogleCalendarToken, HearingType, SyncStatus
from legal_diary.services.access_scope import AccessScope
from legal_diary.services.calendar_sync_service import (
    CalendarSyncTracker,
    build_event_payload,
    is_synced,
    unsynced,
)
from legal_diary.utils.exceptions import AuthExpiredError, CalendarNotConnectedError, ProviderError

from conftest import make_case, make_hearing, mark_synced, utcnow


@pytest.fixture
def tracker(db, provider, credentials):
    return CalendarSyncTracker(db, provider, credentials, refresh_margin_seconds=300)


# =============================================================================
# Event payload
# =============================================================================

class TestEventPayload:
    def test_defaults_to_ten_am_for_one_hour(self, db, assigned_case):
        hearing = make_hearing(db, assigned_case, date(2026, 2, 5), hearing_type=HearingType.FINAL_HEARING)

        payload = build_event_payload(hearing)

        assert payload["summary"] == "WP 101/2026 - FINAL HEARING"
        assert payload["start"] == {"dateTime": "2026-02-05T10:00:00", "timeZone": "Asia/Kolkata"}
        assert payload["end"] == {"dateTime": "2026-02-05T11:00:00", "timeZone": "Asia/Kolkata"}
        assert payload["colorId"] == "11"
        assert [o["minutes"] for o in payload["reminders"]["overrides"]] == [1440, 60]
        assert "location" not in payload

    def test_uses_hearing_time_and_room(self, db, assigned_case):
        hearing = make_hearing(db, assigned_case, date(2026, 2, 5), "2:15 PM", court_room="Hall 3", notes="Bring originals")

        payload = build_event_payload(hearing)

        assert payload["start"]["dateTime"] == "2026-02-05T14:15:00"
        assert payload["location"] == "Hall 3"
        assert "Court Room: Hall 3" in payload["description"]
        assert "Bring originals" in payload["description"]
        assert "Client: Client WP 101/2026" in payload["description"]


# =============================================================================
# Single hearing
# =============================================================================

class TestSyncOne:
    def test_not_connected(self, db, tracker, admin, assigned_case):
        hearing = make_hearing(db, assigned_case, date(2026, 2, 5))
        with pytest.raises(CalendarNotConnectedError):
            tracker.sync_one(admin, hearing)

    def test_first_sync_creates_record(self, db, tracker, provider, connect, admin, assigned_case):
        connect(admin)
        hearing = make_hearing(db, assigned_case, date(2026, 2, 5))

        result = tracker.sync_one(admin, hearing)

        assert result.created is True
        record = db.query(CalendarSync).filter_by(hearing_id=hearing.id).one()
        assert record.sync_status == SyncStatus.SYNCED
        assert record.google_event_id == result.event_id
        assert record.last_synced_at == datetime(2026, 1, 5, 9, 30)
        assert provider.refresh_count == 0
        assert is_synced(hearing)

    def test_resync_updates_existing_event(self, db, tracker, provider, connect, admin, assigned_case):
        connect(admin)
        hearing = make_hearing(db, assigned_case, date(2026, 2, 5))
        mark_synced(db, hearing, event_id="evt-old")

        result = tracker.sync_one(admin, hearing)

        assert result.created is False
        assert provider.calls[-1][2] == "evt-old"
        assert db.query(CalendarSync).count() == 1

    def test_failure_without_record_creates_nothing(self, db, tracker, provider, connect, admin, assigned_case):
        connect(admin)
        hearing = make_hearing(db, assigned_case, date(2026, 2, 5))
        provider.fail_for.add(assigned_case.case_number)

        with pytest.raises(ProviderError):
            tracker.sync_one(admin, hearing)

        assert db.query(CalendarSync).count() == 0

    def test_failure_marks_existing_record_failed(self, db, tracker, provider, connect, admin, assigned_case):
        connect(admin)
        hearing = make_hearing(db, assigned_case, date(2026, 2, 5))
        mark_synced(db, hearing, event_id="evt-old")
        provider.fail_for.add(assigned_case.case_number)

        with pytest.raises(ProviderError):
            tracker.sync_one(admin, hearing)

        record = db.query(CalendarSync).one()
        assert record.sync_status == SyncStatus.FAILED
        assert "500" in record.error_message
        assert record.google_event_id == "evt-old"

    def test_refreshes_expiring_token_once(self, db, tracker, provider, connect, credentials, admin, assigned_case):
        connect(admin, expires_in=60)
        hearing = make_hearing(db, assigned_case, date(2026, 2, 5))

        tracker.sync_one(admin, hearing)

        assert provider.refresh_count == 1
        assert provider.calls[-1][0] == "access-refreshed"
        stored = credentials.get_credential(admin.id)
        assert stored.access_token == "access-refreshed"
        assert stored.refresh_token == "refresh-initial"
        assert stored.expires_at > utcnow() + timedelta(minutes=30)

    def test_refresh_failure_removes_credential(self, db, tracker, provider, connect, credentials, admin, assigned_case):
        connect(admin, expires_in=-10)
        provider.fail_refresh = True
        hearing = make_hearing(db, assigned_case, date(2026, 2, 5))

        with pytest.raises(AuthExpiredError):
            tracker.sync_one(admin, hearing)

        assert credentials.get_credential(admin.id) is None
        assert db.query(CalendarSync).count() == 0


class TestUnsync:
    def test_removes_event_and_record(self, db, tracker, provider, connect, admin, assigned_case):
        connect(admin)
        hearing = make_hearing(db, assigned_case, date(2026, 2, 5))
        mark_synced(db, hearing, event_id="evt-old")

        assert tracker.unsync(admin, hearing) is True

        assert provider.deleted == ["evt-old"]
        assert db.query(CalendarSync).count() == 0
        assert hearing.calendar_sync is None

    def test_never_synced(self, db, tracker, provider, connect, admin, assigned_case):
        connect(admin)
        hearing = make_hearing(db, assigned_case, date(2026, 2, 5))

        assert tracker.unsync(admin, hearing) is False
        assert provider.deleted == []


# =============================================================================
# Batch
# =============================================================================

class TestSyncAll:
    def _run_batch(self, db, tracker, provider, firm, admin, assigned_case, failing_positions, size=3):
        hearings = []
        for i in range(size):
            if i in failing_positions:
                case = make_case(db, firm, admin, f"FAIL {i + 1}/2026")
                provider.fail_for.add(case.case_number)
            else:
                case = assigned_case
            hearings.append(make_hearing(db, case, date(2026, 2, 5 + i)))
        return hearings, tracker.sync_all(admin, hearings)

    def test_counts_successes_and_failures(self, db, tracker, provider, connect, firm, admin, assigned_case):
        connect(admin)
        hearings, summary = self._run_batch(db, tracker, provider, firm, admin, assigned_case, {1})

        assert summary.synced == 2
        assert summary.failed == 1
        assert summary.synced + summary.failed == len(hearings)
        assert summary.errors == ["FAIL 2/2026: Google Calendar event write failed: 500"]
        assert db.query(CalendarSync).count() == 2

    def test_first_failure_does_not_stop_batch(self, db, tracker, provider, connect, firm, admin, assigned_case):
        connect(admin)
        hearings, summary = self._run_batch(db, tracker, provider, firm, admin, assigned_case, {0})

        assert (summary.synced, summary.failed) == (2, 1)
        assert summary.errors == ["FAIL 1/2026: Google Calendar event write failed: 500"]
        assert all(is_synced(h) for h in hearings[1:])

    def test_last_failure_is_counted(self, db, tracker, provider, connect, firm, admin, assigned_case):
        connect(admin)
        hearings, summary = self._run_batch(db, tracker, provider, firm, admin, assigned_case, {2})

        assert (summary.synced, summary.failed) == (2, 1)
        assert summary.errors == ["FAIL 3/2026: Google Calendar event write failed: 500"]
        assert db.query(CalendarSync).count() == 2

    def test_every_hearing_failing(self, db, tracker, provider, connect, firm, admin, assigned_case):
        connect(admin)
        hearings, summary = self._run_batch(db, tracker, provider, firm, admin, assigned_case, {0, 1, 2})

        assert (summary.synced, summary.failed) == (0, 3)
        assert [e.split(":")[0] for e in summary.errors] == ["FAIL 1/2026", "FAIL 2/2026", "FAIL 3/2026"]
        assert db.query(CalendarSync).count() == 0

    def test_auth_expiry_is_counted_not_raised(self, db, tracker, provider, connect, admin, assigned_case):
        connect(admin, expires_in=-10)
        provider.fail_refresh = True
        hearings = [make_hearing(db, assigned_case, date(2026, 2, d)) for d in (5, 6)]

        summary = tracker.sync_all(admin, hearings)

        assert summary.synced == 0
        assert summary.failed == 2
        assert provider.refresh_count == 1

    def test_requires_connection(self, tracker, admin):
        with pytest.raises(CalendarNotConnectedError):
            tracker.sync_all(admin, [])

    def test_unsynced_filter(self, db, assigned_case):
        done = make_hearing(db, assigned_case, date(2026, 2, 5))
        failed = make_hearing(db, assigned_case, date(2026, 2, 6))
        fresh = make_hearing(db, assigned_case, date(2026, 2, 7))
        mark_synced(db, done)
        mark_synced(db, failed, event_id="evt-2", status=SyncStatus.FAILED)

        assert unsynced([done, failed, fresh]) == [failed, fresh]


# =============================================================================
# Status / connect / disconnect
# =============================================================================

class TestConnection:
    def test_connect_stores_encrypted_tokens(self, db, tracker, credentials, admin):
        tracker.connect(admin, "auth-code")

        row = db.query(GoogleCalendarToken).one()
        assert row.access_token_enc != "access-auth-code"
        assert credentials.get_credential(admin.id).access_token == "access-auth-code"

    def test_status(self, db, tracker, connect, admin, advocate, assigned_case, unassigned_case):
        connect(admin)
        mark_synced(db, make_hearing(db, assigned_case, date(2026, 2, 5)))
        mark_synced(db, make_hearing(db, unassigned_case, date(2026, 2, 6)), event_id="e2", status=SyncStatus.FAILED)

        status = tracker.sync_status(admin, AccessScope.for_user(admin))

        assert status["connected"] is True
        assert status["synced_count"] == 1
        assert status["failed_count"] == 1
        assert status["last_sync"] is not None

    def test_status_not_connected(self, tracker, admin):
        assert tracker.sync_status(admin, AccessScope.for_user(admin)) == {"connected": False}

    def test_disconnect_removes_own_sync_records(
        self, db, tracker, provider, connect, credentials, admin, advocate, firm, assigned_case
    ):
        connect(admin)
        own = make_hearing(db, assigned_case, date(2026, 2, 5))
        advocates_case = make_case(db, firm, advocate, "OP 7/2026", assignees=[advocate])
        theirs = make_hearing(db, advocates_case, date(2026, 2, 6))
        mark_synced(db, own)
        mark_synced(db, theirs, event_id="evt-theirs")

        removed = tracker.disconnect(admin)

        assert removed == 1
        assert provider.revoked == ["access-initial"]
        assert credentials.get_credential(admin.id) is None
        remaining = db.query(CalendarSync).all()
        assert [r.hearing_id for r in remaining] == [theirs.id]

    def test_disconnect_survives_revoke_failure(self, db, tracker, provider, connect, credentials, admin):
        connect(admin)
        provider.fail_revoke = True

        tracker.disconnect(admin)

        assert credentials.get_credential(admin.id) is None
