"""
Shared fixtures
===============

Every test runs against a fresh SQLite file database. Environment variables
are set before the package is imported because settings and the engine are
built at import time.
"""

import os
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

from cryptography.fernet import Fernet

_DB_DIR = tempfile.mkdtemp(prefix="legal_diary_tests_")
os.environ["DATABASE_URL"] = f"sqlite:///{Path(_DB_DIR) / 'test.db'}"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-with-enough-length-for-hs256"
os.environ["TOKEN_ENCRYPTION_KEY"] = Fernet.generate_key().decode()
os.environ["GOOGLE_CLIENT_ID"] = "test-client-id"
os.environ["GOOGLE_CLIENT_SECRET"] = "test-client-secret"
os.environ["GOOGLE_REDIRECT_URI"] = "http://localhost:3000/auth/google/callback"
os.environ["DEBUG"] = "true"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

from legal_diary.core.security import TokenCipher, create_access_token
from legal_diary.db.database import Base, SessionLocal, engine
from legal_diary.db.models import (
    Case,
    CaseAssignment,
    CalendarSync,
    Firm,
    Hearing,
    HearingType,
    SyncStatus,
    User,
    UserRole,
)
from legal_diary.services.credential_store import CredentialStore
from legal_diary.services.google_calendar_provider import ProviderEvent, TokenGrant
from legal_diary.utils.exceptions import ProviderError


def utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


# =============================================================================
# Fake Google provider
# =============================================================================

class FakeProvider:
    """In-memory stand-in for GoogleCalendarProvider."""

    enabled = True

    def __init__(self):
        self.events = {}
        self.calls = []
        self.fail_for = set()      # hearing summaries (case numbers) that fail
        self.fail_refresh = False
        self.fail_revoke = False
        self.refresh_count = 0
        self.revoked = []
        self.deleted = []
        self._next_id = 0

    def build_auth_url(self, state):
        return f"https://accounts.google.com/o/oauth2/v2/auth?state={state}"

    def exchange_code(self, code):
        if code == "bad-code":
            raise ProviderError("Google OAuth failed: 400", provider_status=400)
        return TokenGrant(
            access_token=f"access-{code}",
            refresh_token=f"refresh-{code}",
            expires_at=utcnow() + timedelta(hours=1),
        )

    def refresh_credential(self, refresh_token):
        self.refresh_count += 1
        if self.fail_refresh:
            raise ProviderError("Google OAuth failed: 400", provider_status=400)
        return TokenGrant(access_token="access-refreshed", expires_at=utcnow() + timedelta(hours=1))

    def create_or_update_event(self, access_token, payload, event_id=None, calendar_id="primary"):
        self.calls.append((access_token, payload, event_id))
        case_number = payload["summary"].split(" - ")[0]
        if case_number in self.fail_for:
            raise ProviderError("Google Calendar event write failed: 500", provider_status=500)
        if event_id is None:
            self._next_id += 1
            event_id = f"evt-{self._next_id}"
        self.events[event_id] = payload
        return ProviderEvent(event_id=event_id, updated_at=datetime(2026, 1, 5, 9, 30))

    def delete_event(self, access_token, event_id, calendar_id="primary"):
        self.deleted.append(event_id)
        self.events.pop(event_id, None)

    def revoke(self, token):
        if self.fail_revoke:
            raise ProviderError("Google OAuth failed: 400", provider_status=400)
        self.revoked.append(token)

    def close(self):
        pass


# =============================================================================
# Database fixtures
# =============================================================================

@pytest.fixture
def db():
    """Fresh schema per test"""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def firm(db):
    firm = Firm(name="Rao & Associates")
    db.add(firm)
    db.commit()
    return firm


@pytest.fixture
def other_firm(db):
    firm = Firm(name="Elsewhere LLP")
    db.add(firm)
    db.commit()
    return firm


def _user(db, email, role, firm_id):
    user = User(email=email, name=email.split("@")[0].title(), role=role, firm_id=firm_id)
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def admin(db, firm):
    return _user(db, "admin@rao.law", UserRole.ADMIN, firm.id)


@pytest.fixture
def advocate(db, firm):
    return _user(db, "advocate@rao.law", UserRole.ADVOCATE, firm.id)


@pytest.fixture
def second_advocate(db, firm):
    return _user(db, "second@rao.law", UserRole.ADVOCATE, firm.id)


@pytest.fixture
def outsider(db, other_firm):
    return _user(db, "admin@elsewhere.law", UserRole.ADMIN, other_firm.id)


@pytest.fixture
def firmless(db):
    return _user(db, "newcomer@nowhere.law", UserRole.ADVOCATE, None)


def make_case(db, firm, creator, case_number, assignees=()):
    case = Case(
        firm_id=firm.id,
        created_by_id=creator.id,
        case_number=case_number,
        case_title=f"State vs {case_number}",
        client_name=f"Client {case_number}",
    )
    for user in assignees:
        case.assignments.append(CaseAssignment(user_id=user.id))
    db.add(case)
    db.commit()
    return case


def make_hearing(db, case, day, time=None, hearing_type=HearingType.ARGUMENTS, **kwargs):
    hearing = Hearing(
        case_id=case.id,
        hearing_date=datetime.combine(day, datetime.min.time()),
        hearing_time=time,
        hearing_type=hearing_type,
        **kwargs,
    )
    db.add(hearing)
    db.commit()
    return hearing


def mark_synced(db, hearing, event_id="evt-existing", status=SyncStatus.SYNCED):
    record = CalendarSync(
        hearing_id=hearing.id,
        google_event_id=event_id,
        sync_status=status,
        last_synced_at=utcnow(),
    )
    db.add(record)
    db.commit()
    db.refresh(hearing)
    return record


@pytest.fixture
def assigned_case(db, firm, admin, advocate):
    """Case the advocate is assigned to"""
    return make_case(db, firm, admin, "WP 101/2026", assignees=[advocate])


@pytest.fixture
def unassigned_case(db, firm, admin):
    """Case only visible to admins"""
    return make_case(db, firm, admin, "CRL 202/2026")


@pytest.fixture
def foreign_case(db, other_firm, outsider):
    return make_case(db, other_firm, outsider, "OS 303/2026", assignees=[outsider])


# =============================================================================
# Provider / credential fixtures
# =============================================================================

@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def cipher():
    return TokenCipher.from_settings()


@pytest.fixture
def credentials(db, cipher):
    return CredentialStore(db, cipher)


@pytest.fixture
def connect(credentials):
    """Store a Google credential for a user; ``expires_in`` in seconds."""
    def _connect(user, expires_in=3600):
        return credentials.save_credential(
            user.id,
            access_token="access-initial",
            refresh_token="refresh-initial",
            expires_at=utcnow() + timedelta(seconds=expires_in),
        )
    return _connect


# =============================================================================
# API fixtures
# =============================================================================

@pytest.fixture
def client(db, provider):
    """Test client with the fake provider installed on app.state"""
    from legal_diary.main import app

    # Context manager runs the lifespan so app.state is populated
    with TestClient(app) as c:
        app.state.google_provider = provider
        yield c


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token({'sub': str(user.id)})}"}
