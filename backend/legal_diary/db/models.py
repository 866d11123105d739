"""
SQLAlchemy ORM Models
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    String,
    Text,
    TIMESTAMP,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import relationship

from legal_diary.db.database import Base

# ============================================================================
# Enums
# ============================================================================

class UserRole(str, enum.Enum):
    """User roles"""
    ADMIN = "ADMIN"
    ADVOCATE = "ADVOCATE"


class CaseStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    PENDING_JUDGMENT = "PENDING_JUDGMENT"
    CONCLUDED = "CONCLUDED"
    APPEAL = "APPEAL"
    DISMISSED = "DISMISSED"


# Cases that still appear in dropdowns and dashboards
OPEN_CASE_STATUSES = (CaseStatus.ACTIVE, CaseStatus.PENDING_JUDGMENT, CaseStatus.APPEAL)


class CasePriority(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class HearingType(str, enum.Enum):
    ARGUMENTS = "ARGUMENTS"
    EVIDENCE_RECORDING = "EVIDENCE_RECORDING"
    FINAL_HEARING = "FINAL_HEARING"
    INTERIM_HEARING = "INTERIM_HEARING"
    JUDGMENT_DELIVERY = "JUDGMENT_DELIVERY"
    PRE_HEARING = "PRE_HEARING"
    OTHER = "OTHER"


class HearingStatus(str, enum.Enum):
    SCHEDULED = "SCHEDULED"
    POSTPONED = "POSTPONED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


# Hearings still worth mirroring to an external calendar
SYNCABLE_HEARING_STATUSES = (HearingStatus.SCHEDULED, HearingStatus.POSTPONED)


class ReminderType(str, enum.Enum):
    ONE_DAY_BEFORE = "ONE_DAY_BEFORE"


class SyncStatus(str, enum.Enum):
    SYNCED = "SYNCED"
    FAILED = "FAILED"
    PENDING = "PENDING"


# ============================================================================
# Models
# ============================================================================

class Firm(Base):
    """Tenant boundary: every user and case belongs to one firm."""
    __tablename__ = "firms"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)

    users = relationship("User", back_populates="firm")
    cases = relationship("Case", back_populates="firm", cascade="all, delete-orphan")


class User(Base):
    """Firm member (admin or advocate)"""
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # Null until the user joins or sets up a firm
    firm_id = Column(Uuid(as_uuid=True), ForeignKey("firms.id", ondelete="SET NULL"), nullable=True, index=True)

    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    role = Column(SQLEnum(UserRole), nullable=False, default=UserRole.ADVOCATE)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)
    updated_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    firm = relationship("Firm", back_populates="users")
    assignments = relationship("CaseAssignment", back_populates="user", cascade="all, delete-orphan")
    google_token = relationship("GoogleCalendarToken", back_populates="user", uselist=False, cascade="all, delete-orphan")


class Case(Base):
    """Legal case model"""
    __tablename__ = "cases"
    __table_args__ = (
        UniqueConstraint("firm_id", "case_number", name="uq_cases_firm_case_number"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Foreign Keys
    firm_id = Column(Uuid(as_uuid=True), ForeignKey("firms.id", ondelete="CASCADE"), nullable=False, index=True)
    created_by_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # Case Identification
    case_number = Column(String(100), nullable=False)
    case_title = Column(Text, nullable=False)

    # Client
    client_name = Column(String(255), nullable=False)
    client_contact = Column(String(255), nullable=True)

    # Court
    court_name = Column(String(255), nullable=True)
    judge_name = Column(String(255), nullable=True)

    status = Column(SQLEnum(CaseStatus), nullable=False, default=CaseStatus.ACTIVE)
    priority = Column(SQLEnum(CasePriority), nullable=False, default=CasePriority.MEDIUM)

    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)
    updated_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    firm = relationship("Firm", back_populates="cases")
    created_by = relationship("User", foreign_keys=[created_by_id])
    hearings = relationship("Hearing", back_populates="case", cascade="all, delete-orphan")
    assignments = relationship("CaseAssignment", back_populates="case", cascade="all, delete-orphan")


class CaseAssignment(Base):
    """Advocate access to a case."""
    __tablename__ = "case_assignments"
    __table_args__ = (
        UniqueConstraint("case_id", "user_id", name="uq_case_assignments_case_user"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    case_id = Column(Uuid(as_uuid=True), ForeignKey("cases.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    assigned_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)

    case = relationship("Case", back_populates="assignments")
    user = relationship("User", back_populates="assignments")


class Hearing(Base):
    """A scheduled court hearing for a case."""
    __tablename__ = "hearings"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    case_id = Column(Uuid(as_uuid=True), ForeignKey("cases.id", ondelete="CASCADE"), nullable=False)

    # Date-only semantics; the time of day lives in hearing_time
    hearing_date = Column(TIMESTAMP, nullable=False)
    hearing_time = Column(String(20), nullable=True)
    hearing_type = Column(SQLEnum(HearingType), nullable=False, default=HearingType.ARGUMENTS)
    court_room = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)
    status = Column(SQLEnum(HearingStatus), nullable=False, default=HearingStatus.SCHEDULED)

    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)
    updated_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index("ix_hearings_case_date", "case_id", "hearing_date"),
        Index("ix_hearings_date", "hearing_date"),
    )

    case = relationship("Case", back_populates="hearings")
    reminder = relationship("Reminder", back_populates="hearing", uselist=False, cascade="all, delete-orphan")
    calendar_sync = relationship("CalendarSync", back_populates="hearing", uselist=False, cascade="all, delete-orphan")


class Reminder(Base):
    __tablename__ = "reminders"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    hearing_id = Column(Uuid(as_uuid=True), ForeignKey("hearings.id", ondelete="CASCADE"), nullable=False, unique=True)
    reminder_type = Column(SQLEnum(ReminderType), nullable=False, default=ReminderType.ONE_DAY_BEFORE)
    reminder_time = Column(TIMESTAMP, nullable=False)
    is_sent = Column(Boolean, nullable=False, default=False)
    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)

    hearing = relationship("Hearing", back_populates="reminder")


class CalendarSync(Base):
    """Mapping of a hearing to its Google Calendar event."""
    __tablename__ = "calendar_syncs"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    hearing_id = Column(Uuid(as_uuid=True), ForeignKey("hearings.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
    google_event_id = Column(String(255), nullable=False)
    sync_status = Column(SQLEnum(SyncStatus), nullable=False, default=SyncStatus.PENDING)
    last_synced_at = Column(TIMESTAMP, nullable=True)
    error_message = Column(Text, nullable=True)
    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)
    updated_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    hearing = relationship("Hearing", back_populates="calendar_sync")


class GoogleCalendarToken(Base):
    """Google Calendar OAuth tokens per user (encrypted)."""
    __tablename__ = "google_calendar_tokens"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
    access_token_enc = Column(Text, nullable=False)
    refresh_token_enc = Column(Text, nullable=False)
    expires_at = Column(TIMESTAMP, nullable=False)
    calendar_id = Column(String(255), nullable=False, default="primary")
    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)
    updated_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="google_token")


class ActivityLog(Base):
    """Audit trail of user actions within a firm."""
    __tablename__ = "activity_logs"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    firm_id = Column(Uuid(as_uuid=True), nullable=True, index=True)
    user_id = Column(Uuid(as_uuid=True), nullable=True, index=True)
    action = Column(String(50), nullable=False)
    entity_type = Column(String(50), nullable=False)
    entity_id = Column(String(64), nullable=True)
    entity_name = Column(String(255), nullable=True)
    details = Column(JSON, nullable=True)
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(Text, nullable=True)
    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        Index("ix_activity_logs_firm_created", "firm_id", "created_at"),
    )
