"""
Pydantic validation schemas
"""
from datetime import date, datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from legal_diary.db.models import CasePriority, CaseStatus, HearingStatus, HearingType
from legal_diary.services.calendar_sync_service import is_synced
from legal_diary.utils.exceptions import ValidationError
from legal_diary.utils.helpers import parse_hearing_time

# ============================================================================
# Case Schemas
# ============================================================================

class CaseSummary(BaseModel):
    id: UUID
    case_number: str
    case_title: str
    client_name: str
    court_name: Optional[str] = None
    status: CaseStatus
    priority: CasePriority

    class Config:
        from_attributes = True


class CaseCreate(BaseModel):
    case_number: str = Field(..., min_length=1, max_length=100)
    case_title: str = Field(..., min_length=1)
    client_name: str = Field(..., min_length=1, max_length=255)
    client_contact: Optional[str] = None
    court_name: Optional[str] = None
    judge_name: Optional[str] = None
    priority: Optional[CasePriority] = None


class CaseResponse(CaseSummary):
    client_contact: Optional[str] = None
    judge_name: Optional[str] = None
    created_by_id: Optional[UUID] = None
    assigned_user_ids: List[UUID] = []
    created_at: datetime

    @classmethod
    def from_case(cls, case) -> "CaseResponse":
        data = CaseSummary.model_validate(case).model_dump()
        return cls(
            **data,
            client_contact=case.client_contact,
            judge_name=case.judge_name,
            created_by_id=case.created_by_id,
            assigned_user_ids=[a.user_id for a in case.assignments],
            created_at=case.created_at,
        )


class CaseListResponse(BaseModel):
    data: List[CaseResponse]
    page: int
    limit: int
    total: int


class AssignmentUpdate(BaseModel):
    user_ids: List[UUID]


class AssignmentResult(BaseModel):
    case: CaseResponse
    added: List[UUID]
    removed: List[UUID]

# ============================================================================
# Hearing Schemas
# ============================================================================

class _HearingTimeMixin(BaseModel):
    @field_validator("hearing_time", check_fields=False)
    @classmethod
    def validate_hearing_time(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        try:
            parse_hearing_time(v)
        except ValidationError as e:
            raise ValueError(e.message)
        return v.strip()


class HearingCreate(_HearingTimeMixin):
    case_id: UUID
    hearing_date: date
    hearing_time: Optional[str] = None
    hearing_type: Optional[HearingType] = None
    court_room: Optional[str] = None
    notes: Optional[str] = None


class HearingUpdate(_HearingTimeMixin):
    hearing_date: Optional[date] = None
    hearing_time: Optional[str] = None
    hearing_type: Optional[HearingType] = None
    court_room: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[HearingStatus] = None


class HearingResponse(BaseModel):
    id: UUID
    case_id: UUID
    hearing_date: date
    hearing_time: Optional[str] = None
    hearing_type: HearingType
    court_room: Optional[str] = None
    notes: Optional[str] = None
    status: HearingStatus
    synced: bool = False
    case: Optional[CaseSummary] = None
    previous_date: Optional[date] = None
    next_date: Optional[date] = None

    @classmethod
    def from_hearing(cls, hearing, neighbors=None, include_case: bool = True) -> "HearingResponse":
        """``neighbors`` is a HearingWithNeighbors for the same hearing, if computed."""
        return cls(
            id=hearing.id,
            case_id=hearing.case_id,
            hearing_date=hearing.hearing_date.date(),
            hearing_time=hearing.hearing_time,
            hearing_type=hearing.hearing_type,
            court_room=hearing.court_room,
            notes=hearing.notes,
            status=hearing.status,
            synced=is_synced(hearing),
            case=CaseSummary.model_validate(hearing.case) if include_case and hearing.case else None,
            previous_date=neighbors.previous_date.date() if neighbors and neighbors.previous_date else None,
            next_date=neighbors.next_date.date() if neighbors and neighbors.next_date else None,
        )


class CalendarHearing(BaseModel):
    """Minimal hearing shape for calendar views"""
    id: UUID
    case_id: UUID
    hearing_date: date
    hearing_time: Optional[str] = None
    hearing_type: HearingType
    court_room: Optional[str] = None
    case_number: str
    case_title: str
    client_name: str

    @classmethod
    def from_hearing(cls, hearing) -> "CalendarHearing":
        return cls(
            id=hearing.id,
            case_id=hearing.case_id,
            hearing_date=hearing.hearing_date.date(),
            hearing_time=hearing.hearing_time,
            hearing_type=hearing.hearing_type,
            court_room=hearing.court_room,
            case_number=hearing.case.case_number,
            case_title=hearing.case.case_title,
            client_name=hearing.case.client_name,
        )

# ============================================================================
# Calendar Schemas
# ============================================================================

class CalendarDayResponse(BaseModel):
    date: date
    day_status: Dict[str, Any]
    hearing_count: int
    synced_count: int
    unsynced_count: int
    hearings: List[CalendarHearing]

    @classmethod
    def from_day(cls, day) -> "CalendarDayResponse":
        return cls(
            date=day.date,
            day_status=day.day_status.to_dict(),
            hearing_count=day.hearing_count,
            synced_count=day.synced_count,
            unsynced_count=day.unsynced_count,
            hearings=[CalendarHearing.from_hearing(h) for h in day.hearings],
        )


class CalendarMonthResponse(BaseModel):
    year: int
    month: int
    working_days: int
    days: List[CalendarDayResponse]


class WorkingDaysResponse(BaseModel):
    year: int
    month: int
    working_days: int
    holidays: List[Dict[str, Any]]

# ============================================================================
# Dashboard Schemas
# ============================================================================

class DashboardResponse(BaseModel):
    today: date
    today_status: Dict[str, Any]
    todays_hearings: List[HearingResponse]
    upcoming_hearings: List[HearingResponse]
    active_cases: List[CaseSummary]
    active_case_count: int

# ============================================================================
# Google Calendar Schemas
# ============================================================================

class GoogleCallbackRequest(BaseModel):
    code: str
    state: str


class SyncSummaryResponse(BaseModel):
    synced: int
    failed: int
    errors: List[str]


class SyncResultResponse(BaseModel):
    hearing_id: UUID
    event_id: str
    created: bool
    synced_at: datetime


class GoogleStatusResponse(BaseModel):
    connected: bool
    calendar_id: Optional[str] = None
    expires_at: Optional[datetime] = None
    synced_count: int = 0
    failed_count: int = 0
    last_sync: Optional[datetime] = None
