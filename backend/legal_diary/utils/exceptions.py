"""
Custom exception classes
"""
from fastapi import HTTPException


# ============================================================================
# Domain errors (raised by services, mapped to HTTP in main.py)
# ============================================================================

class LegalDiaryError(Exception):
    """Base class for hearing calendar errors"""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LegalDiaryError):
    """Malformed input to a calendar component. Never retried."""
    status_code = 400


class UnsupportedCalendarYearError(ValidationError):
    """Raised in strict mode for a year with no court calendar table"""
    def __init__(self, year: int):
        super().__init__(f"No court calendar available for {year}")
        self.year = year


class CalendarNotConnectedError(LegalDiaryError):
    """User has no stored Google Calendar credential"""
    status_code = 400

    def __init__(self, message: str = "Google Calendar not connected"):
        super().__init__(message)


class AuthExpiredError(LegalDiaryError):
    """Stored provider credential could not be refreshed and was removed"""
    status_code = 401

    def __init__(self, message: str = "Google Calendar authorization expired, please reconnect"):
        super().__init__(message)


class ProviderError(LegalDiaryError):
    """External calendar call failed (network, 4xx/5xx)"""
    status_code = 502

    def __init__(self, message: str, provider_status: int | None = None):
        super().__init__(message)
        self.provider_status = provider_status


# ============================================================================
# HTTP errors
# ============================================================================

class CaseNotFoundError(HTTPException):
    """Raised when case doesn't exist or is outside the caller's scope"""
    def __init__(self, case_id: str):
        super().__init__(
            status_code=404,
            detail=f"Case {case_id} not found"
        )


class HearingNotFoundError(HTTPException):
    """Raised when hearing doesn't exist or is outside the caller's scope"""
    def __init__(self, hearing_id: str):
        super().__init__(
            status_code=404,
            detail=f"Hearing {hearing_id} not found"
        )


class UnauthorizedError(HTTPException):
    """Raised when user may not perform the action"""
    def __init__(self, detail: str = "You don't have permission to access this resource"):
        super().__init__(
            status_code=403,
            detail=detail
        )
