# legal_diary/api/v1/deps.py

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
import jwt
from uuid import UUID

from legal_diary.core.security import decode_access_token
from legal_diary.db.database import get_db
from legal_diary.db.models import User
from legal_diary.services.access_scope import AccessScope
from legal_diary.services.activity_log import ActivityLogger
from legal_diary.services.calendar_sync_service import CalendarSyncTracker
from legal_diary.services.credential_store import CredentialStore
from legal_diary.services.judicial_calendar import JudicialCalendar
from legal_diary.utils.exceptions import UnauthorizedError

security = HTTPBearer()

# ============================================================================
# JWT Dependency
# ============================================================================

def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """
    Validate JWT token and return current user.
    """
    try:
        payload = decode_access_token(credentials.credentials)
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token expired"
        )
    except jwt.PyJWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token"
        )

    user_id = payload.get("user_id") or payload.get("sub")
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token"
        )

    try:
        user = db.get(User, UUID(str(user_id)))
    except ValueError:
        user = None

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found"
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is deactivated"
        )

    return user


# ============================================================================
# Access scope
# ============================================================================

def get_scope(current_user: User = Depends(get_current_user)) -> AccessScope:
    """One scope per request; every case/hearing query goes through it."""
    return AccessScope.for_user(current_user)


def require_admin(scope: AccessScope = Depends(get_scope)) -> AccessScope:
    if not scope.is_admin:
        raise UnauthorizedError("Only administrators can perform this action")
    return scope


# ============================================================================
# Process-wide collaborators (built in the app lifespan)
# ============================================================================

def get_calendar(request: Request) -> JudicialCalendar:
    return request.app.state.judicial_calendar


def get_activity_logger(request: Request) -> ActivityLogger:
    return request.app.state.activity_logger


def get_provider(request: Request):
    provider = request.app.state.google_provider
    if provider is None or not provider.enabled:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Google Calendar is not configured"
        )
    return provider


def get_credential_store(request: Request, db: Session = Depends(get_db)) -> CredentialStore:
    cipher = request.app.state.token_cipher
    if cipher is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Google Calendar is not configured"
        )
    return CredentialStore(db, cipher)


def get_tracker(
    db: Session = Depends(get_db),
    provider=Depends(get_provider),
    credentials: CredentialStore = Depends(get_credential_store),
) -> CalendarSyncTracker:
    return CalendarSyncTracker(db, provider, credentials)
