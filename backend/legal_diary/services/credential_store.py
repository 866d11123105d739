"""
services/credential_store.py

Per-user Google Calendar credentials, encrypted at rest. Callers only ever
see decrypted values in memory.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from legal_diary.core.security import TokenCipher
from legal_diary.db.models import GoogleCalendarToken

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderCredential:
    user_id: UUID
    access_token: str
    refresh_token: str
    expires_at: datetime  # naive UTC
    calendar_id: str = "primary"


class CredentialStore:
    def __init__(self, db: Session, cipher: TokenCipher):
        self.db = db
        self.cipher = cipher

    def _row(self, user_id: UUID) -> Optional[GoogleCalendarToken]:
        return (
            self.db.query(GoogleCalendarToken)
            .filter(GoogleCalendarToken.user_id == user_id)
            .first()
        )

    def get_credential(self, user_id: UUID) -> Optional[ProviderCredential]:
        row = self._row(user_id)
        if not row:
            return None
        return ProviderCredential(
            user_id=row.user_id,
            access_token=self.cipher.decrypt(row.access_token_enc),
            refresh_token=self.cipher.decrypt(row.refresh_token_enc),
            expires_at=row.expires_at,
            calendar_id=row.calendar_id or "primary",
        )

    def save_credential(
        self,
        user_id: UUID,
        access_token: str,
        refresh_token: str,
        expires_at: datetime,
        calendar_id: Optional[str] = None,
    ) -> ProviderCredential:
        row = self._row(user_id)
        if row is None:
            row = GoogleCalendarToken(user_id=user_id)
            self.db.add(row)
        row.access_token_enc = self.cipher.encrypt(access_token)
        row.refresh_token_enc = self.cipher.encrypt(refresh_token)
        row.expires_at = expires_at
        if calendar_id:
            row.calendar_id = calendar_id
        elif not row.calendar_id:
            row.calendar_id = "primary"
        self.db.commit()
        return ProviderCredential(
            user_id=user_id,
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=expires_at,
            calendar_id=row.calendar_id,
        )

    def delete_credential(self, user_id: UUID) -> bool:
        deleted = (
            self.db.query(GoogleCalendarToken)
            .filter(GoogleCalendarToken.user_id == user_id)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        if deleted:
            logger.info("Google Calendar credential removed for user=%s", user_id)
        return bool(deleted)
