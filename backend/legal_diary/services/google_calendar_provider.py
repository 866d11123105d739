"""
services/google_calendar_provider.py

Thin httpx client for the Google OAuth and Calendar v3 REST endpoints.

One instance is built per process (see main.py lifespan) and handed to the
code that needs it. Every network or HTTP failure surfaces as ProviderError;
callers decide what a failure means.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from urllib.parse import quote, urlencode

import httpx

from legal_diary.core.config import settings
from legal_diary.utils.exceptions import ProviderError

logger = logging.getLogger(__name__)

AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
REVOKE_URL = "https://oauth2.googleapis.com/revoke"
EVENTS_URL = "https://www.googleapis.com/calendar/v3/calendars/{calendar_id}/events"

SCOPES = ["https://www.googleapis.com/auth/calendar"]


@dataclass(frozen=True)
class TokenGrant:
    access_token: str
    expires_at: datetime  # naive UTC
    refresh_token: Optional[str] = None


@dataclass(frozen=True)
class ProviderEvent:
    event_id: str
    updated_at: datetime  # naive UTC


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _parse_rfc3339(value: Optional[str]) -> datetime:
    if not value:
        return _utcnow()
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return _utcnow()
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


class GoogleCalendarProvider:
    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        timeout: float = 20.0,
        http_client: Optional[httpx.Client] = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self._client = http_client or httpx.Client(timeout=timeout)

    @classmethod
    def from_settings(cls) -> "GoogleCalendarProvider":
        return cls(
            client_id=settings.GOOGLE_CLIENT_ID,
            client_secret=settings.GOOGLE_CLIENT_SECRET,
            redirect_uri=settings.GOOGLE_REDIRECT_URI,
            timeout=settings.GOOGLE_API_TIMEOUT_SECONDS,
        )

    @property
    def enabled(self) -> bool:
        return bool(self.client_id and self.client_secret and self.redirect_uri)

    def close(self) -> None:
        self._client.close()

    # ------------------------------------------------------------------
    # OAuth
    # ------------------------------------------------------------------

    def build_auth_url(self, state: str) -> str:
        if not self.enabled:
            raise ValueError("Google Calendar is not configured")
        params = {
            "client_id":     self.client_id,
            "redirect_uri":  self.redirect_uri,
            "response_type": "code",
            "scope":         " ".join(SCOPES),
            "access_type":   "offline",
            "state":         state,
            "prompt":        "consent",  # always return a refresh token
        }
        return AUTH_URL + "?" + urlencode(params)

    def exchange_code(self, code: str) -> TokenGrant:
        data = self._post_form(TOKEN_URL, {
            "code":          code,
            "client_id":     self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri":  self.redirect_uri,
            "grant_type":    "authorization_code",
        })
        if not data.get("refresh_token"):
            raise ProviderError("Google did not return a refresh token")
        return self._grant_from(data)

    def refresh_credential(self, refresh_token: str) -> TokenGrant:
        data = self._post_form(TOKEN_URL, {
            "refresh_token": refresh_token,
            "client_id":     self.client_id,
            "client_secret": self.client_secret,
            "grant_type":    "refresh_token",
        })
        return self._grant_from(data)

    def revoke(self, token: str) -> None:
        self._post_form(REVOKE_URL, {"token": token}, expect_json=False)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def create_or_update_event(
        self,
        access_token: str,
        payload: Dict[str, Any],
        event_id: Optional[str] = None,
        calendar_id: str = "primary",
    ) -> ProviderEvent:
        """Inserts a new event, or replaces ``event_id`` when given."""
        url = EVENTS_URL.format(calendar_id=quote(calendar_id, safe=""))
        headers = {"Authorization": f"Bearer {access_token}"}
        try:
            if event_id:
                resp = self._client.put(f"{url}/{quote(event_id, safe='')}", json=payload, headers=headers)
            else:
                resp = self._client.post(url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise ProviderError(f"Google Calendar request failed: {e}") from e

        body = self._check(resp, "Google Calendar event write")
        if not body.get("id"):
            raise ProviderError("No event ID returned")
        return ProviderEvent(event_id=body["id"], updated_at=_parse_rfc3339(body.get("updated")))

    def delete_event(self, access_token: str, event_id: str, calendar_id: str = "primary") -> None:
        url = EVENTS_URL.format(calendar_id=quote(calendar_id, safe="")) + f"/{quote(event_id, safe='')}"
        try:
            resp = self._client.delete(url, headers={"Authorization": f"Bearer {access_token}"})
        except httpx.HTTPError as e:
            raise ProviderError(f"Google Calendar request failed: {e}") from e
        # Already gone on Google's side
        if resp.status_code in (404, 410):
            return
        self._check(resp, "Google Calendar event delete", expect_json=False)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _post_form(self, url: str, data: Dict[str, str], expect_json: bool = True) -> Dict[str, Any]:
        try:
            resp = self._client.post(url, data=data)
        except httpx.HTTPError as e:
            raise ProviderError(f"Google OAuth request failed: {e}") from e
        return self._check(resp, "Google OAuth", expect_json=expect_json)

    @staticmethod
    def _check(resp: httpx.Response, what: str, expect_json: bool = True) -> Dict[str, Any]:
        if resp.status_code >= 400:
            logger.warning("%s failed: %s %s", what, resp.status_code, resp.text[:200])
            raise ProviderError(f"{what} failed: {resp.status_code}", provider_status=resp.status_code)
        if not expect_json or not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError as e:
            raise ProviderError(f"{what} returned invalid JSON") from e

    @staticmethod
    def _grant_from(data: Dict[str, Any]) -> TokenGrant:
        access_token = data.get("access_token")
        if not access_token:
            raise ProviderError("Google did not return an access token")
        expires_in = int(data.get("expires_in") or 3600)
        return TokenGrant(
            access_token=access_token,
            expires_at=_utcnow() + timedelta(seconds=expires_in),
            refresh_token=data.get("refresh_token"),
        )
