"""
Google Calendar client.

Signs in by exchanging an OAuth2 refresh token for an access token (or uses a
ready access token), then creates events with the `events.quickAdd` call,
which parses natural language like "Dentist on March 15 at 10am".
"""

import logging
import os
from typing import Any, Dict, Optional

import requests

from memograph.core.errors import CalendarError, ConfigurationError
from memograph.core.interfaces.ports import ICalendarClient

logger = logging.getLogger(__name__)

TOKEN_URL = "https://oauth2.googleapis.com/token"
REVOKE_URL = "https://oauth2.googleapis.com/revoke"
USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"
QUICK_ADD_URL = "https://www.googleapis.com/calendar/v3/calendars/{calendar_id}/events/quickAdd"
SCOPES = "https://www.googleapis.com/auth/calendar.events"


class GoogleCalendarClient(ICalendarClient):
    def __init__(
        self,
        client_id: str = None,
        client_secret: str = None,
        refresh_token: str = None,
        access_token: str = None,
        calendar_id: str = "primary",
        timeout: int = 30,
    ):
        self.client_id = (client_id or os.getenv("GOOGLE_CLIENT_ID") or "").strip()
        self.client_secret = client_secret or os.getenv("GOOGLE_CLIENT_SECRET")
        self.refresh_token = refresh_token or os.getenv("GOOGLE_REFRESH_TOKEN")
        self.access_token: Optional[str] = access_token or os.getenv("GOOGLE_ACCESS_TOKEN")
        self.calendar_id = calendar_id
        self.timeout = timeout
        self.user_email: Optional[str] = None

    def is_signed_in(self) -> bool:
        return self.access_token is not None

    def sign_in(self) -> bool:
        """Exchanges the refresh token for an access token and looks up the user's email."""
        if not self.client_id:
            raise ConfigurationError("GOOGLE_CLIENT_ID is not set. Add it to your .env file.")
        if not self.refresh_token:
            raise ConfigurationError("GOOGLE_REFRESH_TOKEN is not set. Authorize the app for scope " + SCOPES)

        try:
            response = requests.post(
                TOKEN_URL,
                data={
                    "client_id": self.client_id,
                    "client_secret": self.client_secret or "",
                    "refresh_token": self.refresh_token,
                    "grant_type": "refresh_token",
                },
                timeout=self.timeout,
            )
            data = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            raise CalendarError(f"Failed to sign in to Google Calendar: {e}") from e

        if response.status_code != 200 or "access_token" not in data:
            message = data.get("error_description") or data.get("error") or "Failed to sign in to Google Calendar."
            raise CalendarError(message)

        self.access_token = data["access_token"]
        self.user_email = self._fetch_email()
        logger.info("Calendar connected%s", f" as {self.user_email}" if self.user_email else "")
        return True

    def _fetch_email(self) -> Optional[str]:
        try:
            response = requests.get(USERINFO_URL, headers=self._auth_headers(), timeout=self.timeout)
            response.raise_for_status()
            return response.json().get("email")
        except (requests.exceptions.RequestException, ValueError):
            # Signed in either way
            return None

    def sign_out(self) -> None:
        if self.access_token:
            try:
                requests.post(REVOKE_URL, params={"token": self.access_token}, timeout=self.timeout)
            except requests.exceptions.RequestException as e:
                logger.warning("Token revoke failed: %s", e)
        self.access_token = None
        self.user_email = None

    def _auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.access_token}"}

    def create_event(self, text: str) -> Dict[str, Any]:
        if not self.is_signed_in() and self.client_id and self.refresh_token:
            try:
                self.sign_in()
            except (CalendarError, ConfigurationError) as e:
                logger.error("Calendar sign-in failed: %s", e)
        if not self.is_signed_in():
            return {"success": False, "error": "Not signed in to Google Calendar. Please sign in first."}

        try:
            response = requests.post(
                QUICK_ADD_URL.format(calendar_id=self.calendar_id),
                params={"text": text},
                headers=self._auth_headers(),
                timeout=self.timeout,
            )
            response.raise_for_status()
            event = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.error("Error creating calendar event: %s", e)
            return {"success": False, "error": str(e) or "Failed to create calendar event"}

        if event.get("id"):
            return {"success": True, "eventId": event["id"]}
        return {"success": False, "error": "Failed to create event. No event ID returned."}
