# app/services/calendar/google_calendar_service.py
import functools
import logging
from datetime import datetime
from typing import Any, Dict, List

import httplib2
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from app.config.settings import Settings
from app.core.exceptions import AuthError, CalendarAPIError
from app.services.calendar.base import BusyBlock
from app.utils.time_utils import to_rfc3339

logger = logging.getLogger(__name__)


def _error_body(error: HttpError) -> str:
    content = error.content or b""
    if isinstance(content, bytes):
        return content.decode("utf-8", errors="replace")
    return str(content)


class GoogleCalendarService:
    """Google Calendar client: token refresh, free/busy and event insert"""

    SCOPES = ['https://www.googleapis.com/auth/calendar']

    def __init__(
            self,
            client_id: str,
            client_secret: str,
            token_uri: str = "https://oauth2.googleapis.com/token",
            timeout: float = 10.0,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.token_uri = token_uri
        self.timeout = timeout

        if not client_id or not client_secret:
            logger.warning("Google client credentials are not set; calendar sync will fail")

    @classmethod
    def from_settings(cls, settings: Settings) -> "GoogleCalendarService":
        return cls(
            client_id=settings.GOOGLE_CLIENT_ID,
            client_secret=settings.GOOGLE_CLIENT_SECRET,
            token_uri=settings.GOOGLE_TOKEN_URI,
            timeout=settings.CALENDAR_HTTP_TIMEOUT_SECONDS,
        )

    def refresh_access_token(self, refresh_token: str) -> str:
        """Exchange a stored refresh token for a short-lived access token"""
        credentials = Credentials(
            token=None,
            refresh_token=refresh_token,
            token_uri=self.token_uri,
            client_id=self.client_id,
            client_secret=self.client_secret,
        )
        request = functools.partial(Request(), timeout=self.timeout)

        try:
            credentials.refresh(request)
        except (GoogleAuthError, ValueError) as e:
            raise AuthError(f"Google token refresh failed: {e}") from e

        if not credentials.token:
            raise AuthError("Failed to parse access_token from Google")
        return credentials.token

    def _build_service(self, access_token: str):
        credentials = Credentials(token=access_token)
        http = AuthorizedHttp(credentials, http=httplib2.Http(timeout=self.timeout))
        return build("calendar", "v3", http=http, cache_discovery=False)

    def query_free_busy(
            self,
            access_token: str,
            time_min: datetime,
            time_max: datetime,
            calendar_id: str = "primary",
    ) -> Dict[str, List[BusyBlock]]:
        """Return busy (start, end) RFC3339 pairs per calendar for the window"""
        body = {
            "timeMin": to_rfc3339(time_min),
            "timeMax": to_rfc3339(time_max),
            "items": [{"id": calendar_id}],
        }

        try:
            response = self._build_service(access_token).freebusy().query(body=body).execute()
        except HttpError as e:
            raise CalendarAPIError(
                "Google free/busy query failed",
                status_code=e.resp.status,
                response_body=_error_body(e),
            ) from e
        except (httplib2.HttpLib2Error, OSError) as e:
            raise CalendarAPIError(f"Failed to contact Google: {e}") from e

        calendars = response.get("calendars") if isinstance(response, dict) else None
        if not isinstance(calendars, dict):
            raise CalendarAPIError("Malformed free/busy response", response_body=str(response))

        busy_by_calendar: Dict[str, List[BusyBlock]] = {}
        for cal_id, data in calendars.items():
            if data.get("errors"):
                raise CalendarAPIError(
                    f"Free/busy unavailable for calendar {cal_id}",
                    response_body=str(data["errors"]),
                )
            try:
                busy_by_calendar[cal_id] = [
                    (block["start"], block["end"]) for block in data.get("busy", [])
                ]
            except (KeyError, TypeError) as e:
                raise CalendarAPIError("Malformed busy block in free/busy response") from e

        return busy_by_calendar

    def insert_event(
            self,
            access_token: str,
            event: Dict[str, Any],
            calendar_id: str = "primary",
    ) -> Dict[str, Any]:
        """Create the event and send invites to attendees"""
        try:
            created = self._build_service(access_token).events().insert(
                calendarId=calendar_id,
                body=event,
                sendUpdates="all",
            ).execute()
        except HttpError as e:
            raise CalendarAPIError(
                "Google Calendar API Error",
                status_code=e.resp.status,
                response_body=_error_body(e),
            ) from e
        except (httplib2.HttpLib2Error, OSError) as e:
            raise CalendarAPIError(f"Failed to contact Google: {e}") from e

        logger.info(f"Created Google Calendar event {created.get('id')} on calendar {calendar_id}")
        return created
