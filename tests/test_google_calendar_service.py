from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import httplib2
import pytest
from google.auth.exceptions import RefreshError, TransportError
from googleapiclient.errors import HttpError

from app.core.exceptions import AuthError, CalendarAPIError
from app.services.calendar.google_calendar_service import GoogleCalendarService

UTC = timezone.utc
MODULE = "app.services.calendar.google_calendar_service"
TIME_MIN = datetime(2024, 1, 3, 5, 0, tzinfo=UTC)
TIME_MAX = datetime(2024, 1, 4, 5, 0, tzinfo=UTC)


def http_error(status, body):
    return HttpError(httplib2.Response({"status": status}), body.encode())


@pytest.fixture
def google():
    return GoogleCalendarService(
        client_id="client-id",
        client_secret="client-secret",
        token_uri="https://oauth2.example.com/token",
        timeout=7.5,
    )


@pytest.fixture
def api(google):
    service = MagicMock()
    with patch.object(GoogleCalendarService, "_build_service", return_value=service) as build_service:
        service.build_service = build_service
        yield service


class TestRefreshAccessToken:
    def test_returns_new_access_token(self, google):
        with patch(f"{MODULE}.Credentials") as credentials_cls:
            credentials_cls.return_value.token = "fresh-access-token"

            assert google.refresh_access_token("stored-refresh") == "fresh-access-token"

        kwargs = credentials_cls.call_args.kwargs
        assert kwargs["refresh_token"] == "stored-refresh"
        assert kwargs["client_id"] == "client-id"
        assert kwargs["client_secret"] == "client-secret"
        assert kwargs["token_uri"] == "https://oauth2.example.com/token"

        request = credentials_cls.return_value.refresh.call_args.args[0]
        assert request.keywords == {"timeout": 7.5}

    @pytest.mark.parametrize("error", [
        RefreshError("invalid_grant: Token has been expired or revoked."),
        TransportError("connection refused"),
        ValueError("No JSON object could be decoded"),
    ])
    def test_failures_become_auth_error(self, google, error):
        with patch(f"{MODULE}.Credentials") as credentials_cls:
            credentials_cls.return_value.refresh.side_effect = error

            with pytest.raises(AuthError):
                google.refresh_access_token("stored-refresh")

    def test_missing_access_token(self, google):
        with patch(f"{MODULE}.Credentials") as credentials_cls:
            credentials_cls.return_value.token = None

            with pytest.raises(AuthError, match="access_token"):
                google.refresh_access_token("stored-refresh")


class TestQueryFreeBusy:
    def test_returns_blocks_per_calendar(self, google, api):
        api.freebusy.return_value.query.return_value.execute.return_value = {
            "kind": "calendar#freeBusy",
            "calendars": {
                "primary": {
                    "busy": [
                        {"start": "2024-01-03T15:00:00Z", "end": "2024-01-03T16:00:00Z"},
                        {"start": "2024-01-03T18:00:00Z", "end": "2024-01-03T18:30:00Z"},
                    ]
                }
            },
        }

        result = google.query_free_busy("access", TIME_MIN, TIME_MAX)

        assert result == {"primary": [
            ("2024-01-03T15:00:00Z", "2024-01-03T16:00:00Z"),
            ("2024-01-03T18:00:00Z", "2024-01-03T18:30:00Z"),
        ]}
        api.freebusy.return_value.query.assert_called_once_with(body={
            "timeMin": "2024-01-03T05:00:00Z",
            "timeMax": "2024-01-04T05:00:00Z",
            "items": [{"id": "primary"}],
        })
        api.build_service.assert_called_once_with("access")

    def test_calendar_without_busy_key(self, google, api):
        api.freebusy.return_value.query.return_value.execute.return_value = {"calendars": {"primary": {}}}
        assert google.query_free_busy("access", TIME_MIN, TIME_MAX) == {"primary": []}

    def test_http_error(self, google, api):
        api.freebusy.return_value.query.return_value.execute.side_effect = http_error(
            403, '{"error": {"message": "Forbidden"}}'
        )

        with pytest.raises(CalendarAPIError) as exc_info:
            google.query_free_busy("access", TIME_MIN, TIME_MAX)

        assert exc_info.value.status_code == 403
        assert "Forbidden" in exc_info.value.response_body

    def test_timeout(self, google, api):
        api.freebusy.return_value.query.return_value.execute.side_effect = TimeoutError("timed out")

        with pytest.raises(CalendarAPIError, match="Failed to contact Google"):
            google.query_free_busy("access", TIME_MIN, TIME_MAX)

    @pytest.mark.parametrize("payload", [
        {},
        {"calendars": []},
        {"calendars": {"primary": {"busy": [{"start": "2024-01-03T15:00:00Z"}]}}},
        {"calendars": {"primary": {"errors": [{"domain": "global", "reason": "notFound"}]}}},
    ])
    def test_malformed_payload(self, google, api, payload):
        api.freebusy.return_value.query.return_value.execute.return_value = payload

        with pytest.raises(CalendarAPIError):
            google.query_free_busy("access", TIME_MIN, TIME_MAX)


class TestInsertEvent:
    event = {
        "summary": "Appointment Scheduled: Haircut for Jane",
        "start": {"dateTime": "2024-01-03T14:00:00Z", "timeZone": "UTC"},
        "end": {"dateTime": "2024-01-03T14:30:00Z", "timeZone": "UTC"},
        "attendees": [{"email": "jane@example.com"}],
    }

    def test_inserts_with_invites(self, google, api):
        api.events.return_value.insert.return_value.execute.return_value = {"id": "evt-123"}

        created = google.insert_event("access", self.event, calendar_id="team@example.com")

        assert created == {"id": "evt-123"}
        api.events.return_value.insert.assert_called_once_with(
            calendarId="team@example.com", body=self.event, sendUpdates="all"
        )

    def test_http_error_keeps_provider_body(self, google, api):
        api.events.return_value.insert.return_value.execute.side_effect = http_error(
            400, '{"error": {"message": "Invalid attendee email."}}'
        )

        with pytest.raises(CalendarAPIError) as exc_info:
            google.insert_event("access", self.event)

        assert exc_info.value.status_code == 400
        assert "Invalid attendee email." in exc_info.value.response_body
        assert "Invalid attendee email." in str(exc_info.value)

    def test_transport_error(self, google, api):
        api.events.return_value.insert.return_value.execute.side_effect = httplib2.ServerNotFoundError("dns")

        with pytest.raises(CalendarAPIError):
            google.insert_event("access", self.event)


def test_build_service_uses_bounded_transport(google):
    with patch(f"{MODULE}.build") as build, patch(f"{MODULE}.httplib2.Http") as http_cls:
        google._build_service("access")

    http_cls.assert_called_once_with(timeout=7.5)
    args, kwargs = build.call_args
    assert args == ("calendar", "v3")
    assert kwargs["cache_discovery"] is False


def test_from_settings(settings):
    google = GoogleCalendarService.from_settings(settings)
    assert google.client_id == "test-client-id"
    assert google.timeout == settings.CALENDAR_HTTP_TIMEOUT_SECONDS
