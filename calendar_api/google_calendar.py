"""Google Calendar v3 REST client for reading user calendars and importing events."""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional
from urllib.parse import quote

import requests

logger = logging.getLogger(__name__)

CALENDAR_SCOPES = ['https://www.googleapis.com/auth/calendar']


class CalendarAPIError(Exception):
    """Raised when a Calendar API request fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def format_rfc3339(moment: datetime) -> str:
    """
    Format a datetime as an RFC 3339 UTC timestamp.

    Naive datetimes are assumed to already be in UTC.

    Args:
        moment: Datetime to format

    Returns:
        Timestamp such as '2024-01-15T10:00:00Z'
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime('%Y-%m-%dT%H:%M:%SZ')


def build_delegated_session(credentials_file: str, subject: Optional[str] = None,
                            scopes=None) -> requests.Session:
    """
    Build an authorized HTTP session from a service account key.

    Args:
        credentials_file: Path to the service account JSON key
        subject: Workspace user to impersonate through domain-wide delegation
        scopes: OAuth scopes (default: full calendar access)

    Returns:
        AuthorizedSession usable by GoogleCalendarClient
    """
    from google.auth.transport.requests import AuthorizedSession
    from google.oauth2 import service_account

    credentials = service_account.Credentials.from_service_account_file(
        credentials_file,
        scopes=scopes or CALENDAR_SCOPES
    )
    if subject:
        credentials = credentials.with_subject(subject)

    logger.info(f"Built calendar session from service account key {credentials_file}")
    return AuthorizedSession(credentials)


class GoogleCalendarClient:
    """Thin client over the Calendar v3 events endpoints."""

    BASE_URL = "https://www.googleapis.com/calendar/v3"

    def __init__(self, session: requests.Session, timeout: int = 30,
                 base_url: Optional[str] = None):
        """
        Initialize the calendar client.

        Args:
            session: HTTP session carrying credentials
            timeout: HTTP request timeout in seconds (default: 30)
            base_url: API root, overridable for testing
        """
        self.session = session
        self.timeout = timeout
        self.base_url = (base_url or self.BASE_URL).rstrip('/')

    def _events_url(self, calendar_id: str, suffix: str = '') -> str:
        return f"{self.base_url}/calendars/{quote(calendar_id, safe='')}/events{suffix}"

    def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        try:
            response = self.session.request(
                method,
                url,
                timeout=self.timeout,
                **kwargs
            )
        except requests.RequestException as e:
            raise CalendarAPIError(f"{method} {url} failed: {e}") from e

        if not response.ok:
            raise CalendarAPIError(
                f"{method} {url} returned {response.status_code}: "
                f"{response.text[:500]}",
                status_code=response.status_code
            )

        return response.json() if response.content else {}

    def list_events(self, calendar_id: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """
        Fetch one page of events from a calendar.

        Args:
            calendar_id: Calendar to read (a user's address for primary calendars)
            params: Query parameters (q, timeMin, timeMax, updatedMin, pageToken...)

        Returns:
            Events list response with 'items' and optional 'nextPageToken'

        Raises:
            CalendarAPIError: If the request fails
        """
        query = {key: value for key, value in params.items() if value is not None}
        return self._request('GET', self._events_url(calendar_id), params=query)

    def iter_event_pages(self, calendar_id: str,
                         params: Dict[str, Any]) -> Iterator[Dict[str, Any]]:
        """
        Yield every page of an events query, following continuation tokens.

        Args:
            calendar_id: Calendar to read
            params: Query parameters for the first page

        Yields:
            Events list responses in order
        """
        page_params = dict(params)
        page_token = None

        while True:
            page_params['pageToken'] = page_token
            page = self.list_events(calendar_id, page_params)
            yield page

            page_token = page.get('nextPageToken')
            if not page_token:
                break

    def import_event(self, calendar_id: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """
        Import an event into a calendar.

        Args:
            calendar_id: Destination calendar
            body: Event resource to import

        Returns:
            The imported event resource

        Raises:
            CalendarAPIError: If the request fails
        """
        return self._request('POST', self._events_url(calendar_id, '/import'), json=body)
