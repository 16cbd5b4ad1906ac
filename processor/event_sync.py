"""Sync pass that mirrors matching user events into the team calendar."""
import logging
from datetime import datetime
from typing import Iterable, List, Optional

from dateutil.relativedelta import relativedelta

from calendar_api.google_calendar import GoogleCalendarClient, format_rfc3339
from processor.event_filter import (
    should_import_event,
    to_mirrored_event,
    username_from_email,
)
from processor.models import KeywordResult, SourceEvent, SyncReport, SyncWindow

logger = logging.getLogger(__name__)


def build_window(now: datetime, months_in_advance: int = 3) -> SyncWindow:
    """Window from now until the given number of months ahead."""
    return SyncWindow(start=now, end=now + relativedelta(months=months_in_advance))


class EventSyncFilter:
    """Selects user events for the team calendar and imports them."""

    def __init__(self, client: GoogleCalendarClient, team_calendar_id: str):
        """
        Initialize the sync filter.

        Args:
            client: Calendar client used for both reads and imports
            team_calendar_id: Calendar that receives mirrored events
        """
        self.client = client
        self.team_calendar_id = team_calendar_id

    def select_events_to_mirror(
        self,
        user_email: str,
        keyword: str,
        window_start: datetime,
        window_end: datetime,
        watermark: Optional[datetime] = None
    ) -> KeywordResult:
        """
        Find the events in a user's calendar that qualify for mirroring.

        The provider search is only a coarse pre-filter; every returned item
        is checked with should_import_event.

        Args:
            user_email: Calendar owner
            keyword: Keyword to search for
            window_start: Earliest event time
            window_end: Latest event time
            watermark: If set, skip events not modified since then

        Returns:
            KeywordResult with the qualifying events, or the failure reason
        """
        params = {
            'q': keyword,
            'timeMin': format_rfc3339(window_start),
            'timeMax': format_rfc3339(window_end),
            'showDeleted': 'true',
        }
        if watermark:
            params['updatedMin'] = format_rfc3339(watermark)

        events: List[SourceEvent] = []
        try:
            for page in self.client.iter_event_pages(user_email, params):
                for item in page.get('items', []):
                    event = SourceEvent.from_api(item)
                    if should_import_event(user_email, keyword, event):
                        events.append(event)
        except Exception as e:
            reason = f"Error retrieving events for {user_email}, {keyword}: {e}"
            logger.error(f"{reason}; skipping")
            return KeywordResult.err_result(user_email, keyword, reason)

        logger.debug(
            f"Found {len(events)} events for {user_email} matching '{keyword}'"
        )
        return KeywordResult.ok_result(user_email, keyword, events)

    def import_event(self, username: str, event: SourceEvent) -> bool:
        """
        Mirror a single event into the team calendar.

        Args:
            username: Name prefixed to the summary
            event: Event to mirror

        Returns:
            True if the import succeeded
        """
        mirrored = to_mirrored_event(username, event, self.team_calendar_id)
        logger.info(f"Importing: {mirrored.summary}")

        try:
            self.client.import_event(self.team_calendar_id, mirrored.to_api())
        except Exception as e:
            logger.error(f"Error attempting to import event: {e}. Skipping.")
            return False

        return True

    def run_sync_pass(
        self,
        users: Iterable[str],
        keywords: Iterable[str],
        window: SyncWindow,
        watermark: Optional[datetime] = None
    ) -> SyncReport:
        """
        Run one pass over every user and keyword.

        The returned report carries the new watermark (the window start);
        persisting it is left to the caller.

        Args:
            users: Addresses of monitored users
            keywords: Keywords to search each calendar for
            window: Time range to search
            watermark: Time of the previous pass, or None on the first run

        Returns:
            SyncReport with counts and per-query results
        """
        report = SyncReport(watermark=window.start)
        keywords = list(keywords)

        for email in users:
            if not email:
                logger.warning("Skipping empty user address in configuration")
                continue

            username = username_from_email(email)
            for keyword in keywords:
                result = self.select_events_to_mirror(
                    email, keyword, window.start, window.end, watermark
                )
                report.results.append(result)
                if not result.ok:
                    report.errors.append(result.error)
                    continue

                for event in result.events:
                    if self.import_event(username, event):
                        report.imported += 1
                    else:
                        report.failed_imports += 1
                        report.errors.append(
                            f"Failed to import '{event.summary}' for {email}"
                        )

        logger.info(f"Imported {report.imported} events")
        return report
