"""Selection rules and transform for mirroring events into the team calendar."""
import copy
import logging
from datetime import timezone
from typing import Optional

from dateutil.parser import isoparse

from processor.models import (
    DEFAULT_EVENT_TYPE,
    TYPE_SPECIFIC_PROPERTIES,
    MirroredEvent,
    SourceEvent,
)

logger = logging.getLogger(__name__)

SATURDAY = 5
SUNDAY = 6


def username_from_email(email: str) -> str:
    """Return the part of an address before the '@'."""
    return email.split('@')[0]


def start_weekday_utc(event: SourceEvent) -> Optional[int]:
    """
    Weekday of the event start in UTC (Monday is 0).

    All-day starts are taken as midnight UTC of that date.

    Args:
        event: Event to inspect

    Returns:
        Weekday number, or None if the start cannot be parsed
    """
    if not event.start:
        return None

    try:
        start = isoparse(event.start)
    except ValueError:
        logger.warning(
            f"Unparseable start '{event.start}' for event '{event.summary}'"
        )
        return None

    if start.tzinfo is None:
        start = start.replace(tzinfo=timezone.utc)

    return start.astimezone(timezone.utc).weekday()


def should_import_event(user_email: str, keyword: str,
                        event: SourceEvent) -> bool:
    """
    Decide whether an event from a user's calendar belongs on the team calendar.

    Args:
        user_email: Address of the calendar owner
        keyword: Keyword the event was searched for
        event: Candidate event

    Returns:
        True if the event should be imported
    """
    # The search also matches descriptions and locations; only titles count
    if keyword.lower() not in event.summary.lower():
        return False

    weekday = start_weekday_utc(event)
    if weekday is None or weekday in (SATURDAY, SUNDAY):
        return False

    if event.organizer_email is None or event.organizer_email == user_email:
        return True

    if not event.attendees:
        return False

    own_entries = [attendee for attendee in event.attendees if attendee.self_]
    return bool(own_entries) and own_entries[0].response_status == 'accepted'


def to_mirrored_event(username: str, event: SourceEvent,
                      team_calendar_id: str) -> MirroredEvent:
    """
    Build the team calendar copy of a source event.

    Args:
        username: Name shown in brackets before the summary
        event: Event selected for mirroring
        team_calendar_id: Calendar the copy is imported into

    Returns:
        MirroredEvent ready for import
    """
    body = copy.deepcopy(event.raw)
    event_type = event.event_type

    if event_type != DEFAULT_EVENT_TYPE:
        event_type = DEFAULT_EVENT_TYPE
        for key in TYPE_SPECIFIC_PROPERTIES:
            body.pop(key, None)

    return MirroredEvent(
        summary=f"[{username}] {event.summary}",
        organizer={'id': team_calendar_id},
        attendees=[],
        event_type=event_type,
        body=body
    )

