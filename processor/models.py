"""Data models for calendar event mirroring."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


DEFAULT_EVENT_TYPE = 'default'

# Type-specific payloads the team calendar cannot store on a default event
TYPE_SPECIFIC_PROPERTIES = (
    'outOfOfficeProperties',
    'focusTimeProperties',
    'workingLocationProperties',
)


@dataclass
class Attendee:
    """Attendee entry of a source event."""
    email: str
    self_: bool = False
    response_status: str = 'needsAction'

    @classmethod
    def from_api(cls, item: Dict[str, Any]) -> 'Attendee':
        return cls(
            email=item.get('email', ''),
            self_=bool(item.get('self', False)),
            response_status=item.get('responseStatus', 'needsAction')
        )


@dataclass
class SourceEvent:
    """Event read from a user's calendar."""
    summary: str
    start: str
    organizer_email: Optional[str] = None
    attendees: Optional[List[Attendee]] = None
    event_type: str = DEFAULT_EVENT_TYPE
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, item: Dict[str, Any]) -> 'SourceEvent':
        """
        Convert a Calendar API event resource to a SourceEvent.

        Args:
            item: Event resource dictionary from the Calendar API

        Returns:
            SourceEvent wrapping the resource
        """
        start = item.get('start') or {}
        organizer = item.get('organizer')
        attendees = item.get('attendees')

        return cls(
            summary=item.get('summary') or '',
            start=start.get('dateTime') or start.get('date') or '',
            organizer_email=(
                organizer.get('email', '') if organizer is not None else None
            ),
            attendees=(
                [Attendee.from_api(a) for a in attendees]
                if attendees is not None else None
            ),
            event_type=item.get('eventType', DEFAULT_EVENT_TYPE),
            raw=dict(item)
        )


@dataclass
class MirroredEvent:
    """Copy of a source event destined for the team calendar."""
    summary: str
    organizer: Dict[str, str]
    attendees: List[Dict[str, Any]]
    event_type: str
    body: Dict[str, Any]

    def to_api(self) -> Dict[str, Any]:
        """Build the request body for an events.import call."""
        payload = dict(self.body)
        payload['summary'] = self.summary
        payload['organizer'] = dict(self.organizer)
        payload['attendees'] = list(self.attendees)
        payload['eventType'] = self.event_type
        return payload


@dataclass
class SyncWindow:
    """Time range searched during a pass."""
    start: datetime
    end: datetime


@dataclass
class KeywordResult:
    """Outcome of querying one (user, keyword) pair."""
    user_email: str
    keyword: str
    events: List[SourceEvent] = field(default_factory=list)
    error: Optional[str] = None

    @classmethod
    def ok_result(cls, user_email: str, keyword: str,
                  events: List[SourceEvent]) -> 'KeywordResult':
        return cls(user_email=user_email, keyword=keyword, events=events)

    @classmethod
    def err_result(cls, user_email: str, keyword: str,
                   reason: str) -> 'KeywordResult':
        return cls(user_email=user_email, keyword=keyword, error=reason)

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class SyncReport:
    """Result of a sync pass."""
    watermark: datetime
    imported: int = 0
    failed_imports: int = 0
    results: List[KeywordResult] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def failed_queries(self) -> int:
        return sum(1 for result in self.results if not result.ok)
