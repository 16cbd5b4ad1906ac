"""Shared fixtures for the sync tests."""
import os
from unittest.mock import patch

import pytest


@pytest.fixture(autouse=True)
def aws_credentials():
    """Fake AWS credentials so boto3 never reaches a real account."""
    env_vars = {
        'AWS_ACCESS_KEY_ID': 'testing',
        'AWS_SECRET_ACCESS_KEY': 'testing',
        'AWS_SECURITY_TOKEN': 'testing',
        'AWS_SESSION_TOKEN': 'testing',
        'AWS_DEFAULT_REGION': 'us-east-1'
    }
    with patch.dict(os.environ, env_vars):
        yield env_vars


@pytest.fixture
def make_event_item():
    """Factory for Calendar API event resources."""
    return _make_event_item


def _make_event_item(summary, start, organizer=None, attendees=None,
                    event_type=None, **extra):
    """Build a Calendar API event resource for tests."""
    item = {
        'id': extra.pop('id', 'evt-1'),
        'summary': summary,
        'start': {'date': start} if len(start) == 10 else {'dateTime': start},
    }
    if organizer is not None:
        item['organizer'] = {'email': organizer}
    if attendees is not None:
        item['attendees'] = attendees
    if event_type is not None:
        item['eventType'] = event_type
    item.update(extra)
    return item
