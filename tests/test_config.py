"""Unit tests for configuration loading."""
import pytest

from config import DEFAULT_KEYWORDS, ConfigError, SyncConfig


def test_from_env_reads_lists():
    config = SyncConfig.from_env({
        'TEAM_CALENDAR_ID': 'team@group.calendar.google.com',
        'USER_EMAILS': 'bob@example.com, alice@example.com,,',
        'KEYWORDS': 'pto, out of office',
        'MONTHS_IN_ADVANCE': '6',
        'DELEGATED_USER': 'admin@example.com',
    })

    assert config.team_calendar_id == 'team@group.calendar.google.com'
    assert config.user_emails == ['bob@example.com', 'alice@example.com']
    assert config.keywords == ['pto', 'out of office']
    assert config.months_in_advance == 6
    assert config.delegated_user == 'admin@example.com'


def test_defaults():
    config = SyncConfig.from_env({
        'TEAM_CALENDAR_ID': 'team@group.calendar.google.com',
        'USER_EMAILS': 'bob@example.com',
    })

    assert config.keywords == DEFAULT_KEYWORDS.split(',')
    assert 'pto' in config.keywords and 'PTO' in config.keywords
    assert config.months_in_advance == 3
    assert config.table_name == 'team-calendar-sync-properties'
    assert config.trigger_rule_name == 'team-calendar-sync-hourly'
    assert config.delegated_user is None
    assert config.timeout_seconds == 30


@pytest.mark.parametrize('environ', [
    {'USER_EMAILS': 'bob@example.com'},
    {'TEAM_CALENDAR_ID': 'team@group.calendar.google.com'},
    {'TEAM_CALENDAR_ID': 'team@group.calendar.google.com', 'USER_EMAILS': ' , '},
])
def test_missing_required_setting(environ):
    with pytest.raises(ConfigError):
        SyncConfig.from_env(environ)


def test_invalid_horizon():
    with pytest.raises(ConfigError):
        SyncConfig.from_env({
            'TEAM_CALENDAR_ID': 'team@group.calendar.google.com',
            'USER_EMAILS': 'bob@example.com',
            'MONTHS_IN_ADVANCE': 'three',
        })
