"""Static configuration for the team calendar sync, read from the environment."""
import os
from dataclasses import dataclass
from typing import List, Mapping, Optional


DEFAULT_KEYWORDS = 'pto,ooo,out of office,offline,vacation,PTO,Out of office'


class ConfigError(Exception):
    """Raised when required configuration is missing or invalid."""


def _split_list(value: str) -> List[str]:
    return [item.strip() for item in value.split(',') if item.strip()]


@dataclass
class SyncConfig:
    """Settings for a sync pass and trigger setup."""
    team_calendar_id: str
    user_emails: List[str]
    keywords: List[str]
    months_in_advance: int = 3
    table_name: str = 'team-calendar-sync-properties'
    service_account_file: str = 'service_account.json'
    delegated_user: Optional[str] = None
    trigger_rule_name: str = 'team-calendar-sync-hourly'
    log_level: str = 'INFO'
    timeout_seconds: int = 30

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'SyncConfig':
        """
        Build configuration from environment variables.

        Args:
            environ: Mapping to read instead of os.environ

        Returns:
            SyncConfig instance

        Raises:
            ConfigError: If a required variable is missing or malformed
        """
        env = os.environ if environ is None else environ

        team_calendar_id = env.get('TEAM_CALENDAR_ID', '').strip()
        if not team_calendar_id:
            raise ConfigError('TEAM_CALENDAR_ID is not set')

        user_emails = _split_list(env.get('USER_EMAILS', ''))
        if not user_emails:
            raise ConfigError('USER_EMAILS is not set')

        try:
            months_in_advance = int(env.get('MONTHS_IN_ADVANCE', '3'))
            timeout_seconds = int(env.get('TIMEOUT_SECONDS', '30'))
        except ValueError as e:
            raise ConfigError(f"Invalid numeric setting: {e}") from e

        return cls(
            team_calendar_id=team_calendar_id,
            user_emails=user_emails,
            keywords=_split_list(env.get('KEYWORDS', DEFAULT_KEYWORDS)),
            months_in_advance=months_in_advance,
            table_name=env.get('TABLE_NAME', 'team-calendar-sync-properties'),
            service_account_file=env.get('SERVICE_ACCOUNT_FILE', 'service_account.json'),
            delegated_user=env.get('DELEGATED_USER') or None,
            trigger_rule_name=env.get('TRIGGER_RULE_NAME', 'team-calendar-sync-hourly'),
            log_level=env.get('LOG_LEVEL', 'INFO'),
            timeout_seconds=timeout_seconds
        )
