"""AWS Lambda handlers for the team calendar PTO sync."""
import json
import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict

from calendar_api.google_calendar import GoogleCalendarClient, build_delegated_session
from config import ConfigError, SyncConfig
from processor.event_sync import EventSyncFilter, build_window
from scheduler.trigger_manager import TriggerAlreadyExistsError, TriggerManager
from storage.property_store import DynamoDBPropertyStore, WatermarkStore


# Configure JSON logging
class JsonFormatter(logging.Formatter):
    """JSON formatter for structured CloudWatch logs."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as a single-line JSON object."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Route all logging through a single JSON handler.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


def _error_response(status_code: int, message: str, error: Exception,
                    start_time: float) -> Dict[str, Any]:
    return {
        'statusCode': status_code,
        'body': json.dumps({
            'message': message,
            'error': str(error),
            'error_type': type(error).__name__,
            'duration_seconds': round(time.time() - start_time, 2)
        })
    }


def run_sync(config: SyncConfig) -> Dict[str, Any]:
    """
    Run one sync pass and persist the new watermark.

    Args:
        config: Sync configuration

    Returns:
        Statistics for the response body
    """
    logger = logging.getLogger(__name__)

    session = build_delegated_session(
        config.service_account_file,
        subject=config.delegated_user
    )
    client = GoogleCalendarClient(session, timeout=config.timeout_seconds)
    sync_filter = EventSyncFilter(client, config.team_calendar_id)
    watermarks = WatermarkStore(DynamoDBPropertyStore(config.table_name))

    now = datetime.now(timezone.utc)
    window = build_window(now, config.months_in_advance)
    last_run = watermarks.read()
    logger.info(
        f"Starting sync pass for {len(config.user_emails)} users, "
        f"{len(config.keywords)} keywords",
        extra={'last_run': last_run.isoformat() if last_run else None}
    )

    report = sync_filter.run_sync_pass(
        config.user_emails, config.keywords, window, last_run
    )
    watermarks.write(report.watermark)

    return {
        'events_imported': report.imported,
        'failed_imports': report.failed_imports,
        'failed_queries': report.failed_queries,
        'queries': len(report.results),
        'errors': report.errors,
    }


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Hourly handler: mirror matching events into the team calendar.

    Args:
        event: EventBridge event payload
        context: Lambda context object

    Returns:
        Response dict with statusCode and summary statistics
    """
    start_time = time.time()
    logger = logging.getLogger(__name__)

    try:
        config = SyncConfig.from_env()
    except ConfigError as e:
        setup_logging()
        logger.error(f"Invalid configuration: {e}")
        return _error_response(500, 'Invalid configuration', e, start_time)

    setup_logging(config.log_level)
    logger.info(
        "Lambda execution started",
        extra={'team_calendar_id': config.team_calendar_id}
    )

    try:
        stats = run_sync(config)
    except Exception as e:
        logger.error(
            f"Lambda execution failed: {str(e)}",
            extra={'error_type': type(e).__name__},
            exc_info=True
        )
        return _error_response(500, 'Sync failed', e, start_time)

    duration = time.time() - start_time
    logger.info(
        "Lambda execution completed successfully",
        extra={'duration_seconds': round(duration, 2), **stats}
    )

    errors = stats.pop('errors')
    stats['duration_seconds'] = round(duration, 2)
    return {
        'statusCode': 200,
        'body': json.dumps({
            'message': 'Sync completed successfully',
            'statistics': stats,
            'errors': errors
        })
    }


def setup_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    One-time setup: register the hourly trigger, then run the first sync.

    Args:
        event: Invocation payload (unused)
        context: Lambda context object; its ARN becomes the rule target

    Returns:
        Response dict; 409 if the trigger already exists
    """
    start_time = time.time()
    logger = logging.getLogger(__name__)

    try:
        config = SyncConfig.from_env()
    except ConfigError as e:
        setup_logging()
        logger.error(f"Invalid configuration: {e}")
        return _error_response(500, 'Invalid configuration', e, start_time)

    setup_logging(config.log_level)

    try:
        manager = TriggerManager(config.trigger_rule_name, context.invoked_function_arn)
        rule_arn = manager.setup()
    except TriggerAlreadyExistsError as e:
        logger.error(str(e))
        return _error_response(409, 'Trigger setup failed', e, start_time)
    except Exception as e:
        logger.error(
            f"Trigger setup failed: {str(e)}",
            extra={'error_type': type(e).__name__},
            exc_info=True
        )
        return _error_response(500, 'Trigger setup failed', e, start_time)

    response = lambda_handler(event, context)
    body = json.loads(response['body'])
    body['rule_arn'] = rule_arn
    response['body'] = json.dumps(body)
    return response
