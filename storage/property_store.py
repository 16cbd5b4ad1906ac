"""DynamoDB-backed property store holding the sync watermark."""
import logging
from datetime import datetime, timezone
from typing import Optional

import boto3
from botocore.exceptions import ClientError
from dateutil.parser import isoparse

logger = logging.getLogger(__name__)

LAST_RUN_KEY = 'lastRun'


class DynamoDBPropertyStore:
    """String key-value properties persisted in a DynamoDB table."""

    KEY_ATTRIBUTE = 'property_key'
    VALUE_ATTRIBUTE = 'value'

    def __init__(self, table_name: str):
        """
        Initialize DynamoDB resource and table reference.

        Args:
            table_name: Name of the DynamoDB table
        """
        self.table_name = table_name
        self.dynamodb = boto3.resource('dynamodb')
        self.table = self.dynamodb.Table(table_name)
        logger.info(f"Initialized DynamoDBPropertyStore for table: {table_name}")

    def get_property(self, key: str) -> Optional[str]:
        """
        Read a property.

        Args:
            key: Property name

        Returns:
            Stored value, or None if the property was never set
        """
        try:
            response = self.table.get_item(Key={self.KEY_ATTRIBUTE: key})
        except ClientError as e:
            logger.error(f"Error reading property '{key}': {e}")
            raise

        item = response.get('Item')
        if not item:
            return None
        return item.get(self.VALUE_ATTRIBUTE)

    def set_property(self, key: str, value: str) -> None:
        """
        Write a property, replacing any previous value.

        Args:
            key: Property name
            value: Value to store
        """
        try:
            self.table.put_item(
                Item={self.KEY_ATTRIBUTE: key, self.VALUE_ATTRIBUTE: value}
            )
        except ClientError as e:
            logger.error(f"Error writing property '{key}': {e}")
            raise


class WatermarkStore:
    """Reads and writes the time of the last sync pass."""

    def __init__(self, properties: DynamoDBPropertyStore, key: str = LAST_RUN_KEY):
        self.properties = properties
        self.key = key

    def read(self) -> Optional[datetime]:
        value = self.properties.get_property(self.key)
        if not value:
            return None

        try:
            watermark = isoparse(value)
        except ValueError:
            logger.warning(f"Ignoring unparseable watermark '{value}'")
            return None

        if watermark.tzinfo is None:
            watermark = watermark.replace(tzinfo=timezone.utc)
        return watermark

    def write(self, watermark: datetime) -> None:
        if watermark.tzinfo is None:
            watermark = watermark.replace(tzinfo=timezone.utc)
        value = watermark.astimezone(timezone.utc).isoformat()
        self.properties.set_property(self.key, value)
        logger.info(f"Saved watermark {value}")
