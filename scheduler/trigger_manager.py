"""EventBridge schedule registration for the hourly sync."""
import json
import logging

import boto3
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)


class TriggerAlreadyExistsError(Exception):
    """Raised when the hourly trigger has already been registered."""


class TriggerSetupError(Exception):
    """Raised when EventBridge rejects the rule target."""


class TriggerManager:
    """Registers the single hourly EventBridge rule that invokes the sync."""

    SCHEDULE_EXPRESSION = 'rate(1 hour)'
    TARGET_ID = 'team-calendar-sync'
    PERMISSION_STATEMENT_ID = 'team-calendar-sync-hourly-invoke'

    def __init__(self, rule_name: str, function_arn: str):
        """
        Initialize the EventBridge and Lambda clients.

        Args:
            rule_name: Name of the schedule rule
            function_arn: ARN of the Lambda function the rule invokes
        """
        self.rule_name = rule_name
        self.function_arn = function_arn
        self.events = boto3.client('events')
        self.lambda_client = boto3.client('lambda')

    def has_trigger(self) -> bool:
        """True if a rule with exactly the configured name exists."""
        try:
            paginator = self.events.get_paginator('list_rules')
            for page in paginator.paginate(NamePrefix=self.rule_name):
                if any(rule['Name'] == self.rule_name for rule in page.get('Rules', [])):
                    return True
        except ClientError as e:
            logger.error(f"Error listing EventBridge rules: {e}")
            raise
        return False

    def setup(self) -> str:
        """
        Register the hourly trigger.

        Creates the rule, points it at the function and allows EventBridge
        to invoke the function. If any step fails the rule is removed again,
        so a later setup can be retried.

        Returns:
            ARN of the created rule

        Raises:
            TriggerAlreadyExistsError: If the trigger is already set up
            TriggerSetupError: If EventBridge rejects the target
        """
        if self.has_trigger():
            raise TriggerAlreadyExistsError('Triggers are already setup.')

        response = self.events.put_rule(
            Name=self.rule_name,
            ScheduleExpression=self.SCHEDULE_EXPRESSION,
            State='ENABLED',
            Description='Hourly team calendar sync'
        )
        rule_arn = response['RuleArn']

        try:
            self._add_target()
            self.grant_invoke_permission(rule_arn)
        except Exception:
            self._remove_rule()
            raise

        logger.info(f"Registered hourly trigger {rule_arn} for {self.function_arn}")
        return rule_arn

    def _add_target(self) -> None:
        response = self.events.put_targets(
            Rule=self.rule_name,
            Targets=[{
                'Id': self.TARGET_ID,
                'Arn': self.function_arn,
                'Input': json.dumps({'source': 'schedule'})
            }]
        )
        if response.get('FailedEntryCount', 0):
            entries = response.get('FailedEntries', [])
            raise TriggerSetupError(f"EventBridge rejected the rule target: {entries}")

    def grant_invoke_permission(self, rule_arn: str) -> None:
        """
        Allow the rule to invoke the function.

        Args:
            rule_arn: ARN of the schedule rule
        """
        self.lambda_client.add_permission(
            FunctionName=self.function_arn,
            StatementId=self.PERMISSION_STATEMENT_ID,
            Action='lambda:InvokeFunction',
            Principal='events.amazonaws.com',
            SourceArn=rule_arn
        )

    def _remove_rule(self) -> None:
        logger.warning(f"Removing incomplete trigger {self.rule_name}")
        targets = self.events.list_targets_by_rule(Rule=self.rule_name).get('Targets', [])
        if targets:
            self.events.remove_targets(
                Rule=self.rule_name,
                Ids=[target['Id'] for target in targets]
            )
        self.events.delete_rule(Name=self.rule_name)
