"""
Remote collaborators: the EventBridge rule service and the Lambda
function registry.

Thin wrappers over boto3 clients. Each call is logged at DEBUG and
botocore failures are re-raised as scheduling errors so the service
layer can decide whether a step is fatal.
"""

import logging
from typing import List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from lambda_scheduler.errors import (
    BindError,
    FunctionLookupError,
    InvokePermissionError,
    RuleError,
)
from lambda_scheduler.models import (
    FunctionRef,
    InvokePermission,
    InvokeTarget,
    ScheduleRule,
)

logger = logging.getLogger(__name__)

AWS_ERRORS = (ClientError, BotoCoreError)


def get_events_client(region: str, endpoint_url: Optional[str] = None):
    return boto3.client("events", region_name=region, endpoint_url=endpoint_url)


def get_lambda_client(region: str, endpoint_url: Optional[str] = None):
    return boto3.client("lambda", region_name=region, endpoint_url=endpoint_url)


def error_code(error: Exception) -> Optional[str]:
    """AWS error code of a ClientError, e.g. 'ResourceNotFoundException'."""
    if isinstance(error, ClientError):
        return error.response.get("Error", {}).get("Code")
    return None


class EventRules:
    """EventBridge scheduled-rule operations."""

    def __init__(self, client):
        self.client = client

    def put_rule(self, name: str, schedule_expression: str) -> str:
        """
        Create or update a rule with a schedule.

        PutRule is idempotent per name: calling it again updates the
        schedule of the existing rule.

        Returns:
            ARN of the rule
        """
        try:
            response = self.client.put_rule(Name=name, ScheduleExpression=schedule_expression)
        except AWS_ERRORS as e:
            logger.error(f"put_rule: {e}")
            raise RuleError(f"Could not create scheduled rule {name}: {e}") from e
        logger.debug(f"Put rule {name} with schedule {schedule_expression}")
        return response["RuleArn"]

    def delete_rule(self, name: str):
        try:
            self.client.delete_rule(Name=name)
        except AWS_ERRORS as e:
            raise RuleError(f"Could not delete scheduled rule {name}: {e}") from e
        logger.debug(f"Deleted rule {name}")

    def describe_rule(self, name: str) -> ScheduleRule:
        try:
            response = self.client.describe_rule(Name=name)
        except AWS_ERRORS as e:
            raise RuleError(f"Could not retrieve scheduled rule {name}: {e}") from e
        rule = ScheduleRule.from_response(response)
        logger.debug(f"Rule {name} is {rule.state}")
        return rule

    def enable_rule(self, name: str):
        try:
            self.client.enable_rule(Name=name)
        except AWS_ERRORS as e:
            raise RuleError(f"Could not enable scheduled rule {name}: {e}") from e
        logger.debug(f"Enabled rule {name}")

    def disable_rule(self, name: str):
        try:
            self.client.disable_rule(Name=name)
        except AWS_ERRORS as e:
            raise RuleError(f"Could not disable scheduled rule {name}: {e}") from e
        logger.debug(f"Disabled rule {name}")

    def put_targets(self, rule_name: str, targets: List[InvokeTarget]) -> int:
        """
        Set targets on a rule.

        Returns:
            Number of entries EventBridge failed to add
        """
        try:
            response = self.client.put_targets(
                Rule=rule_name,
                Targets=[target.to_request() for target in targets]
            )
        except AWS_ERRORS as e:
            logger.error(f"put_targets: {e}")
            raise BindError(f"Could not set targets for {rule_name}: {e}") from e

        failed = response.get("FailedEntryCount", 0)
        for entry in response.get("FailedEntries", []):
            logger.error(
                f"put_targets: target {entry.get('TargetId')} failed: "
                f"{entry.get('ErrorCode')} {entry.get('ErrorMessage')}"
            )
        return failed

    def remove_targets(self, rule_name: str, target_ids: List[str]):
        try:
            response = self.client.remove_targets(Rule=rule_name, Ids=target_ids)
        except AWS_ERRORS as e:
            raise BindError(f"Could not remove targets from {rule_name}: {e}") from e
        if response.get("FailedEntryCount", 0):
            raise BindError(
                f"Could not remove {response['FailedEntryCount']} target(s) from {rule_name}"
            )
        logger.debug(f"Removed targets {target_ids} from rule {rule_name}")


class FunctionRegistry:
    """Lambda function lookups and resource-policy permissions."""

    def __init__(self, client):
        self.client = client

    def get_function(self, name: str) -> FunctionRef:
        try:
            response = self.client.get_function(FunctionName=name)
        except AWS_ERRORS as e:
            logger.error(f"get_function: {e}")
            if error_code(e) == "ResourceNotFoundException":
                raise FunctionLookupError(f"Lambda function {name} does not exist") from e
            raise FunctionLookupError(f"Could not retrieve Lambda function {name}: {e}") from e
        return FunctionRef.from_response(name, response)

    def add_permission(self, permission: InvokePermission) -> bool:
        """
        Grant the invoke permission.

        Returns:
            False if a statement with the same id already exists
        """
        try:
            self.client.add_permission(
                FunctionName=permission.function_name,
                StatementId=permission.statement_id,
                Action=permission.action,
                Principal=permission.principal,
                SourceArn=permission.source_arn,
            )
        except AWS_ERRORS as e:
            if error_code(e) == "ResourceConflictException":
                logger.info(
                    f"Permission {permission.statement_id} already exists "
                    f"for {permission.function_name}"
                )
                return False
            logger.error(f"add_permission: {e}")
            raise InvokePermissionError(
                f"Could not grant invoke permission on {permission.function_name}: {e}"
            ) from e
        logger.debug(f"Added permission {permission.statement_id} on {permission.function_name}")
        return True

    def remove_permission(self, function_name: str, statement_id: str) -> int:
        """
        Revoke a permission statement.

        Returns:
            HTTP status code of the response (204 on success)
        """
        try:
            response = self.client.remove_permission(
                FunctionName=function_name,
                StatementId=statement_id
            )
        except AWS_ERRORS as e:
            raise InvokePermissionError(
                f"Could not remove permission {statement_id} from {function_name}: {e}"
            ) from e
        return response.get("ResponseMetadata", {}).get("HTTPStatusCode", 204)
