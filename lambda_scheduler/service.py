"""
Scheduling service for an existing Lambda function.

Wires a Lambda function to an EventBridge scheduled rule:
- Schedule: create/update the rule, grant invoke permission, set the target
- Unschedule: remove the target, delete the rule, revoke the permission
- Toggle: enable or disable the rule

Steps are not transactional. A failed schedule leaves whatever earlier
steps created in place; running unschedule cleans it up.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Tuple

from lambda_scheduler.aws import (
    EventRules,
    FunctionRegistry,
    get_events_client,
    get_lambda_client,
)
from lambda_scheduler.config import ScheduleSettings
from lambda_scheduler.errors import BindError, InvokePermissionError, RuleError, ToggleError
from lambda_scheduler.models import (
    FunctionRef,
    InvokePermission,
    InvokeTarget,
    RuleState,
    ScheduleRule,
    UnscheduleResult,
    invoke_statement_id,
)

logger = logging.getLogger(__name__)


class LambdaScheduleService:
    """
    Schedules the repeated invocation of an existing Lambda function.

    The remote collaborators default to boto3-backed clients for the
    configured region; pass EventRules/FunctionRegistry instances to use
    other clients.
    """

    def __init__(
        self,
        settings: ScheduleSettings,
        events: Optional[EventRules] = None,
        functions: Optional[FunctionRegistry] = None
    ):
        """
        Initialize the service.

        Args:
            settings: What to schedule and where
            events: EventBridge rule operations
            functions: Lambda function registry operations
        """
        self.settings = settings
        self.events = events or EventRules(
            get_events_client(settings.region, settings.endpoint_url)
        )
        self.functions = functions or FunctionRegistry(
            get_lambda_client(settings.region, settings.endpoint_url)
        )

    def schedule(
        self,
        function_name: Optional[str] = None,
        rule_name: Optional[str] = None,
        schedule_expression: Optional[str] = None
    ) -> ScheduleRule:
        """
        Schedule the repeated invocation of the Lambda function.

        Args:
            function_name: Existing Lambda function to schedule
            rule_name: Name of the EventBridge scheduled rule to create
            schedule_expression: cron/rate schedule expression

        Returns:
            The created (or updated) rule

        Raises:
            FunctionLookupError: If the function cannot be retrieved
            RuleError: If the rule cannot be created
            InvokePermissionError: If the invoke permission cannot be granted
            BindError: If the function cannot be set as the rule's target
        """
        function_name = function_name or self.settings.function_name
        rule_name = rule_name or self.settings.rule_name
        schedule_expression = schedule_expression or self.settings.schedule_expression

        function, rule_arn = self._setup(function_name, rule_name, schedule_expression)

        logger.debug(f"FunctionInfo.Arn: {function.arn}")
        logger.debug(f"FunctionInfo.Handler: {function.handler}")
        logger.debug(f"FunctionInfo.Role: {function.role}")
        logger.debug(f"EventRule.Arn: {rule_arn}")

        # Let EventBridge invoke the function, scoped to this rule
        self.functions.add_permission(
            InvokePermission(function_name=function_name, source_arn=rule_arn)
        )

        target = InvokeTarget(
            rule_name=rule_name,
            target_id=function_name,
            function_arn=function.arn
        )
        failed = self.events.put_targets(rule_name, [target])
        if failed != 0:
            msg = f"Could not set {function_name} as the target for {rule_name}"
            logger.error(msg)
            raise BindError(msg)

        return ScheduleRule(
            name=rule_name,
            schedule_expression=schedule_expression,
            arn=rule_arn,
            state=RuleState.ENABLED
        )

    def _setup(
        self,
        function_name: str,
        rule_name: str,
        schedule_expression: str
    ) -> Tuple[FunctionRef, str]:
        """Look up the function and create the rule."""
        if not self.settings.parallel_setup:
            # Lookup first, so a missing function creates nothing
            function = self.functions.get_function(function_name)
            rule_arn = self.events.put_rule(rule_name, schedule_expression)
            return function, rule_arn

        with ThreadPoolExecutor(max_workers=2) as pool:
            function_future = pool.submit(self.functions.get_function, function_name)
            rule_future = pool.submit(self.events.put_rule, rule_name, schedule_expression)
            # Join both before raising so neither request is left in flight
            function_error = function_future.exception()
            rule_error = rule_future.exception()

        if function_error is not None:
            raise function_error
        if rule_error is not None:
            raise rule_error
        return function_future.result(), rule_future.result()

    def unschedule(
        self,
        function_name: Optional[str] = None,
        rule_name: Optional[str] = None
    ) -> UnscheduleResult:
        """
        Unschedule the Lambda function, deleting the schedule resources.

        Best-effort: every step is attempted and failures are logged, never
        raised. CloudWatch log groups created by earlier invocations are
        left alone.

        Returns:
            UnscheduleResult listing the steps that failed
        """
        function_name = function_name or self.settings.function_name
        rule_name = rule_name or self.settings.rule_name
        result = UnscheduleResult(function_name=function_name, rule_name=rule_name)

        # The target must be removed before the rule can be deleted
        self._cleanup_step(
            result,
            f"Removed target {function_name} from scheduled rule {rule_name}",
            self.events.remove_targets, rule_name, [function_name]
        )
        self._cleanup_step(
            result,
            f"Deleted scheduled rule {rule_name}",
            self.events.delete_rule, rule_name
        )
        self._cleanup_step(
            result,
            f"Removed invoke permission from {function_name}",
            self._remove_invoke_permission, function_name
        )

        return result

    def _remove_invoke_permission(self, function_name: str):
        status = self.functions.remove_permission(
            function_name, invoke_statement_id(function_name)
        )
        if status != 204:
            raise InvokePermissionError(f"Could not remove permission: HTTP status: {status}")

    def _cleanup_step(self, result: UnscheduleResult, done_message: str, func, *args):
        try:
            func(*args)
        except Exception as e:
            logger.error(f"Unschedule {result.rule_name}: {e}")
            result.errors.append(str(e))
        else:
            logger.debug(done_message)

    def toggle(self, rule_name: Optional[str] = None) -> str:
        """
        Enable/disable the scheduled rule.

        Returns:
            The new state, "ENABLED" or "DISABLED"

        Raises:
            ToggleError: If the rule's current state cannot be retrieved
            RuleError: If the rule cannot be enabled or disabled
        """
        rule_name = rule_name or self.settings.rule_name

        try:
            rule = self.events.describe_rule(rule_name)
        except RuleError as e:
            logger.error(str(e))
            raise ToggleError(f"Could not retrieve scheduled event rule {rule_name}") from e

        if rule.enabled:
            self.events.disable_rule(rule_name)
            return RuleState.DISABLED

        self.events.enable_rule(rule_name)
        return RuleState.ENABLED
