"""
Lambda Scheduler

Invoke an existing AWS Lambda function on a recurring EventBridge schedule.

Main Components:
- LambdaScheduleService: schedule, unschedule and toggle operations
- EventRules / FunctionRegistry: EventBridge and Lambda collaborators
- SchedulerConfig / ScheduleSettings: configuration
"""

__version__ = "0.1.0"

from lambda_scheduler.config import SchedulerConfig, ScheduleSettings
from lambda_scheduler.aws import EventRules, FunctionRegistry
from lambda_scheduler.errors import (
    ScheduleError,
    FunctionLookupError,
    RuleError,
    BindError,
    InvokePermissionError,
    ToggleError,
)
from lambda_scheduler.models import (
    FunctionRef,
    ScheduleRule,
    InvokeTarget,
    InvokePermission,
    RuleState,
    UnscheduleResult,
)
from lambda_scheduler.service import LambdaScheduleService

__all__ = [
    # Configuration
    "SchedulerConfig",
    "ScheduleSettings",
    # Service
    "LambdaScheduleService",
    "EventRules",
    "FunctionRegistry",
    # Models
    "FunctionRef",
    "ScheduleRule",
    "InvokeTarget",
    "InvokePermission",
    "RuleState",
    "UnscheduleResult",
    # Errors
    "ScheduleError",
    "FunctionLookupError",
    "RuleError",
    "BindError",
    "InvokePermissionError",
    "ToggleError",
]
