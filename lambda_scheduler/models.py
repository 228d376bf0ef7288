"""
Data models for the remote resources that make up a schedule.
"""

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any

EVENTS_PRINCIPAL = "events.amazonaws.com"
INVOKE_ACTION = "lambda:InvokeFunction"


class RuleState:
    """EventBridge rule states."""
    ENABLED = "ENABLED"
    DISABLED = "DISABLED"


def invoke_statement_id(function_name: str) -> str:
    """Statement id used for the EventBridge invoke permission."""
    return f"{function_name}-invoke"


@dataclass
class FunctionRef:
    """Metadata for an existing Lambda function"""
    name: str
    arn: str
    handler: Optional[str] = None
    role: Optional[str] = None

    @classmethod
    def from_response(cls, name: str, response: Dict[str, Any]) -> 'FunctionRef':
        """Create from a GetFunction response"""
        configuration = response['Configuration']
        return cls(
            name=name,
            arn=configuration['FunctionArn'],
            handler=configuration.get('Handler'),
            role=configuration.get('Role')
        )


@dataclass
class ScheduleRule:
    """EventBridge rule with a schedule expression"""
    name: str
    schedule_expression: Optional[str] = None
    arn: Optional[str] = None
    state: str = RuleState.ENABLED

    @property
    def enabled(self) -> bool:
        return self.state == RuleState.ENABLED

    @classmethod
    def from_response(cls, response: Dict[str, Any]) -> 'ScheduleRule':
        """Create from a DescribeRule response"""
        return cls(
            name=response['Name'],
            schedule_expression=response.get('ScheduleExpression'),
            arn=response.get('Arn'),
            # Anything other than ENABLED counts as disabled
            state=RuleState.ENABLED if response.get('State') == RuleState.ENABLED
            else RuleState.DISABLED
        )


@dataclass
class InvokeTarget:
    """Binding of a rule to a Lambda function"""
    rule_name: str
    target_id: str  # The function name
    function_arn: str

    def to_request(self) -> Dict[str, str]:
        """Target entry for PutTargets"""
        return {'Id': self.target_id, 'Arn': self.function_arn}


@dataclass
class InvokePermission:
    """Grant allowing EventBridge to invoke a Lambda function"""
    function_name: str
    source_arn: str
    statement_id: Optional[str] = None
    principal: str = EVENTS_PRINCIPAL
    action: str = INVOKE_ACTION

    def __post_init__(self):
        if self.statement_id is None:
            self.statement_id = invoke_statement_id(self.function_name)


@dataclass
class UnscheduleResult:
    """Outcome of a best-effort unschedule"""
    function_name: str
    rule_name: str
    errors: List[str] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        """True when every cleanup step succeeded"""
        return not self.errors
