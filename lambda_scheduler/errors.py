"""
Error types raised by the scheduling operations.

Every error carries a ``kind`` tag so callers can tell which step failed
without matching on exception classes.
"""


class ErrorKind:
    """Tags identifying which remote step failed."""
    LOOKUP = "lookup"
    RULE = "rule"
    BIND = "bind"
    PERMISSION = "permission"
    TOGGLE = "toggle"


class ScheduleError(Exception):
    """Base class for scheduling failures."""
    kind = None


class FunctionLookupError(ScheduleError, LookupError):
    """Raised when the Lambda function cannot be retrieved."""
    kind = ErrorKind.LOOKUP


class RuleError(ScheduleError):
    """Raised when an EventBridge rule call fails."""
    kind = ErrorKind.RULE


class BindError(ScheduleError):
    """Raised when the function cannot be set as the rule's target."""
    kind = ErrorKind.BIND


class InvokePermissionError(ScheduleError, PermissionError):
    """Raised when the invoke permission cannot be granted or revoked."""
    kind = ErrorKind.PERMISSION


class ToggleError(ScheduleError):
    """Raised when the rule's current state cannot be retrieved."""
    kind = ErrorKind.TOGGLE
