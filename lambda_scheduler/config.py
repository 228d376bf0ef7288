"""
Scheduler configuration management.

Settings are resolved once at startup and passed explicitly to the
scheduling service. Resolution order (highest to lowest priority):

1. Explicit overrides (command-line arguments)
2. LAMBDA_SCHEDULER_* environment variables (a .env file is loaded first)
3. JSON config file
4. Built-in defaults
"""

import json
import logging
import os
import re
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Optional, Dict, List, Any

from aws_croniter import AwsCroniter
from dotenv import find_dotenv, load_dotenv

logger = logging.getLogger(__name__)

# Default schedule. Change as desired.
DEFAULT_FUNCTION_NAME = "ScheduledFunction"  # Existing Lambda function to schedule
DEFAULT_RULE_NAME = "scheduled_lambda_rule"  # Scheduled event rule to create
DEFAULT_SCHEDULE_EXPRESSION = "cron(0/1 * * * ? *)"  # Every minute of every day
DEFAULT_REGION = "us-west-1"

ENV_PREFIX = "LAMBDA_SCHEDULER_"
ENV_CONFIG_PATH = "LAMBDA_SCHEDULER_CONFIG_PATH"

RULE_NAME_PATTERN = re.compile(r'^[\.\-_A-Za-z0-9]{1,64}$')
RATE_PATTERN = re.compile(r'^rate\(([1-9]\d*) (minute|minutes|hour|hours|day|days)\)$')
CRON_PATTERN = re.compile(r'^cron\((.+)\)$')

_TRUE_VALUES = ('1', 'true', 'yes', 'on')
_STRING_SETTINGS = ('function_name', 'rule_name', 'schedule_expression', 'region')


def as_bool(value: Any) -> bool:
    """Read a flag from JSON or the environment ("false" is False)."""
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_VALUES


@dataclass
class ScheduleSettings:
    """What to schedule, and where."""
    function_name: str = DEFAULT_FUNCTION_NAME
    rule_name: str = DEFAULT_RULE_NAME
    schedule_expression: str = DEFAULT_SCHEDULE_EXPRESSION
    region: str = DEFAULT_REGION
    endpoint_url: Optional[str] = None  # e.g. a LocalStack endpoint
    parallel_setup: bool = False  # Look up the function and create the rule concurrently


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    file: Optional[str] = None


def _env_settings() -> Dict[str, Any]:
    """Collect settings overrides from LAMBDA_SCHEDULER_* variables."""
    env_names = {
        'function_name': 'FUNCTION',
        'rule_name': 'RULE',
        'schedule_expression': 'EXPRESSION',
        'region': 'REGION',
        'endpoint_url': 'ENDPOINT_URL',
        'parallel_setup': 'PARALLEL_SETUP',
    }
    values = {}
    for key, suffix in env_names.items():
        value = os.environ.get(ENV_PREFIX + suffix)
        if value is None or value == '':
            continue
        if key == 'parallel_setup':
            value = as_bool(value)
        values[key] = value
    return values


def validate_schedule_expression(expression: str) -> Optional[str]:
    """
    Check an EventBridge schedule expression.

    Returns:
        Error message, or None if the expression is valid
    """
    if not isinstance(expression, str):
        return f"'schedule_expression' must be a string, got {expression!r}"
    if not expression.strip():
        return "'schedule_expression' cannot be empty"

    rate = RATE_PATTERN.match(expression)
    if rate:
        # rate(1 minute) but rate(5 minutes)
        singular = rate.group(1) == '1'
        if singular == rate.group(2).endswith('s'):
            return f"Invalid rate expression '{expression}': use a singular unit for 1, plural otherwise"
        return None

    match = CRON_PATTERN.match(expression)
    if not match:
        return f"Invalid schedule expression '{expression}': expected rate(...) or cron(...)"

    body = match.group(1)
    if len(body.split()) != 6:
        return f"Invalid cron expression '{expression}': expected 6 fields"
    try:
        AwsCroniter(body)
    except Exception as e:
        return f"Invalid cron expression '{expression}': {e}"
    return None


class SchedulerConfig:
    """
    Scheduler configuration manager.

    Loads settings from a JSON file, applies environment overrides and
    validates the result.

    Configuration path priority:
    1. Explicit config_path argument
    2. LAMBDA_SCHEDULER_CONFIG_PATH environment variable
    3. Default: ~/.lambda_scheduler/config.json
    """

    DEFAULT_CONFIG_PATH = Path.home() / ".lambda_scheduler" / "config.json"

    def __init__(self, config_path: Optional[str] = None, use_env: bool = True):
        """
        Initialize scheduler configuration.

        Args:
            config_path: Path to configuration file. If None, uses env var or default.
            use_env: Apply LAMBDA_SCHEDULER_* environment overrides
        """
        if use_env:
            # .env next to where the command runs, not next to this module
            load_dotenv(find_dotenv(usecwd=True))

        if config_path:
            self.config_path = Path(config_path).expanduser()
        elif os.environ.get(ENV_CONFIG_PATH):
            self.config_path = Path(os.environ[ENV_CONFIG_PATH]).expanduser()
        else:
            self.config_path = self.DEFAULT_CONFIG_PATH

        self.settings = ScheduleSettings()
        self.logging = LoggingConfig()

        if self.config_path.exists():
            self.load()
        elif config_path:
            # An explicitly requested file must exist
            raise FileNotFoundError(f"Config file not found: {self.config_path}")
        else:
            logger.debug(f"No config found at {self.config_path}, using defaults")

        if use_env:
            self.apply(**_env_settings())

    def load(self):
        """Load configuration from JSON file."""
        try:
            with open(self.config_path, 'r') as f:
                data = json.load(f)

            known = {f.name for f in fields(ScheduleSettings)}
            schedule_data = data.get('schedule', {})
            unknown = set(schedule_data) - known
            if unknown:
                logger.warning(f"Ignoring unknown settings in {self.config_path}: {sorted(unknown)}")
            values = {k: v for k, v in schedule_data.items() if k in known}
            if 'parallel_setup' in values:
                values['parallel_setup'] = as_bool(values['parallel_setup'])
            self.settings = ScheduleSettings(**values)

            if 'logging' in data:
                self.logging = LoggingConfig(**data['logging'])

            logger.debug(f"Loaded configuration from {self.config_path}")

        except Exception as e:
            logger.error(f"Failed to load config from {self.config_path}: {e}")
            raise

    def save(self):
        """Save configuration to JSON file."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            'schedule': asdict(self.settings),
            'logging': asdict(self.logging)
        }

        with open(self.config_path, 'w') as f:
            json.dump(data, f, indent=2)

        logger.info(f"Saved configuration to {self.config_path}")

    def apply(self, **overrides):
        """Override settings; None values are ignored."""
        for key, value in overrides.items():
            if value is None:
                continue
            if not hasattr(self.settings, key):
                raise ValueError(f"Unknown setting '{key}'")
            setattr(self.settings, key, value)

    def validate(self) -> List[str]:
        """
        Validate configuration.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []
        settings = self.settings

        wrong_type = [
            name for name in _STRING_SETTINGS
            if not isinstance(getattr(settings, name), str)
        ]
        if settings.endpoint_url is not None and not isinstance(settings.endpoint_url, str):
            wrong_type.append('endpoint_url')
        for name in wrong_type:
            errors.append(f"'{name}' must be a string, got {getattr(settings, name)!r}")
        if wrong_type:
            return errors

        if not settings.function_name.strip():
            errors.append("'function_name' cannot be empty")

        if not RULE_NAME_PATTERN.match(settings.rule_name):
            errors.append(
                f"Invalid rule name '{settings.rule_name}': "
                "use up to 64 letters, digits, '.', '-' or '_'"
            )

        expression_error = validate_schedule_expression(settings.schedule_expression)
        if expression_error:
            errors.append(expression_error)

        if not settings.region.strip():
            errors.append("'region' cannot be empty")

        return errors

    def __repr__(self):
        return f"SchedulerConfig(settings={self.settings}, path={self.config_path})"
