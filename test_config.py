"""
Tests for settings resolution and validation.
"""

import json

import pytest

from lambda_scheduler.config import (
    DEFAULT_FUNCTION_NAME,
    DEFAULT_REGION,
    DEFAULT_RULE_NAME,
    DEFAULT_SCHEDULE_EXPRESSION,
    SchedulerConfig,
    validate_schedule_expression,
)


def write_config(path, schedule=None, logging=None):
    data = {'schedule': schedule or {}}
    if logging is not None:
        data['logging'] = logging
    path.write_text(json.dumps(data))
    return path


def test_defaults_when_no_config_file():
    config = SchedulerConfig()

    assert config.settings.function_name == DEFAULT_FUNCTION_NAME
    assert config.settings.rule_name == "scheduled_lambda_rule"
    assert config.settings.rule_name == DEFAULT_RULE_NAME
    assert config.settings.schedule_expression == "cron(0/1 * * * ? *)"
    assert config.settings.schedule_expression == DEFAULT_SCHEDULE_EXPRESSION
    assert config.settings.region == DEFAULT_REGION
    assert config.settings.parallel_setup is False
    assert config.validate() == []


def test_loads_json_file(tmp_path):
    path = write_config(
        tmp_path / "config.json",
        schedule={'function_name': 'Nightly', 'region': 'eu-west-1'},
        logging={'level': 'DEBUG'}
    )

    config = SchedulerConfig(str(path))

    assert config.settings.function_name == 'Nightly'
    assert config.settings.region == 'eu-west-1'
    # Unset keys keep their defaults
    assert config.settings.rule_name == DEFAULT_RULE_NAME
    assert config.logging.level == 'DEBUG'


def test_config_path_from_environment(tmp_path, monkeypatch):
    path = write_config(tmp_path / "env-config.json", schedule={'rule_name': 'from_env_file'})
    monkeypatch.setenv("LAMBDA_SCHEDULER_CONFIG_PATH", str(path))

    config = SchedulerConfig()

    assert config.config_path == path
    assert config.settings.rule_name == 'from_env_file'


def test_environment_overrides_file(tmp_path, monkeypatch):
    path = write_config(tmp_path / "config.json", schedule={'function_name': 'FromFile'})
    monkeypatch.setenv("LAMBDA_SCHEDULER_FUNCTION", "FromEnv")
    monkeypatch.setenv("LAMBDA_SCHEDULER_PARALLEL_SETUP", "true")

    config = SchedulerConfig(str(path))

    assert config.settings.function_name == 'FromEnv'
    assert config.settings.parallel_setup is True


def test_apply_ignores_none_and_rejects_unknown():
    config = SchedulerConfig()

    config.apply(region=None, rule_name='other_rule')
    assert config.settings.region == DEFAULT_REGION
    assert config.settings.rule_name == 'other_rule'

    with pytest.raises(ValueError):
        config.apply(bucket='nope')


def test_missing_explicit_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        SchedulerConfig(str(tmp_path / "nope.json"))


def test_save_then_load(tmp_path):
    path = tmp_path / "saved" / "config.json"
    config = SchedulerConfig()
    config.config_path = path
    config.apply(function_name='Saved', schedule_expression='rate(5 minutes)')
    config.save()

    reloaded = SchedulerConfig(str(path))
    assert reloaded.settings.function_name == 'Saved'
    assert reloaded.settings.schedule_expression == 'rate(5 minutes)'


def test_validate_reports_bad_settings():
    config = SchedulerConfig()
    config.apply(function_name=' ', rule_name='bad rule!', region='')
    config.settings.schedule_expression = 'every minute'

    errors = config.validate()

    assert len(errors) == 4
    assert any("function_name" in e for e in errors)
    assert any("bad rule!" in e for e in errors)
    assert any("every minute" in e for e in errors)
    assert any("region" in e for e in errors)


@pytest.mark.parametrize("expression", [
    "cron(0/1 * * * ? *)",
    "cron(0 12 * * ? *)",
    "rate(1 minute)",
    "rate(5 minutes)",
    "rate(2 days)",
    "rate(1 hour)",
    "rate(10 minutes)",
])
def test_valid_schedule_expressions(expression):
    assert validate_schedule_expression(expression) is None


@pytest.mark.parametrize("expression", [
    "",
    "rate(five minutes)",
    "rate(5 weeks)",
    "rate(0 minutes)",
    "rate(5 minute)",
    "rate(1 minutes)",
    "rate(01 minute)",
    "cron(0 12 * * ?)",
    "0 12 * * ? *",
])
def test_invalid_schedule_expressions(expression):
    assert validate_schedule_expression(expression) is not None


def test_dotenv_in_working_directory(tmp_path, monkeypatch):
    (tmp_path / ".env").write_text("LAMBDA_SCHEDULER_FUNCTION=FromDotenv\n")
    # Registered so the value loaded from .env is removed again afterwards
    monkeypatch.setenv("LAMBDA_SCHEDULER_FUNCTION", "placeholder")
    monkeypatch.delenv("LAMBDA_SCHEDULER_FUNCTION")
    monkeypatch.chdir(tmp_path)

    config = SchedulerConfig()

    assert config.settings.function_name == 'FromDotenv'


@pytest.mark.parametrize("raw, expected", [
    ("false", False),
    ("true", True),
    (False, False),
    (True, True),
    ("0", False),
])
def test_parallel_setup_from_json_is_coerced(tmp_path, raw, expected):
    path = write_config(tmp_path / "config.json", schedule={'parallel_setup': raw})

    config = SchedulerConfig(str(path))

    assert config.settings.parallel_setup is expected


@pytest.mark.parametrize("key, value", [
    ('schedule_expression', 5),
    ('function_name', ['a']),
    ('rule_name', 12),
    ('region', None),
    ('endpoint_url', 4566),
])
def test_validate_reports_non_string_settings(tmp_path, key, value):
    path = write_config(tmp_path / "config.json", schedule={key: value})
    config = SchedulerConfig(str(path))

    errors = config.validate()

    assert errors == [f"'{key}' must be a string, got {value!r}"]


def test_non_string_expression_is_reported():
    assert "must be a string" in validate_schedule_expression(5)
