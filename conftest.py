import os

import pytest


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """
    Keep LAMBDA_SCHEDULER_* settings from the developer's shell or
    ~/.lambda_scheduler out of the tests.
    """
    for name in list(os.environ):
        if name.startswith("LAMBDA_SCHEDULER_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("LAMBDA_SCHEDULER_CONFIG_PATH", str(tmp_path / "missing-config.json"))
    yield
