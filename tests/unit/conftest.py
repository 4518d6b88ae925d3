import pytest

from sidecar import config
from sidecar.testing.config import (
    TEST_AWS_ACCESS_KEY_ID,
    TEST_AWS_REGION_NAME,
    TEST_AWS_SECRET_ACCESS_KEY,
)


@pytest.fixture(autouse=True)
def set_boto_test_credentials_and_region(monkeypatch):
    """
    Automatically sets the default credentials and region for all unit tests.
    """
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", TEST_AWS_ACCESS_KEY_ID)
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", TEST_AWS_SECRET_ACCESS_KEY)
    monkeypatch.setenv("AWS_DEFAULT_REGION", TEST_AWS_REGION_NAME)


@pytest.fixture(autouse=True)
def set_function_name_config(monkeypatch):
    """
    Pins the configuration that function names are derived from, so all deployed names in the unit tests look
    like ``SC-app-testing-<Name>:active``.
    """
    monkeypatch.setattr(config, "SIDECAR_APP_NAME", "app")
    monkeypatch.setattr(config, "SIDECAR_ENV", "testing")
    monkeypatch.setattr(config, "SIDECAR_ALIAS", "active")
    monkeypatch.setattr(config, "SIDECAR_LOG_TYPE", "Tail")
    monkeypatch.setattr(config, "SIDECAR_FUNCTIONS", [])
