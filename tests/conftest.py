"""Shared pytest configuration."""

import pytest

from tests.framework.multi_driver_base import MultiDriverTestBase

ENVIRONMENT_VARIABLES = ("ROUTEDOC_ENV", "HOST", "PORT", "ROUTEDOC_LOG_LEVEL", "ROUTEDOC_SERVICE_NAME")


def pytest_generate_tests(metafunc):
    """Run every test of a MultiDriverTestBase class once per enabled driver."""
    cls = metafunc.cls
    if cls is None or not issubclass(cls, MultiDriverTestBase) or "api" not in metafunc.fixturenames:
        return
    drivers = cls.get_available_drivers()
    metafunc.parametrize("api", drivers, indirect=True, ids=[f"driver-{name}" for name in drivers])


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep the caller's shell settings out of Settings.from_env()."""
    for name in ENVIRONMENT_VARIABLES:
        monkeypatch.delenv(name, raising=False)
