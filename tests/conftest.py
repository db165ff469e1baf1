"""
Shared pytest fixtures for the test suite.

Builds a throw-away Artifactory directory layout under ``tmp_path`` so
tests can run the real file handling without touching /var/opt or /data.
"""

import logging
from unittest.mock import patch

import pytest

from artifactory_entrypoint.config import Settings
from artifactory_entrypoint.database import readiness as readiness_module
from artifactory_entrypoint.models.database import SUPPORTED_DATABASES

POSTGRESQL_TEMPLATE = (
    "type=postgresql\n"
    "driver=org.postgresql.Driver\n"
    "url=jdbc:postgresql://localhost:5432/artifactory\n"
    "username=artifactory\n"
    "password=password\n"
)


_ENV_VARS = (
    "ARTIFACTORY_HOME",
    "ARTIFACTORY_DATA",
    "ARTIFACTORY_USER_NAME",
    "TOMCAT_LIB_DIR",
    "DB_TYPE",
    "DB_HOST",
    "DB_PORT",
    "DB_URL",
    "DB_USER",
    "DB_PASSWORD",
    "DB_WAIT_TIMEOUT",
    "DB_WAIT_INTERVAL",
    "RECOMMENDED_MAX_OPEN_FILES",
    "MIN_MAX_OPEN_FILES",
    "RECOMMENDED_MAX_OPEN_PROCESSES",
    "RUNTIME_OPTS",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep the container variables of the host out of the tests."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def postgresql():
    return SUPPORTED_DATABASES["postgresql"]


@pytest.fixture()
def artifactory_layout(tmp_path):
    """
    Create home, data and tomcat lib directories with the vendor
    template, a connector jar and an executable launcher.
    """
    home = tmp_path / "home"
    data = tmp_path / "data"
    lib = tmp_path / "tomcat" / "lib"

    (home / "misc" / "db").mkdir(parents=True)
    (home / "misc" / "db" / "postgresql.properties").write_text(POSTGRESQL_TEMPLATE)
    (home / "bin").mkdir()
    launcher = home / "bin" / "artifactory.sh"
    launcher.write_text("#!/bin/sh\n")
    launcher.chmod(0o755)

    (data / "etc").mkdir(parents=True)
    lib.mkdir(parents=True)
    (lib / "postgresql-9.4.1212.jar").write_bytes(b"")

    return {"home": home, "data": data, "lib": lib}


@pytest.fixture()
def make_settings(artifactory_layout):
    """Factory returning Settings bound to the temporary layout."""

    def _make(**overrides) -> Settings:
        values = {
            "artifactory_home": artifactory_layout["home"],
            "artifactory_data": artifactory_layout["data"],
            "tomcat_lib_dir": artifactory_layout["lib"],
            "db_wait_timeout": 2,
            "db_wait_interval": 1,
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make


class FakeClock:
    """Stands in for the ``time`` module: sleeping only advances ``now``."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def monotonic(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture()
def fake_clock():
    """Patch the readiness module's clock so waits run instantly."""
    clock = FakeClock()
    with patch.object(readiness_module, "time", clock):
        yield clock


@pytest.fixture()
def restore_root_level():
    root = logging.getLogger()
    level = root.level
    yield root
    root.setLevel(level)
