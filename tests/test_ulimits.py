"""
Tests for the open files / processes limit check.
"""

import logging
import resource
from unittest.mock import patch

import pytest

from artifactory_entrypoint.errors import StartupError
from artifactory_entrypoint.models.limits import LimitStatus
from artifactory_entrypoint.services import ulimits as ulimits_module
from artifactory_entrypoint.services.ulimits import check_ulimits, classify_limit, read_soft_limit


@pytest.mark.parametrize(
    "current, expected",
    [
        (None, LimitStatus.OK),
        (32000, LimitStatus.OK),
        (1048576, LimitStatus.OK),
        (31999, LimitStatus.LOW),
        (10000, LimitStatus.LOW),
        (9999, LimitStatus.TOO_LOW),
        (1024, LimitStatus.TOO_LOW),
    ],
)
def test_classify_open_files(current, expected):
    assert classify_limit(current, recommended=32000, minimum=10000) is expected


def test_classify_without_floor_is_never_fatal():
    assert classify_limit(1, recommended=1024) is LimitStatus.LOW


def test_read_soft_limit_unlimited():
    with patch.object(
        ulimits_module.resource,
        "getrlimit",
        return_value=(resource.RLIM_INFINITY, resource.RLIM_INFINITY),
    ):
        assert read_soft_limit(resource.RLIMIT_NOFILE) is None


def test_read_soft_limit_returns_soft_value():
    with patch.object(ulimits_module.resource, "getrlimit", return_value=(4096, 65536)):
        assert read_soft_limit(resource.RLIMIT_NOFILE) == 4096


def _limits(files, processes):
    values = {resource.RLIMIT_NOFILE: files, resource.RLIMIT_NPROC: processes}
    return patch.object(ulimits_module, "read_soft_limit", side_effect=values.__getitem__)


def test_check_ulimits_all_ok(caplog):
    caplog.set_level(logging.INFO)
    with _limits(65536, None):
        files, processes = check_ulimits(32000, 10000, 1024)

    assert files.status is LimitStatus.OK
    assert processes.status is LimitStatus.OK
    assert processes.display_value == "unlimited"
    assert not [r for r in caplog.records if r.levelno >= logging.WARNING]


def test_check_ulimits_low_files_warns(caplog):
    caplog.set_level(logging.INFO)
    with _limits(16000, 4096):
        files, _processes = check_ulimits(32000, 10000, 1024)

    assert files.status is LimitStatus.LOW
    warnings = [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 2
    assert "--ulimit nofile=32000:32000" in warnings[1]


def test_check_ulimits_too_few_files_is_fatal():
    with _limits(1024, 4096):
        with pytest.raises(StartupError, match="Cannot run Artifactory"):
            check_ulimits(32000, 10000, 1024)


def test_check_ulimits_low_processes_only_warns(caplog):
    caplog.set_level(logging.INFO)
    with _limits(65536, 512):
        _files, processes = check_ulimits(32000, 10000, 1024)

    assert processes.status is LimitStatus.LOW
    warnings = [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING]
    assert "--ulimit nproc=1024:1024" in warnings[-1]
