"""
Hand-off to the vendor launcher.
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from artifactory_entrypoint.errors import StartupError

logger = logging.getLogger(__name__)


def build_launch_env(environ: Mapping[str, str], runtime_opts: str | None) -> dict[str, str]:
    """
    Environment for artifactory.sh.

    Tomcat reads JVM options from CATALINA_OPTS; RUNTIME_OPTS is the
    name the image documents for them.
    """
    env = dict(environ)
    if runtime_opts:
        env["CATALINA_OPTS"] = runtime_opts
    return env


def exec_artifactory(script: Path, env: Mapping[str, str]) -> None:
    """
    Replace the current process with *script*. Does not return.

    Raises:
        StartupError: If the launcher is missing or cannot be executed.
    """
    if not script.is_file():
        raise StartupError(f"Artifactory launcher {script} does not exist")
    if not os.access(script, os.X_OK):
        raise StartupError(f"Artifactory launcher {script} is not executable")

    logger.info("Starting Artifactory: %s", script)
    try:
        os.execve(script, [str(script)], dict(env))
    except OSError as exc:
        raise StartupError(f"Failed to execute {script}: {exc}") from exc
