"""
Container entrypoint for Artifactory.

Runs the pre-start checks (resource limits, database configuration,
database readiness) and then replaces itself with the vendor's
artifactory.sh. Any fatal problem is logged and ends the container
with exit status 1.
"""

import logging
import os
import sys

from pydantic import ValidationError

from artifactory_entrypoint.config import Settings, get_settings
from artifactory_entrypoint.errors import StartupError
from artifactory_entrypoint.services.db_setup import configure_database
from artifactory_entrypoint.services.launcher import build_launch_env, exec_artifactory
from artifactory_entrypoint.services.ulimits import check_ulimits

logger = logging.getLogger(__name__)

_RULE = "====================================="


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger().setLevel(getattr(logging, level.upper(), logging.INFO))


# ---------------------------------------------------------------------------
# Start-up sequence
# ---------------------------------------------------------------------------

def run(settings: Settings) -> None:
    """Prepare the container and exec Artifactory."""
    logger.info("Preparing to run Artifactory in Docker")
    logger.info(_RULE)

    check_ulimits(
        settings.recommended_max_open_files,
        settings.min_max_open_files,
        settings.recommended_max_open_processes,
    )
    configure_database(settings)

    logger.info(_RULE)

    exec_artifactory(
        settings.launcher_path,
        build_launch_env(os.environ, settings.runtime_opts),
    )


def main() -> None:
    """Console script entry point."""
    configure_logging()

    try:
        settings = get_settings()
        configure_logging(settings.log_level)
        run(settings)
    except ValidationError as exc:
        logger.error("Invalid configuration: %s", exc)
        sys.exit(1)
    except StartupError as exc:
        logger.error("%s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
