"""
Open files / processes limit check.

Artifactory keeps a large number of files open. A container started
with the Docker defaults may not allow enough, so the soft limits are
compared against a recommended value (warning) and an absolute floor
(fatal) before anything else happens.
"""

import logging
import resource

from artifactory_entrypoint.errors import StartupError
from artifactory_entrypoint.models.limits import LimitCheck, LimitStatus

logger = logging.getLogger(__name__)


def classify_limit(
    current: int | None,
    recommended: int,
    minimum: int | None = None,
) -> LimitStatus:
    """
    Compare *current* against the two thresholds.

    ``None`` stands for an unlimited value and is always acceptable.
    """
    if current is None or current >= recommended:
        return LimitStatus.OK
    if minimum is not None and current < minimum:
        return LimitStatus.TOO_LOW
    return LimitStatus.LOW


def read_soft_limit(resource_id: int) -> int | None:
    """Return the soft limit for *resource_id*, or None when unlimited."""
    soft, _hard = resource.getrlimit(resource_id)
    if soft == resource.RLIM_INFINITY:
        return None
    return soft


def check_ulimits(
    recommended_open_files: int,
    min_open_files: int,
    recommended_processes: int,
) -> list[LimitCheck]:
    """
    Check the max open files and processes allowed to this container.

    Returns:
        One LimitCheck per resource, open files first.

    Raises:
        StartupError: If the open files limit is below *min_open_files*.
    """
    logger.info("Checking open files and processes limits")

    open_files = read_soft_limit(resource.RLIMIT_NOFILE)
    files_check = LimitCheck(
        name="open files",
        current=open_files,
        recommended=recommended_open_files,
        minimum=min_open_files,
        status=classify_limit(open_files, recommended_open_files, min_open_files),
    )
    logger.info("Current max open files is %s", files_check.display_value)

    if files_check.status is LimitStatus.TOO_LOW:
        raise StartupError(
            f"Max number of open files {open_files}, is too low. Cannot run Artifactory!"
        )
    if files_check.status is LimitStatus.LOW:
        logger.warning("Max number of open files %s is low!", open_files)
        logger.warning(
            "You should add the parameter '--ulimit nofile=%d:%d' to your 'docker run' command.",
            recommended_open_files,
            recommended_open_files,
        )

    processes = read_soft_limit(resource.RLIMIT_NPROC)
    processes_check = LimitCheck(
        name="processes",
        current=processes,
        recommended=recommended_processes,
        status=classify_limit(processes, recommended_processes),
    )
    logger.info("Current max open processes is %s", processes_check.display_value)

    if processes_check.status is not LimitStatus.OK:
        logger.warning("Max number of processes %s is too low!", processes)
        logger.warning(
            "You should add the parameter '--ulimit nproc=%d:%d' to your 'docker run' command.",
            recommended_processes,
            recommended_processes,
        )

    return [files_check, processes_check]
