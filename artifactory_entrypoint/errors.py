"""
Exceptions raised while preparing Artifactory to start.
"""


class StartupError(RuntimeError):
    """
    Fatal misconfiguration detected before Artifactory is launched.

    Raised at the point of failure and handled once by the entrypoint,
    which logs the message and exits with a non-zero status.
    """
