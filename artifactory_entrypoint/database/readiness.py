"""
Database readiness probe.

On slow systems, and with docker-compose in particular, the database
container may be up but not yet accepting connections when Artifactory
starts. The entrypoint therefore polls the database TCP port from the
``url=`` line of db.properties and only hands over once it answers.
"""

import logging
import socket
import time
from urllib.parse import urlsplit

from pydantic import ValidationError

from artifactory_entrypoint.database.properties import get_property
from artifactory_entrypoint.errors import StartupError
from artifactory_entrypoint.models.database import DatabaseEndpoint

logger = logging.getLogger(__name__)

_PROBE_TIMEOUT = 1.0  # seconds per connection attempt


def parse_endpoint(text: str, default_port: int) -> DatabaseEndpoint:
    """
    Extract the database host and port from db.properties contents.

    Args:
        text: Contents of the properties file.
        default_port: Port used when the url does not name one.

    Raises:
        StartupError: If there is no usable ``url=`` line.
    """
    url = get_property(text, "url")
    if not url:
        raise StartupError("Database properties have no 'url=' line")

    # jdbc:postgresql://host:port/db -> postgresql://host:port/db
    if url.lower().startswith("jdbc:"):
        url = url[len("jdbc:"):]

    try:
        parts = urlsplit(url)
        host = parts.hostname
        port = parts.port
    except ValueError as exc:
        raise StartupError(f"Cannot parse database url '{url}': {exc}") from exc

    if not host:
        raise StartupError(f"No database host found in url '{url}'")

    try:
        return DatabaseEndpoint(host=host, port=default_port if port is None else port)
    except ValidationError as exc:
        raise StartupError(f"Invalid database port {port} in url '{url}'") from exc


def probe(endpoint: DatabaseEndpoint, timeout: float = _PROBE_TIMEOUT) -> bool:
    """Return True if a TCP connection to *endpoint* can be opened."""
    try:
        with socket.create_connection((endpoint.host, endpoint.port), timeout=timeout):
            return True
    except OSError as exc:
        logger.debug("Connection to %s failed: %s", endpoint, exc)
        return False


def wait_for_database(
    endpoint: DatabaseEndpoint,
    timeout: float = 30,
    interval: float = 1.0,
    label: str = "Database",
) -> float:
    """
    Poll *endpoint* until it accepts connections.

    One attempt is made every *interval* seconds until *timeout* seconds
    of wall-clock time have passed. Connection attempts and sleeps are
    both cut short at the deadline.

    Returns:
        Seconds waited until the database answered.

    Raises:
        StartupError: If the database did not answer within *timeout*.
    """
    logger.info(
        "Waiting for %s to be ready on %s within %s seconds", label, endpoint, timeout
    )

    started = time.monotonic()
    deadline = started + timeout
    attempt = 0
    while True:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            break

        attempt += 1
        if probe(endpoint, timeout=min(_PROBE_TIMEOUT, interval, remaining)):
            waited = time.monotonic() - started
            logger.info("%s up in %d seconds", label, waited)
            return waited

        logger.info("%s not ready (attempt %d)", label, attempt)
        remaining = deadline - time.monotonic()
        if remaining > 0:
            time.sleep(min(interval, remaining))

    raise StartupError(f"{label} failed to start in the given time")
