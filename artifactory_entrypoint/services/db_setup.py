"""
Database setup workflow.

Validates the configured database type and its JDBC connector, prepares
db.properties and waits for the database to accept connections. Keeps
the entrypoint thin: all file and network work is delegated to the
database layer.
"""

import logging
from pathlib import Path

from artifactory_entrypoint.config import Settings
from artifactory_entrypoint.database.properties import ensure_db_properties
from artifactory_entrypoint.database.readiness import parse_endpoint, wait_for_database
from artifactory_entrypoint.errors import StartupError
from artifactory_entrypoint.models.database import (
    SUPPORTED_DATABASES,
    DatabaseEndpoint,
    DatabaseFlavor,
    DatabaseOverrides,
)

logger = logging.getLogger(__name__)


def resolve_flavor(db_type: str) -> DatabaseFlavor:
    """Return the flavour for *db_type*, or raise if it is not supported."""
    flavor = SUPPORTED_DATABASES.get(db_type)
    if flavor is None:
        supported = ", ".join(sorted(SUPPORTED_DATABASES))
        raise StartupError(f"Unsupported DB_TYPE '{db_type}' (supported: {supported})")
    return flavor


def verify_connector(lib_dir: Path, flavor: DatabaseFlavor) -> Path:
    """
    Check that a JDBC connector jar for *flavor* is installed.

    Returns:
        Path of the first matching jar.
    """
    jars = sorted(lib_dir.glob(flavor.connector_glob))
    if not jars:
        raise StartupError(f"No {flavor.type} connector found in {lib_dir}")
    logger.debug("Using %s connector %s", flavor.label, jars[0].name)
    return jars[0]


def overrides_from_settings(settings: Settings) -> DatabaseOverrides:
    return DatabaseOverrides(
        host=settings.db_host,
        port=settings.db_port,
        url=settings.db_url,
        user=settings.db_user,
        password=settings.db_password,
    )


def configure_database(settings: Settings) -> DatabaseEndpoint:
    """
    Set up and wait for the configured database.

    Returns:
        The endpoint that answered the readiness probe.

    Raises:
        StartupError: On any misconfiguration, or if the database does
            not come up within ``settings.db_wait_timeout``.
    """
    flavor = resolve_flavor(settings.db_type)
    verify_connector(settings.tomcat_lib_dir, flavor)

    ensure_db_properties(
        settings.db_properties_path,
        settings.db_template_path,
        flavor,
        overrides_from_settings(settings),
        owner=settings.artifactory_user_name,
    )

    text = settings.db_properties_path.read_text(encoding="utf-8")
    endpoint = parse_endpoint(text, flavor.default_port)
    wait_for_database(
        endpoint,
        timeout=settings.db_wait_timeout,
        interval=settings.db_wait_interval,
        label=flavor.label,
    )
    return endpoint
