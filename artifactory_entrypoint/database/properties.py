"""
db.properties management.

Handles the initial copy of the vendor template into the data volume
and the line-level substitutions that apply DB_* overrides to it.
Only the ``type=``, ``url=``, ``username=`` and ``password=`` lines are
ever touched; everything else is preserved as written.
"""

import logging
import os
import pwd
import re
import shutil
import tempfile
from pathlib import Path

from artifactory_entrypoint.errors import StartupError
from artifactory_entrypoint.models.database import DatabaseFlavor, DatabaseOverrides

logger = logging.getLogger(__name__)

_MASKED_PASSWORD = "**********"

# jdbc:postgresql://host:5432/artifactory?ssl=true
#   head = "jdbc:postgresql://", host, port, tail = "/artifactory?ssl=true"
_URL_PARTS = re.compile(
    r"^(?P<head>.*?://)(?P<host>\[[^\]]*\]|[^:/?#]*)(?::(?P<port>\d*))?(?P<tail>.*)$"
)


def _property_pattern(key: str) -> re.Pattern:
    return re.compile(rf"^{re.escape(key)}=(?P<value>[^\r\n]*)", re.MULTILINE)


def get_property(text: str, key: str) -> str | None:
    """Return the value of the first ``key=`` line in *text*, if any."""
    match = _property_pattern(key).search(text)
    if match is None:
        return None
    return match.group("value").strip()


def set_property(text: str, key: str, value: str) -> str:
    """
    Replace every ``key=`` line in *text* with ``key=value``.

    *value* is inserted literally, so backslashes and ampersands in
    passwords or JDBC parameters survive unchanged.
    """
    return _property_pattern(key).sub(lambda _m: f"{key}={value}", text)


def replace_url_endpoint(url: str, host: str | None = None, port: int | None = None) -> str:
    """
    Swap the host and/or port of a JDBC url, leaving the rest intact.

    A port is appended after the host when the url did not have one.
    """
    match = _URL_PARTS.match(url)
    if match is None:
        raise StartupError(f"Cannot parse database url '{url}'")

    new_host = match.group("host") if host is None else host
    if ":" in new_host and not new_host.startswith("["):
        new_host = f"[{new_host}]"

    new_port = match.group("port") if port is None else str(port)
    authority = new_host if not new_port else f"{new_host}:{new_port}"
    return f"{match.group('head')}{authority}{match.group('tail')}"


def apply_overrides(text: str, overrides: DatabaseOverrides) -> str:
    """
    Apply environment overrides to the contents of a db.properties file.

    A full url wins over host and port. Host and port are applied to the
    existing url line, which must then be present.

    Raises:
        StartupError: If host/port overrides are given but the file has
            no ``url=`` line to apply them to.
    """
    if overrides.user:
        logger.info("Setting DB_USER to %s", overrides.user)
        text = set_property(text, "username", overrides.user)

    if overrides.password:
        logger.info("Setting DB_PASSWORD to %s", _MASKED_PASSWORD)
        text = set_property(text, "password", overrides.password)

    if overrides.url:
        logger.info("Setting DB_URL to %s (ignoring DB_HOST and DB_PORT if set)", overrides.url)
        return set_property(text, "url", overrides.url)

    if overrides.host is None and overrides.port is None:
        return text

    url = get_property(text, "url")
    if url is None:
        raise StartupError("Cannot set DB_HOST/DB_PORT: no 'url=' line in database properties")

    if overrides.port is not None:
        logger.info("Setting DB_PORT to %d", overrides.port)
    if overrides.host is not None:
        logger.info("Setting DB_HOST to %s", overrides.host)

    return set_property(text, "url", replace_url_endpoint(url, overrides.host, overrides.port))


def _chown_to_user(path: Path, user_name: str, target: Path) -> None:
    """Equivalent of `chown user:`, the user plus its login group."""
    try:
        entry = pwd.getpwnam(user_name)
        shutil.chown(path, user=entry.pw_uid, group=entry.pw_gid)
    except (KeyError, OSError) as exc:
        raise StartupError(f"Change owner of {target} to {user_name} failed: {exc}") from exc


def ensure_db_properties(
    db_props: Path,
    template: Path,
    flavor: DatabaseFlavor,
    overrides: DatabaseOverrides,
    owner: str | None = None,
) -> bool:
    """
    Make sure *db_props* exists and is configured for *flavor*.

    An existing file is only checked, never edited: it belongs to the
    administrator from then on. A missing one is built from *template*
    with *overrides* applied, handed to *owner* and moved into place in
    one rename, so a failed first start never leaves a partial file.

    Returns:
        True if the file was created, False if it already existed.

    Raises:
        StartupError: On a type mismatch, a missing template, or a failed
            override, write or chown.
    """
    logger.info("Checking if need to copy %s configuration", flavor.label)

    if db_props.is_file():
        logger.info("%s already exists. Making sure it's set to %s...", db_props, flavor.label)
        current_type = get_property(db_props.read_text(encoding="utf-8"), "type")
        if current_type != flavor.type:
            raise StartupError(
                f"{db_props} already exists and is set to a DB different than {flavor.label}"
            )
        logger.info("%s is set to %s", db_props, flavor.label)
        return False

    logger.info("Copying %s configuration...", flavor.label)
    try:
        with template.open(encoding="utf-8", newline="") as fh:
            text = fh.read()
        db_props.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise StartupError(f"Copying {template} to {db_props} failed: {exc}") from exc

    content = apply_overrides(text, overrides)

    try:
        fd, tmp_name = tempfile.mkstemp(dir=db_props.parent, prefix=".db.properties.")
    except OSError as exc:
        raise StartupError(f"Writing {db_props} failed: {exc}") from exc
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as fh:
            fh.write(content)
        shutil.copymode(template, tmp_path)
        if owner:
            _chown_to_user(tmp_path, owner, db_props)
        os.replace(tmp_path, db_props)
    except StartupError:
        tmp_path.unlink(missing_ok=True)
        raise
    except OSError as exc:
        tmp_path.unlink(missing_ok=True)
        raise StartupError(f"Writing {db_props} failed: {exc}") from exc
    return True
