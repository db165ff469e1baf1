"""
Pydantic models describing the database Artifactory is configured for:
the supported database flavours, user-supplied overrides for
``db.properties`` and the host/port the readiness probe connects to.
"""

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Supported database types
# ---------------------------------------------------------------------------

class DatabaseFlavor(BaseModel):
    """A database type this image knows how to configure."""

    type: str = Field(..., description="Value of the 'type=' property.")
    label: str = Field(..., description="Human-readable name used in log messages.")
    connector_glob: str = Field(..., description="Glob matching the JDBC connector jar.")
    default_port: int = Field(..., description="Port assumed when the url has none.")


SUPPORTED_DATABASES: dict[str, DatabaseFlavor] = {
    "postgresql": DatabaseFlavor(
        type="postgresql",
        label="PostgreSQL",
        connector_glob="postgresql-*.jar",
        default_port=5432,
    ),
}


# ---------------------------------------------------------------------------
# db.properties overrides
# ---------------------------------------------------------------------------

class DatabaseOverrides(BaseModel):
    """Values from the environment that replace the template defaults."""

    host: str | None = None
    port: int | None = None
    url: str | None = None
    user: str | None = None
    password: str | None = None


# ---------------------------------------------------------------------------
# Readiness probe target
# ---------------------------------------------------------------------------

class DatabaseEndpoint(BaseModel):
    """TCP endpoint of the database server."""

    host: str
    port: int = Field(..., ge=1, le=65535)

    def __str__(self) -> str:
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"
