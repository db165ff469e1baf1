"""
Entrypoint configuration managed via environment variables.
Uses pydantic-settings for type-safe configuration with validation.

Variable names match the ones the container image documents
(``DB_HOST``, ``ARTIFACTORY_DATA`` ...), so no prefix is used.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Entrypoint settings loaded from environment variables."""

    # Artifactory layout
    artifactory_home: Path = Path("/var/opt/artifactory")
    artifactory_data: Path = Path("/data/artifactory")
    artifactory_user_name: str | None = None
    tomcat_lib_dir: Path = Path("/usr/local/tomcat/lib")

    # Database
    db_type: str = "postgresql"
    db_host: str | None = None
    db_port: int | None = Field(default=None, ge=1, le=65535)
    db_url: str | None = None
    db_user: str | None = None
    db_password: str | None = None
    db_wait_timeout: int = Field(default=30, gt=0)
    db_wait_interval: float = Field(default=1.0, gt=0)

    # Resource limits
    recommended_max_open_files: int = Field(default=32000, gt=0)
    min_max_open_files: int = Field(default=10000, gt=0)
    recommended_max_open_processes: int = Field(default=1024, gt=0)

    # JVM options handed to Tomcat as CATALINA_OPTS
    runtime_opts: str | None = None

    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @field_validator(
        "artifactory_user_name",
        "db_host",
        "db_port",
        "db_url",
        "db_user",
        "db_password",
        "runtime_opts",
        mode="before",
    )
    @classmethod
    def _empty_as_unset(cls, value):
        # docker run -e DB_HOST= should behave like no DB_HOST at all
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("db_type", mode="before")
    @classmethod
    def _normalise_db_type(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @property
    def etc_dir(self) -> Path:
        return self.artifactory_data / "etc"

    @property
    def db_properties_path(self) -> Path:
        """Live database configuration read by Artifactory."""
        return self.etc_dir / "db.properties"

    @property
    def db_template_path(self) -> Path:
        """Vendor-shipped template for the configured database type."""
        return self.artifactory_home / "misc" / "db" / f"{self.db_type}.properties"

    @property
    def launcher_path(self) -> Path:
        return self.artifactory_home / "bin" / "artifactory.sh"


@lru_cache
def get_settings() -> Settings:
    """Return the cached settings instance."""
    return Settings()
