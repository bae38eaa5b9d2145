# src/crystal_transfer/core/config.py
"""
Configuration schema and loading for crystal-transfer.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.

Every field has a development default, so running with no settings file
talks to the local source/destination databases used in development.
"""

import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field
from sqlalchemy.engine import URL

ENVVAR_PREFIX = "CRYSTAL_TRANSFER"


class StoreSettings(BaseModel):
    """Connection settings for one trace store.

    The connection pool is bounded: at most pool_max_connections
    connections are open, and checkout waits connect_timeout_seconds
    before failing.
    """

    model_config = {"frozen": True}

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, gt=0, le=65535, description="Database port")
    database: str = Field(description="Database name")
    username: str = Field(default="submerge", description="Database user")
    password: str = Field(default="submerge", description="Database password")
    driver: str = Field(
        default="postgresql+psycopg",
        description="SQLAlchemy driver name (dialect+driver)",
    )
    connect_timeout_seconds: float = Field(default=10.0, gt=0, description="Pool acquire timeout")
    pool_max_connections: int = Field(default=10, gt=0, description="Maximum pooled connections")
    echo: bool = Field(default=False, description="Echo SQL statements")

    def url(self) -> URL:
        """Build the SQLAlchemy URL.

        Render with url.render_as_string(hide_password=True) for logs.
        For sqlite drivers only `database` (the file path) is used.
        """
        if self.driver.startswith("sqlite"):
            return URL.create(self.driver, database=self.database)
        return URL.create(
            self.driver,
            username=self.username,
            password=self.password,
            host=self.host,
            port=self.port,
            database=self.database,
        )


def _default_source() -> StoreSettings:
    return StoreSettings(port=5433, database="submerge_crystal_polkadot")


def _default_destination() -> StoreSettings:
    return StoreSettings(port=5432, database="submerge_crystal")


class RetrySettings(BaseModel):
    """Retry behavior at the store-access boundary.

    max_attempts=1 means a single try: transient failures abort the run.
    """

    model_config = {"frozen": True}

    max_attempts: int = Field(default=1, gt=0, description="Total attempts per store operation")
    initial_delay_seconds: float = Field(default=1.0, gt=0, description="Initial backoff delay")
    max_delay_seconds: float = Field(default=30.0, gt=0, description="Maximum backoff delay")
    exponential_base: float = Field(default=2.0, gt=1.0, description="Exponential backoff base")


class TransferSettings(BaseModel):
    """Top-level configuration for a transfer run.

    chunk_size is fixed for the whole run. Zero would never advance the
    cursor, so it is rejected here rather than discovered at runtime.
    """

    model_config = {"frozen": True}

    source: StoreSettings = Field(default_factory=_default_source)
    destination: StoreSettings = Field(default_factory=_default_destination)
    chunk_size: int = Field(default=100, gt=0, description="Blocks per chunk")
    retry: RetrySettings = Field(default_factory=RetrySettings)


# Regex pattern for ${VAR} or ${VAR:-default} syntax
_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")


def _expand_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively expand ${VAR} and ${VAR:-default} patterns in config values.

    Args:
        config: Configuration dict (may contain nested structures)

    Returns:
        New dict with environment variables expanded
    """
    import os

    def _expand_string(value: str) -> str:
        def replacer(match: re.Match[str]) -> str:
            var_name = match.group(1)
            default = match.group(2)
            env_value = os.environ.get(var_name)
            if env_value is not None:
                return env_value
            if default is not None:
                return default
            # No env var and no default - keep original (validation will flag it)
            return match.group(0)

        return _ENV_VAR_PATTERN.sub(replacer, value)

    def _expand_value(value: Any) -> Any:
        if isinstance(value, str):
            return _expand_string(value)
        elif isinstance(value, dict):
            return {k: _expand_value(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [_expand_value(item) for item in value]
        else:
            return value

    return {k: _expand_value(v) for k, v in config.items()}


def _lower_keys(value: Any) -> Any:
    """Dynaconf upper-cases keys at every level; Pydantic wants lower case."""
    if isinstance(value, dict):
        return {str(k).lower(): _lower_keys(v) for k, v in value.items()}
    return value


def load_settings(config_path: Path | None = None) -> TransferSettings:
    """Load settings from YAML file with environment variable overrides.

    Precedence:
    1. Environment variables (CRYSTAL_TRANSFER_*) - highest priority
    2. Config file, when given
    3. Defaults from the Pydantic schema - lowest priority

    Environment variable format: CRYSTAL_TRANSFER_SOURCE__HOST for nested keys.

    Args:
        config_path: Optional path to YAML configuration file

    Returns:
        Validated TransferSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config_path is given but doesn't exist
    """
    from dynaconf import Dynaconf

    settings_files: list[str] = []
    if config_path is not None:
        # Dynaconf silently accepts missing files
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        settings_files.append(str(config_path))

    dynaconf_settings = Dynaconf(
        envvar_prefix=ENVVAR_PREFIX,
        settings_files=settings_files,
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k: v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}
    raw_config = _lower_keys(raw_config)
    raw_config = _expand_env_vars(raw_config)

    # Store sections given partially (e.g. only host via env) merge over defaults
    for section, default_factory in (("source", _default_source), ("destination", _default_destination)):
        if section in raw_config and isinstance(raw_config[section], dict):
            raw_config[section] = {**default_factory().model_dump(), **raw_config[section]}

    return TransferSettings(**raw_config)
