"""Loader configuration.

Settings come from, in increasing priority: built-in defaults, a YAML config
file (``geoffload.yaml`` by default), and environment variables. CLI flags
override all of these in the command that uses them.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from geoffload.observability.logging import get_logger

log = get_logger(__name__)

DEFAULT_CONFIG_FILE = Path("geoffload.yaml")
DEFAULT_DATABASE = Path("graph.db")
DEFAULT_ENCODING = "utf-8"

ENV_DATABASE = "GEOFFLOAD_DATABASE"
ENV_ENCODING = "GEOFFLOAD_ENCODING"


class ConfigError(Exception):
    """Raised when a config file exists but cannot be used."""


@dataclass
class LoaderConfig:
    """Configuration for reading and loading Geoff documents.

    Attributes:
        database: SQLite database the ``load`` command writes to.
        encoding: Text encoding of Geoff input files.
    """

    database: Path = DEFAULT_DATABASE
    encoding: str = DEFAULT_ENCODING

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LoaderConfig:
        """Create config from a dictionary, ignoring unknown keys."""
        return cls(
            database=Path(data.get("database", DEFAULT_DATABASE)),
            encoding=str(data.get("encoding", DEFAULT_ENCODING)),
        )

    def with_env_overrides(self) -> LoaderConfig:
        """Return a copy with GEOFFLOAD_* environment variables applied."""
        return LoaderConfig(
            database=Path(os.getenv(ENV_DATABASE) or self.database),
            encoding=os.getenv(ENV_ENCODING) or self.encoding,
        )


def load_config(config_path: Path | None = None) -> LoaderConfig:
    """Load configuration from YAML and the environment.

    Args:
        config_path: Config file to read. Defaults to ``geoffload.yaml`` in
            the working directory; a missing default file is not an error.

    Returns:
        The effective LoaderConfig.

    Raises:
        ConfigError: If an explicitly given file is missing, or any config
            file is unreadable or not a mapping.
    """
    path = config_path or DEFAULT_CONFIG_FILE
    data: dict[str, Any] = {}

    if path.exists():
        yaml = YAML()
        try:
            with path.open("r", encoding="utf-8") as f:
                loaded = yaml.load(f)
        except (OSError, YAMLError) as e:
            raise ConfigError(f"Cannot read config file {path}: {e}") from e
        if loaded is not None:
            if not isinstance(loaded, dict):
                raise ConfigError(f"Config file {path} must contain a mapping")
            data = dict(loaded)
        log.debug("config_loaded", path=str(path))
    elif config_path is not None:
        raise ConfigError(f"Config file not found: {path}")

    return LoaderConfig.from_dict(data).with_env_overrides()
