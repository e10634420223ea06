"""
Configuration loading for the bridge service.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from .exceptions import ConfigError
from .mapping import MappingTable

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "MONGO_PROM_BRIDGE_CONFIG"
DEFAULT_CONFIG_PATH = "config.yaml"


@dataclass
class ServerSettings:
    """HTTP listener settings."""
    host: str = "0.0.0.0"
    port: int = 9090
    query_path: str = "/api/v1/query"
    query_range_path: str = "/api/v1/query_range"


@dataclass
class MongoSettings:
    """MongoDB connection settings; timeout is the connect timeout in seconds."""
    uri: str = "mongodb://localhost:27017"
    database: str = "metrics_db"
    timeout: float = 30


@dataclass
class Settings:
    """
    Complete bridge configuration.

    Attributes:
        server: HTTP listener settings.
        mongodb: MongoDB connection settings.
        query_timeout: Deadline for each store query in seconds.
        log_level: Root logging level name.
        mapping: Metric name to collection lookup.
    """

    server: ServerSettings = field(default_factory=ServerSettings)
    mongodb: MongoSettings = field(default_factory=MongoSettings)
    query_timeout: float = 15
    log_level: str = "INFO"
    mapping: MappingTable = field(default_factory=lambda: MappingTable({}, {}))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Settings":
        """
        Create Settings from a parsed YAML document, using defaults for
        missing values.

        Args:
            data: Dictionary with server, mongodb, queryTimeout, logLevel,
                collections and mappings keys.

        Returns:
            Settings instance.

        Raises:
            ConfigError: If a section has the wrong shape.
        """
        server = data.get("server") or {}
        mongodb = data.get("mongodb") or {}
        if not isinstance(server, dict) or not isinstance(mongodb, dict):
            raise ConfigError("'server' and 'mongodb' must be mappings")

        defaults = ServerSettings()
        mongo_defaults = MongoSettings()
        try:
            return cls(
                server=ServerSettings(
                    host=server.get("host", defaults.host),
                    port=int(server.get("port", defaults.port)),
                    query_path=server.get("queryPath", defaults.query_path),
                    query_range_path=server.get("queryRangePath", defaults.query_range_path),
                ),
                mongodb=MongoSettings(
                    uri=mongodb.get("uri", mongo_defaults.uri),
                    database=mongodb.get("database", mongo_defaults.database),
                    timeout=float(mongodb.get("timeout", mongo_defaults.timeout)),
                ),
                query_timeout=float(data.get("queryTimeout", cls.query_timeout)),
                log_level=str(data.get("logLevel", cls.log_level)).upper(),
                mapping=MappingTable.from_config(data),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration value: {e}") from e


def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load configuration from a YAML file.

    Priority:
    1. Provided config_path (must exist)
    2. Environment variable MONGO_PROM_BRIDGE_CONFIG (must exist)
    3. ./config.yaml (if exists)
    4. Defaults (no collections mapped)

    Args:
        config_path: Explicit path to the YAML file.

    Returns:
        Settings instance.

    Raises:
        ConfigError: If a required file is missing or cannot be parsed.
    """
    explicit = config_path or os.environ.get(CONFIG_ENV_VAR)
    path = Path(explicit or DEFAULT_CONFIG_PATH)

    if not path.exists():
        if explicit:
            raise ConfigError(f"Config file not found: {path}")
        logger.info("No %s found, using default configuration", path)
        return Settings()

    logger.info("Loading configuration from: %s", path)
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to load config from {path}: {e}") from e

    if data is None:
        return Settings()
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return Settings.from_dict(data)
