# config.py

import os
import logging
from typing import Dict, Optional, Tuple

import yaml
from pydantic import BaseModel, ValidationError, field_validator

from errors import ConfigError
from models.endpoint import EndpointConfig

logger = logging.getLogger(__name__)

# Paths served by the service itself; endpoints may not claim them.
RESERVED_PATHS = {"/health"}


def _env_bool(name: str, default: bool = False) -> bool:
    return os.getenv(name, str(default)).strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    config_path: str = "config.yaml"
    listen_addr: str = "127.0.0.1:8080"
    queue_size: int = 10
    command_timeout: float = 180.0
    verbose: bool = False
    cert_file: Optional[str] = None
    key_file: Optional[str] = None
    debug_mode: bool = False
    log_db_path: Optional[str] = None

    @field_validator("queue_size")
    @classmethod
    def clamp_queue_size(cls, value: int) -> int:
        return max(1, value)

    @field_validator("command_timeout")
    @classmethod
    def non_negative_timeout(cls, value: float) -> float:
        if value < 0:
            raise ValueError("command timeout must not be negative")
        return value

    @property
    def tls_enabled(self) -> bool:
        return bool(self.cert_file and self.key_file)


def load_settings() -> Settings:
    """
    Build process settings from environment variables, falling back to the
    defaults above for anything unset.
    """
    return Settings(
        config_path=os.getenv("CONFIG_PATH", "config.yaml"),
        listen_addr=os.getenv("LISTEN_ADDR", "127.0.0.1:8080"),
        queue_size=int(os.getenv("QUEUE_SIZE", "10")),
        command_timeout=float(os.getenv("COMMAND_TIMEOUT", "180")),
        verbose=_env_bool("VERBOSE"),
        cert_file=os.getenv("CERT_FILE") or None,
        key_file=os.getenv("KEY_FILE") or None,
        debug_mode=_env_bool("DEBUG_MODE"),
        log_db_path=os.getenv("LOG_DB_PATH") or None,
    )


def parse_listen_addr(addr: str) -> Tuple[str, int]:
    host, sep, port = addr.rpartition(":")
    if not sep or not port.isdigit():
        raise ConfigError(f"Invalid listen address '{addr}', expected host:port.")
    return host.strip("[]") or "0.0.0.0", int(port)


def load_config(path: str) -> Dict[str, EndpointConfig]:
    """
    Load the endpoint table from a YAML file.

    The file maps URL paths to endpoint definitions:

        /hooks/site:
          reponame: site
          secret: s3cret
          command: /usr/local/bin/update-site
          args: [--quiet]
          refs:
            refs/heads/dev:
              command: /usr/local/bin/update-site
              args: [--dev]

    Returns:
        dict: URL path to EndpointConfig.
    """
    if not os.path.exists(path):
        logger.error(f"Configuration file '{path}' not found.")
        raise ConfigError(f"Configuration file '{path}' not found.")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        logger.error(f"Error parsing YAML file '{path}': {e}")
        raise ConfigError(f"Error parsing YAML file '{path}': {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Error reading configuration file '{path}': {e}")
        raise ConfigError(f"Error reading configuration file '{path}': {e}") from e

    if not isinstance(raw, dict):
        raise ConfigError(f"Configuration file '{path}' must contain a mapping of URL paths.")
    if not raw:
        raise ConfigError(f"Configuration file '{path}' defines no endpoints.")

    endpoints = {}
    for url_path, entry in raw.items():
        if not isinstance(url_path, str) or not url_path.startswith("/"):
            raise ConfigError(f"Endpoint path {url_path!r} must start with '/'.")
        if url_path in RESERVED_PATHS:
            raise ConfigError(f"Endpoint path '{url_path}' is reserved.")
        try:
            endpoints[url_path] = EndpointConfig.model_validate(entry or {})
        except ValidationError as e:
            raise ConfigError(f"Invalid endpoint '{url_path}': {e}") from e

    logger.info(f"Configuration loaded successfully from '{path}' ({len(endpoints)} endpoints).")
    return endpoints
