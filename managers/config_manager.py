"""Layered server configuration"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from models.config import ServerConfig

logger = logging.getLogger("MCP_Server")

SERVER_VERSION = "1.0.0"

# Configuration paths
CONFIG_DIR = Path.home() / ".config" / "4o-image-mcp"
CONFIG_FILE = CONFIG_DIR / "config.json"

API_KEY_ENV = "API_KEY"
NAMESPACES = ("api", "server", "polling")


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "y"}


def _coerce_config_value(value: Any, default: Any) -> Any:
    """Coerce a config file value to the type of its hardcoded default.

    Raises:
        TypeError, ValueError: if the value cannot stand in for the default
    """
    if isinstance(default, bool):
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return _parse_bool(value)
        raise TypeError(f"expected bool, got {type(value).__name__}")
    if isinstance(value, bool):
        raise TypeError("booleans are not numbers here")
    if isinstance(default, int):
        if isinstance(value, float) and not value.is_integer():
            raise ValueError(f"expected an integer, got {value}")
        return int(value)
    if isinstance(default, float):
        return float(value)
    if not isinstance(value, str):
        raise TypeError(f"expected str, got {type(value).__name__}")
    return value


# (namespace, key) -> (environment variable, parser)
ENV_OVERRIDES: Dict[Tuple[str, str], Tuple[str, Callable[[str], Any]]] = {
    ("api", "base_url"): ("IMAGE_API_BASE_URL", str),
    ("api", "timeout"): ("REQUEST_TIMEOUT", float),
    ("server", "name"): ("MCP_SERVER_NAME", str),
    ("server", "host"): ("MCP_HOST", str),
    ("server", "port"): ("MCP_PORT", int),
    ("server", "open_browser"): ("OPEN_BROWSER", _parse_bool),
    ("polling", "interval"): ("POLL_INTERVAL", float),
    ("polling", "max_attempts"): ("POLL_MAX_ATTEMPTS", int),
}


class MissingCredentialError(RuntimeError):
    """The API credential is not present in the environment"""


class ConfigManager:
    """Resolves settings with precedence: env > config file > hardcoded"""

    def __init__(self, config_file: Path = CONFIG_FILE, environ: Optional[Mapping[str, str]] = None):
        self.config_file = config_file
        self.environ = os.environ if environ is None else environ
        self._hardcoded_defaults: Dict[str, Dict[str, Any]] = {
            "api": {
                "base_url": "https://4o-image.app",
                "timeout": 30.0,
            },
            "server": {
                "name": "4o-image-mcp",
                "version": SERVER_VERSION,
                "host": "127.0.0.1",
                "port": 3000,
                "open_browser": True,
            },
            "polling": {
                "interval": 3.0,
                "max_attempts": 50,
            },
        }
        self._config_values = self._load_config_file()

    def _load_config_file(self) -> Dict[str, Dict[str, Any]]:
        """Load settings from the JSON config file, if there is one"""
        values: Dict[str, Dict[str, Any]] = {namespace: {} for namespace in NAMESPACES}
        if not self.config_file.exists():
            return values
        try:
            with open(self.config_file, "r", encoding="utf-8") as f:
                config = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning("Failed to load config file %s: %s", self.config_file, e)
            return values
        if not isinstance(config, dict):
            logger.warning("Ignoring config file %s: top level is not an object", self.config_file)
            return values
        for namespace in NAMESPACES:
            section = config.get(namespace, {})
            if not isinstance(section, dict):
                logger.warning("Ignoring config section '%s': not an object", namespace)
                continue
            for key, value in section.items():
                if key not in self._hardcoded_defaults[namespace]:
                    logger.warning("Ignoring unknown config key %s.%s", namespace, key)
                    continue
                try:
                    values[namespace][key] = _coerce_config_value(value, self._hardcoded_defaults[namespace][key])
                except (TypeError, ValueError):
                    logger.warning("Ignoring config value %s.%s=%r: wrong type", namespace, key, value)
        return values

    def _get_env_values(self) -> Dict[str, Dict[str, Any]]:
        """Load overrides from environment variables"""
        values: Dict[str, Dict[str, Any]] = {namespace: {} for namespace in NAMESPACES}
        for (namespace, key), (env_var, parser) in ENV_OVERRIDES.items():
            raw = self.environ.get(env_var)
            if raw is None or raw == "":
                continue
            try:
                values[namespace][key] = parser(raw)
            except ValueError:
                logger.warning("Ignoring %s=%r: not a valid %s", env_var, raw, parser.__name__)
        return values

    def get_all(self) -> Dict[str, Dict[str, Any]]:
        """Get all effective settings (merged from all sources)"""
        env_values = self._get_env_values()
        result = {}
        for namespace in NAMESPACES:
            result[namespace] = self._hardcoded_defaults[namespace].copy()
            result[namespace].update(self._config_values.get(namespace, {}))
            result[namespace].update(env_values.get(namespace, {}))
        return result

    def build_config(self) -> ServerConfig:
        """Build the effective ServerConfig; the API key must be set"""
        api_key = self.environ.get(API_KEY_ENV)
        if not api_key:
            raise MissingCredentialError(f"{API_KEY_ENV} environment variable is required")

        settings = self.get_all()
        return ServerConfig(
            api_key=api_key,
            base_url=str(settings["api"]["base_url"]),
            server_name=str(settings["server"]["name"]),
            server_version=str(settings["server"]["version"]),
            host=str(settings["server"]["host"]),
            port=int(settings["server"]["port"]),
            poll_interval=float(settings["polling"]["interval"]),
            max_attempts=int(settings["polling"]["max_attempts"]),
            request_timeout=float(settings["api"]["timeout"]),
            open_browser=bool(settings["server"]["open_browser"]),
        )
