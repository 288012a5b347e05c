"""
Config system - Layered configuration with explicit cache settings.

Configuration is loaded once by the application and handed to the
components that need it; nothing in Courier reads a process-wide
configuration object.
"""

from typing import Any, Dict, Mapping, Optional
from dataclasses import dataclass, field
from pathlib import Path
import json
import os

import yaml
from dotenv import dotenv_values

from .faults import ConfigInvalidFault


DEFAULT_CHUNK_SIZE = 64 * 1024


@dataclass
class CacheConfig:
    """
    Expiration policy for files sent by ``FileSender``.

    Attributes:
        expires_by_type: Seconds to cache, keyed by content type
        default_expire: Seconds for content types absent from the mapping
    """

    expires_by_type: Dict[str, int] = field(default_factory=dict)
    default_expire: int = 0

    def expire_for(self, content_type: str) -> int:
        """Seconds a response of ``content_type`` may be cached."""
        return self.expires_by_type.get(content_type) or self.default_expire or 0

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "CacheConfig":
        """
        Build from a ``{content_type: seconds}`` mapping where the
        ``default`` key holds the fallback.
        """
        expires: Dict[str, int] = {}
        default = 0
        for key, value in data.items():
            seconds = _as_seconds(f"cache_control.expires.{key}", value)
            if key == "default":
                default = seconds
            else:
                expires[key] = seconds
        return cls(expires_by_type=expires, default_expire=default)


def _as_seconds(key: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigInvalidFault(key, "expected whole seconds, got a boolean")
    try:
        seconds = int(value)
    except (TypeError, ValueError):
        raise ConfigInvalidFault(key, f"expected whole seconds, got {value!r}")
    if seconds < 0:
        raise ConfigInvalidFault(key, "must not be negative")
    return seconds


class ConfigLoader:
    """
    Loads and merges configuration from multiple sources with precedence:
    overrides > environment variables > .env file > config files
    """

    def __init__(self, env_prefix: str = "COURIER_"):
        self.env_prefix = env_prefix
        self.config_data: Dict[str, Any] = {}

    @classmethod
    def load(
        cls,
        paths: Optional[list] = None,
        env_prefix: str = "COURIER_",
        env_file: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "ConfigLoader":
        """
        Load configuration from multiple sources.

        Merge order (later overrides earlier):
        1. Config files (JSON or YAML, in the order given)
        2. .env file (only keys carrying the prefix)
        3. Environment variables (COURIER_* prefix)
        4. Manual overrides

        Args:
            paths: Config file paths
            env_prefix: Prefix for environment variables
            env_file: Path to .env file
            overrides: Manual overrides (highest precedence)

        Returns:
            Configured ConfigLoader instance
        """
        loader = cls(env_prefix=env_prefix)

        for path in paths or []:
            loader._load_file(Path(path))

        if env_file:
            loader._load_env_file(env_file)

        loader._load_from_env()

        if overrides:
            loader._merge_dict(loader.config_data, overrides)

        return loader

    def _load_file(self, path: Path):
        """Load config from a JSON or YAML file."""
        if path.suffix == ".json":
            with open(path) as f:
                data = json.load(f)
        elif path.suffix in (".yaml", ".yml"):
            with open(path) as f:
                data = yaml.safe_load(f)
        else:
            raise ConfigInvalidFault(str(path), "unsupported config file type")

        if data:
            self._merge_dict(self.config_data, data)

    def _load_env_file(self, path: str):
        """Load config from .env file."""
        if not Path(path).exists():
            return

        for key, value in dotenv_values(path).items():
            if key.startswith(self.env_prefix) and value is not None:
                self._set_nested(key, value)

    def _load_from_env(self):
        """Load config from environment variables."""
        for key, value in os.environ.items():
            if key.startswith(self.env_prefix):
                self._set_nested(key, value)

    def _set_nested(self, key: str, value: str):
        """Convert COURIER_CACHE_CONTROL__EXPIRES__DEFAULT to nested dict."""
        key = key[len(self.env_prefix):]

        # Double underscore separates nesting levels
        parts = key.lower().split("__")

        current = self.config_data
        for part in parts[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]

        current[parts[-1]] = self._parse_value(value)

    def _parse_value(self, value: str) -> Any:
        """Parse string value to appropriate type."""
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        try:
            if "." in value:
                return float(value)
            return int(value)
        except ValueError:
            pass

        if value.startswith(("{", "[")):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass

        return value

    def _merge_dict(self, target: dict, source: Mapping):
        """Deep merge source into target."""
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, Mapping):
                self._merge_dict(target[key], value)
            else:
                target[key] = value

    def get(self, path: str, default: Any = None) -> Any:
        """Get config value by dot-separated path."""
        current = self.config_data

        for part in path.split("."):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default

        return current

    def to_dict(self) -> dict:
        """Export all config as dictionary."""
        return self.config_data.copy()

    def get_cache_control_config(self) -> CacheConfig:
        """
        Get file cache expiration settings.

        Reads ``cache_control.expires``; its ``default`` key is the
        fallback for content types it does not list.
        """
        expires = self.get("cache_control.expires", {})
        if not isinstance(expires, Mapping):
            raise ConfigInvalidFault("cache_control.expires", "expected a mapping")
        return CacheConfig.from_mapping(expires)

    def get_response_config(self) -> dict:
        """
        Get response streaming settings with defaults.

        Returns:
            Response configuration dictionary
        """
        merged = {"chunk_size": DEFAULT_CHUNK_SIZE}
        user_config = self.get("response", {})
        if isinstance(user_config, Mapping):
            self._merge_dict(merged, user_config)

        chunk_size = merged["chunk_size"]
        if isinstance(chunk_size, bool) or not isinstance(chunk_size, int) or chunk_size <= 0:
            raise ConfigInvalidFault("response.chunk_size", "expected a positive integer")

        return merged
