#!/usr/bin/env python3
"""Hierarchical configuration manager for NodeSelect.

This module provides configuration management with:
- Precedence levels (defaults < file < environment < CLI < runtime)
- YAML configuration files
- Environment variable overrides (NODESELECT_*)
- Thread-safe operations
- Construction of a NodeSet from the ``selection`` block

Example:
    >>> config = ConfigManager()
    >>> config.load_file("nodeselect.yaml")
    >>> config.get("nodeselect.selection.thread_count", default=1)
    >>> node_set = config.build_node_set()
"""

import copy
import os
import threading
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional

import yaml

from nodeselect.core.constants import DEFAULT_CONFIG, ConfigKey, ErrorCode
from nodeselect.core.validators import ValidationError, is_blank, parse_bool

if TYPE_CHECKING:
    from nodeselect.rules.engine import NodeSet

ENV_PREFIX = "NODESELECT_"
ENV_SEPARATOR = "__"


class ConfigSource(Enum):
    """Configuration source precedence levels."""

    COMPILED_DEFAULTS = 1  # Lowest precedence
    USER_CONFIG = 2
    ENVIRONMENT = 3
    CLI_ARGS = 4
    RUNTIME = 5  # Highest precedence


class ConfigError(Exception):
    """Configuration error."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class ConfigManager:
    """Thread-safe hierarchical configuration manager.

    Manages configuration from multiple sources with precedence:
    1. Compiled defaults (lowest)
    2. User config file (YAML)
    3. Environment variables (NODESELECT_*)
    4. CLI arguments
    5. Runtime updates (highest)

    ``get`` returns the value from the highest source that defines the key,
    so a selector block set on the command line replaces the file's block
    instead of merging with it.
    """

    def __init__(self, config_file: Optional[str] = None, load_environment: bool = True):
        """Initialize configuration manager.

        Args:
            config_file: Optional config file to load
            load_environment: Read NODESELECT_* environment variables
        """
        self._config: Dict[ConfigSource, Dict[str, Any]] = {}
        self._lock = threading.RLock()

        self._config[ConfigSource.COMPILED_DEFAULTS] = copy.deepcopy(DEFAULT_CONFIG)

        if config_file:
            self.load_file(config_file)

        if load_environment:
            self._load_environment()

    def load_file(self, file_path: str, source: ConfigSource = ConfigSource.USER_CONFIG) -> None:
        """Load configuration from YAML file.

        Args:
            file_path: Path to YAML config file
            source: Configuration source level

        Raises:
            ConfigError: If file cannot be loaded or parsed
        """
        path = Path(file_path).expanduser().resolve()

        if not path.exists():
            raise ConfigError(f"Config file not found: {file_path}", ErrorCode.NOT_FOUND)

        try:
            with open(path, "r") as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"YAML parse error in {file_path}: {e}", ErrorCode.INVALID_INPUT)
        except OSError as e:
            raise ConfigError(f"Error loading config {file_path}: {e}", ErrorCode.INTERNAL_ERROR)

        if not isinstance(config_data, dict):
            raise ConfigError(f"Invalid config format in {file_path}", ErrorCode.INVALID_INPUT)

        with self._lock:
            self._config[source] = config_data

    def load_dict(self, config_data: Dict[str, Any], source: ConfigSource = ConfigSource.RUNTIME) -> None:
        """Load configuration from dictionary.

        Args:
            config_data: Configuration dictionary
            source: Configuration source level
        """
        with self._lock:
            self._config[source] = copy.deepcopy(config_data)

    def _load_environment(self) -> None:
        """Load configuration from environment variables.

        Environment variables in format: NODESELECT_SECTION__KEY=value
        Example: NODESELECT_SELECTION__THREAD_COUNT=4
        """
        env_config: Dict[str, Any] = {}

        for key, value in os.environ.items():
            if not key.startswith(ENV_PREFIX):
                continue

            parts = key[len(ENV_PREFIX):].lower().split(ENV_SEPARATOR)

            current = env_config
            for part in parts[:-1]:
                current = current.setdefault(part, {})
                if not isinstance(current, dict):
                    break
            else:
                current[parts[-1]] = value if self._is_literal_key(parts) else self._parse_env_value(value)

        if env_config:
            with self._lock:
                self._config[ConfigSource.ENVIRONMENT] = {ConfigKey.ROOT: env_config}

    def _is_literal_key(self, parts: List[str]) -> bool:
        """Return True for keys whose values are kept as raw strings.

        Match expressions and node names are text: "true" or "01" must not
        be coerced to a bool or an int.
        """
        return (
            len(parts) >= 2
            and parts[0] == ConfigKey.SELECTION
            and parts[1] in (ConfigKey.INCLUDE, ConfigKey.EXCLUDE, ConfigKey.NODE)
        )

    def _parse_env_value(self, value: str) -> Any:
        """Parse environment variable value.

        Args:
            value: String value from environment

        Returns:
            Parsed value (bool, int, float, or str)
        """
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        return value

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key.

        Args:
            key: Dot-separated key path (e.g., "nodeselect.selection.node")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        with self._lock:
            for source in sorted(self._config.keys(), key=lambda s: s.value, reverse=True):
                value = self._get_nested(self._config[source], key)
                if value is not None:
                    return value

            return default

    def _get_nested(self, config: Dict[str, Any], key: str) -> Optional[Any]:
        """Get value from nested dictionary using dot notation.

        Args:
            config: Configuration dictionary
            key: Dot-separated key path

        Returns:
            Value or None if not found
        """
        current: Any = config
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return None
            current = current[part]

        return current

    def set(self, key: str, value: Any, source: ConfigSource = ConfigSource.RUNTIME) -> None:
        """Set configuration value.

        Args:
            key: Dot-separated key path
            value: Value to set
            source: Configuration source level
        """
        with self._lock:
            current = self._config.setdefault(source, {})

            parts = key.split(".")
            for part in parts[:-1]:
                current = current.setdefault(part, {})

            current[parts[-1]] = value

    def get_all(self) -> Dict[str, Any]:
        """Get merged configuration from all sources.

        Returns:
            Merged configuration dictionary
        """
        with self._lock:
            merged: Dict[str, Any] = {}

            for source in sorted(self._config.keys(), key=lambda s: s.value):
                merged = self._deep_merge(merged, self._config[source])

            return merged

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def clear(self, source: Optional[ConfigSource] = None) -> None:
        """Clear configuration.

        Args:
            source: Specific source to clear, or None for all except defaults
        """
        with self._lock:
            if source:
                if source in self._config and source != ConfigSource.COMPILED_DEFAULTS:
                    del self._config[source]
            else:
                for s in [s for s in self._config if s != ConfigSource.COMPILED_DEFAULTS]:
                    del self._config[s]

    def _selection(self, key: str, default: Any = None) -> Any:
        return self.get(f"{ConfigKey.ROOT}.{ConfigKey.SELECTION}.{key}", default)

    def _selector_block(self, key: str) -> Optional[Mapping[str, Any]]:
        """Return the include or exclude block, rejecting multiple blocks.

        Raises:
            ConfigError: If more than one block is configured
        """
        block = self._selection(key)
        if isinstance(block, list):
            if len(block) > 1:
                raise ConfigError(f"only one {key} is allowed, got {len(block)}")
            block = block[0] if block else None
        return block

    def build_node_set(self) -> "NodeSet":
        """Create a NodeSet from the ``nodeselect.selection`` block.

        Returns:
            Configured node set

        Raises:
            ConfigError: If the selection block is malformed
            PatternError: If a ``/regex/`` expression is malformed
        """
        from nodeselect.rules.engine import NodeSet

        try:
            exclude_precedence = parse_bool(self._selection(ConfigKey.EXCLUDE_PRECEDENCE, True))
            node = self._selection(ConfigKey.NODE)

            node_set = NodeSet(
                single_node_name=None if is_blank(node) else str(node),
                thread_count=self._selection(ConfigKey.THREAD_COUNT, 1),
            )
            node_set.create_include(
                self._selector_block(ConfigKey.INCLUDE), dominant=not exclude_precedence
            )
            node_set.create_exclude(self._selector_block(ConfigKey.EXCLUDE))
        except ValidationError as e:
            raise ConfigError(f"Invalid selection configuration: {e.message}", e.error_code) from e

        node_set.validate()
        return node_set


# Global config manager instance
_global_config: Optional[ConfigManager] = None


def get_config_manager(config_file: Optional[str] = None) -> ConfigManager:
    """Get or create global configuration manager.

    Args:
        config_file: Optional config file to load

    Returns:
        Global configuration manager
    """
    global _global_config
    if _global_config is None:
        _global_config = ConfigManager(config_file)
    return _global_config


def set_global_config(config: ConfigManager) -> None:
    """Set the global configuration manager.

    Args:
        config: Configuration manager to use globally
    """
    global _global_config
    _global_config = config
