"""NodeSelect Infrastructure Layer.

Services used by the rules engine and the CLI:
- ConfigManager: Layered YAML/environment/CLI configuration
- Logger: Structured logging system
"""

from .config_manager import ConfigError
from .config_manager import ConfigManager as Config
from .config_manager import ConfigManager, ConfigSource, get_config_manager, set_global_config
from .logger import Logger, LogLevel, configure_logging, get_logger, set_global_logger

__all__ = [
    # Logger exports
    "Logger",
    "LogLevel",
    "configure_logging",
    "get_logger",
    "set_global_logger",
    # ConfigManager exports
    "ConfigSource",
    "ConfigError",
    "Config",
    "ConfigManager",
    "get_config_manager",
    "set_global_config",
]
