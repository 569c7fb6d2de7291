"""
NodeSelect Core: Constants

This module provides system-wide constants, error codes and filter keys
shared by the selection engine and its collaborators.
"""
from enum import IntEnum
from typing import Tuple

# Version information
NODESELECT_VERSION = "1.0.0"


# Error codes
class ErrorCode(IntEnum):
    """Standardized error codes for NodeSelect operations."""

    SUCCESS = 0  # Operation completed successfully
    INVALID_INPUT = 1  # Bad expression, invalid configuration
    NOT_FOUND = 2  # File or resource doesn't exist
    CONFLICT = 4  # Duplicate include/exclude block
    INTERNAL_ERROR = 6  # Bug in NodeSelect


# Filter keys recognised in selector configuration
class FilterKey:
    """Names of the filter attributes used by include/exclude selectors."""

    HOSTNAME = "hostname"
    NAME = "name"
    TYPE = "type"  # Reserved, routed to the attribute map
    TAGS = "tags"
    OS_NAME = "os-name"
    OS_FAMILY = "os-family"
    OS_ARCH = "os-arch"
    OS_VERSION = "os-version"


# Keys exposed to the command line interface
FILTER_KEYS: Tuple[str, ...] = (
    FilterKey.HOSTNAME,
    FilterKey.NAME,
    FilterKey.TYPE,
    FilterKey.TAGS,
    FilterKey.OS_NAME,
    FilterKey.OS_FAMILY,
    FilterKey.OS_ARCH,
    FilterKey.OS_VERSION,
)


# Match expression syntax
class Syntax:
    """Delimiters of the match expression language."""

    REGEX_DELIMITER = "/"  # /pattern/ forces regex mode
    OR_SEPARATOR = ","  # a,b matches either
    AND_SEPARATOR = "+"  # a+b requires both


# Configuration keys
class ConfigKey:
    """Configuration key constants."""

    ROOT = "nodeselect"
    SELECTION = "selection"
    LOGGING = "logging"
    OUTPUT = "output"

    # Selection configuration
    NODE = "node"
    INCLUDE = "include"
    EXCLUDE = "exclude"
    EXCLUDE_PRECEDENCE = "exclude_precedence"
    THREAD_COUNT = "thread_count"

    # Output configuration
    FORMAT = "format"


# Default per-node output template
DEFAULT_NODE_FORMAT = "{{ nodename }}"


# Default configuration values
DEFAULT_CONFIG = {
    ConfigKey.ROOT: {
        ConfigKey.SELECTION: {
            ConfigKey.NODE: None,
            ConfigKey.INCLUDE: {},
            ConfigKey.EXCLUDE: {},
            ConfigKey.EXCLUDE_PRECEDENCE: True,
            ConfigKey.THREAD_COUNT: 1,
        },
        ConfigKey.LOGGING: {
            "level": "INFO",
            "file": None,
        },
        ConfigKey.OUTPUT: {
            ConfigKey.FORMAT: DEFAULT_NODE_FORMAT,
        },
    }
}


# Resource limits and defaults
class Limits:
    """Evaluation limits and default values."""

    DEFAULT_THREAD_COUNT = 1
    MAX_THREAD_COUNT = 64
