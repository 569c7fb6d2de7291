#!/usr/bin/env python3
"""Command-line interface for NodeSelect.

This module provides the CLI for filtering a node inventory:
- Argument parsing and validation
- Include/exclude filter pairs (-I/-X key=value)
- Configuration file and environment loading
- Formatted output of the selected nodes

Example:
    >>> from nodeselect.cli import parse_arguments
    >>> args = parse_arguments(['--nodes', 'resources.yaml', '-I', 'tags=web+prod'])
"""

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from nodeselect.core.constants import FILTER_KEYS, NODESELECT_VERSION, ConfigKey, FilterKey
from nodeselect.core.validators import ValidationError, parse_bool
from nodeselect.infrastructure.config_manager import ConfigError, ConfigManager, ConfigSource
from nodeselect.infrastructure.logger import Logger, configure_logging, get_logger
from nodeselect.inventory.loader import load_nodes
from nodeselect.output.template import FormatError, NodeFormatter

DESCRIPTION = "NodeSelect - include/exclude node filtering"

# Filter key assumed for a bare -I/-X value
DEFAULT_FILTER_KEY = FilterKey.HOSTNAME


class CLIError(Exception):
    """Exception raised for CLI-related errors."""

    pass


def parse_arguments(args: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        args: Argument list to parse (defaults to sys.argv[1:])

    Returns:
        Parsed arguments namespace

    Raises:
        SystemExit: On invalid arguments or --help/--version
        CLIError: If validation fails
    """
    parser = argparse.ArgumentParser(
        prog="nodeselect",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Filter keys: {", ".join(FILTER_KEYS)}; any other key matches a node attribute.

Examples:
  # Nodes tagged both web and prod
  nodeselect --nodes resources.yaml -I tags=web+prod

  # Everything except Windows hosts
  nodeselect --nodes resources.yaml -X os-family=windows

  # Include wins over exclude
  nodeselect --nodes resources.yaml -I 'name=/web.*/' -X tags=maint -Z false

  # Custom output
  nodeselect --nodes resources.yaml -I tags=db --format '{{{{ nodename }}}} {{{{ hostname }}}}'
        """,
    )

    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {NODESELECT_VERSION}",
    )

    parser.add_argument(
        "-c",
        "--config",
        metavar="FILE",
        type=str,
        help="Configuration file path (YAML format)",
    )

    parser.add_argument(
        "-n",
        "--nodes",
        metavar="FILE",
        type=str,
        required=True,
        help="Node inventory file (YAML format, required)",
    )

    # Filter options
    filter_group = parser.add_argument_group("filter options")

    filter_group.add_argument(
        "-I",
        "--filter-include",
        metavar="KEY=VALUE",
        action="append",
        dest="include",
        help=f"Include filter (repeatable, bare values match {DEFAULT_FILTER_KEY})",
    )

    filter_group.add_argument(
        "-X",
        "--filter-exclude",
        metavar="KEY=VALUE",
        action="append",
        dest="exclude",
        help=f"Exclude filter (repeatable, bare values match {DEFAULT_FILTER_KEY})",
    )

    filter_group.add_argument(
        "-Z",
        "--filter-exclude-precedence",
        metavar="BOOL",
        dest="exclude_precedence",
        help="Exclude wins when both filters match (default: true)",
    )

    filter_group.add_argument(
        "--node",
        metavar="NAME",
        type=str,
        help="Select only this node, ignoring include/exclude filters",
    )

    filter_group.add_argument(
        "--threads",
        metavar="N",
        type=int,
        help="Worker threads used to evaluate nodes",
    )

    # Output options
    output_group = parser.add_argument_group("output options")

    output_group.add_argument(
        "-f",
        "--format",
        metavar="TEMPLATE",
        type=str,
        help="Jinja2 template rendered for each selected node",
    )

    # Logging options
    log_group = parser.add_argument_group("logging options")

    log_group.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    log_group.add_argument(
        "--log-file",
        metavar="FILE",
        type=str,
        help="Also write log records to this file",
    )

    parsed = parser.parse_args(args)

    _validate_arguments(parsed)

    return parsed


def _validate_arguments(args: argparse.Namespace) -> None:
    """
    Validate parsed arguments.

    Args:
        args: Parsed arguments namespace

    Raises:
        CLIError: If validation fails
    """
    nodes_path = Path(args.nodes)

    if not nodes_path.exists():
        raise CLIError(f"Node inventory does not exist: {args.nodes}")

    if not nodes_path.is_file():
        raise CLIError(f"Node inventory is not a file: {args.nodes}")

    if args.config:
        config_path = Path(args.config)

        if not config_path.exists():
            raise CLIError(f"Configuration file does not exist: {args.config}")

        if not config_path.is_file():
            raise CLIError(f"Configuration path is not a file: {args.config}")

    if args.threads is not None and args.threads < 1:
        raise CLIError(f"Thread count must be at least 1: {args.threads}")

    if args.exclude_precedence is not None:
        try:
            parse_bool(args.exclude_precedence)
        except ValidationError as e:
            raise CLIError(f"Invalid --filter-exclude-precedence: {e.message}")


def parse_filter_pairs(pairs: List[str], label: str = "include") -> Dict[str, str]:
    """
    Parse repeated KEY=VALUE filter arguments.

    A value without '=' is matched against the default filter key.

    Args:
        pairs: Raw argument values
        label: Filter name for error messages

    Returns:
        Mapping of filter key to match expression

    Raises:
        CLIError: If a key is empty or repeated
    """
    result: Dict[str, str] = {}

    for pair in pairs:
        if "=" in pair:
            key, value = pair.split("=", 1)
            key = key.strip()
        else:
            key, value = DEFAULT_FILTER_KEY, pair

        if not key:
            raise CLIError(f"Missing {label} filter key in: {pair}")
        if key in result:
            raise CLIError(f"Duplicate {label} filter key: {key}")

        result[key] = value

    return result


def build_config_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Build configuration dictionary from command-line arguments.

    Only options given on the command line appear, so file and environment
    values still apply to everything else.

    Args:
        args: Parsed arguments namespace

    Returns:
        Configuration dictionary for ConfigManager
    """
    selection: Dict[str, Any] = {}

    if args.include:
        selection[ConfigKey.INCLUDE] = parse_filter_pairs(args.include, "include")

    if args.exclude:
        selection[ConfigKey.EXCLUDE] = parse_filter_pairs(args.exclude, "exclude")

    if args.exclude_precedence is not None:
        selection[ConfigKey.EXCLUDE_PRECEDENCE] = parse_bool(args.exclude_precedence)

    if args.node:
        selection[ConfigKey.NODE] = args.node

    if args.threads is not None:
        selection[ConfigKey.THREAD_COUNT] = args.threads

    config: Dict[str, Any] = {ConfigKey.SELECTION: selection}

    logging_config: Dict[str, Any] = {}
    if args.debug:
        logging_config["level"] = "DEBUG"
    if args.log_file:
        logging_config["file"] = args.log_file
    if logging_config:
        config[ConfigKey.LOGGING] = logging_config

    if args.format:
        config[ConfigKey.OUTPUT] = {ConfigKey.FORMAT: args.format}

    return {ConfigKey.ROOT: config}


def setup_logging(config: ConfigManager) -> Logger:
    """
    Setup logging based on the resolved configuration.

    Args:
        config: Configuration manager

    Returns:
        Configured logger instance
    """
    log_level = config.get(f"{ConfigKey.ROOT}.{ConfigKey.LOGGING}.level", "INFO")
    log_file = config.get(f"{ConfigKey.ROOT}.{ConfigKey.LOGGING}.file")

    # The log file is opened for existing loggers here, or for the first new one
    try:
        configure_logging(log_level, log_file)
        return get_logger("nodeselect.cli")
    except (KeyError, ValueError):
        raise CLIError(f"Invalid log level: {log_level}")
    except OSError as e:
        raise CLIError(f"Cannot open log file {log_file}: {e}")


def run_selection(args: argparse.Namespace) -> int:
    """
    Load configuration and inventory, filter nodes and print the result.

    Args:
        args: Parsed arguments namespace

    Returns:
        Exit code
    """
    config = ConfigManager(args.config)
    config.load_dict(build_config_from_args(args), ConfigSource.CLI_ARGS)

    logger = setup_logging(config)

    node_set = config.build_node_set()
    logger.info("Resolved node filter", filter=str(node_set))

    formatter = NodeFormatter(config.get(f"{ConfigKey.ROOT}.{ConfigKey.OUTPUT}.{ConfigKey.FORMAT}"))

    nodes = load_nodes(args.nodes)
    logger.info("Loaded node inventory", path=args.nodes, nodes=len(nodes))

    for line in formatter.render_all(node_set.filter_nodes(nodes)):
        print(line)

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Handles argument parsing, validation and error reporting around
    run_selection.
    """
    try:
        args = parse_arguments(argv)
        return run_selection(args)

    except (CLIError, ConfigError, ValidationError, FormatError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
