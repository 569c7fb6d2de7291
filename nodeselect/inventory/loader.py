#!/usr/bin/env python3
"""YAML node inventory loading.

Reads resource documents in either of two shapes:

    web01:                       - nodename: web01
      hostname: web01.example      hostname: web01.example
      tags: web, prod              tags: [web, prod]
      osFamily: unix               osFamily: unix

Keys other than the node descriptor fields become string attributes.
"""

from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Union

import yaml

from nodeselect.core.constants import ErrorCode, Syntax
from nodeselect.core.node import NodeEntry
from nodeselect.core.validators import ValidationError
from nodeselect.infrastructure.logger import get_logger

# Resource document key -> NodeEntry field
RESOURCE_FIELDS: Dict[str, str] = {
    "nodename": "nodename",
    "hostname": "hostname",
    "tags": "tags",
    "osFamily": "os_family",
    "osArch": "os_arch",
    "osName": "os_name",
    "osVersion": "os_version",
}


class InventoryError(ValidationError):
    """Node inventory could not be read."""


def parse_tags(value: Any) -> List[str]:
    """Split a tag value into a list of tags.

    Args:
        value: Comma-separated string or list of tags

    Returns:
        Non-blank tags, trimmed
    """
    if value is None:
        return []
    if isinstance(value, str):
        items: Iterable[Any] = value.split(Syntax.OR_SEPARATOR)
    elif isinstance(value, (list, tuple, set)):
        items = value
    else:
        raise InventoryError(f"Invalid tags value: {value!r}")
    return [str(item).strip() for item in items if item is not None and str(item).strip()]


def node_from_mapping(data: Mapping[str, Any], default_name: str = "") -> NodeEntry:
    """Build a node descriptor from one resource entry.

    Args:
        data: Resource attributes
        default_name: Node name used when the entry has no ``nodename``

    Returns:
        Node descriptor

    Raises:
        InventoryError: If the entry is not a mapping or has no name
    """
    if not isinstance(data, Mapping):
        raise InventoryError(f"Node entry must be a mapping: {data!r}")

    fields: Dict[str, Any] = {}
    attributes: Dict[str, str] = {}
    for key, value in data.items():
        key = str(key)
        field_name = RESOURCE_FIELDS.get(key)
        if field_name == "tags":
            fields["tags"] = parse_tags(value)
        elif field_name is not None:
            fields[field_name] = None if value is None else str(value)
        elif value is not None:
            attributes[key] = str(value)

    if not fields.get("nodename"):
        fields["nodename"] = default_name
    if not fields["nodename"]:
        raise InventoryError(f"Node entry has no nodename: {dict(data)!r}")
    if fields.get("hostname") is None:
        fields["hostname"] = ""

    return NodeEntry(attributes=attributes, **fields)


def parse_nodes(document: Any) -> List[NodeEntry]:
    """Build node descriptors from a parsed resource document.

    Args:
        document: Mapping of node name to attributes, or list of attributes

    Returns:
        Nodes in document order

    Raises:
        InventoryError: If the document shape is invalid or a name repeats
    """
    if document is None:
        return []

    if isinstance(document, Mapping):
        nodes = [
            node_from_mapping(data or {}, default_name=str(name)) for name, data in document.items()
        ]
    elif isinstance(document, list):
        nodes = [node_from_mapping(data) for data in document]
    else:
        raise InventoryError("Node inventory must be a mapping or a list of nodes")

    seen = set()
    for node in nodes:
        if node.nodename in seen:
            raise InventoryError(f"Duplicate node name: {node.nodename}", ErrorCode.CONFLICT)
        seen.add(node.nodename)

    return nodes


def load_nodes(file_path: Union[str, Path]) -> List[NodeEntry]:
    """Load node descriptors from a YAML resource file.

    Args:
        file_path: Path to the resource file

    Returns:
        Nodes in file order

    Raises:
        InventoryError: If the file is missing, unreadable or malformed
    """
    path = Path(file_path).expanduser()
    if not path.exists():
        raise InventoryError(f"Node inventory not found: {file_path}", ErrorCode.NOT_FOUND)

    try:
        with open(path, "r") as f:
            document = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise InventoryError(f"YAML parse error in {file_path}: {e}")
    except OSError as e:
        raise InventoryError(f"Error reading node inventory {file_path}: {e}", ErrorCode.INTERNAL_ERROR)

    nodes = parse_nodes(document)
    get_logger("nodeselect.inventory").debug("Loaded node inventory", path=str(path), nodes=len(nodes))
    return nodes
