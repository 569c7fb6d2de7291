"""Node inventory adapters."""

from .loader import InventoryError, load_nodes, node_from_mapping, parse_nodes, parse_tags

__all__ = [
    "InventoryError",
    "load_nodes",
    "node_from_mapping",
    "parse_nodes",
    "parse_tags",
]
