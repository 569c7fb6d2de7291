"""Output formatting for selected nodes."""

from .template import FormatError, NodeFormatter, node_context

__all__ = [
    "FormatError",
    "NodeFormatter",
    "node_context",
]
