"""NodeSelect - include/exclude node selection.

Decides which nodes of an inventory an operation should run against, using
an include selector, an exclude selector and an optional single node
override.

Example:
    >>> from nodeselect import NodeEntry, NodeSet
    >>> node_set = NodeSet()
    >>> node_set.create_include({"tags": "web+prod"})
    >>> node_set.should_exclude(NodeEntry("web01", tags={"web", "prod"}))
    False
"""

from nodeselect.core.constants import FILTER_KEYS, NODESELECT_VERSION, ErrorCode, FilterKey
from nodeselect.core.node import NodeEntry, NodeLike
from nodeselect.core.validators import PatternError, ValidationError
from nodeselect.rules import (
    NodeSet,
    Selector,
    SelectorKind,
    match_regex_or_equals,
    matches_attributes,
    matches_input,
    matches_input_set,
    populate_selector,
)

__version__ = NODESELECT_VERSION

__all__ = [
    "FILTER_KEYS",
    "ErrorCode",
    "FilterKey",
    "NodeEntry",
    "NodeLike",
    "PatternError",
    "ValidationError",
    "NodeSet",
    "Selector",
    "SelectorKind",
    "match_regex_or_equals",
    "matches_attributes",
    "matches_input",
    "matches_input_set",
    "populate_selector",
]
