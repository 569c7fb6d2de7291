"""NodeSelect Rules System.

This module provides node selection rules and expression matching:
- patterns: regex-or-literal, set and attribute-map matching
- Selector: include/exclude match expressions for one side of a filter
- NodeSet: precedence between include, exclude and the single node override
"""

from .engine import NodeSet
from .patterns import (
    PatternType,
    classify_expression,
    is_explicit_regex,
    match_regex_or_equals,
    matches_attributes,
    matches_input,
    matches_input_set,
)
from .selector import FILTER_FIELDS, FilterField, Selector, SelectorKind, populate_selector

__all__ = [
    # Expression matching
    "PatternType",
    "classify_expression",
    "is_explicit_regex",
    "match_regex_or_equals",
    "matches_attributes",
    "matches_input",
    "matches_input_set",
    # Selectors
    "FILTER_FIELDS",
    "FilterField",
    "Selector",
    "SelectorKind",
    "populate_selector",
    # Node sets
    "NodeSet",
]
