#!/usr/bin/env python3
"""Include/exclude selectors over node attributes.

A selector is a frozen bag of match expressions, one per filter key, plus an
open map of custom attribute expressions. A node matches when every
configured expression matches; blank expressions place no constraint, and a
selector with nothing configured never matches.

Example:
    >>> selector = populate_selector({"tags": "web+prod", "os-family": "unix"})
    >>> selector.matches(NodeEntry("web01", tags={"web", "prod"}, os_family="unix"))
    True
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from nodeselect.core.constants import FilterKey
from nodeselect.core.node import NodeLike
from nodeselect.core.validators import (
    PatternError,
    is_blank,
    validate_match_expression,
    validate_selector_mapping,
)
from nodeselect.rules.patterns import matches_attributes, matches_input, matches_input_set


class SelectorKind(Enum):
    """Role of a selector in a node set."""

    INCLUDE = "include"  # Select matching nodes
    EXCLUDE = "exclude"  # Drop matching nodes


@dataclass(frozen=True)
class FilterField:
    """Binds a filter key to a selector field and a node accessor."""

    key: str
    attribute: str
    node_value: Callable[[NodeLike], Any]
    is_set: bool = False


# Evaluation order of the fixed filter fields
FILTER_FIELDS: Tuple[FilterField, ...] = (
    FilterField(FilterKey.HOSTNAME, "hostname", lambda node: node.hostname),
    FilterField(FilterKey.NAME, "name", lambda node: node.nodename),
    FilterField(FilterKey.TAGS, "tags", lambda node: node.tags, is_set=True),
    FilterField(FilterKey.OS_FAMILY, "os_family", lambda node: node.os_family),
    FilterField(FilterKey.OS_ARCH, "os_arch", lambda node: node.os_arch),
    FilterField(FilterKey.OS_NAME, "os_name", lambda node: node.os_name),
    FilterField(FilterKey.OS_VERSION, "os_version", lambda node: node.os_version),
)

FIELDS_BY_KEY: Dict[str, FilterField] = {f.key: f for f in FILTER_FIELDS}


@dataclass(frozen=True)
class Selector:
    """Match expressions for one side (include or exclude) of a node set.

    The ``dominant`` flag only has an effect on the include selector: a
    dominant include keeps every node it matches even when the exclude
    selector matches it too.
    """

    kind: SelectorKind = field(default=SelectorKind.INCLUDE, compare=False)
    hostname: str = ""
    name: str = ""
    tags: str = ""
    os_family: str = ""
    os_arch: str = ""
    os_name: str = ""
    os_version: str = ""
    attributes: Mapping[str, str] = field(default_factory=dict)
    dominant: bool = False

    # The attribute map is a read-only view, not a hashable value
    __hash__ = None  # type: ignore[assignment]

    def __post_init__(self):
        for filter_field in FILTER_FIELDS:
            if getattr(self, filter_field.attribute) is None:
                object.__setattr__(self, filter_field.attribute, "")

        # Blank attribute expressions are unconstrained, same as blank fields
        attributes = {
            key: value for key, value in (self.attributes or {}).items() if not is_blank(value)
        }
        object.__setattr__(self, "attributes", MappingProxyType(attributes))

    def is_blank(self) -> bool:
        """Return True if no field and no attribute expression is configured."""
        return all(is_blank(getattr(self, f.attribute)) for f in FILTER_FIELDS) and not self.attributes

    is_empty = is_blank

    def matches(self, node: NodeLike) -> bool:
        """Return True if every configured expression matches the node.

        Args:
            node: Node to evaluate

        Returns:
            True if the node matches; always False for a blank selector

        Raises:
            PatternError: If a configured ``/regex/`` expression is malformed
        """
        if self.is_blank():
            return False

        for filter_field in FILTER_FIELDS:
            expression = getattr(self, filter_field.attribute)
            if is_blank(expression):
                continue

            value = filter_field.node_value(node)
            matcher = matches_input_set if filter_field.is_set else matches_input
            if not self._evaluate(filter_field.key, matcher, expression, value):
                return False

        return matches_attributes(self.attributes, node.attributes or {}, match_all=True)

    @staticmethod
    def _evaluate(key: str, matcher: Callable[[str, Any], bool], expression: str, value: Any) -> bool:
        """Run a matcher, reporting a malformed explicit regex against its key."""
        try:
            return matcher(expression, value)
        except re.error as e:
            raise PatternError(key, expression, str(e)) from e

    def validate(self) -> bool:
        """Check every expression up front.

        Returns:
            True if valid

        Raises:
            PatternError: If a configured ``/regex/`` expression is malformed
        """
        for filter_field in FILTER_FIELDS:
            validate_match_expression(
                filter_field.key, getattr(self, filter_field.attribute), is_set=filter_field.is_set
            )
        for key, expression in self.attributes.items():
            validate_match_expression(key, expression)
        return True

    def to_mapping(self) -> Dict[str, str]:
        """Return the configured expressions keyed by filter key."""
        result = {
            f.key: getattr(self, f.attribute)
            for f in FILTER_FIELDS
            if not is_blank(getattr(self, f.attribute))
        }
        result.update(self.attributes)
        return result

    def __str__(self) -> str:
        parts = [
            f"{f.key}={getattr(self, f.attribute)}"
            for f in FILTER_FIELDS
            if not is_blank(getattr(self, f.attribute))
        ]
        parts.append(f"dominant={self.dominant}")
        if self.attributes:
            parts.append(f"attributes={dict(self.attributes)}")
        return "{" + ", ".join(parts) + "}"


def populate_selector(
    mapping: Optional[Mapping[str, Any]],
    kind: SelectorKind = SelectorKind.INCLUDE,
    dominant: bool = False,
) -> Selector:
    """Build a selector from a key/value configuration block.

    Known filter keys (hostname, name, tags, os-name, os-family, os-arch,
    os-version) fill the corresponding field. Every other key, including the
    reserved ``type``, becomes a custom attribute expression.

    Args:
        mapping: Filter key to match expression
        kind: Include or exclude
        dominant: Whether an include selector wins over the exclude selector

    Returns:
        New selector

    Raises:
        ValidationError: If the block is not a flat mapping
    """
    values = validate_selector_mapping(mapping, kind.value)

    fields: Dict[str, Optional[str]] = {}
    attributes: Dict[str, str] = {}
    for key, value in values.items():
        filter_field = FIELDS_BY_KEY.get(key)
        if filter_field is not None:
            fields[filter_field.attribute] = value
        elif value is not None:
            attributes[key] = value

    return Selector(kind=kind, attributes=attributes, dominant=dominant, **fields)
