#!/usr/bin/env python3
"""Node set evaluation: include/exclude precedence and the single node override.

This module decides, per node, whether a node is selected:
- Single node override takes total precedence
- Include-only and exclude-only semantics
- Dominance rule when both selectors match the same node
- Order-preserving filtering, optionally fanned out over threads

Example:
    >>> node_set = NodeSet()
    >>> node_set.create_include({"tags": "web+prod"})
    >>> node_set.create_exclude({"os-family": "windows"})
    >>> node_set.filter_nodes(nodes)
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Iterable, List, Mapping, Optional

from nodeselect.core.constants import ErrorCode, Limits
from nodeselect.core.node import NodeLike
from nodeselect.core.validators import ValidationError, validate_thread_count
from nodeselect.infrastructure.logger import get_logger
from nodeselect.rules.selector import Selector, SelectorKind, populate_selector


class NodeSet:
    """Include/exclude node filter with an optional single node override.

    Precedence:
    1. A single node name selects exactly that node
    2. Without a (non-blank) exclude, nodes must match the include
    3. Without a (non-blank) include, nodes matching the exclude are dropped
    4. With both, a dominant include keeps everything it matches;
       otherwise the exclude wins
    """

    def __init__(
        self,
        single_node_name: Optional[str] = None,
        thread_count: int = Limits.DEFAULT_THREAD_COUNT,
    ):
        """Initialize node set.

        Args:
            single_node_name: Name of the only node to select
            thread_count: Worker threads used by filter_nodes
        """
        self._single_node_name = single_node_name
        self._include: Optional[Selector] = None
        self._exclude: Optional[Selector] = None
        self._thread_count = validate_thread_count(thread_count)
        self._logger = get_logger("nodeselect.engine")

    @classmethod
    def for_node(cls, node: NodeLike) -> "NodeSet":
        """Create a node set selecting a single node.

        Args:
            node: Node to select

        Returns:
            Node set with the single node override set
        """
        return cls(single_node_name=node.nodename)

    @property
    def single_node_name(self) -> Optional[str]:
        """Name of the only node to select, if set."""
        return self._single_node_name

    @single_node_name.setter
    def single_node_name(self, name: Optional[str]) -> None:
        self._single_node_name = name

    @property
    def include(self) -> Optional[Selector]:
        return self._include

    @property
    def exclude(self) -> Optional[Selector]:
        return self._exclude

    @property
    def thread_count(self) -> int:
        return self._thread_count

    @thread_count.setter
    def thread_count(self, count: int) -> None:
        self._thread_count = validate_thread_count(count)

    def add_include(self, selector: Selector) -> Selector:
        """Set the include selector.

        Args:
            selector: Include selector

        Returns:
            The selector

        Raises:
            ValidationError: If an include selector is already configured
        """
        if self._include is not None:
            raise ValidationError("only one include is allowed", ErrorCode.CONFLICT)
        self._include = selector
        return selector

    def add_exclude(self, selector: Selector) -> Selector:
        """Set the exclude selector.

        Args:
            selector: Exclude selector

        Returns:
            The selector

        Raises:
            ValidationError: If an exclude selector is already configured
        """
        if self._exclude is not None:
            raise ValidationError("only one exclude is allowed", ErrorCode.CONFLICT)
        self._exclude = selector
        return selector

    def create_include(
        self, mapping: Optional[Mapping[str, Any]] = None, dominant: bool = False
    ) -> Selector:
        """Create the include selector from a configuration block.

        Args:
            mapping: Filter key to match expression
            dominant: Whether matching the include overrides the exclude

        Returns:
            New include selector
        """
        return self.add_include(populate_selector(mapping, SelectorKind.INCLUDE, dominant))

    def create_exclude(self, mapping: Optional[Mapping[str, Any]] = None) -> Selector:
        """Create the exclude selector from a configuration block.

        Args:
            mapping: Filter key to match expression

        Returns:
            New exclude selector
        """
        return self.add_exclude(populate_selector(mapping, SelectorKind.EXCLUDE))

    def is_blank(self) -> bool:
        """Return True if no include, exclude or single node is configured."""
        return (
            (self._include is None or self._include.is_blank())
            and (self._exclude is None or self._exclude.is_blank())
            and self._single_node_name is None
        )

    def validate(self) -> bool:
        """Check both selectors before any node is evaluated.

        Returns:
            True if valid

        Raises:
            PatternError: If a configured ``/regex/`` expression is malformed
        """
        for selector in (self._include, self._exclude):
            if selector is not None:
                selector.validate()
        return True

    def should_exclude(self, node: NodeLike) -> bool:
        """Return True if the node is not selected.

        Args:
            node: Node to evaluate

        Returns:
            True if the node should be excluded

        Raises:
            PatternError: If a configured ``/regex/`` expression is malformed
        """
        if self._single_node_name is not None:
            return self._single_node_name != node.nodename

        include, exclude = self._include, self._exclude
        includes_match = include.matches(node) if include is not None else False
        excludes_match = exclude.matches(node) if exclude is not None else False

        if exclude is None or exclude.is_blank():
            return not includes_match
        if include is None or include.is_blank():
            return excludes_match
        if include.dominant:
            return not includes_match and excludes_match
        return not includes_match or excludes_match

    def _verdict(self, node: NodeLike) -> bool:
        """Evaluate one node and log the verdict."""
        excluded = self.should_exclude(node)
        self._logger.debug(
            "Node excluded" if excluded else "Node selected",
            node=node.nodename,
        )
        return excluded

    def filter_nodes(self, nodes: Iterable[NodeLike]) -> List[NodeLike]:
        """Return the selected nodes in input order.

        Args:
            nodes: Nodes to evaluate

        Returns:
            Nodes for which should_exclude is False

        Raises:
            PatternError: If a configured ``/regex/`` expression is malformed
        """
        self.validate()
        nodes = list(nodes)

        if self._thread_count > 1 and len(nodes) > 1:
            with ThreadPoolExecutor(max_workers=self._thread_count) as executor:
                verdicts = list(executor.map(self._verdict, nodes))
        else:
            verdicts = [self._verdict(node) for node in nodes]

        selected = [node for node, excluded in zip(nodes, verdicts) if not excluded]
        self._logger.info(
            "Node selection complete",
            total=len(nodes),
            selected=len(selected),
            filter=str(self),
        )
        return selected

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NodeSet):
            return NotImplemented
        return (
            self._single_node_name == other._single_node_name
            and self._include == other._include
            and self._exclude == other._exclude
            and self._thread_count == other._thread_count
        )

    def __str__(self) -> str:
        parts = []
        if self._exclude is not None and not self._exclude.is_blank():
            parts.append(f"excludes={self._exclude}")
        if self._include is not None and not self._include.is_blank():
            parts.append(f"includes={self._include}")
        if self._single_node_name is not None:
            parts.append(f"singleNode={self._single_node_name}")
        return "NodeSet{" + ", ".join(parts) + "}"
