#!/usr/bin/env python3
"""Node listing output using Jinja2.

This module renders selected nodes one line at a time:
- Jinja2 template per node
- Node fields and attributes as template variables
- Strict undefined variables so typos fail loudly

Example:
    >>> formatter = NodeFormatter("{{ nodename }} {{ hostname }}")
    >>> formatter.render(NodeEntry("web01", hostname="web01.example"))
    'web01 web01.example'
"""

from typing import Any, Dict, Iterable, List

import jinja2

from nodeselect.core.constants import DEFAULT_NODE_FORMAT
from nodeselect.core.node import NodeLike


class FormatError(Exception):
    """Template could not be compiled or rendered."""

    def __init__(self, message: str, template: str = ""):
        self.message = message
        self.template = template
        super().__init__(message)


def node_context(node: NodeLike) -> Dict[str, Any]:
    """Build the template context for a node.

    Attributes are flattened into the context first so the descriptor fields
    always win on a name clash.

    Args:
        node: Node to describe

    Returns:
        Template variables
    """
    context: Dict[str, Any] = dict(node.attributes or {})
    context.update(
        {
            "nodename": node.nodename,
            "hostname": node.hostname,
            "tags": sorted(node.tags or ()),
            "os_family": node.os_family,
            "os_arch": node.os_arch,
            "os_name": node.os_name,
            "os_version": node.os_version,
            "attributes": dict(node.attributes or {}),
        }
    )
    return context


class NodeFormatter:
    """Renders nodes through a Jinja2 template."""

    def __init__(self, template: str = DEFAULT_NODE_FORMAT, **jinja_options):
        """Initialize formatter.

        Args:
            template: Jinja2 template source for one node
            **jinja_options: Additional Jinja2 environment options

        Raises:
            FormatError: If the template does not compile
        """
        self._source = template
        options = {"undefined": jinja2.StrictUndefined}
        options.update(jinja_options)
        self._env = jinja2.Environment(**options)

        try:
            self._template = self._env.from_string(template)
        except jinja2.TemplateSyntaxError as e:
            raise FormatError(f"Template syntax error: {e}", template)

    @property
    def source(self) -> str:
        return self._source

    def render(self, node: NodeLike) -> str:
        """Render one node.

        Raises:
            FormatError: If rendering fails
        """
        try:
            return self._template.render(node_context(node))
        except jinja2.TemplateError as e:
            raise FormatError(f"Template error for node {node.nodename}: {e}", self._source)

    def render_all(self, nodes: Iterable[NodeLike]) -> List[str]:
        return [self.render(node) for node in nodes]
