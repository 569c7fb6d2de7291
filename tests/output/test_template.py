#!/usr/bin/env python3
"""Tests for node output templates."""

import pytest

from nodeselect.core.node import NodeEntry
from nodeselect.output.template import FormatError, NodeFormatter, node_context


class TestNodeContext:
    """Tests for node_context."""

    def test_fields(self, web_node):
        """Test descriptor fields are exposed."""
        context = node_context(web_node)
        assert context["nodename"] == "web01"
        assert context["hostname"] == "web01.example.com"
        assert context["tags"] == ["prod", "web"]
        assert context["os_family"] == "unix"
        assert context["attributes"] == {"env": "production", "region": "eu-west"}

    def test_attributes_flattened(self, web_node):
        """Test attributes are top-level variables."""
        assert node_context(web_node)["env"] == "production"

    def test_fields_win_clashes(self):
        """Test an attribute cannot shadow a descriptor field."""
        node = NodeEntry("web01", attributes={"nodename": "other", "role": "app"})
        context = node_context(node)
        assert context["nodename"] == "web01"
        assert context["attributes"]["nodename"] == "other"


class TestNodeFormatter:
    """Tests for NodeFormatter."""

    def test_default_template(self, web_node):
        """Test the default template prints the node name."""
        assert NodeFormatter().render(web_node) == "web01"

    def test_custom_template(self, web_node):
        """Test fields, attributes and filters."""
        formatter = NodeFormatter("{{ nodename }} {{ hostname }} {{ tags | join(',') }} {{ env }}")
        assert formatter.render(web_node) == "web01 web01.example.com prod,web production"
        assert formatter.source.startswith("{{ nodename }}")

    def test_attribute_with_dash(self):
        """Test attributes that are not identifiers via the attributes map."""
        node = NodeEntry("web01", attributes={"ssh-port": "22"})
        assert NodeFormatter("{{ attributes['ssh-port'] }}").render(node) == "22"

    def test_undefined_variable(self, web_node):
        """Test undefined variables fail."""
        formatter = NodeFormatter("{{ rack }}")
        with pytest.raises(FormatError, match="Template error for node web01") as exc_info:
            formatter.render(web_node)
        assert exc_info.value.template == "{{ rack }}"

    def test_lenient_undefined(self, web_node):
        """Test Jinja2 options can be overridden."""
        import jinja2

        formatter = NodeFormatter("[{{ rack }}]", undefined=jinja2.Undefined)
        assert formatter.render(web_node) == "[]"

    def test_syntax_error(self):
        """Test templates that do not compile."""
        with pytest.raises(FormatError, match="Template syntax error"):
            NodeFormatter("{{ nodename ")

    def test_render_all(self, inventory):
        """Test rendering several nodes keeps order."""
        formatter = NodeFormatter("{{ nodename }}:{{ os_family }}")
        assert formatter.render_all(inventory[:2]) == ["web01:unix", "web02:unix"]
