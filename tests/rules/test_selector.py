#!/usr/bin/env python3
"""Tests for include/exclude selectors."""

import pytest

from nodeselect.core.constants import ErrorCode, FilterKey
from nodeselect.core.node import NodeEntry
from nodeselect.core.validators import PatternError, ValidationError
from nodeselect.rules.selector import (
    FILTER_FIELDS,
    FIELDS_BY_KEY,
    Selector,
    SelectorKind,
    populate_selector,
)


class TestFilterFields:
    """Tests for the filter field table."""

    def test_field_order(self):
        """Test fields are evaluated in a fixed order."""
        assert [f.key for f in FILTER_FIELDS] == [
            "hostname",
            "name",
            "tags",
            "os-family",
            "os-arch",
            "os-name",
            "os-version",
        ]

    def test_only_tags_is_a_set(self):
        """Test tags is the only set-valued field."""
        assert [f.key for f in FILTER_FIELDS if f.is_set] == ["tags"]

    def test_name_reads_nodename(self, web_node):
        """Test the name key reads the node name."""
        assert FIELDS_BY_KEY[FilterKey.NAME].node_value(web_node) == "web01"

    def test_type_is_not_a_field(self):
        """Test the reserved type key has no field."""
        assert FilterKey.TYPE not in FIELDS_BY_KEY


class TestSelector:
    """Tests for Selector."""

    def test_defaults_are_blank(self):
        """Test a new selector has nothing configured."""
        selector = Selector()
        assert selector.kind == SelectorKind.INCLUDE
        assert selector.is_blank()
        assert selector.is_empty()
        assert selector.dominant is False

    def test_blank_selector_matches_nothing(self, web_node):
        """Test a blank selector never matches."""
        assert not Selector().matches(web_node)
        assert not Selector(hostname="   ").matches(web_node)

    def test_none_fields_become_empty(self):
        """Test None is treated as an empty expression."""
        selector = Selector(hostname=None, tags=None)
        assert selector.hostname == ""
        assert selector.tags == ""
        assert selector.is_blank()

    def test_blank_attribute_expressions_dropped(self):
        """Test blank attribute expressions place no constraint."""
        selector = Selector(attributes={"env": "", "rack": "  ", "region": "eu"})
        assert dict(selector.attributes) == {"region": "eu"}

    def test_attributes_are_read_only(self):
        """Test the attribute map cannot be mutated."""
        selector = Selector(attributes={"env": "prod"})
        with pytest.raises(TypeError):
            selector.attributes["env"] = "dev"

    def test_frozen(self):
        """Test selectors are immutable."""
        selector = Selector(hostname="web01")
        with pytest.raises(AttributeError):
            selector.hostname = "db01"

    def test_every_field_must_match(self, web_node):
        """Test all configured fields must match."""
        assert Selector(tags="web+prod", os_family="unix").matches(web_node)
        assert not Selector(tags="web+prod", os_family="windows").matches(web_node)

    def test_name_matches_nodename(self, web_node):
        """Test the name field is matched against the node name."""
        assert Selector(name="web\\d+").matches(web_node)
        assert not Selector(name="web01.example.com").matches(web_node)

    def test_hostname(self, web_node):
        """Test the hostname field."""
        assert Selector(hostname="/.*\\.example\\.com/").matches(web_node)

    def test_os_fields(self, web_node):
        """Test the os-* fields."""
        assert Selector(os_arch="x86_64", os_name="Linux", os_version="6\\..*").matches(web_node)
        assert not Selector(os_version="5.*").matches(web_node)

    def test_missing_node_value_does_not_match(self):
        """Test a configured field fails against an unset node value."""
        node = NodeEntry("bare")
        assert not Selector(os_arch=".*").matches(node)
        assert not Selector(tags=".*").matches(node)

    def test_attributes(self, web_node):
        """Test custom attribute expressions."""
        assert Selector(attributes={"env": "prod.*"}).matches(web_node)
        assert not Selector(attributes={"env": "staging"}).matches(web_node)
        assert not Selector(attributes={"rack": "r1"}).matches(web_node)

    def test_attributes_and_fields_combine(self, web_node):
        """Test attributes are ANDed with the fixed fields."""
        assert Selector(tags="web", attributes={"region": "eu-.*"}).matches(web_node)
        assert not Selector(tags="db", attributes={"region": "eu-.*"}).matches(web_node)

    def test_matches_raises_pattern_error(self, web_node):
        """Test a malformed explicit regex names its field."""
        with pytest.raises(PatternError) as exc_info:
            Selector(hostname="/web(/").matches(web_node)
        assert exc_info.value.field == "hostname"
        assert exc_info.value.expression == "/web(/"
        assert exc_info.value.error_code == ErrorCode.INVALID_INPUT

    def test_matches_raises_pattern_error_for_attribute(self, web_node):
        """Test a malformed attribute regex names the attribute."""
        with pytest.raises(PatternError) as exc_info:
            Selector(attributes={"env": "/[/"}).matches(web_node)
        assert exc_info.value.field == "env"

    def test_validate(self):
        """Test validation of well-formed expressions."""
        assert Selector(hostname="/web.*/", tags="a+/b.*/,c", name="web(").validate() is True

    def test_validate_rejects_bad_regex(self):
        """Test validation names the field and expression."""
        with pytest.raises(PatternError) as exc_info:
            Selector(name="/[/").validate()
        assert exc_info.value.field == "name"
        assert "'name'" in str(exc_info.value)
        assert "/[/" in str(exc_info.value)

    def test_validate_rejects_bad_tag_term(self):
        """Test validation checks each term of a set expression."""
        with pytest.raises(PatternError) as exc_info:
            Selector(tags="web+/(/").validate()
        assert exc_info.value.field == "tags"
        assert exc_info.value.expression == "web+/(/"

    def test_validate_scalar_is_not_split(self):
        """Test scalar fields are validated as one expression."""
        assert Selector(hostname="/a/+/b/").validate() is True

    def test_to_mapping(self):
        """Test configured expressions keyed by filter key."""
        selector = Selector(tags="web", os_family="unix", attributes={"env": "prod"})
        assert selector.to_mapping() == {"tags": "web", "os-family": "unix", "env": "prod"}

    def test_str(self):
        """Test the string form lists configured fields."""
        assert str(Selector(hostname="web01")) == "{hostname=web01, dominant=False}"
        assert (
            str(Selector(tags="web", dominant=True, attributes={"env": "prod"}))
            == "{tags=web, dominant=True, attributes={'env': 'prod'}}"
        )

    def test_equality_ignores_kind(self):
        """Test selectors compare by expressions only."""
        include = Selector(kind=SelectorKind.INCLUDE, hostname="web01")
        exclude = Selector(kind=SelectorKind.EXCLUDE, hostname="web01")
        assert include == exclude
        assert include != Selector(hostname="web01", dominant=True)

    def test_unhashable(self):
        """Test selectors are not hashable."""
        with pytest.raises(TypeError):
            hash(Selector())
        with pytest.raises(TypeError):
            {Selector(attributes={"env": "prod"})}


class TestPopulateSelector:
    """Tests for populate_selector."""

    def test_known_keys(self):
        """Test filter keys fill the matching fields."""
        selector = populate_selector(
            {
                "hostname": "h",
                "name": "n",
                "tags": "t",
                "os-name": "on",
                "os-family": "of",
                "os-arch": "oa",
                "os-version": "ov",
            }
        )
        assert selector.hostname == "h"
        assert selector.name == "n"
        assert selector.tags == "t"
        assert selector.os_name == "on"
        assert selector.os_family == "of"
        assert selector.os_arch == "oa"
        assert selector.os_version == "ov"
        assert not selector.attributes

    def test_unknown_keys_become_attributes(self):
        """Test other keys are routed to the attribute map."""
        selector = populate_selector({"tags": "web", "env": "prod", "rack": "r1"})
        assert dict(selector.attributes) == {"env": "prod", "rack": "r1"}

    def test_type_becomes_attribute(self):
        """Test the reserved type key is an attribute."""
        selector = populate_selector({"type": "server"})
        assert dict(selector.attributes) == {"type": "server"}

    def test_values_are_stringified(self):
        """Test non-string scalars are converted."""
        selector = populate_selector({"os-version": 10, "port": 22})
        assert selector.os_version == "10"
        assert selector.attributes["port"] == "22"

    def test_none_values(self):
        """Test None values place no constraint."""
        selector = populate_selector({"hostname": None, "env": None})
        assert selector.is_blank()

    def test_none_mapping(self):
        """Test a missing block gives a blank selector."""
        assert populate_selector(None).is_blank()
        assert populate_selector({}).is_blank()

    def test_kind_and_dominant(self):
        """Test kind and dominant are passed through."""
        selector = populate_selector({"tags": "web"}, SelectorKind.EXCLUDE)
        assert selector.kind == SelectorKind.EXCLUDE
        assert selector.dominant is False

        selector = populate_selector({"tags": "web"}, dominant=True)
        assert selector.dominant is True

    def test_rejects_non_mapping(self):
        """Test a block must be a mapping."""
        with pytest.raises(ValidationError, match="Include block must be a mapping"):
            populate_selector(["tags=web"])

    def test_rejects_nested_values(self):
        """Test block values must be scalars."""
        with pytest.raises(ValidationError, match="exclude value for 'tags'"):
            populate_selector({"tags": ["web", "prod"]}, SelectorKind.EXCLUDE)
