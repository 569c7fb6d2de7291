#!/usr/bin/env python3
r"""Match expression evaluation for node selection.

This module provides the matching primitives used by selectors:
- Regex-or-literal matching of a single value
- Explicit ``/regex/`` expressions that force regex mode
- Boolean set expressions ("+" is AND, "," is OR) over tag sets
- Match-all / match-any composition over attribute maps

All functions are pure and safe to call from many threads.

Example:
    >>> match_regex_or_equals("/^web.*/", "web01")
    True
    >>> matches_input_set("web+prod,db", {"web", "prod"})
    True
"""

import re
from enum import Enum
from typing import Collection, Mapping, Optional

from nodeselect.core.constants import Syntax
from nodeselect.core.validators import PatternError, explicit_regex_body, is_blank, is_set_expression


class PatternType(Enum):
    """Shape of a match expression when matched against a set of values."""

    PLAIN = "plain"  # Literal or implicit regex
    EXPLICIT_REGEX = "explicit_regex"  # /pattern/
    SET = "set"  # Contains "+" or ","


def classify_expression(expression: str) -> PatternType:
    """Classify a match expression.

    Set operators are checked first: "/a/,/b/" is two explicit regex terms,
    not one pattern.

    Args:
        expression: Match expression

    Returns:
        Pattern type of the expression
    """
    if is_set_expression(expression):
        return PatternType.SET
    if explicit_regex_body(expression) is not None:
        return PatternType.EXPLICIT_REGEX
    return PatternType.PLAIN


def is_explicit_regex(expression: str) -> bool:
    """Return True if expression is wrapped in '/' delimiters."""
    return explicit_regex_body(expression) is not None


def match_regex_or_equals(expression: str, value: str) -> bool:
    """Test whether value matches expression as a regex or a literal.

    An expression wrapped in '/' is treated as a regular expression only, and
    compile errors propagate. Any other expression is tried as a regex first
    (compile errors count as no match) and then compared for equality.

    Args:
        expression: Match expression
        value: Value to test

    Returns:
        True if the value matches

    Raises:
        re.error: If an explicit /regex/ expression is malformed
    """
    body = explicit_regex_body(expression)
    if body is not None:
        return re.fullmatch(body, value) is not None

    pattern = expression.strip()
    try:
        matched = re.fullmatch(pattern, value) is not None
    except re.error:
        matched = False

    return matched or pattern == value


def matches_input(expression: Optional[str], value: Optional[str]) -> bool:
    """Test a scalar node value against a match expression.

    Blank values and blank expressions never match. The value also matches
    when it equals one of the comma-separated items of the expression
    exactly (items are not trimmed).

    Args:
        expression: Match expression
        value: Node attribute value

    Returns:
        True if the value matches
    """
    if is_blank(value) or is_blank(expression):
        return False

    if match_regex_or_equals(expression, value):
        return True

    return value in expression.split(Syntax.OR_SEPARATOR)


def _term_matches(term: str, values: Collection[str]) -> bool:
    """Return True if a single term is contained in or matches any value.

    A blank term never matches, so "+web" or "a++b" cannot be satisfied.
    """
    term = term.strip()
    if not term:
        return False
    if term in values:
        return True
    return any(match_regex_or_equals(term, item) for item in values)


def matches_input_set(expression: Optional[str], values: Optional[Collection[str]]) -> bool:
    """Test a set of node values against a boolean set expression.

    "a+b" requires both a and b, "a,b" requires either, and the two compose
    as "a+b,c+d". Each term matches by containment or regex-or-equals, and
    explicit "/regex/" terms may be combined the same way. A clause with a
    blank term never matches.

    Args:
        expression: Set match expression
        values: Node values, e.g. tags

    Returns:
        True if any OR clause has all of its AND terms satisfied

    Raises:
        re.error: If an explicit /regex/ term is malformed
    """
    if not values or is_blank(expression):
        return False

    if not is_set_expression(expression):
        return _term_matches(expression, values)

    for clause in expression.split(Syntax.OR_SEPARATOR):
        terms = clause.split(Syntax.AND_SEPARATOR)
        if all(_term_matches(term, values) for term in terms):
            return True

    return False


def matches_attributes(
    selectors: Optional[Mapping[str, str]],
    values: Optional[Mapping[str, str]],
    match_all: bool = True,
) -> bool:
    """Test an attribute map against per-attribute match expressions.

    Args:
        selectors: Attribute name to match expression
        values: Node attribute map
        match_all: Require every selector to match (otherwise any one)

    Returns:
        True if the attribute map satisfies the selectors

    Raises:
        PatternError: If an explicit /regex/ expression is malformed
    """
    if selectors is None or values is None:
        return False

    for key, expression in selectors.items():
        try:
            matched = matches_input(expression, values.get(key))
        except re.error as e:
            raise PatternError(key, expression, str(e)) from e
        if not matched and match_all:
            return False
        if matched and not match_all:
            return True

    # All matched for match_all, none matched otherwise
    return match_all
