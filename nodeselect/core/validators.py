"""
NodeSelect Core: Input Validators.

This module provides validation functions for match expressions, selector
configuration blocks and the other user inputs that feed node selection.
"""
import re
from typing import Any, Dict, Mapping, Optional

from nodeselect.core.constants import ErrorCode, Limits, Syntax


class ValidationError(Exception):
    """Base exception for validation errors."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        """Initialize ValidationError.

        Args:
            message: Error message
            error_code: Associated error code
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code


class PatternError(ValidationError):
    """A malformed explicit ``/regex/`` expression in a selector field."""

    def __init__(self, field: str, expression: str, reason: str = ""):
        """Initialize PatternError.

        Args:
            field: Filter key or attribute name holding the expression
            expression: The literal expression as configured
            reason: Regex compiler message
        """
        message = f"Invalid regular expression for '{field}': {expression}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message, ErrorCode.INVALID_INPUT)
        self.field = field
        self.expression = expression


def is_blank(value: Optional[str]) -> bool:
    """Return True if value is None or only whitespace."""
    return value is None or not str(value).strip()


def explicit_regex_body(expression: str) -> Optional[str]:
    """Return the trimmed pattern of a ``/.../`` expression, else None.

    Args:
        expression: Match expression

    Returns:
        Inner pattern text, or None when the expression is not wrapped
    """
    delimiter = Syntax.REGEX_DELIMITER
    if len(expression) >= 2 and expression.startswith(delimiter) and expression.endswith(delimiter):
        return expression[1:-1].strip()
    return None


def is_set_expression(expression: str) -> bool:
    """Return True if expression contains a set operator ('+' or ',')."""
    return Syntax.OR_SEPARATOR in expression or Syntax.AND_SEPARATOR in expression


def validate_match_expression(field: str, expression: Optional[str], is_set: bool = False) -> bool:
    """Validate a single match expression.

    Only the explicit ``/regex/`` form can be invalid. Plain expressions that
    fail to compile fall back to literal comparison and are accepted.

    Args:
        field: Filter key or attribute name, used in the error
        expression: Match expression
        is_set: Expression is matched against a set (terms checked one by one)

    Returns:
        True if valid

    Raises:
        PatternError: If an explicit regex does not compile
    """
    if is_blank(expression):
        return True

    terms = [expression]
    if is_set and is_set_expression(expression):
        terms = [
            term.strip()
            for clause in expression.split(Syntax.OR_SEPARATOR)
            for term in clause.split(Syntax.AND_SEPARATOR)
        ]

    for term in terms:
        body = explicit_regex_body(term)
        if body is None:
            continue
        try:
            re.compile(body)
        except re.error as e:
            raise PatternError(field, expression, str(e))

    return True


def validate_selector_mapping(mapping: Any, label: str = "selector") -> Dict[str, Optional[str]]:
    """Validate a key/value selector block and normalise its values to strings.

    Args:
        mapping: Mapping of filter key to match expression
        label: Name used in error messages (include/exclude)

    Returns:
        New dictionary with string keys and string-or-None values

    Raises:
        ValidationError: If the block is not a flat mapping
    """
    if mapping is None:
        return {}

    if not isinstance(mapping, Mapping):
        raise ValidationError(f"{label.capitalize()} block must be a mapping, got {type(mapping).__name__}")

    result: Dict[str, Optional[str]] = {}
    for key, value in mapping.items():
        if isinstance(value, (dict, list, tuple, set)):
            raise ValidationError(f"Invalid {label} value for '{key}': must be a scalar")
        result[str(key)] = None if value is None else str(value)

    return result


def validate_thread_count(count: Any) -> int:
    """Validate evaluation thread count.

    Args:
        count: Requested number of worker threads

    Returns:
        Thread count as int

    Raises:
        ValidationError: If count is not an integer in range
    """
    if isinstance(count, bool) or not isinstance(count, int):
        raise ValidationError(f"Thread count must be an integer: {count}")

    if count < 1 or count > Limits.MAX_THREAD_COUNT:
        raise ValidationError(
            f"Thread count must be between 1 and {Limits.MAX_THREAD_COUNT}: {count}"
        )

    return count


def parse_bool(value: Any) -> bool:
    """Parse a boolean flag from config or command line text.

    Raises:
        ValidationError: If the value is not a recognised boolean
    """
    if isinstance(value, bool):
        return value

    text = str(value).strip().lower()
    if text in ("true", "yes", "1", "on"):
        return True
    if text in ("false", "no", "0", "off"):
        return False

    raise ValidationError(f"Invalid boolean value: {value}")
