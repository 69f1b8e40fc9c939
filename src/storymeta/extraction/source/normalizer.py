"""
Static value normalization.

Maps expressions from the tagged syntax model to plain JSON-compatible
values. This is best-effort and never executes code: computed values
(spreads, calls, interpolated templates) degrade to None, functions and
markup degrade to sentinel strings, and identifiers become their own name
rather than their bound value.
"""

from __future__ import annotations

from typing import Any

from .syntax import (
    ArrayLiteral,
    BooleanLiteral,
    Expression,
    FunctionExpression,
    Identifier,
    JsxExpression,
    NullLiteral,
    NumberLiteral,
    ObjectLiteral,
    StringLiteral,
    TypeAssertion,
    Unresolved,
    unwrap,
)

FUNCTION_SENTINEL = "[Function]"
JSX_SENTINEL = "[JSX Element]"


def normalize_value(expression: Expression | None) -> Any:
    """Convert one expression into a plain value."""
    if expression is None:
        return None
    if isinstance(expression, (StringLiteral, NumberLiteral, BooleanLiteral)):
        return expression.value
    if isinstance(expression, NullLiteral):
        return None
    if isinstance(expression, ObjectLiteral):
        return normalize_object(expression)
    if isinstance(expression, ArrayLiteral):
        # null elements are dropped along with unsupported ones
        values = (normalize_value(element) for element in expression.elements)
        return [value for value in values if value is not None]
    if isinstance(expression, FunctionExpression):
        return FUNCTION_SENTINEL
    if isinstance(expression, JsxExpression):
        return JSX_SENTINEL
    if isinstance(expression, Identifier):
        return expression.name
    if isinstance(expression, TypeAssertion):
        return normalize_value(expression.expression)
    if isinstance(expression, Unresolved):
        return None
    raise TypeError(f"Unknown expression variant: {type(expression).__name__}")


def normalize_object(expression: Expression | None) -> dict[str, Any]:
    """Convert an object literal (possibly type-asserted) into a dict.

    Anything that is not an object literal yields an empty dict. Properties
    whose key cannot be resolved statically are skipped.
    """
    value = unwrap(expression)
    if not isinstance(value, ObjectLiteral):
        return {}
    result: dict[str, Any] = {}
    for prop in value.properties:
        if prop.key is None:
            continue
        result[prop.key] = normalize_value(prop.value)
    return result


def normalize_string(expression: Expression | None) -> str | None:
    """The string value of a (possibly type-asserted) string literal."""
    value = unwrap(expression)
    if isinstance(value, StringLiteral):
        return value.value
    return None
