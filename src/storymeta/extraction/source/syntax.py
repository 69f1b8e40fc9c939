"""
Tagged expression model for story source files.

tree-sitter hands back untyped nodes whose shape depends on the node kind.
``to_expression`` converts the expression kinds that matter for story
metadata into small frozen dataclasses, and everything else into
``Unresolved`` carrying the original kind. Downstream code works only with
these variants, never with raw nodes.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Union

# Wrappers that only carry type information around an expression
ASSERTION_KINDS = frozenset(
    {
        "as_expression",
        "satisfies_expression",
        "type_assertion",
        "non_null_expression",
        "parenthesized_expression",
    }
)
FUNCTION_KINDS = frozenset(
    {
        "arrow_function",
        "function_expression",
        "function",
        "generator_function",
    }
)
JSX_KINDS = frozenset({"jsx_element", "jsx_self_closing_element", "jsx_fragment"})

_SKIPPED_KINDS = frozenset({"comment", "type_annotation", "type_arguments"})

_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}
_UNICODE_ESCAPE = re.compile(r"\\u\{([0-9a-fA-F]+)\}|\\u([0-9a-fA-F]{4})|\\x([0-9a-fA-F]{2})")
# Any escape in raw template text, matched left to right so each is decoded once
_ESCAPE = re.compile(r"\\(?:u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|\r\n|[\s\S])")


@dataclass(frozen=True)
class StringLiteral:
    value: str


@dataclass(frozen=True)
class NumberLiteral:
    value: int | float


@dataclass(frozen=True)
class BooleanLiteral:
    value: bool


@dataclass(frozen=True)
class NullLiteral:
    pass


@dataclass(frozen=True)
class Identifier:
    name: str


@dataclass(frozen=True)
class Property:
    """One member of an object literal.

    ``key`` is None for computed keys and spread elements, which cannot be
    resolved statically.
    """

    key: str | None
    value: Expression


@dataclass(frozen=True)
class ObjectLiteral:
    properties: tuple[Property, ...] = ()

    def get(self, key: str) -> Expression | None:
        """Value of the last property named ``key``, as JS object semantics dictate."""
        found: Expression | None = None
        for prop in self.properties:
            if prop.key == key:
                found = prop.value
        return found


@dataclass(frozen=True)
class ArrayLiteral:
    elements: tuple[Expression, ...] = ()


@dataclass(frozen=True)
class FunctionExpression:
    kind: str


@dataclass(frozen=True)
class JsxExpression:
    kind: str


@dataclass(frozen=True)
class TypeAssertion:
    expression: Expression
    kind: str


@dataclass(frozen=True)
class Unresolved:
    kind: str
    text: str = field(default="", compare=False)


Expression = Union[
    StringLiteral,
    NumberLiteral,
    BooleanLiteral,
    NullLiteral,
    Identifier,
    ObjectLiteral,
    ArrayLiteral,
    FunctionExpression,
    JsxExpression,
    TypeAssertion,
    Unresolved,
]


def unwrap(expression: Expression | None) -> Expression | None:
    """Strip any number of nested type assertions."""
    while isinstance(expression, TypeAssertion):
        expression = expression.expression
    return expression


def node_text(node: Any, source: bytes) -> str:
    return source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def named_children(node: Any) -> list[Any]:
    """Named children without comments and type-only nodes."""
    return [child for child in node.named_children if child.type not in _SKIPPED_KINDS]


def to_expression(node: Any | None, source: bytes) -> Expression:
    """Convert a tree-sitter expression node into the tagged model."""
    if node is None:
        return Unresolved("missing")

    kind = node.type

    if kind == "string":
        return StringLiteral(_string_value(node, source))
    if kind == "template_string":
        return _template_value(node, source)
    if kind == "number":
        number = parse_number(node_text(node, source))
        return NumberLiteral(number) if number is not None else Unresolved(kind)
    if kind == "true":
        return BooleanLiteral(True)
    if kind == "false":
        return BooleanLiteral(False)
    if kind == "null":
        return NullLiteral()
    if kind == "undefined":
        return Identifier("undefined")
    if kind == "identifier":
        return Identifier(node_text(node, source))
    if kind == "object":
        return ObjectLiteral(tuple(_object_properties(node, source)))
    if kind == "array":
        return ArrayLiteral(tuple(to_expression(child, source) for child in named_children(node)))
    if kind in FUNCTION_KINDS:
        return FunctionExpression(kind)
    if kind in JSX_KINDS:
        return JsxExpression(kind)
    if kind in ASSERTION_KINDS:
        return _assertion(node, source)
    if kind == "unary_expression":
        return _signed_number(node, source)

    return Unresolved(kind, node_text(node, source))


def _assertion(node: Any, source: bytes) -> Expression:
    children = named_children(node)
    if not children:
        return Unresolved(node.type)
    # `<T>value` keeps the expression last, every other wrapper keeps it first
    inner = children[-1] if node.type == "type_assertion" else children[0]
    return TypeAssertion(to_expression(inner, source), node.type)


def _signed_number(node: Any, source: bytes) -> Expression:
    operator = node.child_by_field_name("operator")
    argument = node.child_by_field_name("argument")
    sign = node_text(operator, source) if operator is not None else ""
    if argument is not None and argument.type == "number" and sign in ("-", "+"):
        number = parse_number(node_text(argument, source))
        if number is not None:
            return NumberLiteral(-number if sign == "-" else number)
    return Unresolved(node.type, node_text(node, source))


def _object_properties(node: Any, source: bytes) -> list[Property]:
    properties: list[Property] = []
    for child in named_children(node):
        if child.type == "pair":
            key = property_key(child.child_by_field_name("key"), source)
            properties.append(Property(key, to_expression(child.child_by_field_name("value"), source)))
        elif child.type == "shorthand_property_identifier":
            name = node_text(child, source)
            properties.append(Property(name, Identifier(name)))
        elif child.type == "method_definition":
            key = property_key(child.child_by_field_name("name"), source)
            properties.append(Property(key, FunctionExpression(child.type)))
        else:
            properties.append(Property(None, Unresolved(child.type)))
    return properties


def property_key(node: Any | None, source: bytes) -> str | None:
    """Static name of an object key, or None when it is computed."""
    if node is None:
        return None
    if node.type in ("property_identifier", "identifier", "private_property_identifier"):
        return node_text(node, source)
    if node.type == "string":
        return _string_value(node, source)
    if node.type == "number":
        number = parse_number(node_text(node, source))
        return _number_key(number) if number is not None else None
    return None


def _number_key(number: int | float) -> str:
    if isinstance(number, float) and number.is_integer():
        number = int(number)
    return str(number)


def _string_value(node: Any, source: bytes) -> str:
    parts: list[str] = []
    for child in node.named_children:
        if child.type == "string_fragment":
            parts.append(node_text(child, source))
        elif child.type == "escape_sequence":
            parts.append(decode_escape(node_text(child, source)))
        elif child.type == "html_character_reference":
            parts.append(node_text(child, source))
    return "".join(parts)


def _template_value(node: Any, source: bytes) -> Expression:
    if any(child.type == "template_substitution" for child in node.named_children):
        return Unresolved(node.type, node_text(node, source))
    raw = node_text(node, source)[1:-1]
    return StringLiteral(_ESCAPE.sub(lambda m: decode_escape(m.group(0)), raw))


def decode_escape(sequence: str) -> str:
    """Decode a single JS escape sequence such as ``\\n`` or ``\\u00e9``."""
    if _UNICODE_ESCAPE.fullmatch(sequence):
        return _UNICODE_ESCAPE.sub(_unicode_repl, sequence)
    if len(sequence) >= 2 and sequence[0] == "\\":
        char = sequence[1]
        if char in ("\n", "\r"):
            # line continuation
            return ""
        return _SIMPLE_ESCAPES.get(char, char)
    return sequence


def _unicode_repl(match: re.Match[str]) -> str:
    digits = match.group(1) or match.group(2) or match.group(3)
    return chr(int(digits, 16))


def parse_number(text: str) -> int | float | None:
    """Parse a JS numeric literal (decimal, hex, octal, binary, separators, bigint)."""
    cleaned = text.replace("_", "").rstrip("n")
    lowered = cleaned.lower()
    try:
        if lowered.startswith(("0x", "0o", "0b")):
            return int(lowered, 0)
        if re.fullmatch(r"[0-9]+", cleaned):
            return int(cleaned)
        return float(cleaned)
    except ValueError:
        return None
