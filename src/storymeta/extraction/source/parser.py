"""
Tree-sitter powered story file walker.

Parses one component-definition file (CSF: ``*.stories.tsx`` and friends)
into a ParsedStoryFile: the default-exported meta expression, the named
exports that are candidate stories, and the ``Story.args = {...}`` /
``Story.storyName = "..."`` assignments attributed to them.

Nothing is evaluated; the walker only records expressions in the tagged
model from ``syntax``. Normalizing them into plain values is the
normalizer's job.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import cache
from pathlib import Path
from typing import Any

from ...exceptions import DependencyUnavailableError, SourceParseError
from ..capabilities import SOURCE_PARSER_PACKAGES, detect_capabilities
from .syntax import (
    ASSERTION_KINDS,
    Expression,
    ObjectLiteral,
    StringLiteral,
    named_children,
    node_text,
    to_expression,
    unwrap,
)

logger = logging.getLogger(__name__)

# Grammar used per file suffix; TSX accepts JSX plus types but rejects `<T>x`
# assertions, so plain .ts files get the TypeScript grammar.
_GRAMMAR_BY_SUFFIX = {
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
}
DEFAULT_GRAMMAR = "tsx"

_DECLARATION_KINDS = ("lexical_declaration", "variable_declaration")
_FUNCTION_DECLARATION_KINDS = ("function_declaration", "generator_function_declaration")


@dataclass
class StoryCandidate:
    """A named export that may be a story."""

    export_name: str
    line: int
    initializer: Expression | None = None
    args_expression: Expression | None = None
    story_name: str | None = None
    # Local binding when exported under an alias: `export { Base as Primary }`
    local_name: str | None = None

    @property
    def binding(self) -> str:
        return self.local_name or self.export_name

    @property
    def story_object(self) -> ObjectLiteral | None:
        """The CSF3 story object, when the export is initialized with one."""
        value = unwrap(self.initializer)
        return value if isinstance(value, ObjectLiteral) else None


@dataclass
class ParsedStoryFile:
    """Raw intermediate representation of one story file."""

    path: Path | None
    meta_expression: Expression | None = None
    stories: dict[str, StoryCandidate] = field(default_factory=dict)


@cache
def _load_language(grammar: str) -> Any:
    import tree_sitter_typescript
    from tree_sitter import Language

    if grammar == "typescript":
        return Language(tree_sitter_typescript.language_typescript())
    return Language(tree_sitter_typescript.language_tsx())


def grammar_for(path: Path | str | None) -> str:
    if path is None:
        return DEFAULT_GRAMMAR
    return _GRAMMAR_BY_SUFFIX.get(Path(path).suffix.lower(), DEFAULT_GRAMMAR)


class SourceParser:
    """
    Parses story source files with tree-sitter.

    Parsers are created lazily per grammar and reused across files. The
    ``source_parser`` capability must be present; check it with
    ``detect_capabilities()`` before constructing one.
    """

    def __init__(self) -> None:
        if not detect_capabilities().source_parser:
            raise DependencyUnavailableError("source_parser", list(SOURCE_PARSER_PACKAGES))
        self._parsers: dict[str, Any] = {}

    def parse_file(self, path: Path) -> tuple[ParsedStoryFile, str]:
        """Read and parse a file, returning the parse result and the file text.

        Raises:
            SourceParseError: If the file cannot be read or contains syntax errors.
        """
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise SourceParseError(path, str(e)) from e
        return self.parse(text, path), text

    def parse(self, text: str, path: Path | str | None = None) -> ParsedStoryFile:
        """Parse source text into a ParsedStoryFile.

        Raises:
            SourceParseError: If the text contains syntax errors.
        """
        source = text.encode("utf-8")
        tree = self._get_parser(grammar_for(path)).parse(source)
        root = tree.root_node
        if root.has_error:
            raise SourceParseError(path, f"syntax error near line {_first_error_line(root)}")

        parsed = ParsedStoryFile(path=Path(path) if path is not None else None)
        declarations = _top_level_declarations(root, source)
        default_node: Any | None = None

        for statement in named_children(root):
            if statement.type != "export_statement":
                continue
            if _is_default_export(statement):
                default_node = statement
                continue
            for name, local_name, line, initializer in _named_exports(
                statement, source, declarations
            ):
                parsed.stories[name] = StoryCandidate(
                    export_name=name,
                    line=line,
                    initializer=initializer,
                    local_name=local_name if local_name != name else None,
                )

        if default_node is not None:
            parsed.meta_expression = _default_export_expression(default_node, source, declarations)

        # Exports are collected first so assignments may appear anywhere in the file
        bindings: dict[str, list[StoryCandidate]] = {}
        for candidate in parsed.stories.values():
            bindings.setdefault(candidate.binding, []).append(candidate)
        for assignment in _walk(root, "assignment_expression"):
            _attribute_assignment(assignment, source, bindings)

        logger.debug(
            f"Parsed {path or '<source>'}: meta={'yes' if parsed.meta_expression else 'no'}, "
            f"{len(parsed.stories)} candidate stories"
        )
        return parsed

    def _get_parser(self, grammar: str) -> Any:
        parser = self._parsers.get(grammar)
        if parser is None:
            from tree_sitter import Parser

            parser = Parser(_load_language(grammar))
            self._parsers[grammar] = parser
        return parser


def _first_error_line(root: Any) -> int:
    for node in _walk(root):
        if node.type == "ERROR" or node.is_missing:
            return int(node.start_point[0]) + 1
    return int(root.start_point[0]) + 1


def _walk(node: Any, kind: str | None = None):  # type: ignore[no-untyped-def]
    """Depth-first pre-order traversal, optionally filtered by node kind."""
    stack = [node]
    while stack:
        current = stack.pop()
        if kind is None or current.type == kind:
            yield current
        stack.extend(reversed(current.children))


def _is_default_export(statement: Any) -> bool:
    return any(child.type == "default" for child in statement.children)


def _declarators(declaration: Any):  # type: ignore[no-untyped-def]
    for child in named_children(declaration):
        if child.type == "variable_declarator":
            yield child


def _top_level_declarations(root: Any, source: bytes) -> dict[str, Any]:
    """Map of top-level names to the nodes that declare them.

    Variable declarators map to their value node (possibly None); function
    declarations map to the declaration node itself.
    """
    found: dict[str, Any] = {}
    for statement in named_children(root):
        declaration = statement
        if statement.type == "export_statement":
            declaration = statement.child_by_field_name("declaration")
            if declaration is None:
                continue
        if declaration.type in _DECLARATION_KINDS:
            for declarator in _declarators(declaration):
                name_node = declarator.child_by_field_name("name")
                if name_node is not None and name_node.type == "identifier":
                    found[node_text(name_node, source)] = declarator.child_by_field_name("value")
        elif declaration.type in _FUNCTION_DECLARATION_KINDS:
            name_node = declaration.child_by_field_name("name")
            if name_node is not None:
                found[node_text(name_node, source)] = declaration
    return found


def _named_exports(
    statement: Any, source: bytes, declarations: dict[str, Any]
) -> list[tuple[str, str, int, Expression | None]]:
    """Candidate stories declared by one non-default export statement.

    Each entry is (exported name, local name, line, initializer).
    """
    exports: list[tuple[str, str, int, Expression | None]] = []
    declaration = statement.child_by_field_name("declaration")

    if declaration is not None:
        if declaration.type in _DECLARATION_KINDS:
            for declarator in _declarators(declaration):
                name_node = declarator.child_by_field_name("name")
                if name_node is None or name_node.type != "identifier":
                    continue
                value = declarator.child_by_field_name("value")
                name = node_text(name_node, source)
                exports.append(
                    (
                        name,
                        name,
                        declarator.start_point[0] + 1,
                        to_expression(value, source) if value is not None else None,
                    )
                )
        elif declaration.type in _FUNCTION_DECLARATION_KINDS:
            name_node = declaration.child_by_field_name("name")
            if name_node is not None:
                name = node_text(name_node, source)
                exports.append((name, name, declaration.start_point[0] + 1, None))
        return exports

    # export { Primary, Secondary as Other } for locally declared stories;
    # re-exports from another module are not stories of this file
    if statement.child_by_field_name("source") is not None:
        return exports
    for clause in named_children(statement):
        if clause.type != "export_clause":
            continue
        for specifier in named_children(clause):
            if specifier.type != "export_specifier":
                continue
            local = specifier.child_by_field_name("name")
            alias = specifier.child_by_field_name("alias")
            if local is None:
                continue
            local_name = node_text(local, source)
            if local_name not in declarations:
                continue
            exported = node_text(alias, source) if alias is not None else local_name
            if exported == "default":
                continue
            value = declarations[local_name]
            initializer = (
                to_expression(value, source)
                if value is not None and value.type not in _FUNCTION_DECLARATION_KINDS
                else None
            )
            exports.append((exported, local_name, specifier.start_point[0] + 1, initializer))
    return exports


def _default_export_expression(
    statement: Any, source: bytes, declarations: dict[str, Any]
) -> Expression | None:
    value = statement.child_by_field_name("value")
    if value is None:
        # export default function/class: not a meta object
        return None
    # `const meta = {...}; export default meta;`
    reference = value
    while reference.type in ASSERTION_KINDS and named_children(reference):
        reference = named_children(reference)[0]
    if reference.type == "identifier":
        target = declarations.get(node_text(reference, source))
        if target is not None and target.type not in _FUNCTION_DECLARATION_KINDS:
            return to_expression(target, source)
    return to_expression(value, source)


def _attribute_assignment(
    assignment: Any, source: bytes, bindings: dict[str, list[StoryCandidate]]
) -> None:
    left = assignment.child_by_field_name("left")
    if left is None or left.type != "member_expression":
        return
    target = left.child_by_field_name("object")
    prop = left.child_by_field_name("property")
    if target is None or prop is None or target.type != "identifier":
        return

    stories = bindings.get(node_text(target, source))
    if not stories:
        return

    right = to_expression(assignment.child_by_field_name("right"), source)
    member = node_text(prop, source)
    for story in stories:
        if member == "args":
            story.args_expression = right
        elif member == "storyName":
            value = unwrap(right)
            if isinstance(value, StringLiteral) and value.value:
                story.story_name = value.value
