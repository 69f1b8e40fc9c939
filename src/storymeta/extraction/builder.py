"""
Story record assembly.

Turns the raw pieces each strategy produces (a parsed source file, an index
entry, or runtime store data) into canonical StoryRecord objects with
deterministic ids, derived actions and harvested docs.
"""

from __future__ import annotations

import copy
import re
from dataclasses import dataclass, field
from typing import Any

from ..models import IndexEntry, StoryAction, StoryDocs, StoryRecord, dedupe_tags
from .source.normalizer import FUNCTION_SENTINEL, normalize_object, normalize_string, normalize_value
from .source.parser import ParsedStoryFile, StoryCandidate
from .source.syntax import ArrayLiteral, Expression, Identifier, ObjectLiteral, unwrap

UNKNOWN_TITLE = "Unknown"

_WHITESPACE = re.compile(r"\s+")
_UNSAFE = re.compile(r"[^a-z0-9-]")


def slugify(text: str) -> str:
    """Lowercase, turn whitespace and ``/`` into ``-``, drop anything else unsafe."""
    slug = _WHITESPACE.sub("-", text.lower())
    slug = slug.replace("/", "-")
    return _UNSAFE.sub("", slug)


def generate_story_id(title: str, name: str) -> str:
    """Deterministic story id, e.g. ``("Components/Button", "Primary")`` -> ``components-button--primary``."""
    return slugify(f"{title}--{name}")


@dataclass
class MetaObject:
    """The default-exported meta object of a story file."""

    title: str = ""
    component: str | None = None
    arg_types: dict[str, Any] = field(default_factory=dict)
    parameters: dict[str, Any] = field(default_factory=dict)
    tags: list[str] = field(default_factory=list)

    @classmethod
    def from_expression(cls, expression: Expression | None) -> MetaObject:
        """Read the known meta keys from an object literal; anything else yields defaults."""
        meta = cls()
        value = unwrap(expression)
        if not isinstance(value, ObjectLiteral):
            return meta

        meta.title = normalize_string(value.get("title")) or ""
        component = unwrap(value.get("component"))
        meta.component = component.name if isinstance(component, Identifier) else None
        meta.arg_types = normalize_object(value.get("argTypes"))
        meta.parameters = normalize_object(value.get("parameters"))
        meta.tags = _string_list(value.get("tags"))
        return meta


def _string_list(expression: Expression | None) -> list[str]:
    value = unwrap(expression)
    if not isinstance(value, ArrayLiteral):
        return []
    items = (normalize_value(element) for element in value.elements)
    return [item for item in items if isinstance(item, str) and item]


def _nested(data: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _action_descriptor(key: str, config: Any) -> StoryAction:
    config = config if isinstance(config, dict) else {}
    action = config.get("action")
    return StoryAction(
        name=key,
        action=action if isinstance(action, str) and action else key,
        description=_text(config.get("description")),
    )


def _is_action_arg_type(config: Any) -> bool:
    if not isinstance(config, dict):
        return False
    return bool(config.get("action")) or _nested(config, "table", "category") == "events"


def extract_actions(args: dict[str, Any], arg_types: dict[str, Any]) -> dict[str, StoryAction]:
    """Event handlers of a story.

    Args named ``on*`` or holding a function, plus argTypes flagged with
    ``action`` or categorized as events. argTypes entries win on conflict.
    """
    actions: dict[str, StoryAction] = {}
    for key, value in (args or {}).items():
        if key.startswith("on") or value == FUNCTION_SENTINEL:
            actions[key] = StoryAction(
                name=key,
                action=key,
                description=_text(_nested(arg_types, key, "description")),
            )
    for key, config in (arg_types or {}).items():
        if _is_action_arg_type(config):
            actions[key] = _action_descriptor(key, config)
    return actions


def extract_runtime_actions(arg_types: dict[str, Any]) -> dict[str, StoryAction]:
    """Event handlers derived from runtime argTypes only."""
    return {
        key: _action_descriptor(key, config)
        for key, config in (arg_types or {}).items()
        if key.startswith("on") or _is_action_arg_type(config)
    }


def story_description(*parameter_sets: dict[str, Any]) -> str:
    """Story-level docs description, then component-level, then empty."""
    for level in ("story", "component"):
        for parameters in parameter_sets:
            text = _nested(parameters, "docs", "description", level)
            if isinstance(text, str) and text:
                return text
    return ""


def _merge_story_object(meta: MetaObject, story: StoryCandidate) -> tuple[dict, dict, list[str]]:
    """argTypes, parameters and tags after applying CSF3 story-level overrides."""
    arg_types = copy.deepcopy(meta.arg_types)
    parameters = copy.deepcopy(meta.parameters)
    tags = list(meta.tags)

    story_object = story.story_object
    if story_object is not None:
        arg_types.update(normalize_object(story_object.get("argTypes")))
        parameters.update(normalize_object(story_object.get("parameters")))
        tags.extend(_string_list(story_object.get("tags")))
    return arg_types, parameters, dedupe_tags(tags)


def story_args(story: StoryCandidate) -> dict[str, Any]:
    """Args of a candidate: the ``.args`` assignment wins over a CSF3 ``args`` property."""
    if story.args_expression is not None:
        return normalize_object(story.args_expression)
    story_object = story.story_object
    if story_object is not None:
        return normalize_object(story_object.get("args"))
    return {}


def story_display_name(story: StoryCandidate) -> str:
    if story.story_name:
        return story.story_name
    story_object = story.story_object
    if story_object is not None:
        name = normalize_string(story_object.get("name"))
        if name:
            return name
    return story.export_name


def build_story_records(
    parsed: ParsedStoryFile, import_path: str, source: str
) -> list[StoryRecord]:
    """One StoryRecord per candidate story of a parsed file."""
    meta = MetaObject.from_expression(parsed.meta_expression)
    title = meta.title or UNKNOWN_TITLE
    records: list[StoryRecord] = []

    for export_name, story in parsed.stories.items():
        args = story_args(story)
        arg_types, parameters, tags = _merge_story_object(meta, story)
        name = story_display_name(story)
        records.append(
            StoryRecord(
                id=generate_story_id(meta.title, export_name),
                title=title,
                name=name,
                import_path=import_path,
                type="story",
                tags=tags,
                args=args,
                initial_args=copy.deepcopy(args),
                arg_types=arg_types,
                parameters=parameters,
                actions=extract_actions(args, arg_types),
                docs=StoryDocs(
                    description=story_description(parameters, meta.parameters),
                    source_code=source,
                    mdx=_text(_nested(parameters, "docs", "page")),
                ),
                source=source,
                component=meta.component,
            )
        )
    return records


def record_from_index_entry(story_id: str, entry: IndexEntry) -> StoryRecord:
    """Minimal record wrapping a story index entry (no args, argTypes or docs)."""
    return StoryRecord(
        id=entry.id or story_id,
        title=entry.title,
        name=entry.name,
        import_path=entry.import_path,
        type=entry.type,
        tags=list(entry.tags),
        parameters={"fileName": entry.import_path},
    )


def record_from_runtime(story_id: str, entry: IndexEntry, data: dict[str, Any]) -> StoryRecord:
    """Deep record combining an index entry with data from the runtime story store."""
    args = data.get("args") if isinstance(data.get("args"), dict) else {}
    initial_args = data.get("initialArgs") if isinstance(data.get("initialArgs"), dict) else {}
    arg_types = data.get("argTypes") if isinstance(data.get("argTypes"), dict) else {}
    runtime_parameters = data.get("parameters") if isinstance(data.get("parameters"), dict) else {}
    tags = data.get("tags") or entry.tags

    source_code = _text(_nested(runtime_parameters, "docs", "source", "code")) or _text(
        _nested(runtime_parameters, "storySource", "source")
    )

    return StoryRecord(
        id=entry.id or story_id,
        title=entry.title,
        name=entry.name,
        import_path=entry.import_path,
        type=entry.type,
        tags=tags,
        args=args or initial_args,
        initial_args=initial_args,
        arg_types=arg_types,
        parameters={"fileName": entry.import_path, **runtime_parameters},
        actions=extract_runtime_actions(arg_types),
        docs=StoryDocs(
            description=story_description(runtime_parameters),
            source_code=source_code,
            mdx=_text(_nested(runtime_parameters, "docs", "page")),
        ),
        source=_text(_nested(runtime_parameters, "docs", "source", "code")),
        component=_nested(runtime_parameters, "component", "__docgenInfo"),
    )
