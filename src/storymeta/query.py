"""
Catalog queries.

Pure functions over a Catalog: grouping stories into components, component
detail/docs/examples, search, filtering and statistics. Results are plain
JSON-ready dicts.
"""

from __future__ import annotations

import json
import re
from typing import Any

from .models import Catalog, StoryRecord, dedupe_tags

MAX_SEARCH_LENGTH = 200
DEFAULT_COMPONENT_NAME = "Component"

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def component_id(title: str | None) -> str:
    """URL-safe component id, e.g. ``"Components/Button"`` -> ``"components-button"``."""
    return _NON_ALNUM.sub("-", (title or "").lower()).strip("-")


def _group_name(story: StoryRecord) -> str:
    return story.title or story.kind


def stories_for_component(catalog: Catalog, cid: str) -> list[StoryRecord]:
    """All stories whose title maps to the component id."""
    return [story for story in catalog.stories.values() if component_id(_group_name(story)) == cid]


def list_components(catalog: Catalog) -> list[dict[str, Any]]:
    """Stories grouped by component, in first-seen order."""
    components: dict[str, dict[str, Any]] = {}
    for story in catalog.stories.values():
        name = _group_name(story)
        cid = component_id(name)
        entry = components.get(cid)
        if entry is None:
            entry = components[cid] = {
                "id": cid,
                "name": name,
                "title": story.title,
                "kind": story.kind,
                "stories": [],
                "tags": [],
                "importPath": story.import_path,
            }
        entry["stories"].append({"id": story.id, "name": story.name, "story": story.story})
        entry["tags"] = dedupe_tags([*entry["tags"], *story.tags])

    for entry in components.values():
        entry["storyCount"] = len(entry["stories"])
    return list(components.values())


def component_detail(catalog: Catalog, cid: str) -> dict[str, Any] | None:
    """Aggregated view of one component; args and argTypes merged across its stories."""
    stories = stories_for_component(catalog, cid)
    if not stories:
        return None

    first = stories[0]
    tags: list[str] = []
    args: dict[str, Any] = {}
    arg_types: dict[str, Any] = {}
    for story in stories:
        tags.extend(story.tags)
        args.update(story.args)
        arg_types.update(story.arg_types)

    return {
        "id": cid,
        "name": _group_name(first),
        "title": first.title,
        "kind": first.kind,
        "importPath": first.import_path,
        "tags": dedupe_tags(tags),
        "stories": [
            {
                "id": s.id,
                "name": s.name,
                "story": s.story,
                "args": s.args,
                "initialArgs": s.initial_args,
                "argTypes": s.arg_types,
                "parameters": s.parameters,
            }
            for s in stories
        ],
        "args": args,
        "argTypes": arg_types,
        "component": first.component,
        "storyCount": len(stories),
    }


def component_docs(catalog: Catalog, cid: str) -> dict[str, Any] | None:
    """Documentation of a component, taken from its first story."""
    stories = stories_for_component(catalog, cid)
    if not stories:
        return None

    first = stories[0]
    return {
        "component": _group_name(first),
        "description": first.docs.description,
        "mdx": first.docs.mdx,
        "sourceCode": first.docs.source_code or first.source,
        "argTypes": first.arg_types,
        "stories": [
            {
                "name": s.name,
                "description": s.docs.description,
                "args": s.args,
                "argTypes": s.arg_types,
                "source": s.source,
            }
            for s in stories
        ],
        "parameters": first.parameters,
        "tags": first.tags,
        "importPath": first.import_path,
    }


def _prop(key: str, value: Any) -> str:
    if isinstance(value, str):
        return f'{key}="{value}"'
    if isinstance(value, bool):
        return key if value else ""
    if isinstance(value, (int, float)):
        number = int(value) if isinstance(value, float) and value.is_integer() else value
        return f"{key}={{{number}}}"
    return f"{key}={{{json.dumps(value, separators=(',', ':'), ensure_ascii=False)}}}"


def generate_usage_example(story: StoryRecord) -> str:
    """A copy-paste JSX snippet rendering the component with the story's args."""
    name = story.component if isinstance(story.component, str) and story.component else None
    if name is None:
        name = story.title.split("/")[-1] if story.title else DEFAULT_COMPONENT_NAME

    props = " ".join(filter(None, (_prop(key, value) for key, value in story.args.items())))
    if not props:
        return f"<{name} />"
    return f"<{name} {props} />"


def component_examples(catalog: Catalog, cid: str) -> dict[str, Any] | None:
    """Per-story code examples and usage snippets of a component."""
    stories = stories_for_component(catalog, cid)
    if not stories:
        return None

    first = stories[0]
    file_name = first.parameters.get("fileName")
    return {
        "component": _group_name(first),
        "importPath": first.import_path,
        "sourceFile": file_name if isinstance(file_name, str) else "",
        "examples": [
            {
                "name": s.name,
                "description": f"{s.story} example",
                "code": s.source or s.docs.source_code,
                "args": s.args,
                "argTypes": s.arg_types,
                "usage": generate_usage_example(s),
            }
            for s in stories
        ],
    }


def search_stories(catalog: Catalog, query: str) -> list[StoryRecord]:
    """
    Case-insensitive substring search over title, name, kind, story, tags and id.

    Raises:
        ValueError: If the query is empty or longer than MAX_SEARCH_LENGTH.
    """
    needle = (query or "").strip()
    if not needle or len(needle) > MAX_SEARCH_LENGTH:
        raise ValueError(f"Search query must be 1-{MAX_SEARCH_LENGTH} characters")
    needle = needle.lower()

    def matches(story: StoryRecord) -> bool:
        fields = (story.title, story.name, story.kind, story.story, story.id)
        if any(needle in field.lower() for field in fields):
            return True
        return any(needle in tag.lower() for tag in story.tags)

    return [story for story in catalog.stories.values() if matches(story)]


def filter_stories(
    catalog: Catalog,
    title: str | None = None,
    tag: str | None = None,
    kind: str | None = None,
) -> list[StoryRecord]:
    """Stories matching all given filters: title and kind by substring, tag exactly."""
    stories = list(catalog.stories.values())
    if title and title.strip():
        needle = title.strip().lower()
        stories = [s for s in stories if needle in s.title.lower()]
    if tag and tag.strip():
        stories = [s for s in stories if tag.strip() in s.tags]
    if kind and kind.strip():
        needle = kind.strip().lower()
        stories = [s for s in stories if needle in s.kind.lower()]
    return stories


def catalog_stats(catalog: Catalog) -> dict[str, Any]:
    """Summary counts of a catalog."""
    titles = dedupe_tags(story.title for story in catalog.stories.values())
    tags = dedupe_tags(tag for story in catalog.stories.values() for tag in story.tags)
    return {
        "totalStories": catalog.total_stories,
        "totalComponents": len({component_id(_group_name(s)) for s in catalog.stories.values()}),
        "generatedAt": catalog.generated_at_iso,
        "extractedFrom": catalog.extracted_from.value,
        "storyTitles": titles,
        "tags": tags,
    }
