"""
Catalog data model.

StoryRecord and Catalog are plain dataclasses that serialize to the JSON
document consumers read (camelCase keys, legacy ``kind``/``story`` aliases).
IndexEntry and StoryIndex are pydantic models validating the Storybook
``index.json`` documents that the built and live strategies consume.
"""

from __future__ import annotations

import copy
import json
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

logger = logging.getLogger(__name__)

CATALOG_VERSION = "1.0.0"


class Provenance(Enum):
    """Which extraction strategy produced a catalog."""

    SOURCE_FILES = "source-files"
    BUILT_STORYBOOK = "built-storybook"
    RUNNING_STORYBOOK_DEEP = "running-storybook-deep"
    STORYBOOK_INDEX_BASIC = "storybook-index-basic"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> Provenance:
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_deep(self) -> bool:
        """Whether records carry args/argTypes rather than index data only."""
        return self in (Provenance.SOURCE_FILES, Provenance.RUNNING_STORYBOOK_DEEP)


def _as_dict(value: Any) -> dict[str, Any]:
    return dict(value) if isinstance(value, dict) else {}


def _as_tags(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple, set)):
        return []
    return dedupe_tags(str(tag) for tag in value if tag not in (None, ""))


def dedupe_tags(tags: Any) -> list[str]:
    """Remove duplicate tags, keeping first-seen order."""
    seen: dict[str, None] = {}
    for tag in tags:
        seen.setdefault(tag, None)
    return list(seen)


@dataclass
class StoryAction:
    """An event handler exposed by a story."""

    name: str
    action: str
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "description": self.description, "action": self.action}

    @classmethod
    def from_dict(cls, key: str, data: Any) -> StoryAction:
        data = _as_dict(data)
        return cls(
            name=str(data.get("name") or key),
            action=str(data.get("action") or key),
            description=str(data.get("description") or ""),
        )


@dataclass
class StoryDocs:
    """Textual documentation attached to a story."""

    description: str = ""
    source_code: str = ""
    mdx: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "description": self.description,
            "sourceCode": self.source_code,
            "mdx": self.mdx,
        }

    @classmethod
    def from_dict(cls, data: Any) -> StoryDocs:
        data = _as_dict(data)
        return cls(
            description=str(data.get("description") or ""),
            source_code=str(data.get("sourceCode") or ""),
            mdx=str(data.get("mdx") or ""),
        )


@dataclass
class StoryRecord:
    """One exported story, the unit of cataloging."""

    id: str
    title: str
    name: str
    import_path: str = ""
    type: str = "story"
    tags: list[str] = field(default_factory=list)
    args: dict[str, Any] = field(default_factory=dict)
    initial_args: dict[str, Any] = field(default_factory=dict)
    arg_types: dict[str, Any] = field(default_factory=dict)
    parameters: dict[str, Any] = field(default_factory=dict)
    actions: dict[str, StoryAction] = field(default_factory=dict)
    docs: StoryDocs = field(default_factory=StoryDocs)
    source: str = ""
    component: Any = None

    def __post_init__(self) -> None:
        # Mappings are never None, tags are always a list
        self.tags = _as_tags(self.tags)
        self.args = _as_dict(self.args)
        self.initial_args = _as_dict(self.initial_args)
        self.arg_types = _as_dict(self.arg_types)
        self.parameters = _as_dict(self.parameters)
        self.actions = dict(self.actions or {})

    @property
    def kind(self) -> str:
        """Legacy alias for title."""
        return self.title

    @property
    def story(self) -> str:
        """Legacy alias for name."""
        return self.name

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "name": self.name,
            "kind": self.kind,
            "story": self.story,
            "importPath": self.import_path,
            "type": self.type,
            "tags": list(self.tags),
            "args": copy.deepcopy(self.args),
            "initialArgs": copy.deepcopy(self.initial_args),
            "argTypes": copy.deepcopy(self.arg_types),
            "parameters": copy.deepcopy(self.parameters),
            "actions": {key: action.to_dict() for key, action in self.actions.items()},
            "docs": self.docs.to_dict(),
            "source": self.source,
            "component": copy.deepcopy(self.component),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], story_id: str | None = None) -> StoryRecord:
        """Rebuild a record from its serialized form, tolerating missing keys."""
        return cls(
            id=str(data.get("id") or story_id or ""),
            title=str(data.get("title") or data.get("kind") or ""),
            name=str(data.get("name") or data.get("story") or ""),
            import_path=str(data.get("importPath") or ""),
            type=str(data.get("type") or "story"),
            tags=data.get("tags"),
            args=data.get("args"),
            initial_args=data.get("initialArgs"),
            arg_types=data.get("argTypes"),
            parameters=data.get("parameters"),
            actions={
                key: StoryAction.from_dict(key, value)
                for key, value in _as_dict(data.get("actions")).items()
            },
            docs=StoryDocs.from_dict(data.get("docs")),
            source=str(data.get("source") or ""),
            component=data.get("component"),
        )


@dataclass
class Catalog:
    """Extraction output: all story records plus provenance metadata."""

    extracted_from: Provenance
    stories: dict[str, StoryRecord] = field(default_factory=dict)
    generated_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    version: str = CATALOG_VERSION

    @property
    def total_stories(self) -> int:
        return len(self.stories)

    @property
    def generated_at_iso(self) -> str:
        return self.generated_at.isoformat().replace("+00:00", "Z")

    def add(self, record: StoryRecord) -> None:
        """Insert a record; a record with the same id is replaced."""
        self.stories[record.id] = record

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "generatedAt": self.generated_at_iso,
            "extractedFrom": self.extracted_from.value,
            "totalStories": self.total_stories,
            "stories": {story_id: record.to_dict() for story_id, record in self.stories.items()},
        }

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Catalog:
        """Rebuild a catalog from a serialized document.

        Raises:
            ValueError: If the document is not a catalog.
        """
        if not isinstance(data, dict) or not isinstance(data.get("stories", {}), dict):
            raise ValueError("Catalog document must be an object with a 'stories' mapping")

        stories: dict[str, StoryRecord] = {}
        for story_id, story in data.get("stories", {}).items():
            if isinstance(story, dict):
                stories[story_id] = StoryRecord.from_dict(story, story_id=story_id)

        return cls(
            extracted_from=Provenance.parse(data.get("extractedFrom")),
            stories=stories,
            generated_at=_parse_timestamp(data.get("generatedAt")),
            version=str(data.get("version") or CATALOG_VERSION),
        )


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            pass
        else:
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    return datetime.now(UTC)


class IndexEntry(BaseModel):
    """One entry of a Storybook ``index.json`` (or legacy ``stories.json``)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = ""
    title: str = ""
    name: str = ""
    import_path: str = Field("", alias="importPath")
    type: str = "story"
    tags: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _legacy_fields(cls, data: Any) -> Any:
        # v3 stories.json uses kind/story instead of title/name
        if isinstance(data, dict):
            data = dict(data)
            if not data.get("title") and data.get("kind"):
                data["title"] = data["kind"]
            if not data.get("name") and data.get("story"):
                data["name"] = data["story"]
        return data

    @field_validator("id", "title", "name", "import_path", mode="before")
    @classmethod
    def _coerce_scalar(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, (bool, int, float)):
            return str(value)
        return value

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, value: Any) -> list[str]:
        return _as_tags(value)

    @field_validator("type", mode="before")
    @classmethod
    def _default_type(cls, value: Any) -> str:
        return str(value) if value else "story"


class StoryIndex(BaseModel):
    """A Storybook story index document."""

    model_config = ConfigDict(extra="ignore")

    v: int | None = None
    entries: dict[str, IndexEntry] = Field(default_factory=dict)
    stories: dict[str, IndexEntry] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _drop_invalid_entries(cls, data: Any) -> Any:
        # One malformed entry must not invalidate the rest of the index
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for key in ("entries", "stories"):
            raw = data.get(key)
            if not isinstance(raw, dict):
                continue
            kept: dict[str, IndexEntry] = {}
            for entry_id, entry in raw.items():
                try:
                    kept[entry_id] = IndexEntry.model_validate(entry)
                except ValidationError as e:
                    logger.warning(
                        f"Skipping invalid index entry {entry_id!r}: {e.error_count()} error(s)"
                    )
            data[key] = kept
        return data

    def all_entries(self) -> dict[str, IndexEntry]:
        """Entries keyed by story id, from whichever key the document used."""
        return self.entries or self.stories

    def __len__(self) -> int:
        return len(self.all_entries())
