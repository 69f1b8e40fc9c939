"""Tests for story record assembly."""

import pytest

from storymeta.extraction.builder import (
    UNKNOWN_TITLE,
    MetaObject,
    build_story_records,
    extract_actions,
    extract_runtime_actions,
    generate_story_id,
    record_from_index_entry,
    record_from_runtime,
    slugify,
    story_description,
)
from storymeta.extraction.source import SourceParser
from storymeta.models import IndexEntry


@pytest.fixture(scope="module")
def parser():
    return SourceParser()


def build(parser, source: str, path: str = "Button.stories.tsx"):
    parsed = parser.parse(source, path=path)
    records = build_story_records(parsed, f"./src/{path}", source)
    return {record.id: record for record in records}


class TestStoryIds:
    """Test slug and id generation."""

    def test_slugify(self):
        assert slugify("Components/Button") == "components-button"
        assert slugify("My  Fancy Story!") == "my-fancy-story"
        assert slugify("Ünïcode") == "ncode"

    def test_generate_story_id(self):
        assert generate_story_id("Components/Button", "Primary") == "components-button--primary"

    def test_ids_are_deterministic(self, parser, button_source):
        first = build(parser, button_source)
        second = build(parser, button_source)
        assert list(first) == list(second)


class TestButtonExample:
    """Test the canonical CSF2 Button file."""

    def test_primary_record(self, parser, button_source):
        records = build(parser, button_source)
        primary = records["components-button--primary"]

        assert primary.title == "Components/Button"
        assert primary.kind == "Components/Button"
        assert primary.name == "Primary"
        assert primary.story == "Primary"
        assert primary.args == {"variant": "primary", "disabled": False}
        assert primary.initial_args == primary.args
        assert primary.arg_types["variant"]["control"]["type"] == "select"
        assert primary.component == "Button"
        assert primary.import_path == "./src/Button.stories.tsx"
        assert primary.source == button_source
        assert primary.docs.source_code == button_source

    def test_function_arg_becomes_action(self, parser, button_source):
        clickable = build(parser, button_source)["components-button--clickable"]

        assert clickable.args["onClick"] == "[Function]"
        assert "onClick" in clickable.actions
        assert clickable.actions["onClick"].action == "onClick"
        assert "label" not in clickable.actions

    def test_story_without_args_has_empty_mapping(self, parser):
        records = build(parser, 'export default { title: "X" };\nexport const Empty = {};')
        assert records["x--empty"].args == {}
        assert records["x--empty"].actions == {}


class TestCsf3:
    """Test story objects and resolved meta identifiers."""

    def test_story_object_args_name_and_tags(self, parser, card_source):
        records = build(parser, card_source, path="Card.stories.tsx")
        elevated = records["layout-card--elevated"]

        assert elevated.name == "With shadow"
        assert elevated.args == {"elevation": 2, "title": "Hello"}
        assert elevated.tags == ["autodocs"]
        assert elevated.docs.description == "A content card."
        assert elevated.component == "Card"

    def test_assignment_overrides_story_object(self, parser):
        source = """
export default { title: "X" };
export const A = { args: { from: "object" }, name: "Object name" };
A.args = { from: "assignment" };
A.storyName = "Assigned name";
"""
        record = build(parser, source)["x--a"]
        assert record.args == {"from": "assignment"}
        assert record.name == "Assigned name"

    def test_story_level_overrides_merge_over_meta(self, parser):
        source = """
export default {
  title: "X",
  tags: ["autodocs"],
  argTypes: { size: { control: "number" } },
  parameters: { layout: "centered" },
};
export const A = {
  tags: ["autodocs", "beta"],
  argTypes: { onHover: { action: "hovered" } },
  parameters: { docs: { description: { story: "Story text" } } },
};
"""
        record = build(parser, source)["x--a"]

        assert record.tags == ["autodocs", "beta"]
        assert set(record.arg_types) == {"size", "onHover"}
        assert record.parameters["layout"] == "centered"
        assert record.docs.description == "Story text"
        assert record.actions["onHover"].action == "hovered"


class TestMetaObject:
    """Test meta object reading."""

    def test_missing_title_uses_unknown(self, parser):
        records = build(parser, "export default { component: Button };\nexport const A = {};")
        record = next(iter(records.values()))

        assert record.title == UNKNOWN_TITLE
        assert record.id == "--a"

    def test_non_object_meta_yields_defaults(self):
        meta = MetaObject.from_expression(None)
        assert meta.title == ""
        assert meta.component is None
        assert meta.tags == []

    def test_mdx_page(self, parser):
        source = (
            'export default { title: "X", parameters: { docs: { page: "Docs.mdx" } } };\n'
            "export const A = {};"
        )
        assert build(parser, source)["x--a"].docs.mdx == "Docs.mdx"


class TestActions:
    """Test action derivation."""

    def test_on_prefix_and_function_values(self):
        actions = extract_actions(
            {"onChange": "x", "render": "[Function]", "label": "a"},
            {"onChange": {"description": "Fires on change"}},
        )

        assert set(actions) == {"onChange", "render"}
        assert actions["onChange"].description == "Fires on change"

    def test_arg_types_flagged_as_actions_win(self):
        actions = extract_actions(
            {"onClick": "[Function]"},
            {
                "onClick": {"action": "clicked", "description": "Click handler"},
                "onSubmit": {"table": {"category": "events"}},
                "variant": {"control": "select"},
            },
        )

        assert actions["onClick"].action == "clicked"
        assert actions["onClick"].description == "Click handler"
        assert actions["onSubmit"].action == "onSubmit"
        assert "variant" not in actions

    def test_runtime_actions(self):
        actions = extract_runtime_actions(
            {"onFocus": {}, "size": {"control": "number"}, "submit": {"action": "sent"}}
        )
        assert set(actions) == {"onFocus", "submit"}
        assert actions["submit"].action == "sent"

    def test_story_description_prefers_story_level(self):
        assert (
            story_description(
                {"docs": {"description": {"component": "C"}}},
                {"docs": {"description": {"story": "S"}}},
            )
            == "S"
        )
        assert story_description({}) == ""


class TestIndexAndRuntimeRecords:
    """Test records built from index entries and runtime data."""

    @pytest.fixture
    def entry(self):
        return IndexEntry.model_validate(
            {
                "id": "components-button--primary",
                "title": "Components/Button",
                "name": "Primary",
                "importPath": "./Button.stories.tsx",
                "tags": ["dev"],
            }
        )

    def test_record_from_index_entry(self, entry):
        record = record_from_index_entry("ignored", entry)

        assert record.id == "components-button--primary"
        assert record.args == {}
        assert record.arg_types == {}
        assert record.parameters == {"fileName": "./Button.stories.tsx"}
        assert record.tags == ["dev"]

    def test_record_from_runtime(self, entry):
        data = {
            "args": {"label": "Go"},
            "initialArgs": {"label": "Go"},
            "argTypes": {"onClick": {"action": "clicked"}},
            "parameters": {
                "docs": {"source": {"code": "<Button />"}, "description": {"story": "Main"}},
                "component": {"__docgenInfo": {"displayName": "Button"}},
            },
            "tags": ["dev", "autodocs"],
        }
        record = record_from_runtime(entry.id, entry, data)

        assert record.args == {"label": "Go"}
        assert record.actions["onClick"].action == "clicked"
        assert record.docs.source_code == "<Button />"
        assert record.docs.description == "Main"
        assert record.parameters["fileName"] == "./Button.stories.tsx"
        assert record.component == {"displayName": "Button"}
        assert record.tags == ["dev", "autodocs"]

    def test_record_from_runtime_tolerates_missing_fields(self, entry):
        record = record_from_runtime(entry.id, entry, {"args": None})

        assert record.args == {}
        assert record.tags == ["dev"]
        assert record.docs.source_code == ""
