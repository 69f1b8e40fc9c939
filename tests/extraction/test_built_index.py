"""Tests for reading a built Storybook index."""

import json

import pytest

from storymeta.exceptions import StoryIndexError
from storymeta.extraction import ExtractionContext
from storymeta.extraction.live import find_built_index, parse_story_index, read_built_index
from storymeta.extraction.strategies import BuiltIndexStrategy
from storymeta.models import Catalog, Provenance


class TestParseStoryIndex:
    """Test index document validation."""

    def test_v5_entries(self):
        index = parse_story_index(
            {"v": 5, "entries": {"a--b": {"id": "a--b", "title": "A", "name": "B"}}}, "test"
        )
        assert len(index) == 1
        assert index.all_entries()["a--b"].type == "story"

    def test_legacy_v3_stories(self):
        index = parse_story_index(
            {"v": 3, "stories": {"a--b": {"id": "a--b", "kind": "A", "story": "B"}}}, "test"
        )
        entry = index.all_entries()["a--b"]
        assert entry.title == "A"
        assert entry.name == "B"

    def test_rejects_non_index_documents(self):
        with pytest.raises(StoryIndexError):
            parse_story_index([], "test")
        with pytest.raises(StoryIndexError):
            parse_story_index({"something": "else"}, "test")

    def test_rejects_catalog_snapshots(self):
        snapshot = Catalog(extracted_from=Provenance.SOURCE_FILES).to_dict()
        with pytest.raises(StoryIndexError):
            parse_story_index(snapshot, "test")

    def test_rejects_malformed_entries_map(self):
        with pytest.raises(StoryIndexError):
            parse_story_index({"entries": ["not", "a", "map"]}, "test")

    def test_invalid_entries_are_skipped(self):
        index = parse_story_index(
            {
                "entries": {
                    "a": "not an object",
                    "b--c": {"id": "b--c", "title": {"nested": True}},
                    "d--e": {"id": "d--e", "title": "D", "name": "E"},
                }
            },
            "test",
        )
        assert list(index.all_entries()) == ["d--e"]

    def test_scalar_fields_coerced_to_strings(self):
        index = parse_story_index(
            {"entries": {"a--2": {"id": "a--2", "title": "A", "name": 2, "importPath": None}}},
            "test",
        )
        entry = index.all_entries()["a--2"]
        assert entry.name == "2"
        assert entry.import_path == ""


class TestBuiltIndexFiles:
    """Test locating and reading index files."""

    def test_find_prefers_index_json(self, built_index):
        output_dir = built_index / "storybook-static"
        (output_dir / "stories.json").write_text(json.dumps({"v": 3, "stories": {}}))

        assert find_built_index(output_dir) == output_dir / "index.json"

    def test_find_skips_our_own_snapshot(self, tmp_path):
        snapshot = Catalog(extracted_from=Provenance.SOURCE_FILES).to_json()
        (tmp_path / "stories.json").write_text(snapshot)

        assert find_built_index(tmp_path) is None

    def test_find_tolerates_one_bad_entry(self, tmp_path):
        document = {
            "v": 5,
            "entries": {
                "a--b": {"id": "a--b", "title": "A", "name": "B"},
                "a--c": {"id": "a--c", "title": "A", "name": ["not", "a", "name"]},
            },
        }
        (tmp_path / "index.json").write_text(json.dumps(document))

        assert find_built_index(tmp_path) == tmp_path / "index.json"
        assert list(read_built_index(tmp_path / "index.json").all_entries()) == ["a--b"]

    def test_read_malformed_json(self, tmp_path):
        path = tmp_path / "index.json"
        path.write_text("{not json")

        with pytest.raises(StoryIndexError):
            read_built_index(path)


class TestBuiltIndexStrategy:
    """Test the built Storybook strategy."""

    def test_applicability(self, built_index, tmp_path_factory):
        strategy = BuiltIndexStrategy()
        present = ExtractionContext(
            project_root=built_index, output_dir=built_index / "storybook-static"
        )
        empty_root = tmp_path_factory.mktemp("empty")
        missing = ExtractionContext(project_root=empty_root, output_dir=empty_root / "out")

        assert strategy.is_applicable(present)
        assert not strategy.is_applicable(missing)

    @pytest.mark.asyncio
    async def test_extract(self, built_index):
        context = ExtractionContext(
            project_root=built_index, output_dir=built_index / "storybook-static"
        )

        catalog = await BuiltIndexStrategy().extract(context)

        assert catalog is not None
        assert catalog.extracted_from == Provenance.BUILT_STORYBOOK
        assert catalog.total_stories == 2
        primary = catalog.stories["components-button--primary"]
        assert primary.args == {}
        assert primary.parameters == {"fileName": "./src/components/Button.stories.tsx"}
        assert catalog.stories["components-button--docs"].type == "docs"

    @pytest.mark.asyncio
    async def test_missing_output_dir_yields_none(self, tmp_path):
        context = ExtractionContext(project_root=tmp_path)
        assert await BuiltIndexStrategy().extract(context) is None
