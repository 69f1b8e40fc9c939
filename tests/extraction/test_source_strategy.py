"""Tests for the source file strategy."""

import time

import pytest

from storymeta.exceptions import ExtractionTimeoutError, with_timeout
from storymeta.extraction import ExtractionContext
from storymeta.extraction.strategies import (
    SourceFileStrategy,
    discover_story_files,
    import_path_for,
    is_story_file,
)
from storymeta.models import Provenance


def write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


class TestDiscovery:
    """Test story file discovery."""

    def test_story_suffixes(self, tmp_path):
        assert is_story_file(tmp_path / "Button.stories.tsx")
        assert is_story_file(tmp_path / "Button.stories.mjs")
        assert not is_story_file(tmp_path / "Button.stories.mdx")
        assert not is_story_file(tmp_path / "Button.tsx")

    def test_sorted_and_skips_node_modules(self, tmp_path):
        write(tmp_path / "b" / "B.stories.tsx", "")
        write(tmp_path / "a" / "A.stories.js", "")
        write(tmp_path / "node_modules" / "lib" / "C.stories.tsx", "")
        write(tmp_path / "a" / "README.md", "")

        files = discover_story_files(tmp_path)

        assert [f.relative_to(tmp_path).as_posix() for f in files] == [
            "a/A.stories.js",
            "b/B.stories.tsx",
        ]

    def test_import_path_is_relative_to_project_root(self, tmp_path):
        path = tmp_path / "src" / "Button.stories.tsx"
        assert import_path_for(path, tmp_path) == "./src/Button.stories.tsx"


class TestSourceFileStrategy:
    """Test extraction from story files."""

    def test_not_applicable_without_parser(self, story_project, no_capabilities):
        context = ExtractionContext(
            project_root=story_project,
            source_dir=story_project / "src",
            capabilities=no_capabilities,
        )
        assert not SourceFileStrategy().is_applicable(context)

    def test_not_applicable_without_source_dir(self, tmp_path, parser_only):
        context = ExtractionContext(
            project_root=tmp_path, source_dir=tmp_path / "src", capabilities=parser_only
        )
        assert not SourceFileStrategy().is_applicable(context)

    @pytest.mark.asyncio
    async def test_extracts_all_files(self, story_project, parser_only):
        context = ExtractionContext(
            project_root=story_project,
            source_dir=story_project / "src",
            capabilities=parser_only,
        )
        strategy = SourceFileStrategy()
        assert strategy.is_applicable(context)

        catalog = await strategy.extract(context)

        assert catalog is not None
        assert catalog.extracted_from == Provenance.SOURCE_FILES
        assert set(catalog.stories) == {
            "components-button--primary",
            "components-button--clickable",
            "layout-card--elevated",
        }
        assert catalog.total_stories == 3
        primary = catalog.stories["components-button--primary"]
        assert primary.import_path == "./src/components/Button.stories.tsx"

    @pytest.mark.asyncio
    async def test_broken_file_does_not_stop_siblings(
        self, story_project, parser_only, broken_source
    ):
        write(story_project / "src" / "broken" / "Broken.stories.tsx", broken_source)
        context = ExtractionContext(
            project_root=story_project,
            source_dir=story_project / "src",
            capabilities=parser_only,
        )

        catalog = await SourceFileStrategy().extract(context)

        assert catalog is not None
        assert "components-button--primary" in catalog.stories
        assert not any(story_id.startswith("broken") for story_id in catalog.stories)

    @pytest.mark.asyncio
    async def test_duplicate_ids_last_file_wins(self, tmp_path, parser_only):
        write(
            tmp_path / "src" / "a" / "One.stories.tsx",
            'export default { title: "Shared" };\n'
            'export const Story = {};\nStory.args = { from: "a" };\n',
        )
        write(
            tmp_path / "src" / "b" / "Two.stories.tsx",
            'export default { title: "Shared" };\n'
            'export const Story = {};\nStory.args = { from: "b" };\n',
        )
        context = ExtractionContext(
            project_root=tmp_path, source_dir=tmp_path / "src", capabilities=parser_only
        )

        catalog = await SourceFileStrategy().extract(context)

        assert catalog is not None
        assert list(catalog.stories) == ["shared--story"]
        assert catalog.stories["shared--story"].args == {"from": "b"}
        assert catalog.stories["shared--story"].import_path == "./src/b/Two.stories.tsx"

    @pytest.mark.asyncio
    async def test_no_story_files_yields_none(self, tmp_path, parser_only):
        (tmp_path / "src").mkdir()
        context = ExtractionContext(
            project_root=tmp_path, source_dir=tmp_path / "src", capabilities=parser_only
        )
        assert await SourceFileStrategy().extract(context) is None

    @pytest.mark.asyncio
    async def test_missing_source_dir_yields_none(self, tmp_path, parser_only):
        context = ExtractionContext(project_root=tmp_path, capabilities=parser_only)
        assert await SourceFileStrategy().extract(context) is None

    @pytest.mark.asyncio
    async def test_slow_parse_is_abandoned_on_timeout(
        self, story_project, parser_only, monkeypatch
    ):
        def slow_build(self, context, files):
            time.sleep(0.3)

        monkeypatch.setattr(SourceFileStrategy, "_build_catalog", slow_build)
        context = ExtractionContext(
            project_root=story_project,
            source_dir=story_project / "src",
            capabilities=parser_only,
        )

        started = time.monotonic()
        with pytest.raises(ExtractionTimeoutError):
            await with_timeout(SourceFileStrategy().extract(context), 0.02, "source-files")
        assert time.monotonic() - started < 0.25
