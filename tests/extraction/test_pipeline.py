"""Tests for the extraction entry points."""

import json

import pytest

from storymeta.config import StorymetaSettings
from storymeta.extraction import (
    Capabilities,
    ExtractionContext,
    ExtractionMode,
    extract_catalog_sync,
    run_extraction,
)
from storymeta.models import Provenance
from storymeta.store import CatalogStore, read_catalog


def write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


class TestRunExtraction:
    """Test extraction with persistence."""

    @pytest.mark.asyncio
    async def test_writes_snapshot_and_fills_store(self, story_project, parser_only):
        context = ExtractionContext(
            project_root=story_project,
            source_dir=story_project / "src",
            capabilities=parser_only,
        )
        output = story_project / "storybook-static" / "stories.json"
        store = CatalogStore()

        outcome = await run_extraction(context, output_path=output, store=store)

        assert outcome.succeeded
        assert store.get() is outcome.catalog
        assert store.source_path == output

        written = json.loads(output.read_text())
        assert written["extractedFrom"] == "source-files"
        assert written["totalStories"] == 3
        assert written["stories"]["components-button--primary"]["kind"] == "Components/Button"

    @pytest.mark.asyncio
    async def test_nothing_extracted_writes_nothing(self, tmp_path, no_capabilities):
        context = ExtractionContext(project_root=tmp_path, capabilities=no_capabilities)
        output = tmp_path / "out" / "stories.json"
        store = CatalogStore()

        outcome = await run_extraction(context, output_path=output, store=store)

        assert not outcome.succeeded
        assert not output.exists()
        assert store.get() is None

    @pytest.mark.asyncio
    async def test_enhance_adopts_source_catalog(self, story_project, built_index, parser_only):
        # story_project and built_index share tmp_path
        context = ExtractionContext(
            project_root=story_project,
            source_dir=story_project / "src",
            output_dir=story_project / "storybook-static",
            capabilities=parser_only,
        )

        outcome = await run_extraction(context, mode=ExtractionMode.BUILD, enhance=True)

        assert outcome.catalog.extracted_from == Provenance.SOURCE_FILES
        assert [a.name for a in outcome.attempts][0] == "built-storybook"

    @pytest.mark.asyncio
    async def test_enhance_keeps_build_catalog_when_nothing_richer(
        self, built_index, no_capabilities
    ):
        context = ExtractionContext(
            project_root=built_index,
            output_dir=built_index / "storybook-static",
            capabilities=no_capabilities,
        )

        outcome = await run_extraction(context, mode=ExtractionMode.BUILD, enhance=True)

        assert outcome.catalog.extracted_from == Provenance.BUILT_STORYBOOK
        assert outcome.strategy == "built-storybook"
        assert len(outcome.attempts) == 1

    @pytest.mark.asyncio
    async def test_enhance_skipped_when_build_fails(self, story_project, parser_only):
        context = ExtractionContext(
            project_root=story_project,
            source_dir=story_project / "src",
            output_dir=story_project / "storybook-static",
            capabilities=parser_only,
        )

        outcome = await run_extraction(context, mode=ExtractionMode.BUILD, enhance=True)

        assert outcome.catalog is None


class TestExtractCatalogSync:
    """Test the settings-driven synchronous entry point."""

    def test_extracts_and_writes(self, story_project):
        write(
            story_project / "src" / "Extra.stories.js",
            'export default { title: "Extra" };\nexport const One = {};\n',
        )
        settings = StorymetaSettings(project_root=str(story_project), output_dir="build")

        outcome = extract_catalog_sync(settings)

        assert outcome.succeeded
        snapshot = read_catalog(story_project / "build" / "stories.json")
        assert snapshot is not None
        assert "extra--one" in snapshot.stories

    def test_no_write(self, story_project):
        settings = StorymetaSettings(project_root=str(story_project))

        outcome = extract_catalog_sync(settings, write=False)

        assert outcome.succeeded
        assert not (story_project / "storybook-static" / "stories.json").exists()


class TestContextFromSettings:
    """Test building a context from settings."""

    def test_paths_resolved(self, tmp_path):
        settings = StorymetaSettings(project_root=str(tmp_path), source_dir="stories")

        context = ExtractionContext.from_settings(
            settings, capabilities=Capabilities(source_parser=True, browser=False)
        )

        assert context.source_dir == tmp_path.resolve() / "stories"
        assert context.require_source_dir is True
        assert context.server_url == "http://localhost:6006"

    def test_default_source_dir_not_required(self, tmp_path):
        settings = StorymetaSettings(project_root=str(tmp_path))

        context = ExtractionContext.from_settings(settings)

        assert context.require_source_dir is False

    def test_no_source(self, tmp_path):
        settings = StorymetaSettings(project_root=str(tmp_path), source_dir="stories")

        context = ExtractionContext.from_settings(settings, use_source=False)

        assert context.source_dir is None
        assert context.require_source_dir is False
