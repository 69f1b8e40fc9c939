"""
Source file strategy.

Walks the project's source directory for story files and parses each one
statically. Files that fail to parse are logged and skipped; the rest still
contribute their stories.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from ...exceptions import SourceParseError
from ...models import Catalog, Provenance
from ..builder import build_story_records
from ..context import ExtractionContext
from ..source import SourceParser
from .base import ExtractionStrategy

logger = logging.getLogger(__name__)

STORY_SUFFIXES = (".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs")
EXCLUDED_DIRS = frozenset({"node_modules"})


def is_story_file(path: Path) -> bool:
    name = path.name
    return any(name.endswith(f".stories{suffix}") for suffix in STORY_SUFFIXES)


def discover_story_files(source_dir: Path) -> list[Path]:
    """Story files under a directory, sorted by path, skipping node_modules."""
    files = [
        path
        for path in source_dir.rglob("*.stories.*")
        if path.is_file()
        and is_story_file(path)
        and not EXCLUDED_DIRS.intersection(path.relative_to(source_dir).parts)
    ]
    return sorted(files)


def import_path_for(path: Path, project_root: Path) -> str:
    """``./``-prefixed POSIX path relative to the project root."""
    try:
        relative = path.resolve().relative_to(project_root.resolve())
    except ValueError:
        relative = path
    return f"./{relative.as_posix()}"


class SourceFileStrategy(ExtractionStrategy):
    """Builds the catalog by parsing ``*.stories.*`` files without executing them."""

    name = "source-files"
    provenance = Provenance.SOURCE_FILES

    def is_applicable(self, context: ExtractionContext) -> bool:
        if not context.capabilities.source_parser:
            return False
        return context.source_dir is not None and context.source_dir.is_dir()

    async def extract(self, context: ExtractionContext) -> Catalog | None:
        if context.source_dir is None:
            return None
        files = discover_story_files(context.source_dir)
        logger.info(f"Found {len(files)} story files in {context.source_dir}")
        if not files:
            return None

        # Parsing is CPU bound; a worker thread keeps the run timeout effective
        return await asyncio.to_thread(self._build_catalog, context, files)

    def _build_catalog(self, context: ExtractionContext, files: list[Path]) -> Catalog:
        parser = SourceParser()
        catalog = Catalog(extracted_from=self.provenance)
        skipped = 0

        for path in files:
            try:
                parsed, source = parser.parse_file(path)
            except SourceParseError as e:
                logger.warning(f"Skipping {path}: {e.reason}")
                skipped += 1
                continue

            import_path = import_path_for(path, context.project_root)
            for record in build_story_records(parsed, import_path, source):
                if record.id in catalog.stories:
                    logger.debug(f"Story id {record.id} redefined in {import_path}")
                catalog.add(record)

        logger.info(
            f"Parsed {len(files) - skipped} story files ({skipped} skipped), "
            f"{catalog.total_stories} stories"
        )
        return catalog
