"""
Catalog loading for consumers.

Looks for a catalog snapshot in a few well-known places and keeps it in a
CatalogStore. A loaded catalog is served until the TTL expires; after that
it is reused only while its file still exists with an unchanged mtime.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from ..config import StorymetaSettings
from ..models import Catalog
from .catalog_store import CatalogStore
from .io import read_catalog

logger = logging.getLogger(__name__)

TEMP_CATALOG_FILE = ".storybook-metadata-temp.json"
DEFAULT_CACHE_TTL = 5.0


def candidate_paths(
    project_root: Path, output_dir: Path, output_file: str = "stories.json"
) -> list[Path]:
    """Catalog locations, most preferred first."""
    return [
        output_dir / output_file,
        project_root / TEMP_CATALOG_FILE,
        project_root / ".storybook" / "stories.json",
    ]


class CatalogLoader:
    """Loads the catalog on demand, caching it in a CatalogStore."""

    def __init__(
        self,
        paths: Sequence[Path],
        store: CatalogStore | None = None,
        ttl: float = DEFAULT_CACHE_TTL,
    ) -> None:
        """
        Initialize the loader.

        Args:
            paths: Candidate catalog files, in order of preference
            store: Store to cache into (a new one by default)
            ttl: Seconds a loaded catalog is served without checking its file
        """
        self.paths = [Path(p) for p in paths]
        self.store = store if store is not None else CatalogStore()
        self.ttl = ttl

    @classmethod
    def from_settings(
        cls, settings: StorymetaSettings, store: CatalogStore | None = None
    ) -> CatalogLoader:
        paths = candidate_paths(
            settings.resolved_project_root, settings.resolved_output_dir, settings.output_file
        )
        return cls(paths, store=store, ttl=settings.cache_ttl)

    def load(self) -> Catalog | None:
        """
        The current catalog, reloading from disk when stale.

        Returns:
            The catalog, or None when no candidate file holds one.
        """
        if self._cached_is_current():
            return self.store.get()

        for path in self.paths:
            catalog = read_catalog(path)
            if catalog is not None:
                logger.debug(f"Loaded {catalog.total_stories} stories from {path}")
                self.store.replace(catalog, source_path=path)
                return catalog

        logger.debug("No catalog found in any candidate location")
        self.store.invalidate()
        return None

    def _cached_is_current(self) -> bool:
        cached = self.store.get()
        if cached is None:
            return False
        if self.store.is_fresh(self.ttl):
            return True

        source = self.store.source_path
        if source is None or not source.is_file():
            return False
        try:
            unchanged = source.stat().st_mtime == self.store.source_mtime
        except OSError:
            return False
        if unchanged:
            # refresh the TTL window without re-reading
            self.store.replace(cached, source_path=source)
        return unchanged
