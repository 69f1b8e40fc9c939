"""Built Storybook strategy: reads ``index.json`` from the static build output."""

from __future__ import annotations

import logging

from ...exceptions import StoryIndexError
from ...models import Catalog, Provenance
from ..builder import record_from_index_entry
from ..context import ExtractionContext
from ..live import find_built_index, read_built_index
from .base import ExtractionStrategy

logger = logging.getLogger(__name__)


class BuiltIndexStrategy(ExtractionStrategy):
    """Wraps the entries of a built Storybook's index file."""

    name = "built-storybook"
    provenance = Provenance.BUILT_STORYBOOK

    def is_applicable(self, context: ExtractionContext) -> bool:
        if context.output_dir is None:
            return False
        return find_built_index(context.output_dir) is not None

    async def extract(self, context: ExtractionContext) -> Catalog | None:
        if context.output_dir is None:
            return None
        path = find_built_index(context.output_dir)
        if path is None:
            return None

        try:
            index = read_built_index(path)
        except StoryIndexError as e:
            logger.warning(f"Built story index unusable: {e}")
            return Catalog(extracted_from=self.provenance)

        catalog = Catalog(extracted_from=self.provenance)
        for story_id, entry in index.all_entries().items():
            catalog.add(record_from_index_entry(story_id, entry))

        logger.info(f"Read {catalog.total_stories} entries from {path}")
        return catalog
