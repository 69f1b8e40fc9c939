"""
Running dev server strategies.

DeepIntrospectionStrategy opens every story in a headless browser and reads
its runtime args and argTypes; BasicIndexStrategy settles for the entries
of the server's story index. Both share the index fetched through the
context, so it is requested only once per run.
"""

from __future__ import annotations

import logging

from ...exceptions import IntrospectionError
from ...models import Catalog, Provenance
from ..builder import record_from_index_entry, record_from_runtime
from ..context import ExtractionContext
from .base import ExtractionStrategy

logger = logging.getLogger(__name__)


class DeepIntrospectionStrategy(ExtractionStrategy):
    """Per-story runtime introspection through a headless browser."""

    name = "running-storybook-deep"
    provenance = Provenance.RUNNING_STORYBOOK_DEEP

    def is_applicable(self, context: ExtractionContext) -> bool:
        return context.capabilities.browser and bool(context.server_url)

    async def extract(self, context: ExtractionContext) -> Catalog | None:
        index = await context.live_index()
        if index is None or len(index) == 0:
            return None

        entries = index.all_entries()
        catalog = Catalog(extracted_from=self.provenance)
        introspected = 0

        try:
            async with context.create_introspector() as introspector:
                for story_id, entry in entries.items():
                    try:
                        data = await introspector.introspect(entry.id or story_id)
                    except IntrospectionError as e:
                        logger.debug(f"Falling back to index data for {story_id}: {e}")
                        catalog.add(record_from_index_entry(story_id, entry))
                        continue
                    catalog.add(record_from_runtime(story_id, entry, data))
                    introspected += 1
        except IntrospectionError as e:
            logger.warning(f"Deep introspection unavailable: {e}")
            return None

        logger.info(f"Introspected {introspected}/{len(entries)} stories")
        if introspected == 0:
            # nothing deeper than the basic index; let that strategy report it
            return None
        return catalog


class BasicIndexStrategy(ExtractionStrategy):
    """Wraps the dev server's story index entries."""

    name = "storybook-index-basic"
    provenance = Provenance.STORYBOOK_INDEX_BASIC

    def is_applicable(self, context: ExtractionContext) -> bool:
        return bool(context.server_url)

    async def extract(self, context: ExtractionContext) -> Catalog | None:
        index = await context.live_index()
        if index is None:
            return None

        catalog = Catalog(extracted_from=self.provenance)
        for story_id, entry in index.all_entries().items():
            catalog.add(record_from_index_entry(story_id, entry))
        return catalog
