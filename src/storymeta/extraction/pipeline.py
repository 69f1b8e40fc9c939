"""
Extraction entry points.

``extract_catalog`` runs a strategy chain and returns the outcome;
``run_extraction`` additionally handles the enhance pass, writes the
snapshot, and installs the catalog into a store.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from ..config import StorymetaSettings, get_settings
from ..store import CatalogStore, write_catalog
from .context import ExtractionContext
from .selector import ExtractionMode, ExtractionOutcome, StrategySelector, default_strategies

logger = logging.getLogger(__name__)


async def extract_catalog(
    context: ExtractionContext,
    mode: ExtractionMode = ExtractionMode.DEV,
    run_timeout: float | None = None,
) -> ExtractionOutcome:
    """
    Run the strategy chain for a mode.

    Raises:
        ConfigError: If the context is invalid.
    """
    selector = StrategySelector(default_strategies(mode), run_timeout=run_timeout)
    return await selector.select(context)


async def run_extraction(
    context: ExtractionContext,
    mode: ExtractionMode = ExtractionMode.DEV,
    enhance: bool = False,
    output_path: Path | None = None,
    store: CatalogStore | None = None,
    run_timeout: float | None = None,
) -> ExtractionOutcome:
    """
    Extract, optionally enhance, then persist the catalog.

    With ``enhance`` a successful build-mode run is followed by a dev-mode
    run whose catalog is adopted when it carries source or runtime data.

    Args:
        context: Extraction inputs
        mode: Strategy chain to run
        enhance: Try to upgrade a build catalog with dev-mode data
        output_path: Where to write the snapshot (not written when None)
        store: Store to install the catalog into
        run_timeout: Per-strategy time limit

    Returns:
        The outcome of the run whose catalog was kept.

    Raises:
        ConfigError: If the context is invalid.
    """
    outcome = await extract_catalog(context, mode, run_timeout)

    if enhance and mode is ExtractionMode.BUILD and outcome.succeeded:
        logger.info("Enhancing build catalog with dev server data...")
        enhanced = await extract_catalog(context, ExtractionMode.DEV, run_timeout)
        if enhanced.catalog is not None and enhanced.catalog.extracted_from.is_deep:
            logger.info(f"Enhanced catalog from {enhanced.catalog.extracted_from.value}")
            enhanced.attempts = outcome.attempts + enhanced.attempts
            outcome = enhanced
        else:
            logger.info("Enhancement found nothing richer; keeping build catalog")

    if outcome.catalog is None:
        return outcome

    if output_path is not None:
        write_catalog(outcome.catalog, output_path)
    if store is not None:
        store.replace(outcome.catalog, source_path=output_path)
    return outcome


def extract_catalog_sync(
    settings: StorymetaSettings | None = None,
    mode: ExtractionMode = ExtractionMode.DEV,
    enhance: bool = False,
    write: bool = True,
    store: CatalogStore | None = None,
) -> ExtractionOutcome:
    """Synchronous extraction driven entirely by settings."""
    settings = settings or get_settings()
    context = ExtractionContext.from_settings(settings)
    return asyncio.run(
        run_extraction(
            context,
            mode=mode,
            enhance=enhance,
            output_path=settings.output_path if write else None,
            store=store,
            run_timeout=settings.run_timeout,
        )
    )
