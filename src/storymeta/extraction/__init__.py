"""
Storybook metadata extraction.

Builds a story catalog from whichever source is available: story source
files, a built Storybook, or a running dev server.

Example:
    >>> from storymeta.extraction import ExtractionContext, run_extraction
    >>> context = ExtractionContext(project_root=Path("."), source_dir=Path("src"))
    >>> outcome = await run_extraction(context)
    >>> outcome.catalog.total_stories
"""

from .builder import (
    build_story_records,
    extract_actions,
    generate_story_id,
    record_from_index_entry,
    record_from_runtime,
    slugify,
)
from .capabilities import Capabilities, detect_capabilities
from .context import ExtractionContext
from .pipeline import extract_catalog, extract_catalog_sync, run_extraction
from .selector import (
    AttemptStatus,
    ExtractionMode,
    ExtractionOutcome,
    StrategyAttempt,
    StrategySelector,
    default_strategies,
)

__all__ = [
    "AttemptStatus",
    "Capabilities",
    "ExtractionContext",
    "ExtractionMode",
    "ExtractionOutcome",
    "StrategyAttempt",
    "StrategySelector",
    "build_story_records",
    "default_strategies",
    "detect_capabilities",
    "extract_actions",
    "extract_catalog",
    "extract_catalog_sync",
    "generate_story_id",
    "record_from_index_entry",
    "record_from_runtime",
    "run_extraction",
    "slugify",
]
