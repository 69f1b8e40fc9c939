"""storymeta: Storybook component metadata extraction.

Builds a catalog of every story in a Storybook project, from its story
source files, a built Storybook, or a running dev server, and exposes the
catalog to consumers through a file snapshot, an in-memory store, and
query helpers.
"""

from .config import StorymetaSettings, get_settings, reset_settings
from .exceptions import (
    ConfigError,
    DependencyUnavailableError,
    IntrospectionError,
    SourceParseError,
    StoryIndexError,
    StorymetaException,
)
from .extraction import (
    ExtractionContext,
    ExtractionMode,
    ExtractionOutcome,
    StrategySelector,
    extract_catalog,
    extract_catalog_sync,
    run_extraction,
)
from .models import Catalog, Provenance, StoryAction, StoryDocs, StoryRecord
from .store import CatalogLoader, CatalogStore, read_catalog, write_catalog

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Models
    "Catalog",
    "Provenance",
    "StoryAction",
    "StoryDocs",
    "StoryRecord",
    # Extraction
    "ExtractionContext",
    "ExtractionMode",
    "ExtractionOutcome",
    "StrategySelector",
    "extract_catalog",
    "extract_catalog_sync",
    "run_extraction",
    # Store
    "CatalogLoader",
    "CatalogStore",
    "read_catalog",
    "write_catalog",
    # Config
    "StorymetaSettings",
    "get_settings",
    "reset_settings",
    # Errors
    "ConfigError",
    "DependencyUnavailableError",
    "IntrospectionError",
    "SourceParseError",
    "StoryIndexError",
    "StorymetaException",
]
