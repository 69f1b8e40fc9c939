"""Catalog extraction strategies, in the order the selector tries them."""

from .base import ExtractionStrategy
from .built_index import BuiltIndexStrategy
from .live_server import BasicIndexStrategy, DeepIntrospectionStrategy
from .source_files import (
    SourceFileStrategy,
    discover_story_files,
    import_path_for,
    is_story_file,
)

__all__ = [
    "ExtractionStrategy",
    "SourceFileStrategy",
    "BuiltIndexStrategy",
    "DeepIntrospectionStrategy",
    "BasicIndexStrategy",
    "discover_story_files",
    "import_path_for",
    "is_story_file",
]
