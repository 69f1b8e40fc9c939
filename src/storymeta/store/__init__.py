"""Catalog storage: in-memory store, snapshot files, and the consumer-side loader."""

from .catalog_store import CatalogStore
from .io import read_catalog, write_catalog
from .loader import TEMP_CATALOG_FILE, CatalogLoader, candidate_paths

__all__ = [
    "CatalogStore",
    "CatalogLoader",
    "TEMP_CATALOG_FILE",
    "candidate_paths",
    "read_catalog",
    "write_catalog",
]
