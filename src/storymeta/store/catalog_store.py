"""In-memory holder for the current catalog."""

from __future__ import annotations

import threading
import time
from pathlib import Path

from ..models import Catalog


class CatalogStore:
    """
    Current catalog plus a freshness signal.

    ``replace`` is the only way to change the catalog and swaps the
    reference in one assignment under a lock, so readers always see either
    the old catalog or the new one.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._catalog: Catalog | None = None
        self._loaded_at: float | None = None
        self._source_path: Path | None = None
        self._source_mtime: float | None = None

    def get(self) -> Catalog | None:
        return self._catalog

    def replace(self, catalog: Catalog, source_path: Path | None = None) -> None:
        """Install a new catalog, recording where it came from."""
        mtime = _mtime(source_path)
        with self._lock:
            self._catalog = catalog
            self._loaded_at = time.monotonic()
            self._source_path = source_path
            self._source_mtime = mtime

    def invalidate(self) -> None:
        """Drop the current catalog."""
        with self._lock:
            self._catalog = None
            self._loaded_at = None
            self._source_path = None
            self._source_mtime = None

    @property
    def loaded_at(self) -> float | None:
        """Monotonic timestamp of the last replace, or None."""
        return self._loaded_at

    @property
    def source_path(self) -> Path | None:
        return self._source_path

    @property
    def source_mtime(self) -> float | None:
        return self._source_mtime

    def is_fresh(self, ttl: float) -> bool:
        """Whether a catalog is loaded and younger than ``ttl`` seconds."""
        loaded_at = self._loaded_at
        if self._catalog is None or loaded_at is None:
            return False
        return time.monotonic() - loaded_at < ttl


def _mtime(path: Path | None) -> float | None:
    if path is None:
        return None
    try:
        return path.stat().st_mtime
    except OSError:
        return None
