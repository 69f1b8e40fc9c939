"""Catalog snapshot reading and writing."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from ..models import Catalog

logger = logging.getLogger(__name__)


def write_catalog(catalog: Catalog, path: Path) -> Path:
    """
    Write a catalog as pretty JSON, atomically.

    The document goes to a temporary file in the target directory which
    then replaces ``path``, so readers never see a partial file.

    Returns:
        The path written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(catalog.to_json(indent=2))
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.info(f"Wrote {catalog.total_stories} stories to {path}")
    return path


def read_catalog(path: Path) -> Catalog | None:
    """
    Load a catalog snapshot.

    Returns:
        The catalog, or None when the file is missing or not a catalog.
    """
    path = Path(path)
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return Catalog.from_dict(data)
    except (OSError, ValueError) as e:
        logger.warning(f"Ignoring unreadable catalog {path}: {e}")
        return None
