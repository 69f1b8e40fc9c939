"""
Story index access.

Reads the flat Storybook story index, either over HTTP from a running dev
server (``/index.json``, falling back to the legacy ``/stories.json``) or
from a built Storybook directory on disk.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import httpx
from pydantic import ValidationError

from ...exceptions import StoryIndexError
from ...models import StoryIndex

logger = logging.getLogger(__name__)

INDEX_FILES = ("index.json", "stories.json")


def parse_story_index(data: Any, source: str) -> StoryIndex:
    """Validate a decoded index document.

    Raises:
        StoryIndexError: If the document is not a story index.
    """
    if not isinstance(data, dict):
        raise StoryIndexError("Story index must be a JSON object", source=source)
    if "entries" not in data and "stories" not in data:
        raise StoryIndexError("Story index has neither 'entries' nor 'stories'", source=source)
    if "stories" in data and "entries" not in data and "totalStories" in data:
        # our own catalog snapshot, not a Storybook index
        raise StoryIndexError("Document is a catalog snapshot, not a story index", source=source)
    try:
        return StoryIndex.model_validate(data)
    except ValidationError as e:
        raise StoryIndexError(f"Invalid story index: {e.error_count()} errors", source=source) from e


def find_built_index(output_dir: Path) -> Path | None:
    """First story index file present in a built Storybook directory."""
    for name in INDEX_FILES:
        candidate = output_dir / name
        if candidate.is_file():
            try:
                data = json.loads(candidate.read_text(encoding="utf-8"))
                parse_story_index(data, str(candidate))
            except (OSError, ValueError, StoryIndexError):
                continue
            return candidate
    return None


def read_built_index(path: Path) -> StoryIndex:
    """Read and validate an index file from disk.

    Raises:
        StoryIndexError: If the file cannot be read or is not a story index.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise StoryIndexError(f"Cannot read {path}: {e}", source=str(path)) from e
    except json.JSONDecodeError as e:
        raise StoryIndexError(f"Malformed JSON in {path}: {e}", source=str(path)) from e
    return parse_story_index(data, str(path))


class StoryIndexClient:
    """Fetches the story index from a running Storybook dev server."""

    DEFAULT_TIMEOUT_SECONDS = 10.0

    def __init__(self, base_url: str, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS):
        """
        Initialize the client.

        Args:
            base_url: Dev server base URL (e.g. http://localhost:6006)
            timeout_seconds: HTTP request timeout
        """
        self.base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds

    async def fetch(self) -> StoryIndex:
        """
        Fetch the story index.

        Returns:
            Validated StoryIndex

        Raises:
            StoryIndexError: If no index endpoint answers with a valid document.
        """
        last_error: StoryIndexError | None = None
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            for name in INDEX_FILES:
                url = f"{self.base_url}/{name}"
                try:
                    response = await client.get(url, headers={"Accept": "application/json"})
                except httpx.TimeoutException:
                    last_error = StoryIndexError(f"Timeout fetching {url}", source=url)
                    logger.warning(f"Timeout fetching story index from {url}")
                    continue
                except httpx.RequestError as e:
                    last_error = StoryIndexError(f"Error fetching {url}: {e}", source=url)
                    logger.warning(f"Error fetching story index from {url}: {e}")
                    continue

                if not response.is_success:
                    last_error = StoryIndexError(
                        f"HTTP {response.status_code} from {url}", source=url
                    )
                    logger.info(f"No story index at {url} ({response.status_code})")
                    continue

                try:
                    index = parse_story_index(response.json(), url)
                except (ValueError, StoryIndexError) as e:
                    last_error = (
                        e if isinstance(e, StoryIndexError) else StoryIndexError(str(e), source=url)
                    )
                    logger.warning(f"Invalid story index from {url}: {e}")
                    continue

                logger.info(f"Fetched {len(index)} index entries from {url}")
                return index

        raise last_error or StoryIndexError("Story index unavailable", source=self.base_url)
