"""
Runtime story introspection with Playwright.

Drives a headless browser to each story's isolated render frame
(``iframe.html?id=<id>&viewMode=story``) and reads args, argTypes,
parameters and tags out of the preview's in-memory story store.
"""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any
from urllib.parse import quote

from ...exceptions import (
    DependencyUnavailableError,
    ExtractionTimeoutError,
    IntrospectionError,
    with_timeout,
)
from ..capabilities import BROWSER_PACKAGES, detect_capabilities

logger = logging.getLogger(__name__)

BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
]
PREVIEW_SELECTOR = "#storybook-preview-iframe"
RENDER_SETTLE_MS = 100

# Runs inside the story frame; returns null when no store is reachable
STORE_SCRIPT = """
(storyId) => {
  try {
    const preview = window.__STORYBOOK_PREVIEW__;
    const store = window.__STORYBOOK_STORY_STORE__ || (preview && preview.storyStore);
    if (!store) return null;

    let story = null;
    if (typeof store.fromId === 'function') {
      story = store.fromId(storyId);
    } else if (store.stories && store.stories[storyId]) {
      story = store.stories[storyId];
    } else if (typeof store.raw === 'function') {
      story = store.raw().find((s) => s.id === storyId) || null;
    }
    if (!story) return null;

    const safe = (value) => {
      try {
        return JSON.parse(JSON.stringify(value, (key, v) => {
          if (typeof v === 'function') return '[Function]';
          if (v && v.$$typeof) return '[JSX Element]';
          return v;
        }));
      } catch (e) {
        return {};
      }
    };

    return {
      args: safe(story.args || story.initialArgs || {}),
      initialArgs: safe(story.initialArgs || {}),
      argTypes: safe(story.argTypes || {}),
      parameters: safe(story.parameters || {}),
      tags: story.tags || [],
    };
  } catch (e) {
    return null;
  }
}
"""


def story_frame_url(base_url: str, story_id: str) -> str:
    return f"{base_url.rstrip('/')}/iframe.html?id={quote(story_id, safe='-_.')}&viewMode=story"


class StoryStoreIntrospector:
    """
    Reads story metadata from a running Storybook through a browser page.

    Use as an async context manager; ``introspect`` may then be called once
    per story. A page can be injected for testing, in which case no browser
    is launched.
    """

    def __init__(
        self,
        base_url: str,
        story_timeout: float = 5.0,
        page_timeout: float = 30.0,
        headless: bool = True,
        page: Any | None = None,
    ) -> None:
        """
        Initialize the introspector.

        Args:
            base_url: Dev server base URL
            story_timeout: Seconds allowed per story
            page_timeout: Seconds allowed for the initial page load
            headless: Run the browser without a window
            page: Pre-built page object (skips launching a browser)
        """
        self.base_url = base_url.rstrip("/")
        self.story_timeout = story_timeout
        self.page_timeout = page_timeout
        self.headless = headless
        self.page = page
        self._owns_page = page is None
        self._playwright: Any | None = None
        self._browser: Any | None = None

    async def __aenter__(self) -> StoryStoreIntrospector:
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def open(self) -> None:
        """
        Launch the browser and load the Storybook manager once.

        Raises:
            DependencyUnavailableError: If Playwright is not installed.
            IntrospectionError: If Storybook does not load.
        """
        if self._owns_page:
            if not detect_capabilities().browser:
                raise DependencyUnavailableError("browser", list(BROWSER_PACKAGES))
            from playwright.async_api import async_playwright

            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self.headless, args=BROWSER_ARGS
            )
            context = await self._browser.new_context(viewport={"width": 1280, "height": 720})
            self.page = await context.new_page()

        try:
            await self.page.goto(
                self.base_url, wait_until="networkidle", timeout=self.page_timeout * 1000
            )
            await self.page.wait_for_selector(PREVIEW_SELECTOR, timeout=10_000)
        except Exception as e:
            logger.error(f"Storybook did not load at {self.base_url}: {e}")
            await self.close()
            raise IntrospectionError(f"Storybook did not load at {self.base_url}") from e

        logger.info(f"Connected to Storybook at {self.base_url}")

    async def close(self) -> None:
        """Release browser resources."""
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    async def introspect(self, story_id: str) -> dict[str, Any]:
        """
        Read one story's runtime metadata.

        Returns:
            Dict with args, initialArgs, argTypes, parameters and tags

        Raises:
            IntrospectionError: If the story times out, fails to load, or the
                store does not know it.
        """
        if self.page is None:
            raise IntrospectionError("Introspector is not open", story_id=story_id)

        try:
            data = await with_timeout(
                self._read_story(story_id), self.story_timeout, f"story {story_id}"
            )
        except ExtractionTimeoutError:
            raise IntrospectionError(
                f"Story {story_id} timed out after {self.story_timeout}s", story_id=story_id
            ) from None
        except IntrospectionError:
            raise
        except Exception as e:
            raise IntrospectionError(f"Story {story_id} failed: {e}", story_id=story_id) from e

        if not isinstance(data, dict):
            raise IntrospectionError(f"Story store has no entry for {story_id}", story_id=story_id)
        return data

    async def _read_story(self, story_id: str) -> Any:
        await self.page.goto(
            story_frame_url(self.base_url, story_id),
            wait_until="domcontentloaded",
            timeout=self.story_timeout * 1000,
        )
        await self.page.wait_for_timeout(RENDER_SETTLE_MS)
        return await self.page.evaluate(STORE_SCRIPT, story_id)
