"""
Extraction context.

Everything a strategy needs to decide whether it applies and to run:
project paths, the dev server URL, capability flags, timeouts, and the
live story index shared between the live strategies of one run.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..config import StorymetaSettings
from ..exceptions import ConfigError, StoryIndexError
from ..models import StoryIndex
from .capabilities import Capabilities, detect_capabilities
from .live import StoryIndexClient, StoryStoreIntrospector

logger = logging.getLogger(__name__)

IntrospectorFactory = Callable[["ExtractionContext"], Any]


def default_introspector(context: ExtractionContext) -> StoryStoreIntrospector:
    return StoryStoreIntrospector(
        base_url=context.server_url or "",
        story_timeout=context.story_timeout,
        page_timeout=context.page_timeout,
        headless=context.headless,
    )


@dataclass
class ExtractionContext:
    """Inputs for one extraction run."""

    project_root: Path
    source_dir: Path | None = None
    output_dir: Path | None = None
    server_url: str | None = None
    capabilities: Capabilities = field(default_factory=detect_capabilities)
    page_timeout: float = 30.0
    story_timeout: float = 5.0
    index_timeout: float = 10.0
    headless: bool = True
    require_source_dir: bool = False
    introspector_factory: IntrospectorFactory = default_introspector

    _live_index: StoryIndex | None = field(default=None, init=False, repr=False)
    _live_index_error: StoryIndexError | None = field(default=None, init=False, repr=False)
    _live_index_fetched: bool = field(default=False, init=False, repr=False)
    _live_index_lock: asyncio.Lock | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self.project_root = Path(self.project_root)
        if self.source_dir is not None:
            self.source_dir = Path(self.source_dir)
        if self.output_dir is not None:
            self.output_dir = Path(self.output_dir)

    def validate(self) -> None:
        """
        Check the paths the run depends on.

        Raises:
            ConfigError: If the project root is missing, or the source
                directory was explicitly required and is missing.
        """
        if not self.project_root.is_dir():
            raise ConfigError(
                f"Project root does not exist: {self.project_root}",
                context={"project_root": str(self.project_root)},
            )
        if self.require_source_dir and (self.source_dir is None or not self.source_dir.is_dir()):
            raise ConfigError(
                f"Source directory does not exist: {self.source_dir}",
                context={"source_dir": str(self.source_dir)},
            )

    async def live_index(self) -> StoryIndex | None:
        """
        The dev server's story index, fetched at most once per context.

        Returns:
            The index, or None when no server is configured or it cannot be
            fetched.
        """
        if self.server_url is None:
            return None
        if self._live_index_lock is None:
            self._live_index_lock = asyncio.Lock()

        async with self._live_index_lock:
            if not self._live_index_fetched:
                self._live_index_fetched = True
                client = StoryIndexClient(self.server_url, timeout_seconds=self.index_timeout)
                try:
                    self._live_index = await client.fetch()
                except StoryIndexError as e:
                    self._live_index_error = e
                    logger.warning(f"Live story index unavailable: {e}")
        return self._live_index

    def create_introspector(self) -> Any:
        return self.introspector_factory(self)

    @classmethod
    def from_settings(
        cls,
        settings: StorymetaSettings,
        server_url: str | None = None,
        require_source_dir: bool | None = None,
        use_source: bool = True,
        capabilities: Capabilities | None = None,
    ) -> ExtractionContext:
        """
        Build a context from settings.

        Args:
            settings: Loaded settings
            server_url: Dev server URL override (e.g. from port detection)
            require_source_dir: Fail when the source directory is missing;
                defaults to whether source_dir was set explicitly
            use_source: Disable the source file strategy when False
            capabilities: Capability flags override
        """
        if require_source_dir is None:
            require_source_dir = "source_dir" in settings.model_fields_set
        return cls(
            project_root=settings.resolved_project_root,
            source_dir=settings.resolved_source_dir if use_source else None,
            output_dir=settings.resolved_output_dir,
            server_url=server_url or settings.effective_url,
            capabilities=capabilities or detect_capabilities(),
            page_timeout=settings.timeout,
            story_timeout=settings.story_timeout,
            index_timeout=settings.index_timeout,
            headless=settings.headless,
            require_source_dir=require_source_dir and use_source,
        )
