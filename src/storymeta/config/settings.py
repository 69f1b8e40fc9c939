"""Configuration management for storymeta using pydantic-settings.

Every option can be set through an environment variable with the
``STORYBOOK_`` prefix (for example ``STORYBOOK_URL`` or ``STORYBOOK_PORT``)
or through a ``.env`` file in the working directory.
"""

from __future__ import annotations

from pathlib import Path
from urllib.parse import urlparse, urlunparse

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_URL = "http://localhost:6006"


class StorymetaSettings(BaseSettings):
    """Settings for Storybook metadata extraction.

    Examples:
        # Extract from a dev server on a non-default port
        STORYBOOK_PORT=6007

        # Point at a monorepo package
        STORYBOOK_PROJECT_ROOT=packages/ui
        STORYBOOK_SOURCE_DIR=lib
    """

    model_config = SettingsConfigDict(
        env_prefix="STORYBOOK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Live dev server
    url: str = Field(DEFAULT_URL, description="Base URL of the Storybook dev server")
    port: int | None = Field(
        None, ge=1, le=65535, description="Port override applied to the dev server URL"
    )

    # Project layout
    project_root: Path = Field(Path("."), description="Root of the Storybook project")
    source_dir: Path = Field(
        Path("src"), description="Directory holding story files, relative to project_root"
    )
    output_dir: Path = Field(
        Path("storybook-static"),
        description="Built Storybook directory, relative to project_root",
    )
    output_file: str = Field("stories.json", description="Catalog file name inside output_dir")

    # Timeouts (seconds)
    timeout: float = Field(30.0, gt=0, description="Page load timeout for the browser")
    story_timeout: float = Field(5.0, gt=0, description="Per-story introspection timeout")
    index_timeout: float = Field(10.0, gt=0, description="Timeout for fetching index.json")
    probe_timeout: float = Field(1.0, gt=0, description="Per-port timeout for auto-detection")
    run_timeout: float | None = Field(
        None, gt=0, description="Upper bound for a single strategy run"
    )

    # Catalog consumption
    cache_ttl: float = Field(5.0, ge=0, description="Seconds a loaded catalog stays fresh")

    # Browser
    headless: bool = Field(True, description="Run the browser without a window")

    # Logging
    debug_mode: bool = Field(False, description="Enable debug logging")
    log_level: str = Field("INFO", description="Log level when debug_mode is off")

    @field_validator("url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def effective_url(self) -> str:
        """Dev server URL with the port override applied."""
        if self.port is None:
            return self.url
        parsed = urlparse(self.url)
        host = parsed.hostname or "localhost"
        return urlunparse(parsed._replace(netloc=f"{host}:{self.port}"))

    @property
    def resolved_project_root(self) -> Path:
        return self.project_root.expanduser().resolve()

    @property
    def resolved_source_dir(self) -> Path:
        return self._under_root(self.source_dir)

    @property
    def resolved_output_dir(self) -> Path:
        return self._under_root(self.output_dir)

    @property
    def output_path(self) -> Path:
        """Location the catalog snapshot is written to."""
        return self.resolved_output_dir / self.output_file

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug_mode else self.log_level

    def _under_root(self, path: Path) -> Path:
        path = path.expanduser()
        if path.is_absolute():
            return path
        return self.resolved_project_root / path


# Singleton instance
_settings: StorymetaSettings | None = None


def get_settings() -> StorymetaSettings:
    """Get the singleton settings instance.

    Returns:
        StorymetaSettings instance
    """
    global _settings

    if _settings is None:
        _settings = StorymetaSettings()

    return _settings


def reset_settings() -> None:
    """Reset the settings singleton (mainly for testing)."""
    global _settings
    _settings = None
