"""Configuration package.

Usage:
    from storymeta.config import get_settings

    settings = get_settings()
    print(settings.effective_url, settings.output_path)
"""

from .settings import DEFAULT_URL, StorymetaSettings, get_settings, reset_settings

__all__ = [
    "DEFAULT_URL",
    "StorymetaSettings",
    "get_settings",
    "reset_settings",
]
