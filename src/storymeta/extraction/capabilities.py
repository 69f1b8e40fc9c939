"""
Optional dependency flags.

Source parsing needs tree-sitter with the TypeScript grammars, and deep
introspection needs Playwright. Whether they are installed is resolved once
and cached; strategies consult these flags instead of attempting an import
and catching the failure.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import cache
from importlib.util import find_spec

logger = logging.getLogger(__name__)

SOURCE_PARSER_PACKAGES = ("tree_sitter", "tree_sitter_typescript")
BROWSER_PACKAGES = ("playwright",)


@dataclass(frozen=True)
class Capabilities:
    """Which optional extraction features are available."""

    source_parser: bool
    browser: bool

    def describe(self) -> dict[str, bool]:
        return {"source_parser": self.source_parser, "browser": self.browser}


def _installed(packages: tuple[str, ...]) -> bool:
    return all(find_spec(package) is not None for package in packages)


@cache
def detect_capabilities() -> Capabilities:
    """Resolve capability flags for the current environment (cached)."""
    capabilities = Capabilities(
        source_parser=_installed(SOURCE_PARSER_PACKAGES),
        browser=_installed(BROWSER_PACKAGES),
    )
    logger.debug(f"Detected capabilities: {capabilities.describe()}")
    return capabilities
