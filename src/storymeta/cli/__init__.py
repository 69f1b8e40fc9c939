"""storymeta Command Line Interface.

Provides CLI commands for:
- Extracting the story catalog (dev or build mode)
- Detecting a running Storybook dev server
- Querying the extracted catalog

Usage:
    python -m storymeta.cli --help
    python -m storymeta.cli extract --mode build --enhance

Or via the installed entry point:
    storymeta --help
"""

from .main import main

__all__ = ["main"]
