"""
Abstract base class for extraction strategies.

A strategy is one way of producing a story catalog: parsing source files,
reading a built index, or asking a running dev server. The selector tries
strategies in priority order and keeps the first non-empty result.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...models import Catalog, Provenance
    from ..context import ExtractionContext


class ExtractionStrategy(ABC):
    """
    Abstract base class for catalog extraction strategies.

    Subclasses set ``name`` and ``provenance`` and implement the two
    methods below. ``extract`` should catch recoverable per-item failures
    itself and return None (or an empty catalog) when the strategy as a
    whole produced nothing.
    """

    name: str = "strategy"
    provenance: Provenance

    @abstractmethod
    def is_applicable(self, context: ExtractionContext) -> bool:
        """
        Whether this strategy can run in the given context.

        Must be cheap and must not touch the network.
        """
        pass

    @abstractmethod
    async def extract(self, context: ExtractionContext) -> Catalog | None:
        """
        Produce a catalog.

        Args:
            context: Paths, server URL, capabilities and timeouts for this run

        Returns:
            A catalog stamped with this strategy's provenance, or None.
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
