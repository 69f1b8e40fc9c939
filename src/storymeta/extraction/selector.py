"""
Extraction strategy selection.

Tries strategies in priority order and keeps the first catalog that has at
least one story. Every attempt is recorded so callers can report why a run
came back empty.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

from ..exceptions import ConfigError, ExtractionTimeoutError, with_timeout
from ..logging import strategy_logger
from ..models import Catalog
from .context import ExtractionContext
from .strategies import (
    BasicIndexStrategy,
    BuiltIndexStrategy,
    DeepIntrospectionStrategy,
    ExtractionStrategy,
    SourceFileStrategy,
)

logger = logging.getLogger(__name__)


class ExtractionMode(Enum):
    """Which strategy chain to run."""

    DEV = "dev"  # source files, built index, live server
    BUILD = "build"  # built index only


class AttemptStatus(Enum):
    SKIPPED = "skipped"
    EMPTY = "empty"
    SUCCEEDED = "succeeded"
    TIMED_OUT = "timed_out"
    FAILED = "failed"


@dataclass
class StrategyAttempt:
    """Outcome of trying one strategy."""

    name: str
    status: AttemptStatus
    stories: int = 0
    detail: str = ""


@dataclass
class ExtractionOutcome:
    """Result of a selection run: the chosen catalog (if any) and every attempt."""

    catalog: Catalog | None = None
    attempts: list[StrategyAttempt] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.catalog is not None

    @property
    def strategy(self) -> str | None:
        """Name of the strategy whose catalog was kept."""
        for attempt in self.attempts:
            if attempt.status is AttemptStatus.SUCCEEDED:
                return attempt.name
        return None


def default_strategies(mode: ExtractionMode = ExtractionMode.DEV) -> list[ExtractionStrategy]:
    """The strategy chain for a mode, highest priority first."""
    if mode is ExtractionMode.BUILD:
        return [BuiltIndexStrategy()]
    return [
        SourceFileStrategy(),
        BuiltIndexStrategy(),
        DeepIntrospectionStrategy(),
        BasicIndexStrategy(),
    ]


class StrategySelector:
    """Runs strategies in order until one yields a non-empty catalog."""

    def __init__(
        self,
        strategies: Sequence[ExtractionStrategy] | None = None,
        run_timeout: float | None = None,
    ) -> None:
        """
        Initialize the selector.

        Args:
            strategies: Strategies in priority order (defaults to the dev chain)
            run_timeout: Seconds a single strategy may run before it is abandoned
        """
        self.strategies = list(strategies) if strategies is not None else default_strategies()
        self.run_timeout = run_timeout

    def register_strategy(self, strategy: ExtractionStrategy) -> None:
        """Append a strategy with the lowest priority."""
        logger.info(f"Registering extraction strategy: {strategy.name}")
        self.strategies.append(strategy)

    async def select(self, context: ExtractionContext) -> ExtractionOutcome:
        """
        Run the strategy chain.

        Returns:
            ExtractionOutcome whose catalog is None when no strategy produced
            stories.

        Raises:
            ConfigError: If the context is invalid.
        """
        context.validate()
        outcome = ExtractionOutcome()

        for strategy in self.strategies:
            if not strategy.is_applicable(context):
                strategy_logger.log_strategy_skipped(strategy.name, "not applicable")
                outcome.attempts.append(StrategyAttempt(strategy.name, AttemptStatus.SKIPPED))
                continue

            attempt, catalog = await self._run(strategy, context)
            outcome.attempts.append(attempt)
            if catalog is not None:
                logger.info(f"Using {catalog.total_stories} stories from {strategy.name}")
                outcome.catalog = catalog
                return outcome

        logger.warning("No extraction strategy produced any stories")
        return outcome

    async def _run(
        self, strategy: ExtractionStrategy, context: ExtractionContext
    ) -> tuple[StrategyAttempt, Catalog | None]:
        log_context = strategy_logger.log_strategy_start(strategy.name)

        try:
            catalog = await with_timeout(
                strategy.extract(context), self.run_timeout, strategy.name
            )
        except ExtractionTimeoutError as e:
            strategy_logger.log_strategy_end(log_context, "timed_out", error=e)
            return StrategyAttempt(strategy.name, AttemptStatus.TIMED_OUT, detail=str(e)), None
        except ConfigError:
            raise
        except Exception as e:
            logger.error(f"Strategy {strategy.name} failed: {e}", exc_info=True)
            strategy_logger.log_strategy_end(log_context, "failed", error=e)
            return StrategyAttempt(strategy.name, AttemptStatus.FAILED, detail=str(e)), None

        if catalog is None or catalog.total_stories == 0:
            strategy_logger.log_strategy_end(log_context, "empty")
            return StrategyAttempt(strategy.name, AttemptStatus.EMPTY), None

        strategy_logger.log_strategy_end(log_context, "succeeded", stories=catalog.total_stories)
        attempt = StrategyAttempt(
            strategy.name, AttemptStatus.SUCCEEDED, stories=catalog.total_stories
        )
        return attempt, catalog
