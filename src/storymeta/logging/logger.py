"""Structured logging configuration for storymeta using structlog.

Library modules log through ``logging.getLogger(__name__)``; this module
wires those records through structlog so that command-line runs get either
readable console output or JSON lines. Output always goes to stderr, which
keeps stdout free for command results.
"""

import logging
import sys
import time
from pathlib import Path
from typing import Any, cast

import structlog


def setup_logging(
    level: str = "INFO",
    log_file: Path | None = None,
    structured: bool = False,
    console: bool = True,
    add_timestamp: bool = True,
    colorize: bool = True,
) -> None:
    """Configure structured logging for storymeta.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file
        structured: Use JSON structured output
        console: Enable console output
        add_timestamp: Add timestamps to logs
        colorize: Colorize console output (only for non-structured)
    """
    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
    ]

    if add_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    processors.extend(
        [
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
        ]
    )

    renderer: Any
    if structured:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=colorize and console)

    structlog.configure(
        processors=[*processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Records from plain stdlib loggers go through the same renderer
    formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=[
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
        ],
    )

    handlers: list[logging.Handler] = []

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        handlers.append(logging.NullHandler())

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        handlers=handlers,
        force=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Structured logger instance
    """
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))


class StrategyLogger:
    """Specialized logger for extraction strategy attempts."""

    def __init__(self, base_logger: structlog.stdlib.BoundLogger | None = None) -> None:
        """Initialize strategy logger.

        Args:
            base_logger: Base logger to use
        """
        self.logger = base_logger or get_logger("storymeta.extraction")

    def log_strategy_start(self, strategy: str, **kwargs: Any) -> dict[str, Any]:
        """Log the start of a strategy attempt.

        Returns:
            Attempt context to pass to log_strategy_end
        """
        context = {"strategy": strategy, "started": time.monotonic(), **kwargs}
        self.logger.info("strategy_started", strategy=strategy, **kwargs)
        return context

    def log_strategy_end(
        self,
        context: dict[str, Any],
        status: str,
        stories: int = 0,
        error: Exception | None = None,
    ) -> float:
        """Log the end of a strategy attempt.

        Returns:
            Attempt duration in seconds
        """
        duration = time.monotonic() - context["started"]
        log_data: dict[str, Any] = {
            "strategy": context["strategy"],
            "status": status,
            "stories": stories,
            "duration": round(duration, 3),
        }
        if error is not None:
            log_data["error"] = str(error)
            log_data["error_type"] = type(error).__name__

        if status == "succeeded":
            self.logger.info("strategy_finished", **log_data)
        else:
            self.logger.warning("strategy_finished", **log_data)
        return duration

    def log_strategy_skipped(self, strategy: str, reason: str) -> None:
        self.logger.info("strategy_skipped", strategy=strategy, reason=reason)


strategy_logger = StrategyLogger()
