"""Logging module for storymeta."""

from .logger import StrategyLogger, get_logger, setup_logging, strategy_logger

__all__ = [
    "setup_logging",
    "get_logger",
    "StrategyLogger",
    "strategy_logger",
]
