"""
Static parsing of story source files.

SourceParser walks a file's syntax tree into a ParsedStoryFile; the
normalizer turns the recorded expressions into plain values.
"""

from .normalizer import (
    FUNCTION_SENTINEL,
    JSX_SENTINEL,
    normalize_object,
    normalize_string,
    normalize_value,
)
from .parser import ParsedStoryFile, SourceParser, StoryCandidate, grammar_for

__all__ = [
    "FUNCTION_SENTINEL",
    "JSX_SENTINEL",
    "ParsedStoryFile",
    "SourceParser",
    "StoryCandidate",
    "grammar_for",
    "normalize_object",
    "normalize_string",
    "normalize_value",
]
