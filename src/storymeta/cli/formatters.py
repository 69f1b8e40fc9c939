"""Output formatters for CLI commands.

Query commands print JSON to stdout; ``extract`` prints a short
human-readable summary of which strategies ran.
"""

import json
from typing import Any

from ..extraction import AttemptStatus, ExtractionOutcome
from ..models import StoryRecord

_STATUS_MARKS = {
    AttemptStatus.SUCCEEDED: "+",
    AttemptStatus.EMPTY: "-",
    AttemptStatus.SKIPPED: ".",
    AttemptStatus.TIMED_OUT: "!",
    AttemptStatus.FAILED: "x",
}


def format_json(data: Any) -> str:
    """Pretty JSON, keeping non-ASCII text readable."""
    return json.dumps(data, indent=2, ensure_ascii=False)


def stories_payload(stories: list[StoryRecord]) -> list[dict[str, Any]]:
    return [story.to_dict() for story in stories]


def format_outcome(outcome: ExtractionOutcome, output_path: str | None = None) -> str:
    """Summary of an extraction run.

    Args:
        outcome: Result of the run
        output_path: Where the catalog was written, if anywhere

    Returns:
        Multi-line text summary
    """
    lines = ["Strategies:"]
    for attempt in outcome.attempts:
        mark = _STATUS_MARKS.get(attempt.status, "?")
        line = f"  [{mark}] {attempt.name}: {attempt.status.value}"
        if attempt.stories:
            line += f" ({attempt.stories} stories)"
        if attempt.detail:
            line += f" - {attempt.detail}"
        lines.append(line)

    catalog = outcome.catalog
    if catalog is None:
        lines.append("No stories extracted.")
        return "\n".join(lines)

    lines.append(
        f"Extracted {catalog.total_stories} stories from {catalog.extracted_from.value}"
    )
    if output_path:
        lines.append(f"Catalog written to: {output_path}")
    return "\n".join(lines)
