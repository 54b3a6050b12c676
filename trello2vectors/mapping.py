"""Trello → Vectors vocabulary mapping.

Pure functions over fixed tables: label colors become tag colors and task
priorities, list names become workflow statuses.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path

# Trello label colors → Vectors tag colors
TRELLO_COLOR_MAP = {
    "red": "#EF4444",
    "orange": "#F97316",
    "yellow": "#F59E0B",
    "lime": "#84CC16",
    "green": "#10B981",
    "sky": "#0EA5E9",
    "blue": "#3B82F6",
    "purple": "#8B5CF6",
    "pink": "#EC4899",
    "black": "#374151",
}
DEFAULT_TAG_COLOR = "#6B7280"

PRIORITY_BY_COLOR = {
    "red": "high",
    "orange": "high",
    "yellow": "medium",
}

PRIORITIES = ("none", "low", "medium", "high")
STATUSES = ("todo", "in_progress", "done")

# Checked in this order; the first status with a matching keyword wins
STATUS_KEYWORDS = {
    "done": ["done", "complete", "finished", "shipped"],
    "in_progress": ["doing", "progress", "working", "active", "current"],
}


def infer_priority_from_color(color: str | None) -> str | None:
    """Priority implied by a single label color, or None if it implies nothing"""
    if not color:
        return None
    return PRIORITY_BY_COLOR.get(color)


def infer_card_priority(labels: Iterable[dict] | None) -> str:
    """Priority for a card: the first label that implies one wins.

    >>> infer_card_priority([{"color": "yellow"}, {"color": "red"}])
    'medium'
    """
    for label in labels or []:
        priority = infer_priority_from_color(label.get("color"))
        if priority:
            return priority
    return "none"


def tag_color_for_label(color: str | None) -> str:
    """Hex color for a tag created from a Trello label"""
    if not color:
        return DEFAULT_TAG_COLOR
    return TRELLO_COLOR_MAP.get(color, DEFAULT_TAG_COLOR)


def list_to_status(
    list_name: str | None, keywords: dict[str, list[str]] | None = None
) -> str:
    """Map a Trello list name to a Vectors status.

    Case-insensitive substring match. Precedence: done > in_progress > todo,
    so "Done (in progress review)" is still done. Lists matching nothing are
    todo.
    """
    if not list_name:
        return "todo"
    keywords = keywords if keywords is not None else STATUS_KEYWORDS
    normalized = list_name.lower()

    for status in ("done", "in_progress"):
        if any(keyword in normalized for keyword in keywords.get(status, [])):
            return status
    return "todo"


def load_status_mapping(json_path: str) -> dict[str, list[str]]:
    """Load custom status keywords from JSON file

    The file holds an object like ``{"done": ["released"], "in_progress": ["qa"]}``.
    Statuses present in the file replace the default keywords for that status;
    the others keep their defaults.

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If JSON is invalid or contains bad data
    """
    if not Path(json_path).exists():
        raise FileNotFoundError(f"Status mapping file not found: {json_path}")

    try:
        with open(json_path) as f:
            custom_mapping = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in status mapping file: {e}") from e

    if not isinstance(custom_mapping, dict):
        raise ValueError("Status mapping must be a JSON object")

    for status, keywords in custom_mapping.items():
        if status not in STATUS_KEYWORDS:
            raise ValueError(
                f"Invalid status '{status}'. Must be one of: {', '.join(STATUS_KEYWORDS)} "
                "(unmatched lists are always todo)"
            )
        if not isinstance(keywords, list):
            raise ValueError(f"Keywords for '{status}' must be a list")
        if not all(isinstance(k, str) for k in keywords):
            raise ValueError(f"All keywords for '{status}' must be strings")
        # An empty keyword is a substring of every list name
        if any(not k.strip() for k in keywords):
            raise ValueError(f"Keywords for '{status}' must not be empty")

    merged = {status: list(words) for status, words in STATUS_KEYWORDS.items()}
    for status, words in custom_mapping.items():
        merged[status] = [word.strip().lower() for word in words]
    return merged
