"""Import Trello cards as Vectors tasks."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from trello2vectors.context import ImportContext
from trello2vectors.exceptions import StoreError
from trello2vectors.mapping import infer_card_priority, list_to_status
from trello2vectors.tags import TagMapping

logger = logging.getLogger(__name__)


@dataclass
class TaskImportResult:
    imported: int = 0
    errors: list[dict] = field(default_factory=list)
    card_to_task: dict[str, str] = field(default_factory=dict)  # Trello card ID -> task ID


def card_to_task_row(
    card: dict,
    index: int,
    board_id: str,
    tag_mapping: TagMapping,
    user_id: str,
    status_keywords: dict[str, list[str]] | None = None,
) -> dict:
    """Build the ``tasks`` row for one enriched card.

    ``sort_order`` is the card's position in the import order, so cards that
    fail to import leave gaps instead of shifting later cards up.
    """
    tag_ids = tag_mapping.resolve_all(card.get("labels"))
    return {
        "title": card["name"],
        "description": card.get("desc") or None,
        "user_id": user_id,
        "completed": bool(card.get("dueComplete")),
        "assigned_to": "me",
        "due_date": card.get("due") or None,
        "priority": infer_card_priority(card.get("labels")),
        "status": list_to_status(card.get("listName"), status_keywords),
        "tags": tag_ids or None,
        "board_id": board_id,
        "recurring": "none",
        "sort_order": index,
    }


def import_cards_as_tasks(
    cards: list[dict],
    board_id: str,
    tag_mapping: TagMapping,
    ctx: ImportContext,
    on_progress: Callable[[float], None] | None = None,
    status_keywords: dict[str, list[str]] | None = None,
) -> TaskImportResult:
    """Create one task per card, in the order given.

    Tasks are inserted one at a time so that a card the store rejects only
    costs that card: the failure is recorded as ``{"card": name, "message": ...}``
    and the loop moves on. Progress is reported as a 0..1 fraction after
    every card, whether or not it imported.

    If the import is cancelled, the loop stops before the next card.
    """
    result = TaskImportResult()
    total = len(cards)

    for i, card in enumerate(cards):
        if ctx.cancelled:
            logger.info("Import cancelled after %d of %d cards", i, total)
            break

        name = card.get("name") or ""
        try:
            row = card_to_task_row(
                card, i, board_id, tag_mapping, ctx.user_id, status_keywords
            )
            rows = ctx.store.insert("tasks", [row])
            if not rows:
                raise StoreError("store returned no row", table="tasks")
        except (StoreError, KeyError, ValueError) as e:
            result.errors.append({"card": name, "message": str(e)})
            logger.warning("Failed to import card '%s': %s", name, e)
        else:
            result.card_to_task[card["id"]] = rows[0]["id"]
            result.imported += 1
            logger.debug("Imported card '%s' as task %s", name, rows[0]["id"])

        if on_progress:
            on_progress((i + 1) / total)

    return result
