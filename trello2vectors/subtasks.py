"""Import Trello checklist items as Vectors subtasks."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from trello2vectors.context import ImportContext
from trello2vectors.exceptions import StoreError

logger = logging.getLogger(__name__)

BATCH_SIZE = 50


@dataclass
class SubtaskImportResult:
    imported: int = 0
    errors: list[dict] = field(default_factory=list)
    batches_attempted: int = 0


def collect_subtasks(cards: list[dict], card_to_task: dict[str, str]) -> list[dict]:
    """Flatten checklist items into ``subtasks`` rows.

    Only cards that became tasks contribute, so a card that failed to import
    never leaves orphaned subtasks behind. ``sort_order`` is the item's Trello
    position.
    """
    rows = []
    for card in cards:
        task_id = card_to_task.get(card.get("id"))
        if not task_id:
            continue

        for checklist in card.get("checklists") or []:
            for item in checklist.get("checkItems") or []:
                rows.append(
                    {
                        "task_id": task_id,
                        "title": item.get("name"),
                        "completed": item.get("state") == "complete",
                        "sort_order": item.get("pos"),
                    }
                )
    return rows


def import_checklists_as_subtasks(
    cards: list[dict],
    card_to_task: dict[str, str],
    ctx: ImportContext,
    on_progress: Callable[[float], None] | None = None,
    batch_size: int = BATCH_SIZE,
) -> SubtaskImportResult:
    """Insert subtasks in batches of ``batch_size``.

    A rejected batch is recorded as ``{"batch": start_index, "message": ...}``
    and only its own rows are lost; later batches are still attempted.
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be at least 1, got: {batch_size}")

    result = SubtaskImportResult()
    rows = collect_subtasks(cards, card_to_task)
    total = len(rows)

    if not rows:
        if on_progress:
            on_progress(1.0)
        return result

    for start in range(0, total, batch_size):
        if ctx.cancelled:
            logger.info("Import cancelled after %d of %d subtasks", start, total)
            break

        batch = rows[start : start + batch_size]
        result.batches_attempted += 1
        try:
            ctx.store.insert("subtasks", batch)
        except StoreError as e:
            result.errors.append({"batch": start, "message": str(e)})
            logger.warning("Failed to import subtask batch at %d: %s", start, e)
        else:
            result.imported += len(batch)

        if on_progress:
            on_progress((start + len(batch)) / total)

    return result
