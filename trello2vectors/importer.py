"""Trello board → Vectors import orchestration.

An import runs six stages in order, each owning a fixed window of the 0-100
progress range:

    fetch      10 → 20   read the whole board from Trello (parallel requests)
    board      20 → 30   create the Vectors board
    tags       30 → 40   reconcile labels with the user's tags
    tasks      40 → 80   one task per card
    subtasks   80 → 95   checklist items, in batches
    history    95 → 100  record the import (best effort)

Only fetch and board creation (and loading the user's tags) can abort an
import. Cards, subtask batches and tags that fail individually are reported
in ``ImportResult.errors`` and the import carries on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from trello2vectors.context import ImportContext
from trello2vectors.exceptions import (
    BoardImportError,
    StoreError,
    TrelloAPIError,
    TrelloAuthenticationError,
    TrelloNotConnectedError,
)
from trello2vectors.progress import CancelToken, ProgressCallback, StageProgress
from trello2vectors.store_client import MemoryStore, SupabaseStore
from trello2vectors.subtasks import BATCH_SIZE, import_checklists_as_subtasks
from trello2vectors.tags import reconcile_tags
from trello2vectors.tasks import import_cards_as_tasks
from trello2vectors.trello_client import TrelloReader

logger = logging.getLogger(__name__)

DEFAULT_BOARD_COLOR = "#3B82F6"
DEFAULT_BOARD_ICON = "📋"
IMPORTS_TABLE = "trello_imports"


@dataclass
class ImportResult:
    board_created: dict | None = None
    tasks_imported: int = 0
    subtasks_imported: int = 0
    tags_created: int = 0
    errors: list[dict] = field(default_factory=list)
    cancelled: bool = False

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "boardCreated": self.board_created,
            "tasksImported": self.tasks_imported,
            "subtasksImported": self.subtasks_imported,
            "tagsCreated": self.tags_created,
            "errors": list(self.errors),
        }


def _error_target(error: dict) -> str:
    if "card" in error:
        return error["card"]
    if "tag" in error:
        return f'tag "{error["tag"]}"'
    return f"batch {error.get('batch')}"


class BoardImporter:
    """Import Trello boards for one Vectors user.

    Example:
        >>> importer = BoardImporter(TrelloReader(key, token), store, user_id)
        >>> result = importer.import_board("Bm0nnz1R", on_progress=print)
        >>> if result.errors:
        ...     print(f"{len(result.errors)} items could not be imported")
    """

    def __init__(
        self,
        trello: TrelloReader,
        store: SupabaseStore | MemoryStore,
        user_id: str,
        status_keywords: dict[str, list[str]] | None = None,
    ):
        if not user_id:
            raise ValueError("user_id is required (user not authenticated)")
        self.trello = trello
        self.store = store
        self.user_id = user_id
        self.status_keywords = status_keywords

    def import_board(
        self,
        trello_board_id: str,
        options: dict | None = None,
        on_progress: ProgressCallback | None = None,
        cancel: CancelToken | None = None,
    ) -> ImportResult:
        """Import one Trello board and return a summary.

        Args:
            trello_board_id: ID of the board on Trello
            options: Optional overrides: ``board_name``, ``board_color``,
                     ``batch_size`` (subtask batch size)
            on_progress: Called as ``on_progress(percent, message)``; percent
                         never decreases and ends at exactly 100
            cancel: Token that stops the import before the next card or
                    subtask batch once cancelled

        Raises:
            TrelloAuthenticationError: Trello credential expired or forbidden
            TrelloNotConnectedError: No Trello credential configured
            BoardImportError: The board could not be fetched or created
        """
        options = options or {}
        ctx = ImportContext(
            user_id=self.user_id, store=self.store, cancel=cancel or CancelToken()
        )
        progress = StageProgress(on_progress)
        result = ImportResult()

        logger.info("🔄 Importing Trello board %s...", trello_board_id)

        # Fetch
        progress.begin("fetch", "Fetching Trello board data...")
        trello_data = self._fetch(trello_board_id)
        card_count = trello_data["summary"]["cardCount"]
        progress.finish("fetch", f"Found {card_count} cards to import")
        logger.info(
            "📋 Board: %s (%d lists, %d cards, %d checklist items)",
            trello_data["board"].get("name"),
            trello_data["summary"]["listCount"],
            card_count,
            trello_data["summary"]["checklistItemCount"],
        )

        # Board
        progress.begin("board", "Creating board...")
        board = self._create_board(trello_data["board"], ctx, options)
        result.board_created = board
        progress.finish("board", f'Board "{board["name"]}" created')
        logger.info("✅ Created board %s: %s", board["id"], board["name"])

        # Tags
        progress.begin("tags", "Setting up tags...")
        try:
            tag_mapping = reconcile_tags(trello_data["labels"], ctx)
        except StoreError as e:
            raise BoardImportError(f"Failed to load existing tags: {e}", stage="tags") from e
        result.tags_created = len(tag_mapping.created)
        result.errors.extend(tag_mapping.errors)
        progress.finish("tags", f"{result.tags_created} tags created")
        logger.info(
            "🏷️  Tags: %d created, %d reused",
            len(tag_mapping.created),
            len(tag_mapping.existing),
        )

        # Tasks
        progress.begin("tasks", "Importing tasks...")
        task_results = import_cards_as_tasks(
            trello_data["cards"],
            board["id"],
            tag_mapping,
            ctx,
            on_progress=progress.stage_callback("tasks", "Importing tasks"),
            status_keywords=self.status_keywords,
        )
        result.tasks_imported = task_results.imported
        result.errors.extend(task_results.errors)
        progress.finish("tasks", f"{result.tasks_imported} tasks imported")
        logger.info("✅ Tasks: %d/%d imported", task_results.imported, card_count)

        # Subtasks
        progress.begin("subtasks", "Importing subtasks from checklists...")
        subtask_results = import_checklists_as_subtasks(
            trello_data["cards"],
            task_results.card_to_task,
            ctx,
            on_progress=progress.stage_callback("subtasks", "Importing subtasks"),
            batch_size=int(options.get("batch_size") or BATCH_SIZE),
        )
        result.subtasks_imported = subtask_results.imported
        result.errors.extend(subtask_results.errors)
        progress.finish("subtasks", f"{result.subtasks_imported} subtasks imported")
        logger.info("✅ Subtasks: %d imported", subtask_results.imported)

        result.cancelled = ctx.cancelled
        if result.cancelled:
            logger.warning("⚠️  Import cancelled; keeping what was already written")

        # History
        progress.begin("history", "Saving import record...")
        self._log_import(trello_board_id, trello_data["board"].get("name"), board["id"], result)
        progress.complete("Import cancelled" if result.cancelled else "Import complete!")

        if result.errors:
            logger.warning("⚠️  %d items could not be imported", len(result.errors))
            for error in result.errors[:5]:
                target = _error_target(error)
                logger.info("    - %s: %s", target, error["message"])
            if len(result.errors) > 5:
                logger.info("    ... and %d more", len(result.errors) - 5)

        return result

    def _fetch(self, trello_board_id: str) -> dict:
        try:
            return self.trello.fetch_board_for_import(trello_board_id)
        except (TrelloNotConnectedError, TrelloAuthenticationError):
            # Surfaced as-is so the caller can prompt the user to reconnect
            raise
        except TrelloAPIError as e:
            logger.error("❌ Failed to fetch Trello board %s: %s", trello_board_id, e)
            raise BoardImportError(
                f"Failed to fetch Trello board: {e}", stage="fetch"
            ) from e

    def _create_board(self, trello_board: dict, ctx: ImportContext, options: dict) -> dict:
        prefs = trello_board.get("prefs") or {}
        row = {
            "name": options.get("board_name") or trello_board.get("name") or "Imported board",
            "user_id": ctx.user_id,
            "color": (
                options.get("board_color") or prefs.get("backgroundColor") or DEFAULT_BOARD_COLOR
            ),
            "icon": DEFAULT_BOARD_ICON,
            "sort_order": 0,
        }
        try:
            rows = ctx.store.insert("boards", [row])
        except StoreError as e:
            logger.error("❌ Failed to create board: %s", e)
            raise BoardImportError(f"Failed to create board: {e}", stage="board") from e
        if not rows:
            raise BoardImportError("Failed to create board: store returned no row", stage="board")
        return rows[0]

    def _log_import(
        self,
        trello_board_id: str,
        trello_board_name: str | None,
        vectors_board_id: str,
        result: ImportResult,
    ) -> None:
        """Write the import history record; failures are logged, never raised"""
        try:
            self.store.insert(
                IMPORTS_TABLE,
                [
                    {
                        "user_id": self.user_id,
                        "trello_board_id": trello_board_id,
                        "trello_board_name": trello_board_name,
                        "vectors_board_id": vectors_board_id,
                        "cards_imported": result.tasks_imported,
                    }
                ],
            )
        except StoreError as e:
            logger.warning("Failed to log import: %s", e)

    def has_been_imported(self, trello_board_id: str) -> bool:
        """True if this user has an import record for the board.

        Advisory only: ``import_board`` never refuses a board that was
        imported before.
        """
        rows = self.store.select(
            IMPORTS_TABLE,
            {"user_id": self.user_id, "trello_board_id": trello_board_id},
            limit=1,
            columns="id",
        )
        return bool(rows)

    def get_import_history(self) -> list[dict]:
        """This user's import records, most recent first"""
        return self.store.select(IMPORTS_TABLE, {"user_id": self.user_id}, order="-imported_at")

