"""Import Trello boards into the Vectors shared to-do app."""

from __future__ import annotations

from trello2vectors.cli import main
from trello2vectors.config import ImportConfig
from trello2vectors.context import ImportContext
from trello2vectors.exceptions import (
    BoardImportError,
    StoreError,
    TrelloAPIError,
    TrelloAuthenticationError,
    TrelloNotConnectedError,
    TrelloNotFoundError,
    TrelloRateLimitError,
    TrelloServerError,
)
from trello2vectors.importer import BoardImporter, ImportResult
from trello2vectors.logging_config import setup_logging
from trello2vectors.mapping import (
    infer_card_priority,
    infer_priority_from_color,
    list_to_status,
    load_status_mapping,
    tag_color_for_label,
)
from trello2vectors.progress import CancelToken, StageProgress
from trello2vectors.store_client import MemoryStore, SupabaseStore
from trello2vectors.subtasks import collect_subtasks, import_checklists_as_subtasks
from trello2vectors.tags import TagMapping, reconcile_tags
from trello2vectors.tasks import import_cards_as_tasks
from trello2vectors.trello_client import TrelloReader

__version__ = "0.1.0"

__all__ = [
    # Core classes
    "BoardImporter",
    "ImportResult",
    "ImportContext",
    "ImportConfig",
    "TrelloReader",
    "SupabaseStore",
    "MemoryStore",
    "StageProgress",
    "CancelToken",
    "TagMapping",
    # Stages
    "reconcile_tags",
    "import_cards_as_tasks",
    "collect_subtasks",
    "import_checklists_as_subtasks",
    # Mapping rules
    "infer_priority_from_color",
    "infer_card_priority",
    "tag_color_for_label",
    "list_to_status",
    "load_status_mapping",
    "setup_logging",
    # Exceptions
    "TrelloAPIError",
    "TrelloNotConnectedError",
    "TrelloAuthenticationError",
    "TrelloNotFoundError",
    "TrelloRateLimitError",
    "TrelloServerError",
    "StoreError",
    "BoardImportError",
    # CLI
    "main",
]
