"""Per-import context passed explicitly to every stage."""

from __future__ import annotations

from dataclasses import dataclass, field

from trello2vectors.progress import CancelToken
from trello2vectors.store_client import MemoryStore, SupabaseStore


@dataclass
class ImportContext:
    """Who is importing, and where rows are written.

    Built once per ``import_board`` call; stages never look the user up
    themselves.
    """

    user_id: str
    store: SupabaseStore | MemoryStore
    cancel: CancelToken = field(default_factory=CancelToken)

    @property
    def cancelled(self) -> bool:
        return self.cancel.cancelled
