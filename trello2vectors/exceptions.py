"""Custom exception classes for trello2vectors.

This module defines the exception hierarchy for Trello API errors, errors
raised by the Vectors data store, and fatal import failures.
"""

from __future__ import annotations


class TrelloAPIError(Exception):
    """Base exception for Trello API errors"""

    def __init__(
        self, message: str, status_code: int | None = None, response_text: str | None = None
    ):
        self.status_code = status_code
        self.response_text = response_text
        super().__init__(message)


class TrelloNotConnectedError(TrelloAPIError):
    """Raised when no Trello API key or token is configured"""

    pass


class TrelloAuthenticationError(TrelloAPIError):
    """Raised when the Trello token is expired (401) or lacks access (403)"""

    pass


class TrelloNotFoundError(TrelloAPIError):
    """Raised when a board, card, or resource is not found (404)"""

    pass


class TrelloRateLimitError(TrelloAPIError):
    """Raised when Trello rejects a request for exceeding the rate limit (429)"""

    pass


class TrelloServerError(TrelloAPIError):
    """Raised when Trello's servers return an error (500/502/503/504)"""

    pass


class StoreError(Exception):
    """Raised when a Vectors data store operation fails.

    Covers both HTTP errors returned by the store (constraint violations,
    permission errors) and network failures reaching it.

    Attributes:
        table: The table the operation targeted
        status_code: HTTP status returned by the store (if any)
        response_text: Raw response body (if any)

    Example:
        >>> try:
        ...     store.insert("tasks", [row])
        ... except StoreError as e:
        ...     print(f"{e.table}: {e}")
    """

    def __init__(
        self,
        message: str,
        table: str | None = None,
        status_code: int | None = None,
        response_text: str | None = None,
    ):
        self.table = table
        self.status_code = status_code
        self.response_text = response_text
        super().__init__(message)


class BoardImportError(Exception):
    """Raised when an import stage fails outright and the import is aborted.

    Item-level failures (a single card, a single subtask batch, a single tag)
    never raise this; they are reported in ``ImportResult.errors`` instead.

    Attributes:
        stage: Name of the stage that failed (e.g. "fetch", "board")
    """

    def __init__(self, message: str, stage: str | None = None):
        self.stage = stage
        super().__init__(message)
