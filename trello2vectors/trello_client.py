"""Trello API client for one-shot board imports."""

from __future__ import annotations

import logging
import re
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable, cast

import requests

from trello2vectors.exceptions import (
    TrelloAPIError,
    TrelloAuthenticationError,
    TrelloNotConnectedError,
    TrelloNotFoundError,
    TrelloRateLimitError,
    TrelloServerError,
)

logger = logging.getLogger(__name__)

TRELLO_API_BASE = "https://api.trello.com/1"

CARD_FIELDS = "id,name,desc,due,dueComplete,idList,labels,pos,closed"
CHECKLIST_PARAMS = {
    "fields": "id,name,idCard,pos",
    "checkItems": "all",
    "checkItem_fields": "name,pos,state",
}


class TrelloReader:
    """Read boards, lists, cards, labels and checklists from the Trello API.

    Requests are made without retries: an import is user-triggered, so any
    failure is surfaced immediately and the user decides whether to try again.
    A 401 is reported as an expired authorization so the caller can prompt the
    user to reconnect their Trello account.
    """

    def __init__(
        self,
        api_key: str | None,
        token: str | None,
        verify_ssl: bool = True,
        timeout: float = 30,
    ):
        self.api_key = api_key
        self.token = token
        self.verify_ssl = verify_ssl
        self.timeout = timeout
        self.base_url = TRELLO_API_BASE

    @staticmethod
    def parse_board_url(url: str) -> str:
        """Extract board ID from Trello URL

        Supports formats:
        - https://trello.com/b/Bm0nnz1R/board-name
        - https://trello.com/b/Bm0nnz1R
        - trello.com/b/Bm0nnz1R/board-name

        Raises:
            ValueError: If URL format is invalid or board ID cannot be extracted
        """
        if not url:
            raise ValueError("URL cannot be empty")

        match = re.search(r"trello\.com/b/([a-zA-Z0-9]+)", url)
        if match:
            return match.group(1)

        raise ValueError(f"Could not extract board ID from URL: {url}")

    @property
    def is_connected(self) -> bool:
        return bool(self.api_key and self.token)

    def _request(self, endpoint: str, params: dict | None = None) -> Any:
        """Make one authenticated GET request to the Trello API"""
        if not self.is_connected:
            raise TrelloNotConnectedError(
                "Trello not connected. Please connect your Trello account first."
            )

        url = f"{self.base_url}/{endpoint}"
        query = {"key": self.api_key, "token": self.token}
        if params:
            query.update(params)

        logger.debug("GET %s", endpoint)
        try:
            response = requests.get(
                url,
                params=query,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
                verify=self.verify_ssl,
            )
            response.raise_for_status()
        except requests.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else 0
            reason = e.response.reason if e.response is not None else ""
            response_text = e.response.text if e.response is not None else ""
            raise self._error_for_status(endpoint, status_code, reason, response_text) from e
        except requests.RequestException as e:
            raise TrelloAPIError(
                f"Network error contacting Trello: {e}\n"
                "Check your internet connection and try again."
            ) from e

        try:
            return cast(Any, response.json())
        except ValueError as e:
            raise TrelloAPIError(
                f"Invalid JSON from Trello for {endpoint} (HTTP {response.status_code})",
                status_code=response.status_code,
                response_text=response.text,
            ) from e

    @staticmethod
    def _error_for_status(
        endpoint: str, status_code: int, reason: str, response_text: str
    ) -> TrelloAPIError:
        if status_code == 401:
            return TrelloAuthenticationError(
                "Trello authorization expired. Please reconnect your account.",
                status_code=status_code,
                response_text=response_text,
            )
        if status_code == 403:
            return TrelloAuthenticationError(
                f"Access forbidden to resource: {endpoint}\n"
                "Your Trello token may not have permission to access this board.",
                status_code=status_code,
                response_text=response_text,
            )
        if status_code == 404:
            return TrelloNotFoundError(
                f"Resource not found: {endpoint}\n"
                "Check that the board ID is correct and the board exists.",
                status_code=status_code,
                response_text=response_text,
            )
        if status_code == 429:
            return TrelloRateLimitError(
                "Trello rate limit exceeded. Wait a few seconds and try again.",
                status_code=status_code,
                response_text=response_text,
            )
        if status_code in {500, 502, 503, 504}:
            return TrelloServerError(
                f"Trello server error (HTTP {status_code}). Try again later.",
                status_code=status_code,
                response_text=response_text,
            )
        return TrelloAPIError(
            f"Trello API error: {status_code} {reason}".rstrip(),
            status_code=status_code,
            response_text=response_text,
        )

    def validate_credentials(self) -> bool:
        """Return True if the configured token is accepted by Trello.

        Authentication failures return False; other errors propagate.
        """
        try:
            self.get_member()
        except (TrelloNotConnectedError, TrelloAuthenticationError):
            return False
        return True

    def get_member(self) -> dict:
        """Get the authenticated user's Trello profile"""
        return cast(
            dict,
            self._request("members/me", {"fields": "id,fullName,username,email,avatarUrl"}),
        )

    def list_boards(self) -> list[dict]:
        """List the authenticated user's open boards"""
        return cast(
            list[dict],
            self._request(
                "members/me/boards",
                {"fields": "id,name,desc,dateLastActivity,prefs,closed", "filter": "open"},
            ),
        )

    def get_board(self, board_id: str) -> dict:
        """Get board info"""
        return cast(dict, self._request(f"boards/{board_id}", {"fields": "id,name,desc,prefs"}))

    def get_lists(self, board_id: str) -> list[dict]:
        """Get all open lists on the board"""
        return cast(
            list[dict],
            self._request(
                f"boards/{board_id}/lists", {"fields": "id,name,pos,closed", "filter": "open"}
            ),
        )

    def get_cards(self, board_id: str) -> list[dict]:
        """Get all open cards on the board (labels included)"""
        return cast(
            list[dict],
            self._request(f"boards/{board_id}/cards", {"fields": CARD_FIELDS, "filter": "open"}),
        )

    def get_labels(self, board_id: str) -> list[dict]:
        """Get all labels defined on the board"""
        return cast(
            list[dict], self._request(f"boards/{board_id}/labels", {"fields": "id,name,color"})
        )

    def get_card_checklists(self, card_id: str) -> list[dict]:
        """Get checklists for a single card"""
        return cast(
            list[dict],
            self._request(
                f"cards/{card_id}/checklists",
                {"fields": "id,name,pos", "checkItems": "all", "checkItem_fields": "name,pos,state"},
            ),
        )

    def get_board_checklists(self, board_id: str) -> list[dict]:
        """Get every checklist on the board in one request"""
        return cast(
            list[dict], self._request(f"boards/{board_id}/checklists", dict(CHECKLIST_PARAMS))
        )

    def _fetch_parallel(
        self, calls: dict[str, Callable[[], Any]], max_workers: int
    ) -> dict[str, Any]:
        """Run independent reads concurrently and wait for all of them.

        The first failure to complete is re-raised; remaining reads that have
        not started yet are cancelled.
        """
        results: dict[str, Any] = {}
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = {executor.submit(fn): name for name, fn in calls.items()}
            try:
                for future in as_completed(futures):
                    results[futures[future]] = future.result()
            except Exception:
                for future in futures:
                    future.cancel()
                raise
        return results

    def fetch_board_for_import(self, board_id: str, max_workers: int = 5) -> dict:
        """Fetch everything needed to import a board in the minimum number of requests.

        Board metadata, lists, cards, checklists and labels are requested in
        parallel. Cards are enriched with ``listName`` (the owning list's name,
        or "Unknown") and ``checklists`` (the card's checklists, possibly empty).

        Returns:
            dict with keys ``board``, ``lists``, ``cards``, ``labels`` and
            ``summary`` (cardCount, listCount, labelCount, checklistCount,
            checklistItemCount)
        """
        data = self._fetch_parallel(
            {
                "board": lambda: self.get_board(board_id),
                "lists": lambda: self.get_lists(board_id),
                "cards": lambda: self.get_cards(board_id),
                "checklists": lambda: self.get_board_checklists(board_id),
                "labels": lambda: self.get_labels(board_id),
            },
            max_workers=max_workers,
        )
        lists = data["lists"] or []
        cards = data["cards"] or []
        checklists = data["checklists"] or []
        labels = data["labels"] or []

        lists_by_id = {lst["id"]: lst for lst in lists}

        checklists_by_card: dict[str, list[dict]] = {}
        for checklist in checklists:
            checklists_by_card.setdefault(checklist.get("idCard"), []).append(checklist)

        enriched_cards = []
        for card in cards:
            owning_list = lists_by_id.get(card.get("idList"))
            enriched_cards.append(
                {
                    **card,
                    "listName": owning_list["name"] if owning_list else "Unknown",
                    "checklists": checklists_by_card.get(card["id"], []),
                }
            )

        summary = {
            "cardCount": len(cards),
            "listCount": len(lists),
            "labelCount": len(labels),
            "checklistCount": len(checklists),
            "checklistItemCount": count_check_items(checklists),
        }
        logger.debug("Fetched board %s: %s", board_id, summary)

        return {
            "board": data["board"],
            "lists": lists,
            "cards": enriched_cards,
            "labels": labels,
            "summary": summary,
        }

    def get_board_summary(self, board_id: str, max_workers: int = 3) -> dict:
        """Lightweight preview of a board: counts only, no enrichment.

        ``labelCount`` counts distinct labels actually applied to cards, not
        the labels defined on the board.
        """
        data = self._fetch_parallel(
            {
                "board": lambda: self.get_board(board_id),
                "cards": lambda: self.get_cards(board_id),
                "checklists": lambda: self.get_board_checklists(board_id),
            },
            max_workers=max_workers,
        )
        cards = data["cards"] or []

        applied_labels = set()
        for card in cards:
            for label in card.get("labels") or []:
                applied_labels.add(label["id"])

        return {
            "boardName": data["board"]["name"],
            "cardCount": len(cards),
            "labelCount": len(applied_labels),
            "checklistItemCount": count_check_items(data["checklists"] or []),
        }


def count_check_items(checklists: list[dict]) -> int:
    """Total number of check items across checklists"""
    return sum(len(checklist.get("checkItems") or []) for checklist in checklists)
