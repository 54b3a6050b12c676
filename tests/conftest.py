"""
Shared pytest fixtures for trello2vectors tests
"""
import json
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add parent directory to path to import trello2vectors module
sys.path.insert(0, str(Path(__file__).parent.parent))

from trello2vectors import CancelToken, ImportContext, MemoryStore, TrelloReader


@pytest.fixture
def fixtures_dir():
    """Return path to test fixtures directory"""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def simple_board_fixture(fixtures_dir):
    """Load simple board test fixture (raw Trello API responses)"""
    with open(fixtures_dir / "simple_board.json") as f:
        return json.load(f)


def enrich_board(raw):
    """Shape raw fixture data the way TrelloReader.fetch_board_for_import returns it"""
    lists_by_id = {lst["id"]: lst for lst in raw["lists"]}
    cards = []
    for card in raw["cards"]:
        cards.append(
            {
                **card,
                "listName": lists_by_id[card["idList"]]["name"],
                "checklists": [cl for cl in raw["checklists"] if cl["idCard"] == card["id"]],
            }
        )
    return {
        "board": raw["board"],
        "lists": raw["lists"],
        "cards": cards,
        "labels": raw["labels"],
        "summary": {
            "cardCount": len(raw["cards"]),
            "listCount": len(raw["lists"]),
            "labelCount": len(raw["labels"]),
            "checklistCount": len(raw["checklists"]),
            "checklistItemCount": sum(len(cl["checkItems"]) for cl in raw["checklists"]),
        },
    }


@pytest.fixture
def board_data(simple_board_fixture):
    """Enriched board graph for the simple board"""
    return enrich_board(simple_board_fixture)


@pytest.fixture
def mock_trello(board_data):
    """TrelloReader double that returns the simple board"""
    trello = MagicMock(spec=TrelloReader)
    trello.fetch_board_for_import.return_value = board_data
    return trello


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def ctx(memory_store):
    return ImportContext(user_id="user-1", store=memory_store, cancel=CancelToken())


def make_card(card_id, name, labels=None, list_name="To Do", checklists=None, **extra):
    """Minimal enriched card for stage tests"""
    card = {
        "id": card_id,
        "name": name,
        "desc": "",
        "due": None,
        "dueComplete": False,
        "idList": "list1",
        "labels": labels or [],
        "pos": 0,
        "listName": list_name,
        "checklists": checklists or [],
    }
    card.update(extra)
    return card


def make_checklist(card_id, item_count, start_pos=1):
    return {
        "id": f"cl-{card_id}",
        "name": "Checklist",
        "idCard": card_id,
        "pos": 1,
        "checkItems": [
            {"name": f"Item {i}", "pos": start_pos + i, "state": "incomplete"}
            for i in range(item_count)
        ],
    }
