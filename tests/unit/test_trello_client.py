"""
Unit tests for TrelloReader (Trello API client)

Tests cover:
- Board URL parsing
- Credential precondition and HTTP error mapping
- No-retry policy
- Parallel board fetch with card enrichment and summary counts
- Lightweight board summary
"""

import pytest
import requests
import responses

from trello2vectors import (
    TrelloAPIError,
    TrelloAuthenticationError,
    TrelloNotConnectedError,
    TrelloNotFoundError,
    TrelloRateLimitError,
    TrelloReader,
    TrelloServerError,
)

API = "https://api.trello.com/1"
BOARD_ID = "board_abc123"


def add_board_endpoints(fixture, board_id=BOARD_ID):
    responses.add(responses.GET, f"{API}/boards/{board_id}", json=fixture["board"])
    responses.add(responses.GET, f"{API}/boards/{board_id}/lists", json=fixture["lists"])
    responses.add(responses.GET, f"{API}/boards/{board_id}/cards", json=fixture["cards"])
    responses.add(
        responses.GET, f"{API}/boards/{board_id}/checklists", json=fixture["checklists"]
    )
    responses.add(responses.GET, f"{API}/boards/{board_id}/labels", json=fixture["labels"])


class TestBoardURLParsing:
    """Test parse_board_url() static method"""

    def test_parse_full_https_url(self):
        assert TrelloReader.parse_board_url("https://trello.com/b/Bm0nnz1R/my-board") == "Bm0nnz1R"

    def test_parse_url_without_protocol(self):
        assert TrelloReader.parse_board_url("trello.com/b/XYZ789AB/board") == "XYZ789AB"

    def test_parse_url_with_query_params(self):
        url = "https://trello.com/b/TEST123A/board?menu=filter"
        assert TrelloReader.parse_board_url(url) == "TEST123A"

    def test_parse_empty_url_raises_error(self):
        with pytest.raises(ValueError, match="URL cannot be empty"):
            TrelloReader.parse_board_url("")

    def test_parse_card_url_raises_error(self):
        """A card URL is not a board URL"""
        with pytest.raises(ValueError, match="Could not extract board ID"):
            TrelloReader.parse_board_url("https://trello.com/c/ABC12345/card-name")


class TestCredentials:
    """Missing credentials fail before any request is made"""

    @responses.activate
    def test_missing_token_raises_not_connected(self):
        reader = TrelloReader(api_key="key", token=None)

        with pytest.raises(TrelloNotConnectedError, match="Trello not connected"):
            reader.get_board(BOARD_ID)
        assert len(responses.calls) == 0

    @responses.activate
    def test_missing_api_key_raises_not_connected(self):
        reader = TrelloReader(api_key="", token="token")

        with pytest.raises(TrelloNotConnectedError):
            reader.fetch_board_for_import(BOARD_ID)
        assert len(responses.calls) == 0

    @responses.activate
    def test_auth_params_sent_with_every_request(self):
        responses.add(responses.GET, f"{API}/boards/{BOARD_ID}", json={"id": BOARD_ID})
        reader = TrelloReader(api_key="my-key", token="my-token")

        reader.get_board(BOARD_ID)

        request = responses.calls[0].request
        assert "key=my-key" in request.url
        assert "token=my-token" in request.url
        assert request.headers["Accept"] == "application/json"

    @responses.activate
    def test_validate_credentials_true_on_success(self):
        responses.add(responses.GET, f"{API}/members/me", json={"id": "m1", "username": "sam"})
        assert TrelloReader("key", "token").validate_credentials() is True

    @responses.activate
    def test_validate_credentials_false_on_401(self):
        responses.add(responses.GET, f"{API}/members/me", status=401, body="invalid token")
        assert TrelloReader("key", "token").validate_credentials() is False

    def test_validate_credentials_false_without_token(self):
        assert TrelloReader("key", None).validate_credentials() is False


class TestErrorMapping:
    """HTTP failures become typed exceptions, without retries"""

    @responses.activate
    def test_401_reports_expired_authorization(self):
        responses.add(responses.GET, f"{API}/boards/{BOARD_ID}", status=401, body="unauthorized")
        reader = TrelloReader("key", "token")

        with pytest.raises(TrelloAuthenticationError) as exc_info:
            reader.get_board(BOARD_ID)

        assert exc_info.value.status_code == 401
        assert "authorization expired" in str(exc_info.value)
        assert "reconnect" in str(exc_info.value)

    @responses.activate
    def test_403_raises_authentication_error(self):
        responses.add(responses.GET, f"{API}/boards/{BOARD_ID}", status=403)

        with pytest.raises(TrelloAuthenticationError) as exc_info:
            TrelloReader("key", "token").get_board(BOARD_ID)
        assert exc_info.value.status_code == 403

    @responses.activate
    def test_404_raises_not_found(self):
        responses.add(responses.GET, f"{API}/boards/{BOARD_ID}", status=404)

        with pytest.raises(TrelloNotFoundError):
            TrelloReader("key", "token").get_board(BOARD_ID)

    @responses.activate
    def test_429_raises_rate_limit_error_without_retry(self):
        responses.add(responses.GET, f"{API}/boards/{BOARD_ID}", status=429)

        with pytest.raises(TrelloRateLimitError):
            TrelloReader("key", "token").get_board(BOARD_ID)
        assert len(responses.calls) == 1

    @responses.activate
    def test_500_raises_server_error_without_retry(self):
        responses.add(responses.GET, f"{API}/boards/{BOARD_ID}", status=503)

        with pytest.raises(TrelloServerError) as exc_info:
            TrelloReader("key", "token").get_board(BOARD_ID)
        assert exc_info.value.status_code == 503
        assert len(responses.calls) == 1

    @responses.activate
    def test_other_status_raises_base_error(self):
        responses.add(responses.GET, f"{API}/boards/{BOARD_ID}", status=418, body="teapot")

        with pytest.raises(TrelloAPIError) as exc_info:
            TrelloReader("key", "token").get_board(BOARD_ID)

        error = exc_info.value
        assert type(error) is TrelloAPIError
        assert "Trello API error: 418" in str(error)
        assert error.response_text == "teapot"

    @responses.activate
    def test_non_json_success_body_raises_typed_error(self):
        """A proxy or captive portal answering 200 with HTML"""
        responses.add(
            responses.GET,
            f"{API}/boards/{BOARD_ID}",
            body="<html>proxy</html>",
            status=200,
            content_type="text/html",
        )

        with pytest.raises(TrelloAPIError, match="Invalid JSON from Trello") as exc_info:
            TrelloReader("key", "token").get_board(BOARD_ID)

        assert exc_info.value.status_code == 200
        assert exc_info.value.response_text == "<html>proxy</html>"

    @responses.activate
    def test_network_error_wrapped(self):
        responses.add(
            responses.GET,
            f"{API}/boards/{BOARD_ID}",
            body=requests.ConnectionError("connection refused"),
        )

        with pytest.raises(TrelloAPIError, match="Network error"):
            TrelloReader("key", "token").get_board(BOARD_ID)
        assert len(responses.calls) == 1


class TestFetchBoardForImport:
    """Test the parallel fetch and enrichment"""

    @responses.activate
    def test_fetches_all_five_resources(self, simple_board_fixture):
        add_board_endpoints(simple_board_fixture)

        TrelloReader("key", "token").fetch_board_for_import(BOARD_ID)

        paths = sorted(call.request.url.split("?")[0] for call in responses.calls)
        assert paths == sorted(
            [
                f"{API}/boards/{BOARD_ID}",
                f"{API}/boards/{BOARD_ID}/cards",
                f"{API}/boards/{BOARD_ID}/checklists",
                f"{API}/boards/{BOARD_ID}/labels",
                f"{API}/boards/{BOARD_ID}/lists",
            ]
        )

    @responses.activate
    def test_cards_enriched_with_list_name_and_checklists(self, simple_board_fixture):
        add_board_endpoints(simple_board_fixture)

        data = TrelloReader("key", "token").fetch_board_for_import(BOARD_ID)

        cards = {card["id"]: card for card in data["cards"]}
        assert cards["card_readme"]["listName"] == "To Do"
        assert cards["card_ci"]["listName"] == "Doing"
        assert cards["card_ship"]["listName"] == "Done"

        assert [cl["id"] for cl in cards["card_readme"]["checklists"]] == ["checklist_sections"]
        assert [cl["id"] for cl in cards["card_ci"]["checklists"]] == ["checklist_pipeline"]
        assert cards["card_tests"]["checklists"] == []

    @responses.activate
    def test_card_order_preserved(self, simple_board_fixture):
        add_board_endpoints(simple_board_fixture)

        data = TrelloReader("key", "token").fetch_board_for_import(BOARD_ID)

        assert [c["id"] for c in data["cards"]] == [c["id"] for c in simple_board_fixture["cards"]]

    @responses.activate
    def test_summary_counts(self, simple_board_fixture):
        add_board_endpoints(simple_board_fixture)

        data = TrelloReader("key", "token").fetch_board_for_import(BOARD_ID)

        assert data["summary"] == {
            "cardCount": 4,
            "listCount": 3,
            "labelCount": 4,
            "checklistCount": 2,
            "checklistItemCount": 5,
        }
        assert data["board"]["name"] == "Launch Plan"
        assert len(data["labels"]) == 4

    @responses.activate
    def test_card_in_unknown_list(self, simple_board_fixture):
        simple_board_fixture["cards"][0]["idList"] = "list_archived"
        add_board_endpoints(simple_board_fixture)

        data = TrelloReader("key", "token").fetch_board_for_import(BOARD_ID)

        assert data["cards"][0]["listName"] == "Unknown"

    @responses.activate
    def test_checklist_without_items_counts_zero(self, simple_board_fixture):
        del simple_board_fixture["checklists"][0]["checkItems"]
        add_board_endpoints(simple_board_fixture)

        data = TrelloReader("key", "token").fetch_board_for_import(BOARD_ID)

        assert data["summary"]["checklistItemCount"] == 3

    @responses.activate
    def test_any_failed_request_fails_the_fetch(self, simple_board_fixture):
        add_board_endpoints(simple_board_fixture)
        responses.replace(responses.GET, f"{API}/boards/{BOARD_ID}/labels", status=401)

        with pytest.raises(TrelloAuthenticationError):
            TrelloReader("key", "token").fetch_board_for_import(BOARD_ID)


class TestBoardSummary:
    """Test the lightweight preview fetch"""

    @responses.activate
    def test_counts_distinct_applied_labels(self, simple_board_fixture):
        simple_board_fixture["cards"][2]["labels"] = [
            {"id": "label_urgent", "name": "Urgent", "color": "red"}
        ]
        simple_board_fixture["cards"][3]["labels"] = []
        responses.add(responses.GET, f"{API}/boards/{BOARD_ID}", json=simple_board_fixture["board"])
        responses.add(
            responses.GET, f"{API}/boards/{BOARD_ID}/cards", json=simple_board_fixture["cards"]
        )
        responses.add(
            responses.GET,
            f"{API}/boards/{BOARD_ID}/checklists",
            json=simple_board_fixture["checklists"],
        )

        summary = TrelloReader("key", "token").get_board_summary(BOARD_ID)

        # urgent is applied twice; the board defines 4 labels but only 3 are in use
        assert summary == {
            "boardName": "Launch Plan",
            "cardCount": 4,
            "labelCount": 3,
            "checklistItemCount": 5,
        }

    @responses.activate
    def test_summary_does_not_fetch_lists_or_labels(self, simple_board_fixture):
        responses.add(responses.GET, f"{API}/boards/{BOARD_ID}", json=simple_board_fixture["board"])
        responses.add(responses.GET, f"{API}/boards/{BOARD_ID}/cards", json=[])
        responses.add(responses.GET, f"{API}/boards/{BOARD_ID}/checklists", json=[])

        summary = TrelloReader("key", "token").get_board_summary(BOARD_ID)

        assert len(responses.calls) == 3
        assert summary["labelCount"] == 0
        assert summary["cardCount"] == 0


class TestListBoards:
    @responses.activate
    def test_list_boards_requests_open_boards(self):
        responses.add(
            responses.GET,
            f"{API}/members/me/boards",
            json=[{"id": "b1", "name": "Home"}, {"id": "b2", "name": "Work"}],
        )

        boards = TrelloReader("key", "token").list_boards()

        assert [b["name"] for b in boards] == ["Home", "Work"]
        assert "filter=open" in responses.calls[0].request.url


class TestCardChecklists:
    @responses.activate
    def test_requests_all_check_items(self):
        responses.add(
            responses.GET,
            f"{API}/cards/card_ci/checklists",
            json=[{"id": "cl1", "name": "Pipeline", "pos": 1, "checkItems": []}],
        )

        checklists = TrelloReader("key", "token").get_card_checklists("card_ci")

        assert checklists[0]["name"] == "Pipeline"
        url = responses.calls[0].request.url
        assert "checkItems=all" in url
        assert "checkItem_fields=name%2Cpos%2Cstate" in url
