"""
Unit tests for Trello → Vectors vocabulary mapping
"""

import json

import pytest

from trello2vectors import (
    infer_card_priority,
    infer_priority_from_color,
    list_to_status,
    load_status_mapping,
    tag_color_for_label,
)
from trello2vectors.mapping import DEFAULT_TAG_COLOR, TRELLO_COLOR_MAP


class TestPriorityFromColor:
    def test_red_is_high(self):
        assert infer_priority_from_color("red") == "high"

    def test_orange_is_high(self):
        assert infer_priority_from_color("orange") == "high"

    def test_yellow_is_medium(self):
        assert infer_priority_from_color("yellow") == "medium"

    @pytest.mark.parametrize("color", ["green", "blue", "purple", "black", "sky", None, ""])
    def test_other_colors_imply_nothing(self, color):
        assert infer_priority_from_color(color) is None


class TestCardPriority:
    def test_first_matching_label_wins(self):
        """yellow before red means medium, not high"""
        labels = [{"color": "yellow"}, {"color": "red"}]
        assert infer_card_priority(labels) == "medium"

    def test_non_matching_labels_are_skipped(self):
        labels = [{"color": "blue"}, {"color": None}, {"color": "orange"}]
        assert infer_card_priority(labels) == "high"

    def test_no_labels_is_none(self):
        assert infer_card_priority([]) == "none"
        assert infer_card_priority(None) == "none"

    def test_only_neutral_colors_is_none(self):
        assert infer_card_priority([{"color": "green"}, {"color": "purple"}]) == "none"


class TestTagColor:
    def test_known_colors_use_palette(self):
        assert tag_color_for_label("red") == "#EF4444"
        assert tag_color_for_label("sky") == "#0EA5E9"
        assert tag_color_for_label("black") == "#374151"

    def test_null_color_is_gray(self):
        assert tag_color_for_label(None) == DEFAULT_TAG_COLOR == "#6B7280"

    def test_unknown_color_is_gray(self):
        assert tag_color_for_label("red_dark") == DEFAULT_TAG_COLOR

    def test_palette_covers_trello_colors(self):
        assert set(TRELLO_COLOR_MAP) == {
            "red", "orange", "yellow", "lime", "green",
            "sky", "blue", "purple", "pink", "black",
        }


class TestListToStatus:
    @pytest.mark.parametrize("name", ["Done", "Completed", "Finished ✔", "Shipped to prod"])
    def test_done_keywords(self, name):
        assert list_to_status(name) == "done"

    @pytest.mark.parametrize("name", ["DOING", "In Progress!!", "Currently Active", "Working on"])
    def test_in_progress_keywords_case_insensitive(self, name):
        assert list_to_status(name) == "in_progress"

    @pytest.mark.parametrize("name", ["Backlog", "To Do", "Ideas", "Unknown"])
    def test_unmatched_is_todo(self, name):
        assert list_to_status(name) == "todo"

    def test_done_takes_precedence_over_in_progress(self):
        assert list_to_status("Done (was in progress)") == "done"

    def test_empty_or_missing_name_is_todo(self):
        assert list_to_status("") == "todo"
        assert list_to_status(None) == "todo"

    def test_custom_keywords(self):
        keywords = {"done": ["released"], "in_progress": ["qa"]}
        assert list_to_status("Released", keywords) == "done"
        assert list_to_status("QA review", keywords) == "in_progress"
        assert list_to_status("Done", keywords) == "todo"


class TestLoadStatusMapping:
    def test_overrides_one_status_keeps_other(self, tmp_path):
        path = tmp_path / "mapping.json"
        path.write_text(json.dumps({"done": ["Released", "live"]}))

        mapping = load_status_mapping(str(path))

        assert mapping["done"] == ["released", "live"]
        assert "doing" in mapping["in_progress"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_status_mapping(str(tmp_path / "nope.json"))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "mapping.json"
        path.write_text("{not json")
        with pytest.raises(ValueError, match="Invalid JSON"):
            load_status_mapping(str(path))

    def test_not_an_object(self, tmp_path):
        path = tmp_path / "mapping.json"
        path.write_text("[]")
        with pytest.raises(ValueError, match="JSON object"):
            load_status_mapping(str(path))

    def test_unknown_status(self, tmp_path):
        path = tmp_path / "mapping.json"
        path.write_text(json.dumps({"blocked": ["waiting"]}))
        with pytest.raises(ValueError, match="Invalid status 'blocked'"):
            load_status_mapping(str(path))

    def test_keywords_must_be_strings(self, tmp_path):
        path = tmp_path / "mapping.json"
        path.write_text(json.dumps({"done": ["ok", 3]}))
        with pytest.raises(ValueError, match="must be strings"):
            load_status_mapping(str(path))

    @pytest.mark.parametrize("keyword", ["", "   "])
    def test_empty_keywords_rejected(self, tmp_path, keyword):
        """An empty keyword would match every list name"""
        path = tmp_path / "mapping.json"
        path.write_text(json.dumps({"done": ["released", keyword]}))
        with pytest.raises(ValueError, match="must not be empty"):
            load_status_mapping(str(path))

    def test_keywords_are_trimmed(self, tmp_path):
        path = tmp_path / "mapping.json"
        path.write_text(json.dumps({"in_progress": ["  QA "]}))

        mapping = load_status_mapping(str(path))

        assert mapping["in_progress"] == ["qa"]
        assert list_to_status("QA review", mapping) == "in_progress"
