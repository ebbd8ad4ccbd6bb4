"""Tests for EntityTable."""

from dataclasses import dataclass

import pytest

from bizledger.database.codec import decode_row, encode_row
from bizledger.database.tables import EntityTable

HEADERS = ("id", "name", "color")


@dataclass(frozen=True)
class Widget:
    id: str
    name: str
    color: str = ""


def widget_to_row(widget: Widget) -> list[str]:
    return encode_row({"id": widget.id, "name": widget.name, "color": widget.color}, HEADERS)


def row_to_widget(row, headers=HEADERS) -> Widget:
    obj = decode_row(row, headers)
    return Widget(id=obj.get("id", ""), name=obj.get("name", ""), color=obj.get("color", ""))


@pytest.fixture
def widgets(any_store):
    table = EntityTable(any_store, "Widgets", HEADERS, widget_to_row, row_to_widget)
    table.initialize()
    return table


class TestEntityTable:
    """CRUD through EntityTable."""

    def test_initialize_writes_header_once(self, widgets, any_store):
        widgets.initialize()
        assert any_store.list_rows("Widgets") == [list(HEADERS)]

    def test_list_all_on_header_only_table(self, widgets):
        assert widgets.list_all() == []

    def test_list_all_on_missing_table(self, any_store):
        table = EntityTable(any_store, "Missing", HEADERS, widget_to_row, row_to_widget)
        assert table.list_all() == []
        assert table.get("w1") is None

    def test_append_and_get(self, widgets):
        widgets.append([Widget("w1", "Bolt"), Widget("w2", "Nut", "red")])
        assert widgets.get("w2") == Widget("w2", "Nut", "red")
        assert [w.id for w in widgets.list_all()] == ["w1", "w2"]

    def test_locate_counts_header(self, widgets):
        widgets.append([Widget("w1", "Bolt"), Widget("w2", "Nut")])
        assert widgets.locate("w1") == 1
        assert widgets.locate("w2") == 2
        assert widgets.locate("nope") is None

    def test_replace_targets_current_position(self, widgets):
        """Replace finds the row again after earlier rows were removed."""
        widgets.append([Widget("w1", "Bolt"), Widget("w2", "Nut"), Widget("w3", "Gear")])
        assert widgets.remove("w1")
        assert widgets.replace("w3", Widget("w3", "Cog"))
        assert widgets.list_all() == [Widget("w2", "Nut"), Widget("w3", "Cog")]

    def test_replace_and_remove_missing(self, widgets):
        assert widgets.replace("nope", Widget("nope", "x")) is False
        assert widgets.remove("nope") is False


class TestHeaderUpgrade:
    """Tables written with an older, shorter header."""

    def test_prefix_header_is_upgraded(self, any_store):
        any_store.ensure_table("Widgets")
        any_store.append_rows("Widgets", [["id", "name"], ["w1", "Bolt"]])

        table = EntityTable(any_store, "Widgets", HEADERS, widget_to_row, row_to_widget)
        assert table.list_all() == [Widget("w1", "Bolt")]

        table.initialize()
        assert any_store.list_rows("Widgets")[0] == list(HEADERS)
        assert table.get("w1") == Widget("w1", "Bolt", "")

    def test_unknown_header_is_left_alone(self, any_store, caplog):
        any_store.ensure_table("Widgets")
        any_store.append_rows("Widgets", [["key", "label"]])

        table = EntityTable(any_store, "Widgets", HEADERS, widget_to_row, row_to_widget)
        table.initialize()

        assert any_store.list_rows("Widgets")[0][:2] == ["key", "label"]
        assert "unrecognized header" in caplog.text

    def test_reordered_header_is_read_and_written_by_name(self, any_store):
        any_store.ensure_table("Widgets")
        any_store.append_rows("Widgets", [["name", "id", "color"], ["Bolt", "w1", "red"]])

        table = EntityTable(any_store, "Widgets", HEADERS, widget_to_row, row_to_widget)
        table.initialize()

        assert table.list_all() == [Widget("w1", "Bolt", "red")]
        assert table.get("w1") == Widget("w1", "Bolt", "red")
        assert table.locate("w1") == 1

        assert table.replace("w1", Widget("w1", "Cog", "blue"))
        table.append([Widget("w2", "Nut")])
        rows = any_store.list_rows("Widgets")
        assert rows[1] == ["Cog", "w1", "blue"]
        assert rows[2][:2] == ["Nut", "w2"]
        assert table.remove("w1")
        assert table.list_all() == [Widget("w2", "Nut", "")]

    def test_writes_refused_under_unknown_header(self, any_store):
        any_store.ensure_table("Widgets")
        any_store.append_rows("Widgets", [["key", "label"]])

        table = EntityTable(any_store, "Widgets", HEADERS, widget_to_row, row_to_widget)
        with pytest.raises(ValueError, match="unrecognized header"):
            table.append([Widget("w1", "Bolt")])
        assert any_store.list_rows("Widgets") == [["key", "label"]]
