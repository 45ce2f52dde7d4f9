"""Tests for store.py – today's blocks, templates and JSON persistence."""
import json
import logging
from datetime import datetime

import pytest

from timetable_import.models import Block, Template
from timetable_import.store import Store
from timetable_import.text_parse import parse


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "timetable-store.json"


class TestLoadSave:
    def test_missing_file_gives_seed_templates(self, store_path):
        store = Store.load(store_path)
        assert store.today_blocks == []
        assert [t.title for t in store.templates] == ["Workday", "Weekend", "Exam"]
        assert not store_path.exists()

    def test_roundtrip_keeps_ids(self, store_path):
        store = Store(store_path)
        added = store.add_block(Block(start="9:00", end="10:00", title="Gym", icon="\U0001F3C3"))
        again = Store.load(store_path)
        assert again.today_blocks == [added]
        assert [t.id for t in again.templates] == [t.id for t in store.templates]

    def test_document_shape(self, store_path):
        store = Store(store_path, templates=[])
        store.add_block(Block(start="22:00", end="06:00", title="Sleep"))
        data = json.loads(store_path.read_text(encoding="utf-8"))
        assert set(data) == {"todayBlocks", "templates"}
        block = data["todayBlocks"][0]
        assert block["isOvernight"] is True
        assert block["startMinutes"] == 1320
        assert "error" not in block
        assert "tag" not in block

    def test_invalid_document_falls_back(self, store_path, caplog):
        store_path.write_text("{not json", encoding="utf-8")
        with caplog.at_level(logging.WARNING):
            store = Store.load(store_path)
        assert store.today_blocks == []
        assert len(store.templates) == 3
        assert "Ignoring unreadable store" in caplog.text

    def test_bad_block_falls_back(self, store_path):
        store_path.write_text(json.dumps({"todayBlocks": [{"title": "no start"}], "templates": []}), encoding="utf-8")
        store = Store.load(store_path)
        assert store.today_blocks == []

    def test_save_without_path(self):
        with pytest.raises(ValueError):
            Store().save()

    def test_in_memory_store_writes_nothing(self, tmp_path):
        store = Store()
        store.add_block(Block(start="9:00"))
        assert list(tmp_path.iterdir()) == []


class TestBlocks:
    def test_add_normalizes(self):
        store = Store()
        b = store.add_block(Block(start="9:5", end="10:00 PM", title="Edited"))
        assert (b.start, b.end, b.start_minutes) == ("09:05", "22:00", 545)
        assert store.today_blocks == [b]

    def test_blank_title_replaced(self):
        store = Store()
        b = store.add_block(Block.blank())
        assert b.title == "New block"
        assert b.start == "09:00"

    def test_update_by_id(self):
        store = Store()
        b = store.add_block(Block(start="9:00", title="Gym"))
        b.end = "22:00"
        b.start = "23:00"
        updated = store.update_block(b)
        assert updated.id == b.id
        assert updated.is_overnight is True
        assert store.today_blocks == [updated]

    def test_update_unknown(self):
        store = Store()
        assert store.update_block(Block(start="9:00")) is None
        assert store.today_blocks == []

    def test_find_block(self):
        store = Store()
        b = store.add_block(Block(start="9:00", title="Gym"))
        assert store.find_block(b.id) is b
        assert store.find_block("missing") is None

    def test_delete(self):
        store = Store()
        a = store.add_block(Block(start="9:00", title="a"))
        b = store.add_block(Block(start="10:00", title="b"))
        store.delete_block(a.id)
        assert store.today_blocks == [b]

    def test_sorted_blocks(self):
        store = Store()
        store.import_blocks(parse("13:00 Lunch\n09:00 Standup\n11:00 Review", "lines"))
        assert [b.title for b in store.sorted_blocks()] == ["Standup", "Review", "Lunch"]
        assert [b.title for b in store.today_blocks] == ["Lunch", "Standup", "Review"]


class TestConfirmImport:
    def test_errors_left_out(self):
        store = Store(templates=[])
        preview = parse("9:00 Standup\nno time\n10:00-11:00 Review", "lines")
        imported = store.confirm_import(preview)
        assert [b.title for b in imported] == ["Standup", "Review"]
        assert store.today_blocks == imported
        assert store.templates == []

    def test_nothing_valid_keeps_store(self):
        store = Store(today_blocks=[Block(start="08:00", title="Old")])
        assert store.confirm_import(parse("nothing here", "lines")) == []
        assert [b.title for b in store.today_blocks] == ["Old"]

    def test_save_template(self):
        store = Store()
        preview = parse("9:00-10:00 Standup", "lines")
        store.confirm_import(preview, save_template=True, now=datetime(2026, 3, 5, 8, 7))
        assert store.templates[0].title == "Imported 03-05 08:07"
        assert store.templates[0].blocks == preview
        assert len(store.templates) == 4

    def test_saved_template_independent_of_today(self):
        store = Store()
        store.confirm_import(parse("9:00-10:00 Standup", "lines"), save_template=True)
        store.today_blocks[0].note = "only today"
        assert store.templates[0].blocks[0].note == ""
        assert store.templates[0].blocks[0].id == store.today_blocks[0].id


class TestTemplates:
    def test_add_inserts_first(self):
        store = Store()
        t = store.add_template("Mine", [Block(start="07:00")])
        assert store.templates[0] is t

    def test_find(self):
        store = Store()
        workday = store.find_template("workday")
        assert workday is not None and workday.title == "Workday"
        assert store.find_template(workday.id) is workday
        assert store.find_template("nope") is None

    def test_apply(self, store_path):
        store = Store(store_path)
        store.apply_template(store.find_template("Exam"))
        assert [b.title for b in store.today_blocks] == ["Study", "Practice", "Review"]
        assert len(Store.load(store_path).today_blocks) == 3

    def test_apply_copies_blocks(self, store_path):
        store = Store(store_path)
        workday = store.find_template("Workday")
        store.apply_template(workday)
        store.today_blocks[0].title = "Edited today"
        assert workday.blocks[0].title == "Meeting"
        assert Store.load(store_path).find_template("Workday").blocks[0].title == "Meeting"

    def test_update_and_delete(self):
        store = Store()
        t = store.templates[1]
        store.update_template(Template(id=t.id, title="Lazy Sunday", blocks=[]))
        assert store.templates[1].title == "Lazy Sunday"
        store.delete_template(t.id)
        assert all(x.id != t.id for x in store.templates)
        assert len(store.templates) == 2
