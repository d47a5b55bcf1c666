"""
Unit tests for store.py.
"""

import pytest

from conftest import image_bytes, make_panel
from storyboard_formatter.models import PanelFields
from storyboard_formatter.recovery import AutoRecovery
from storyboard_formatter.store import ImportFile, PanelStore


def store_with(n: int) -> PanelStore:
    store = PanelStore()
    store.replace_contents("Test", [make_panel(i + 1) for i in range(n)])
    return store


class TestImportFile:

    def test_type_guessed_from_name(self):
        assert ImportFile("a.png", b"").resolved_type == "image/png"
        assert ImportFile("notes.txt", b"").is_image is False
        assert ImportFile("blob", b"", "image/jpeg").is_image


class TestImport:

    def test_partial_failure_keeps_order(self):
        files = [
            ImportFile(f"f{i}.png", image_bytes(color=(i * 40, 0, 0)), "image/png")
            for i in range(1, 6)
        ]
        files[2] = ImportFile("f3.png", b"corrupt bytes", "image/png")

        store = PanelStore()
        result = store.import_files(files)

        assert result.added == 4
        assert result.selected == 5
        assert result.failed == ["f3.png"]
        assert [p.original_file_name for p in store.panels] == ["f1.png", "f2.png", "f4.png", "f5.png"]
        assert "4 of 5" in result.summary and "1 failed" in result.summary
        assert store.dirty

    def test_labels_follow_live_count(self):
        store = store_with(2)
        store.import_files([ImportFile("a.png", image_bytes()), ImportFile("b.png", image_bytes())])
        assert [p.scene for p in store.panels[2:]] == ["Scene 3", "Scene 4"]
        assert [p.shot for p in store.panels[2:]] == ["Panel 3", "Panel 4"]
        new = store.panels[2]
        assert new.description == new.dialogue == new.camera == ""
        assert new.duration == 5

    def test_non_images_filtered(self):
        store = PanelStore()
        result = store.import_files([
            ImportFile("readme.txt", b"hello", "text/plain"),
            ImportFile("a.png", image_bytes(), "image/png"),
        ])
        assert (result.selected, result.images, result.added) == (2, 1, 1)
        assert "non-image" in result.summary

    def test_nothing_valid(self):
        store = PanelStore()
        result = store.import_files([ImportFile("readme.txt", b"hello")])
        assert result.added == 0
        assert not store.dirty
        assert result.summary.startswith("No valid image files")


class TestSelection:

    def test_select_and_deselect(self):
        store = store_with(3)
        store.select(1)
        assert store.current is store.panels[1]
        store.select(-1)
        assert store.current_index is None
        store.select(2)
        store.close_editor()
        assert store.current is None

    @pytest.mark.parametrize("index", [3, -2, 10])
    def test_out_of_range(self, index):
        with pytest.raises(IndexError):
            store_with(3).select(index)

    def test_select_does_not_dirty(self):
        store = store_with(3)
        store.select(0)
        assert not store.dirty


class TestUpdate:

    def test_applies_full_field_set(self):
        store = store_with(2)
        store.select(1)
        assert store.update({"scene": "INT", "shot": "A", "dialogue": "Hi", "duration": "abc"})
        p = store.panels[1]
        assert (p.scene, p.shot, p.dialogue, p.duration) == ("INT", "A", "Hi", 5.0)
        assert p.description == ""
        assert store.dirty

    def test_huge_integer_duration(self):
        store = store_with(1)
        store.select(0)
        assert store.update({"duration": 10**400})
        assert store.panels[0].duration == 5.0

    def test_noop_without_selection(self):
        store = store_with(1)
        before = store.panels[0].model_copy()
        assert store.update({"scene": "X"}) is False
        assert store.panels[0] == before
        assert not store.dirty


class TestClipboard:

    def test_paste_with_empty_clipboard(self):
        store = store_with(2)
        store.select(0)
        before = store.panels[0].model_copy()
        assert store.paste_clipboard() is False
        assert store.panels[0] == before
        assert not store.dirty

    def test_paste_without_selection(self):
        store = store_with(2)
        store.select(0)
        store.copy_clipboard()
        store.close_editor()
        assert store.paste_clipboard() is False

    def test_copy_paste_by_value(self):
        store = store_with(2)
        store.select(0)
        store.update(PanelFields(scene="S", shot="1", dialogue="Run!", duration=2))
        assert store.copy_clipboard()
        store.panels[0].dialogue = "edited after copy"

        store.select(1)
        target_id, target_image = store.panels[1].id, store.panels[1].image
        assert store.paste_clipboard()
        target = store.panels[1]
        assert target.dialogue == "Run!"
        assert target.duration == 2
        assert (target.id, target.image) == (target_id, target_image)

        target.scene = "changed"
        assert store.clipboard.scene == "S"

    def test_copy_without_selection(self):
        assert store_with(1).copy_clipboard() is False


class TestDelete:

    @pytest.mark.parametrize("current,deleted,expected", [
        (2, 2, None),
        (3, 1, 2),
        (1, 3, 1),
        (0, 0, None),
        (4, 0, 3),
        (None, 2, None),
    ])
    def test_index_shift(self, current, deleted, expected):
        store = store_with(5)
        store.select(current)
        selected_panel = store.current
        store.delete_at(deleted)
        assert store.current_index == expected
        if expected is not None:
            assert store.current is selected_panel
        assert len(store) == 4
        assert store.dirty

    def test_delete_current(self):
        store = store_with(3)
        victim = store.panels[1]
        store.select(1)
        assert store.delete_current() is victim
        assert store.current_index is None
        assert victim not in store.panels

    def test_delete_current_noop(self):
        store = store_with(3)
        assert store.delete_current() is None
        assert len(store) == 3

    def test_delete_out_of_range(self):
        with pytest.raises(IndexError):
            store_with(2).delete_at(2)


class TestProject:

    def test_title_tracks_dirty(self):
        store = PanelStore()
        assert store.title == "Untitled Project - Storyboard Formatter"
        store.mark_dirty()
        assert store.title == "Untitled Project * - Storyboard Formatter"

    def test_new_project_resets_and_clears_recovery(self):
        recovery = AutoRecovery()
        store = PanelStore(recovery=recovery)
        store.replace_contents("Mine", [make_panel(1)])
        store.select(0)
        recovery.capture(store)
        assert recovery.pending is not None

        store.new_project()
        assert store.panels == []
        assert store.current_index is None
        assert store.project_name == "Untitled Project"
        assert not store.dirty
        assert recovery.pending is None

    def test_cards(self):
        store = store_with(2)
        store.select(1)
        cards = store.cards()
        assert [c.active for c in cards] == [False, True]
        assert cards[0].header == "Scene 1 - Panel 1"
