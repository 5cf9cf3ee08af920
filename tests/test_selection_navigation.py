from __future__ import annotations

import unittest

from factories import ItemType, case_folder, folder, make_item, store_with
from navigation import Direction, NavigationController
from selection import SelectionController


class SelectionControllerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = store_with(
            make_item("a"), make_item("b"), make_item("c"),
            folder("f"), make_item("inside1", "f"), make_item("inside2", "f"),
        )
        self.selection = SelectionController(self.store)

    def test_plain_press_replaces_selection(self) -> None:
        self.selection.replace(["a", "b"])
        may_drag = self.selection.press_item("c")
        self.assertTrue(may_drag)
        self.assertEqual(self.selection.ids, ("c",))

    def test_press_on_selected_item_keeps_group(self) -> None:
        self.selection.replace(["a", "b"])
        self.assertTrue(self.selection.press_item("b"))
        self.assertEqual(self.selection.ids, ("a", "b"))

    def test_click_without_drag_narrows_to_single(self) -> None:
        self.selection.replace(["a", "b"])
        self.selection.press_item("b")
        self.selection.click_item("b")
        self.assertEqual(self.selection.ids, ("b",))

    def test_modifier_press_toggles_without_drag(self) -> None:
        self.selection.replace(["a"])
        self.assertFalse(self.selection.press_item("b", modifier=True))
        self.assertEqual(self.selection.ids, ("a", "b"))
        self.selection.press_item("a", modifier=True)
        self.assertEqual(self.selection.ids, ("b",))

    def test_canvas_click_clears_unless_modifier(self) -> None:
        self.selection.replace(["a"])
        self.selection.click_canvas(modifier=True)
        self.assertEqual(self.selection.ids, ("a",))
        self.selection.click_canvas()
        self.assertTrue(self.selection.is_empty())

    def test_select_all_is_scoped_to_folder(self) -> None:
        self.selection.select_all("f")
        self.assertEqual(set(self.selection.ids), {"inside1", "inside2"})
        self.selection.select_all(None)
        self.assertEqual(set(self.selection.ids), {"a", "b", "c", "f"})

    def test_replace_deduplicates_preserving_order(self) -> None:
        self.selection.replace(["b", "a", "b"])
        self.assertEqual(self.selection.ids, ("b", "a"))

    def test_prune_drops_deleted_ids(self) -> None:
        self.selection.replace(["a", "b"])
        self.store.delete({"a"})
        self.selection.prune()
        self.assertEqual(self.selection.ids, ("b",))


class NavigationControllerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = store_with(
            folder("f"),
            case_folder("case", "f"),
            make_item("doc", "case"),
            make_item("note", None, ItemType.NOTE),
        )
        self.selection = SelectionController(self.store)
        self.nav = NavigationController(self.store, self.selection)

    def test_open_folder_enters_forward_and_clears_selection(self) -> None:
        self.selection.replace(["f"])
        self.assertIsNone(self.nav.open_item("f"))
        self.assertEqual(self.nav.current_path, "f")
        self.assertEqual(self.nav.direction, Direction.FORWARD)
        self.assertTrue(self.selection.is_empty())

    def test_open_smart_folder_enters(self) -> None:
        self.nav.enter("f")
        self.assertIsNone(self.nav.open_item("case"))
        self.assertEqual(self.nav.current_path, "case")
        self.assertEqual(self.nav.smart_context_id(), "case")

    def test_open_file_or_note_returns_item_for_preview(self) -> None:
        item = self.nav.open_item("note")
        self.assertEqual(item.id, "note")
        self.assertIsNone(self.nav.current_path)

    def test_navigate_up_goes_to_parent_then_root(self) -> None:
        self.nav.enter("f")
        self.nav.enter("case")
        self.selection.replace(["doc"])
        self.assertTrue(self.nav.navigate_up())
        self.assertEqual(self.nav.current_path, "f")
        self.assertEqual(self.nav.direction, Direction.BACKWARD)
        self.assertTrue(self.selection.is_empty())
        self.nav.navigate_up()
        self.assertIsNone(self.nav.current_path)
        self.assertFalse(self.nav.navigate_up())

    def test_breadcrumbs_and_navigate_to(self) -> None:
        self.nav.enter("f")
        self.nav.enter("case")
        self.assertEqual([b.id for b in self.nav.breadcrumbs()], ["f", "case"])
        self.assertTrue(self.nav.navigate_to(None))
        self.assertIsNone(self.nav.current_path)
        self.assertEqual(self.nav.direction, Direction.BACKWARD)

    def test_ensure_valid_falls_back_to_desktop(self) -> None:
        self.nav.enter("f")
        self.store.delete({"f"})
        self.assertTrue(self.nav.ensure_valid())
        self.assertIsNone(self.nav.current_path)


if __name__ == "__main__":
    unittest.main()
