from __future__ import annotations

import unittest

from factories import Position, make_item
from layout_engine import SortMethod, arrange, grid_columns, order_items


class GridColumnsTests(unittest.TestCase):
    def test_columns_from_width(self) -> None:
        self.assertEqual(grid_columns(1200), 9)  # floor(1150 / 120)
        self.assertEqual(grid_columns(290), 2)

    def test_at_least_one_column(self) -> None:
        self.assertEqual(grid_columns(100), 1)
        self.assertEqual(grid_columns(0), 1)


class OrderItemsTests(unittest.TestCase):
    def test_name_order_ignores_case(self) -> None:
        items = [make_item("1", name="beta"), make_item("2", name="Alpha"), make_item("3", name="gamma")]
        ordered = [i.name for i in order_items(items, SortMethod.NAME)]
        self.assertEqual(ordered, ["Alpha", "beta", "gamma"])

    def test_date_order_is_newest_first(self) -> None:
        items = [make_item("old", created_at=1), make_item("new", created_at=3), make_item("mid", created_at=2)]
        ordered = [i.id for i in order_items(items, SortMethod.DATE)]
        self.assertEqual(ordered, ["new", "mid", "old"])

    def test_tidy_groups_rows_then_left_to_right(self) -> None:
        items = [
            make_item("right", x=300, y=5),
            make_item("left", x=10, y=8),
            make_item("below", x=0, y=100),
        ]
        ordered = [i.id for i in order_items(items, SortMethod.TIDY)]
        self.assertEqual(ordered, ["left", "right", "below"])

    def test_tidy_rounds_half_up_into_next_row(self) -> None:
        # y=9 -> row 0, y=10 -> row 1 with a tolerance of 20
        items = [make_item("lower", x=0, y=10), make_item("upper", x=500, y=9)]
        ordered = [i.id for i in order_items(items, SortMethod.TIDY, row_tolerance=20)]
        self.assertEqual(ordered, ["upper", "lower"])


class ArrangeTests(unittest.TestCase):
    def test_five_items_fill_rows_in_order(self) -> None:
        items = [make_item(str(n), name=f"item{n}") for n in range(5)]
        positions = arrange(items, SortMethod.NAME, width=290)  # two columns
        self.assertEqual(positions["0"], Position(50, 50))
        self.assertEqual(positions["1"], Position(170, 50))
        self.assertEqual(positions["2"], Position(50, 170))
        self.assertEqual(positions["3"], Position(170, 170))
        self.assertEqual(positions["4"], Position(50, 290))

    def test_only_given_items_are_positioned(self) -> None:
        positions = arrange([make_item("a")], SortMethod.DATE, width=1000)
        self.assertEqual(list(positions), ["a"])


if __name__ == "__main__":
    unittest.main()
