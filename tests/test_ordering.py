"""
Tests for drag-and-drop ordering of categories and questions.
"""

import pytest

from dashboard.schemas import ChatType, MenuCategory, Question
from dashboard.services.ordering import group_questions, move_item, sequential_sort_order


class TestMoveItem:

    def test_move_forward(self):
        assert move_item(["a", "b", "c", "d"], 0, 2) == ["b", "c", "a", "d"]

    def test_move_backward(self):
        assert move_item(["a", "b", "c", "d"], 3, 1) == ["a", "d", "b", "c"]

    def test_original_untouched(self):
        items = ["a", "b"]
        move_item(items, 0, 1)
        assert items == ["a", "b"]

    def test_out_of_range(self):
        with pytest.raises(IndexError):
            move_item(["a", "b"], 0, 2)


class TestCategoryOrder:

    def test_sequential_numbers_start_at_one(self):
        categories = [
            MenuCategory(id=3, name="Desserts", sort_order=3),
            MenuCategory(id=1, name="Salads", sort_order=1),
        ]
        assert sequential_sort_order(categories) == [
            {"id": 3, "sort_order": 1},
            {"id": 1, "sort_order": 2},
        ]


class TestQuestionGroups:

    def test_grouped_by_chat_type_and_display_order(self):
        questions = [
            Question(id=1, text="Menu B", chat_type=ChatType.MENU, display_order=2),
            Question(id=2, text="Booking", chat_type=ChatType.RESERVATION, display_order=1),
            Question(id=3, text="Menu A", chat_type=ChatType.MENU, display_order=1),
        ]
        groups = group_questions(questions)
        assert [q.id for q in groups[ChatType.MENU]] == [3, 1]
        assert [q.id for q in groups[ChatType.RESERVATION]] == [2]

    def test_empty_groups_present(self):
        groups = group_questions([])
        assert groups == {ChatType.MENU: [], ChatType.RESERVATION: []}
