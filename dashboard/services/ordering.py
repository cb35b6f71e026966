"""
Drag-and-drop ordering helpers for menu categories and bot questions.
"""

from typing import TypeVar

from dashboard.schemas import ChatType, MenuCategory, Question

T = TypeVar("T")


def move_item(items: list[T], from_index: int, to_index: int) -> list[T]:
    """
    Return a copy of ``items`` with the element at ``from_index`` moved to
    ``to_index``. Out-of-range indexes raise IndexError.
    """
    if not 0 <= from_index < len(items) or not 0 <= to_index < len(items):
        raise IndexError(f"Cannot move item {from_index} to {to_index} in a list of {len(items)}")
    moved = list(items)
    item = moved.pop(from_index)
    moved.insert(to_index, item)
    return moved


def sort_categories(categories: list[MenuCategory]) -> list[MenuCategory]:
    return sorted(categories, key=lambda c: c.sort_order)


def sequential_sort_order(categories: list[MenuCategory]) -> list[dict[str, int]]:
    """Number categories 1..n in list order."""
    return [{"id": c.id, "sort_order": index} for index, c in enumerate(categories, start=1)]


def sort_questions(questions: list[Question]) -> list[Question]:
    return sorted(questions, key=lambda q: q.display_order)


def question_order(questions: list[Question]) -> list[int]:
    return [q.id for q in questions]


def group_questions(questions: list[Question]) -> dict[ChatType, list[Question]]:
    """Split questions into menu and reservation lists, each by display order."""
    ordered = sort_questions(questions)
    return {
        chat_type: [q for q in ordered if q.chat_type == chat_type]
        for chat_type in (ChatType.MENU, ChatType.RESERVATION)
    }
