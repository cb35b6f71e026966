"""
Tests for the AI/staff handoff heuristic and chat summaries.
"""

from datetime import datetime

from dashboard.schemas import ChatMessage, ChatSession
from dashboard.services.chat import (
    ChatHandoff,
    Responder,
    chat_stats,
    detect_responder,
    split_sessions,
)


def message(id, author, minute=0):
    return ChatMessage(id=id, content=f"message {id}", author_type=author, sent_at=datetime(2024, 6, 5, 12, minute))


class TestDetectResponder:

    def test_bot_only_is_ai(self):
        messages = [message(1, "user"), message(2, "bot")]
        assert detect_responder(messages) == Responder.AI

    def test_recent_staff_message(self):
        messages = [message(1, "user"), message(2, "restaurant"), message(3, "user")]
        assert detect_responder(messages) == Responder.STAFF

    def test_staff_message_outside_window(self):
        """Only the last five messages are considered."""
        messages = [message(1, "restaurant")] + [message(i, "user") for i in range(2, 7)]
        assert detect_responder(messages) == Responder.AI

    def test_empty(self):
        assert detect_responder([]) == Responder.AI


class TestChatHandoff:

    def test_staff_message_switches_off_ai(self):
        handoff = ChatHandoff()
        assert handoff.observe([message(1, "user"), message(2, "restaurant")]) is False
        assert handoff.responder == Responder.STAFF

    def test_return_to_ai_survives_same_messages(self):
        """Re-observing an unchanged list keeps the operator's choice."""
        handoff = ChatHandoff()
        messages = [message(1, "user"), message(2, "restaurant")]
        handoff.observe(messages)
        handoff.return_to_ai()
        assert handoff.observe(messages) is True

    def test_new_staff_message_switches_off_again(self):
        handoff = ChatHandoff()
        handoff.observe([message(1, "restaurant")])
        handoff.return_to_ai()
        assert handoff.observe([message(1, "restaurant"), message(2, "restaurant")]) is False

    def test_staff_replied(self):
        handoff = ChatHandoff()
        handoff.staff_replied()
        assert not handoff.ai_enabled


class TestSummaries:

    def test_chat_stats(self):
        messages = [message(1, "user", 1), message(2, "bot", 2), message(3, "restaurant", 3), message(4, "user", 4)]
        stats = chat_stats(messages)
        assert stats.total_messages == 4
        assert stats.user_messages == 2
        assert stats.bot_messages == 1
        assert stats.staff_messages == 1
        assert stats.start_time == datetime(2024, 6, 5, 12, 1)
        assert stats.last_message_time == datetime(2024, 6, 5, 12, 4)

    def test_chat_stats_empty(self):
        stats = chat_stats([])
        assert stats.total_messages == 0
        assert stats.start_time is None

    def test_split_sessions(self):
        sessions = [
            ChatSession(id=1, active=True, last_active=datetime(2024, 6, 5, 10, 0)),
            ChatSession(id=2, active=True, last_active=datetime(2024, 6, 5, 12, 0), table={"id": 1, "name": "T1"}),
            ChatSession(id=3, active=False, last_active=datetime(2024, 6, 4, 9, 0)),
        ]
        split = split_sessions(sessions)
        assert [s.id for s in split.active] == [2, 1]
        assert [s.id for s in split.history] == [3]
        assert split.table_sessions == 1
        assert split.restaurant_sessions == 2
