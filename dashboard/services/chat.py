"""
Chat Handoff Logic

Decides who is currently answering a guest chat (the AI bot or restaurant
staff) and summarizes chat sessions for the chat screens.

The backend does not store the handoff state. The dashboard infers it from
recent message authorship and keeps a per-session flag the operator can flip
back to AI; flipping it back is never sent to the backend.

Version: 1.0.0
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from dashboard.schemas import AuthorType, ChatMessage, ChatSession

STAFF_WINDOW = 5


class Responder(str, Enum):
    AI = "ai"
    STAFF = "staff"


def detect_responder(messages: list[ChatMessage], window: int = STAFF_WINDOW) -> Responder:
    """
    STAFF when any of the last ``window`` messages was written by the
    restaurant, otherwise AI.
    """
    recent = messages[-window:] if window > 0 else []
    if any(m.author_type == AuthorType.RESTAURANT for m in recent):
        return Responder.STAFF
    return Responder.AI


class ChatHandoff(BaseModel):
    """
    AI/staff flag for one chat session.

    Attributes:
        ai_enabled: Whether the bot is considered to be answering
        seen_message_ids: Ids of the message list last observed
    """
    ai_enabled: bool = True
    seen_message_ids: list[int] = []

    def observe(self, messages: list[ChatMessage]) -> bool:
        """
        Apply the authorship heuristic to a freshly fetched message list.

        Only a changed list can switch AI off, so an operator who returned
        the chat to AI is not overridden by the same old staff message.

        Returns:
            bool: Current ``ai_enabled``
        """
        ids = [m.id for m in messages]
        if ids != self.seen_message_ids:
            self.seen_message_ids = ids
            if messages and detect_responder(messages) == Responder.STAFF:
                self.ai_enabled = False
        return self.ai_enabled

    def staff_replied(self) -> None:
        self.ai_enabled = False

    def return_to_ai(self) -> None:
        self.ai_enabled = True

    @property
    def responder(self) -> Responder:
        return Responder.AI if self.ai_enabled else Responder.STAFF


class ChatStats(BaseModel):
    total_messages: int = 0
    user_messages: int = 0
    bot_messages: int = 0
    staff_messages: int = 0
    start_time: Optional[datetime] = None
    last_message_time: Optional[datetime] = None


def chat_stats(messages: list[ChatMessage]) -> ChatStats:
    """Count messages per author and report first/last message times."""
    def count(author: AuthorType) -> int:
        return sum(1 for m in messages if m.author_type == author)

    return ChatStats(
        total_messages=len(messages),
        user_messages=count(AuthorType.USER),
        bot_messages=count(AuthorType.BOT),
        staff_messages=count(AuthorType.RESTAURANT),
        start_time=messages[0].sent_at if messages else None,
        last_message_time=messages[-1].sent_at if messages else None,
    )


class SessionSplit(BaseModel):
    active: list[ChatSession] = []
    history: list[ChatSession] = []
    table_sessions: int = 0
    restaurant_sessions: int = 0


def split_sessions(sessions: list[ChatSession]) -> SessionSplit:
    """Partition sessions into active and closed, most recent first."""
    def recency(session: ChatSession) -> float:
        return session.last_active.timestamp() if session.last_active else 0.0

    ordered = sorted(sessions, key=recency, reverse=True)
    return SessionSplit(
        active=[s for s in ordered if s.active],
        history=[s for s in ordered if not s.active],
        table_sessions=sum(1 for s in sessions if s.is_table_session),
        restaurant_sessions=sum(1 for s in sessions if not s.is_table_session),
    )


def last_message(session: ChatSession) -> Optional[ChatMessage]:
    return session.messages[-1] if session.messages else None
