"""
Chat endpoints.

The backend keeps two parallel families of chat sessions: table-scoped
(guest scanned a table QR code) and restaurant-scoped (guest scanned the
restaurant QR code). Both expose the same operations under different paths.
"""

from dashboard.schemas import ChatMessage, ChatSession
from dashboard.services.api.client import Resource, unwrap_list, unwrap_one


class ChatApi(Resource):

    # -------------------------------------------------------------------------
    # Table sessions
    # -------------------------------------------------------------------------

    async def table_sessions(self, table_id: int) -> list[ChatSession]:
        data = await self.client.get(f"/chat/table/session/{table_id}")
        return unwrap_list(data, "sessions", ChatSession)

    async def table_messages(self, session_id: int) -> list[ChatMessage]:
        data = await self.client.get(f"/chat/table/session/{session_id}/messages")
        return unwrap_list(data, "messages", ChatMessage)

    async def send_table_message(self, session_id: int, content: str) -> ChatMessage:
        data = await self.client.post(
            "/chat/table/message/send", json={"sessionId": session_id, "content": content}
        )
        return unwrap_one(data, ChatMessage, "message")

    async def close_table_session(self, session_id: int) -> None:
        await self.client.post(f"/chat/table/session/close/{session_id}")

    # -------------------------------------------------------------------------
    # Restaurant sessions
    # -------------------------------------------------------------------------

    async def restaurant_sessions(self, restaurant_id: int) -> list[ChatSession]:
        data = await self.client.get(f"/chat/restaurant/sessions/{restaurant_id}")
        return unwrap_list(data, "sessions", ChatSession)

    async def restaurant_messages(self, session_id: int) -> list[ChatMessage]:
        data = await self.client.get(f"/chat/restaurant/session/{session_id}/messages")
        return unwrap_list(data, "messages", ChatMessage)

    async def send_restaurant_message(self, session_id: int, content: str) -> ChatMessage:
        data = await self.client.post(
            "/chat/restaurant/message/send", json={"sessionId": session_id, "content": content}
        )
        return unwrap_one(data, ChatMessage, "message")

    async def close_restaurant_session(self, session_id: int) -> None:
        await self.client.post(f"/chat/restaurant/session/close/{session_id}")
