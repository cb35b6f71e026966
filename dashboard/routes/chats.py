"""
Chat routes.
Guest chat sessions of the selected restaurant, their messages, staff
replies, the AI/staff handoff flag and server-sent-event streams that
replace client polling.
"""

import json
import logging
from enum import Enum
from typing import Any, AsyncIterator

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import StreamingResponse

from dashboard.core.config import get_settings
from dashboard.core.exceptions import ApiError, UnauthorizedError, get_error_message
from dashboard.dependencies import DashboardContext, require_restaurant
from dashboard.i18n import author_label, quick_replies
from dashboard.schemas import ChatMessage, ChatSession, MessageForm, ToastResponse
from dashboard.services.chat import ChatHandoff, chat_stats, last_message, split_sessions

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/chats", tags=["Chats"])


class ChatScope(str, Enum):
    RESTAURANT = "restaurant"
    TABLE = "table"


# =============================================================================
# HELPERS
# =============================================================================

def _sessions_loader(ctx: DashboardContext, restaurant_id: int):
    return lambda: ctx.api.chat.restaurant_sessions(restaurant_id)


def _messages_loader(ctx: DashboardContext, session_id: int, scope: ChatScope):
    if scope == ChatScope.TABLE:
        return lambda: ctx.api.chat.table_messages(session_id)
    return lambda: ctx.api.chat.restaurant_messages(session_id)


def sessions_payload(ctx: DashboardContext, sessions: list[ChatSession]) -> dict[str, Any]:
    """
    Session lists for the chats screen.

    The responder shown per session is the stored handoff flag; only a full
    message list (``messages_payload``) moves it.
    """
    split = split_sessions(sessions)

    def describe(session: ChatSession) -> dict[str, Any]:
        handoff = ctx.session.chat_handoffs.get(session.id) or ChatHandoff()
        last = last_message(session)
        return {
            **session.model_dump(mode="json", exclude={"messages"}),
            "is_table_session": session.is_table_session,
            "responder": handoff.responder.value,
            "last_message": last.model_dump(mode="json") if last else None,
        }

    return {
        "active": [describe(s) for s in split.active],
        "history": [describe(s) for s in split.history],
        "table_sessions": split.table_sessions,
        "restaurant_sessions": split.restaurant_sessions,
    }


def messages_payload(ctx: DashboardContext, session_id: int, messages: list[ChatMessage]) -> dict[str, Any]:
    handoff = ctx.session.handoff(session_id)
    handoff.observe(messages)
    return {
        "session_id": session_id,
        "messages": [
            {**m.model_dump(mode="json"), "author_label": author_label(m.author_type.value, ctx.language)}
            for m in messages
        ],
        "stats": chat_stats(messages).model_dump(mode="json"),
        "ai_enabled": handoff.ai_enabled,
        "responder": handoff.responder.value,
    }


async def observe_messages(ctx: DashboardContext, session_id: int, messages: list[ChatMessage]) -> dict[str, Any]:
    """
    Build the messages payload against the stored session and save the
    updated handoff flag.

    Raises:
        UnauthorizedError: The session was signed out meanwhile
    """
    if not await ctx.reload():
        raise UnauthorizedError(ctx.t("auth.session_expired"), status_code=401)
    payload = messages_payload(ctx, session_id, messages)
    await ctx.save()
    return payload


def sse_event(event: str, data: Any) -> str:
    return f"event: {event}\ndata: {json.dumps(data, default=str)}\n\n"


async def _stream(request: Request, ctx: DashboardContext, updates: AsyncIterator[Any], render) -> AsyncIterator[str]:
    """
    Forward ``updates`` as SSE events until the client disconnects.

    A ``signed_out`` event ends the stream once the session is no longer
    signed in.
    """
    try:
        async for data in updates:
            if await request.is_disconnected():
                break
            try:
                payload = await render(data)
            except UnauthorizedError:
                logger.info(f"Chat stream of session {ctx.session.id[:8]}... ended by sign-out")
                yield sse_event("signed_out", {"redirect": "/login"})
                break
            yield sse_event("update", payload)
    except ApiError as exc:
        logger.warning(f"Chat stream stopped: {exc}")
        yield sse_event("error", {"message": get_error_message(exc)})
    finally:
        await updates.aclose()


# =============================================================================
# SESSIONS
# =============================================================================

@router.get("/sessions")
async def list_sessions(ctx: DashboardContext = Depends(require_restaurant)) -> dict[str, Any]:
    """Active and closed sessions of the selected restaurant, most recent first."""
    restaurant_id = ctx.session.restaurant_id
    sessions = await ctx.query.fetch(
        ("chat_sessions", restaurant_id),
        _sessions_loader(ctx, restaurant_id),
        response_type=list[ChatSession],
        stale_seconds=get_settings().chat_sessions_poll_seconds,
    )
    return sessions_payload(ctx, sessions)


@router.get("/tables/{table_id}/sessions", response_model=list[ChatSession])
async def list_table_sessions(table_id: int, ctx: DashboardContext = Depends(require_restaurant)) -> list[ChatSession]:
    return await ctx.query.fetch(
        ("chat_table_sessions", table_id),
        lambda: ctx.api.chat.table_sessions(table_id),
        response_type=list[ChatSession],
        stale_seconds=get_settings().chat_sessions_poll_seconds,
    )


@router.get("/sessions/stream")
async def stream_sessions(request: Request, ctx: DashboardContext = Depends(require_restaurant)) -> StreamingResponse:
    restaurant_id = ctx.session.restaurant_id
    updates = ctx.query.watch(
        ("chat_sessions", restaurant_id),
        _sessions_loader(ctx, restaurant_id),
        interval_seconds=get_settings().chat_sessions_poll_seconds,
        response_type=list[ChatSession],
    )

    async def render(sessions: list[ChatSession]) -> dict[str, Any]:
        if not await ctx.reload():
            raise UnauthorizedError(ctx.t("auth.session_expired"), status_code=401)
        return sessions_payload(ctx, sessions)

    return StreamingResponse(_stream(request, ctx, updates, render), media_type="text/event-stream")


@router.post("/sessions/{session_id}/close", response_model=ToastResponse)
async def close_session(
    session_id: int,
    scope: ChatScope = Query(ChatScope.RESTAURANT),
    ctx: DashboardContext = Depends(require_restaurant),
) -> ToastResponse:
    if scope == ChatScope.TABLE:
        await ctx.api.chat.close_table_session(session_id)
    else:
        await ctx.api.chat.close_restaurant_session(session_id)
    logger.info(f"Chat session {session_id} closed")
    await ctx.query.invalidate_many(("chat_sessions",), ("chat_table_sessions",), ("chat_messages", session_id))
    return ctx.toast("chat.closed")


# =============================================================================
# MESSAGES
# =============================================================================

@router.get("/sessions/{session_id}/messages")
async def list_messages(
    session_id: int,
    scope: ChatScope = Query(ChatScope.RESTAURANT),
    ctx: DashboardContext = Depends(require_restaurant),
) -> dict[str, Any]:
    """Messages plus stats and the AI/staff flag for the chat header."""
    messages = await ctx.query.fetch(
        ("chat_messages", session_id),
        _messages_loader(ctx, session_id, scope),
        response_type=list[ChatMessage],
        stale_seconds=get_settings().chat_messages_poll_seconds,
    )
    return await observe_messages(ctx, session_id, messages)


@router.get("/sessions/{session_id}/messages/stream")
async def stream_messages(
    session_id: int,
    request: Request,
    scope: ChatScope = Query(ChatScope.RESTAURANT),
    ctx: DashboardContext = Depends(require_restaurant),
) -> StreamingResponse:
    updates = ctx.query.watch(
        ("chat_messages", session_id),
        _messages_loader(ctx, session_id, scope),
        interval_seconds=get_settings().chat_messages_poll_seconds,
        response_type=list[ChatMessage],
    )

    async def render(messages: list[ChatMessage]) -> dict[str, Any]:
        return await observe_messages(ctx, session_id, messages)

    return StreamingResponse(_stream(request, ctx, updates, render), media_type="text/event-stream")


@router.post("/sessions/{session_id}/messages", response_model=ToastResponse)
async def send_message(
    session_id: int,
    form: MessageForm,
    scope: ChatScope = Query(ChatScope.RESTAURANT),
    ctx: DashboardContext = Depends(require_restaurant),
) -> ToastResponse:
    """Reply as staff; the chat switches to staff mode."""
    if scope == ChatScope.TABLE:
        message = await ctx.api.chat.send_table_message(session_id, form.content)
    else:
        message = await ctx.api.chat.send_restaurant_message(session_id, form.content)
    if await ctx.reload():
        ctx.session.handoff(session_id).staff_replied()
        await ctx.save()
    await ctx.query.invalidate_many(("chat_messages", session_id), ("chat_sessions",))
    return ctx.toast("chat.sent", message)


@router.post("/sessions/{session_id}/return-to-ai", response_model=ToastResponse)
async def return_to_ai(session_id: int, ctx: DashboardContext = Depends(require_restaurant)) -> ToastResponse:
    """Hand the chat back to the bot. Nothing is sent to the backend."""
    ctx.session.handoff(session_id).return_to_ai()
    await ctx.save()
    return ctx.toast("chat.returned_to_ai", {"session_id": session_id, "ai_enabled": True})


@router.get("/quick-replies")
async def get_quick_replies(ctx: DashboardContext = Depends(require_restaurant)) -> list[dict[str, str]]:
    return quick_replies(ctx.language)
