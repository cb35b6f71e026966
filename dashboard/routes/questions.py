"""
Bot question routes.
Suggested questions shown to guests, grouped by chat type and reordered by
drag and drop.
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query

from dashboard.core.exceptions import ApiValidationError
from dashboard.dependencies import DashboardContext, require_auth
from dashboard.schemas import ChatType, Question, QuestionForm, QuestionUpdateForm, ReorderForm, ToastResponse
from dashboard.services.ordering import group_questions, move_item, question_order

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/questions", tags=["Questions"])


async def load_questions(ctx: DashboardContext, language: Optional[str]) -> list[Question]:
    if language:
        return await ctx.query.fetch(
            ("questions", language),
            lambda: ctx.api.questions.list_by_language(language),
            response_type=list[Question],
        )
    return await ctx.query.fetch(
        ("questions", "all"),
        ctx.api.questions.list_all,
        response_type=list[Question],
    )


@router.get("")
async def list_questions(
    language: Optional[str] = Query(None),
    ctx: DashboardContext = Depends(require_auth),
) -> dict[str, Any]:
    """Questions split into menu and reservation lists, each in display order."""
    groups = group_questions(await load_questions(ctx, language))
    return {
        chat_type.value: [q.model_dump(mode="json") for q in questions]
        for chat_type, questions in groups.items()
    }


@router.post("", response_model=ToastResponse)
async def create_question(form: QuestionForm, ctx: DashboardContext = Depends(require_auth)) -> ToastResponse:
    if form.display_order is None:
        existing = group_questions(await load_questions(ctx, form.language_code))[form.chat_type]
        form.display_order = len(existing) + 1
    question = await ctx.api.questions.create(form)
    await ctx.query.invalidate(("questions",))
    return ctx.toast("question.created", question)


@router.put("/{question_id}", response_model=ToastResponse)
async def update_question(
    question_id: int,
    form: QuestionUpdateForm,
    ctx: DashboardContext = Depends(require_auth),
) -> ToastResponse:
    question = await ctx.api.questions.update(question_id, form.to_payload())
    await ctx.query.invalidate(("questions",))
    return ctx.toast("question.updated", question)


@router.delete("/{question_id}", response_model=ToastResponse)
async def delete_question(question_id: int, ctx: DashboardContext = Depends(require_auth)) -> ToastResponse:
    await ctx.api.questions.delete(question_id)
    await ctx.query.invalidate(("questions",))
    return ctx.toast("question.deleted")


@router.post("/reorder/{chat_type}", response_model=ToastResponse)
async def reorder_questions(
    chat_type: ChatType,
    form: ReorderForm,
    language: Optional[str] = Query(None),
    ctx: DashboardContext = Depends(require_auth),
) -> ToastResponse:
    """Move one question within its chat type and persist the new id order."""
    questions = group_questions(await load_questions(ctx, language))[chat_type]
    try:
        reordered = move_item(questions, form.from_index, form.to_index)
    except IndexError as exc:
        raise ApiValidationError(str(exc), status_code=422) from exc
    ids = question_order(reordered)
    await ctx.api.questions.reorder(ids)
    await ctx.query.invalidate(("questions",))
    return ctx.toast("question.reordered", ids)
