"""
Suggested-question endpoints.
"""

from typing import Any

from dashboard.schemas import Question, QuestionForm
from dashboard.services.api.client import Resource, unwrap_list, unwrap_one


class QuestionsApi(Resource):

    async def list_all(self) -> list[Question]:
        return unwrap_list(await self.client.get("/questions"), "questions", Question)

    async def list_by_language(self, code: str) -> list[Question]:
        data = await self.client.get(f"/questions/language/{code}")
        return unwrap_list(data, "questions", Question)

    async def create(self, form: QuestionForm) -> Question:
        data = await self.client.post("/questions", json=form.to_payload())
        return unwrap_one(data, Question, "question")

    async def update(self, question_id: int, changes: dict[str, Any]) -> Question:
        data = await self.client.put(f"/questions/{question_id}", json=changes)
        return unwrap_one(data, Question, "question")

    async def reorder(self, question_ids: list[int]) -> None:
        await self.client.put("/questions/reorder", json={"questionIds": question_ids})

    async def delete(self, question_id: int) -> None:
        await self.client.delete(f"/questions/{question_id}")
