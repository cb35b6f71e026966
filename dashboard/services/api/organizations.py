"""
Organization and language endpoints.
"""

from typing import Any

from dashboard.schemas import Language, LanguageForm, Organization
from dashboard.services.api.client import Resource, unwrap_list, unwrap_one


class OrganizationsApi(Resource):

    async def list_all(self) -> list[Organization]:
        return unwrap_list(await self.client.get("/organization"), "organizations", Organization)

    async def get(self, organization_id: int) -> Organization:
        data = await self.client.get(f"/organization/{organization_id}")
        return unwrap_one(data, Organization, "organization")

    async def update(self, organization_id: int, changes: dict[str, Any]) -> Organization:
        data = await self.client.patch(f"/organization/{organization_id}", json=changes)
        return unwrap_one(data, Organization, "organization")

    async def add_user(self, organization_id: int, user_id: int) -> None:
        await self.client.post(f"/organization/{organization_id}/users", json={"user_id": user_id})

    async def remove_user(self, organization_id: int, user_id: int) -> None:
        await self.client.delete(f"/organization/{organization_id}/users", json={"user_id": user_id})

    async def languages(self, organization_id: int) -> list[Language]:
        data = await self.client.get(f"/organization/{organization_id}/languages")
        return unwrap_list(data, "languages", Language)

    async def add_language(self, organization_id: int, language_id: int) -> None:
        await self.client.post(
            f"/organization/{organization_id}/languages", json={"languageId": language_id}
        )

    async def remove_language(self, organization_id: int, language_id: int) -> None:
        await self.client.delete(
            f"/organization/{organization_id}/languages", json={"languageId": language_id}
        )


class LanguagesApi(Resource):

    async def list_all(self) -> list[Language]:
        return unwrap_list(await self.client.get("/languages"), "languages", Language)

    async def create(self, form: LanguageForm) -> Language:
        return unwrap_one(await self.client.post("/languages", json=form.to_payload()), Language)
