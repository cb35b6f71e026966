"""
Subscription and extension-request endpoints.
"""

from typing import Optional

from dashboard.schemas import (
    ExtensionRequest,
    ExtensionRequestForm,
    ExtensionRequestStatus,
    Subscription,
    SubscriptionForm,
)
from dashboard.services.api.client import Resource, unwrap_list, unwrap_one


class SubscriptionsApi(Resource):

    async def list_all(self) -> list[Subscription]:
        data = await self.client.get("/subscriptions")
        return unwrap_list(data, "subscriptions", Subscription)

    async def get(self, subscription_id: int) -> Subscription:
        data = await self.client.get(f"/subscriptions/{subscription_id}")
        return unwrap_one(data, Subscription, "subscription")

    async def list_by_organization(self, organization_id: int) -> list[Subscription]:
        data = await self.client.get(f"/subscriptions/organization/{organization_id}")
        return unwrap_list(data, "subscriptions", Subscription)

    async def get_active(self, organization_id: int) -> Optional[Subscription]:
        data = await self.client.get(f"/subscriptions/organization/{organization_id}/active")
        if not data:
            return None
        return unwrap_one(data, Subscription, "subscription")

    async def create(self, form: SubscriptionForm) -> Subscription:
        data = await self.client.post("/subscriptions", json=form.to_payload())
        return unwrap_one(data, Subscription, "subscription")

    async def update(self, subscription_id: int, form: SubscriptionForm) -> Subscription:
        payload = form.to_payload()
        payload.pop("organizationId", None)
        data = await self.client.put(f"/subscriptions/{subscription_id}", json=payload)
        return unwrap_one(data, Subscription, "subscription")

    async def extend(self, subscription_id: int, period: int) -> Subscription:
        data = await self.client.post(
            f"/subscriptions/{subscription_id}/extend", json={"period": period}
        )
        return unwrap_one(data, Subscription, "subscription")

    async def deactivate(self, subscription_id: int) -> None:
        await self.client.post(f"/subscriptions/{subscription_id}/deactivate")

    async def delete(self, subscription_id: int) -> None:
        await self.client.delete(f"/subscriptions/{subscription_id}")


class ExtensionRequestsApi(Resource):

    BASE = "/subscriptions/extension-requests"

    async def list_all(self) -> list[ExtensionRequest]:
        return unwrap_list(await self.client.get(self.BASE), "requests", ExtensionRequest)

    async def list_mine(self) -> list[ExtensionRequest]:
        return unwrap_list(await self.client.get(f"{self.BASE}/my"), "requests", ExtensionRequest)

    async def get(self, request_id: int) -> ExtensionRequest:
        data = await self.client.get(f"{self.BASE}/{request_id}")
        return unwrap_one(data, ExtensionRequest, "request")

    async def list_by_status(self, status: ExtensionRequestStatus) -> list[ExtensionRequest]:
        data = await self.client.get(f"{self.BASE}/status/{ExtensionRequestStatus(status).value}")
        return unwrap_list(data, "requests", ExtensionRequest)

    async def create(self, form: ExtensionRequestForm) -> ExtensionRequest:
        data = await self.client.post(self.BASE, json=form.to_payload())
        return unwrap_one(data, ExtensionRequest, "request")

    async def update_status(
        self,
        request_id: int,
        status: ExtensionRequestStatus,
        admin_comment: Optional[str] = None,
    ) -> ExtensionRequest:
        body = {"status": ExtensionRequestStatus(status).value}
        if admin_comment:
            body["adminComment"] = admin_comment
        data = await self.client.patch(f"{self.BASE}/{request_id}/status", json=body)
        return unwrap_one(data, ExtensionRequest, "request")
