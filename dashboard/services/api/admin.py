"""
Platform-admin and support-ticket endpoints.

Admin listings are paginated with ``page``/``pageSize``; support listings
use ``page``/``page_size``. Both are returned as ``Page`` objects.
"""

from typing import Optional

from dashboard.schemas import (
    AdminLog,
    AdminStats,
    Dish,
    Organization,
    Page,
    SupportTicket,
    SupportTicketForm,
    SupportTicketStatus,
    User,
    UserRole,
)
from dashboard.services.api.client import Resource, unwrap_one, unwrap_page


class AdminApi(Resource):

    async def stats(self) -> AdminStats:
        return AdminStats.model_validate(await self.client.get("/admin/stats"))

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    async def users(self, page: int = 1, page_size: int = 20) -> Page[User]:
        envelope = await self.client.request(
            "GET", "/admin/users", params={"page": page, "pageSize": page_size}
        )
        return unwrap_page(envelope, "users", User, page, page_size)

    async def get_user(self, user_id: int) -> User:
        return unwrap_one(await self.client.get(f"/admin/users/{user_id}"), User, "user")

    async def set_user_status(self, user_id: int, is_active: bool) -> None:
        await self.client.patch(f"/admin/users/{user_id}/status", json={"isActive": is_active})

    async def set_user_role(self, user_id: int, role: UserRole) -> None:
        await self.client.patch(f"/admin/users/{user_id}/role", json={"role": UserRole(role).value})

    async def delete_user(self, user_id: int) -> None:
        await self.client.delete(f"/admin/users/{user_id}")

    # -------------------------------------------------------------------------
    # Organizations
    # -------------------------------------------------------------------------

    async def organizations(self, page: int = 1, page_size: int = 20) -> Page[Organization]:
        envelope = await self.client.request(
            "GET", "/admin/organizations", params={"page": page, "pageSize": page_size}
        )
        return unwrap_page(envelope, "organizations", Organization, page, page_size)

    async def get_organization(self, organization_id: int) -> Organization:
        data = await self.client.get(f"/admin/organizations/{organization_id}")
        return unwrap_one(data, Organization, "organization")

    async def delete_organization(self, organization_id: int) -> None:
        await self.client.delete(f"/admin/organizations/{organization_id}")

    # -------------------------------------------------------------------------
    # Moderation
    # -------------------------------------------------------------------------

    async def dishes(self, page: int = 1, page_size: int = 20) -> Page[Dish]:
        envelope = await self.client.request(
            "GET", "/admin/dishes", params={"page": page, "pageSize": page_size}
        )
        return unwrap_page(envelope, "dishes", Dish, page, page_size)

    async def delete_dish(self, dish_id: int) -> None:
        await self.client.delete(f"/admin/dishes/{dish_id}")

    # -------------------------------------------------------------------------
    # Logs
    # -------------------------------------------------------------------------

    async def logs(self, page: int = 1, page_size: int = 20) -> Page[AdminLog]:
        envelope = await self.client.request(
            "GET", "/admin/logs", params={"page": page, "pageSize": page_size}
        )
        return unwrap_page(envelope, "logs", AdminLog, page, page_size)

    async def my_logs(self, page: int = 1, page_size: int = 20) -> Page[AdminLog]:
        envelope = await self.client.request(
            "GET", "/admin/logs/me", params={"page": page, "pageSize": page_size}
        )
        return unwrap_page(envelope, "logs", AdminLog, page, page_size)

    # -------------------------------------------------------------------------
    # Support
    # -------------------------------------------------------------------------

    async def support_tickets(
        self,
        page: int = 1,
        page_size: int = 10,
        status: Optional[SupportTicketStatus] = None,
    ) -> Page[SupportTicket]:
        params = {"page": page, "page_size": page_size}
        if status:
            params["status"] = SupportTicketStatus(status).value
        envelope = await self.client.request("GET", "/admin/support", params=params)
        return unwrap_page(envelope, "tickets", SupportTicket, page, page_size)

    async def set_support_ticket_status(
        self, ticket_id: int, status: SupportTicketStatus
    ) -> SupportTicket:
        data = await self.client.patch(
            f"/admin/support/{ticket_id}/status",
            json={"status": SupportTicketStatus(status).value},
        )
        return unwrap_one(data, SupportTicket, "ticket")


class SupportApi(Resource):

    async def create(self, form: SupportTicketForm) -> SupportTicket:
        data = await self.client.post("/support", json=form.to_payload())
        return unwrap_one(data, SupportTicket, "ticket")

    async def list_mine(self, page: int = 1, page_size: int = 10) -> Page[SupportTicket]:
        envelope = await self.client.request(
            "GET", "/support/my", params={"page": page, "page_size": page_size}
        )
        return unwrap_page(envelope, "tickets", SupportTicket, page, page_size)

    async def get(self, ticket_id: int) -> SupportTicket:
        return unwrap_one(await self.client.get(f"/support/{ticket_id}"), SupportTicket, "ticket")
