"""
Reservation endpoints.

Status changes other than cancellation go through ``update`` with a
``{"status": ...}`` body; cancellation has its own endpoint.
"""

from datetime import date
from typing import Any, Optional

from dashboard.schemas import Availability, Reservation, ReservationForm
from dashboard.services.api.client import Resource, unwrap_list, unwrap_one


class ReservationsApi(Resource):

    async def list_all(self) -> list[Reservation]:
        return unwrap_list(await self.client.get("/reservations"), "reservations", Reservation)

    async def list_by_restaurant(self, restaurant_id: int) -> list[Reservation]:
        data = await self.client.get(f"/reservations/restaurant/{restaurant_id}")
        return unwrap_list(data, "reservations", Reservation)

    async def get(self, reservation_id: int) -> Reservation:
        data = await self.client.get(f"/reservations/{reservation_id}")
        return unwrap_one(data, Reservation, "reservation")

    async def available_slots(
        self,
        restaurant_id: int,
        on_date: date,
        guest_count: Optional[int] = None,
    ) -> Availability:
        """Free slots for a date; ``guest_count`` is sent only when truthy."""
        params = {"date": on_date.isoformat()}
        if guest_count:
            params["guest_count"] = guest_count
        data = await self.client.get(f"/reservations/available/{restaurant_id}", params=params)
        return Availability.model_validate(data)

    async def list_by_phone(self, phone: str) -> list[Reservation]:
        data = await self.client.get("/reservations/my", params={"phone": phone})
        return unwrap_list(data, "reservations", Reservation)

    async def list_by_session(self, session_id: int) -> list[Reservation]:
        data = await self.client.get(f"/reservations/session/{session_id}")
        return unwrap_list(data, "reservations", Reservation)

    async def create(self, form: ReservationForm) -> Reservation:
        data = await self.client.post("/reservations", json=form.to_payload())
        return unwrap_one(data, Reservation, "reservation")

    async def update(self, reservation_id: int, changes: dict[str, Any]) -> Reservation:
        data = await self.client.patch(f"/reservations/{reservation_id}", json=changes)
        return unwrap_one(data, Reservation, "reservation")

    async def cancel(self, reservation_id: int) -> Reservation:
        data = await self.client.post(f"/reservations/{reservation_id}/cancel")
        return unwrap_one(data, Reservation, "reservation")

    async def cancel_by_phone(self, reservation_id: int, phone: str) -> Reservation:
        data = await self.client.post(
            f"/reservations/{reservation_id}/cancel/public", json={"phone": phone}
        )
        return unwrap_one(data, Reservation, "reservation")

    async def delete(self, reservation_id: int) -> None:
        await self.client.delete(f"/reservations/{reservation_id}")
