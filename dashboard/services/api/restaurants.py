"""
Restaurant and table endpoints.
"""

from dashboard.schemas import Restaurant, RestaurantForm, Table, TableForm, WorkingHourForm
from dashboard.services.api.client import Resource, unwrap_list, unwrap_one


class RestaurantsApi(Resource):

    async def list_all(self) -> list[Restaurant]:
        return unwrap_list(await self.client.get("/restaurants"), "restaurants", Restaurant)

    async def list_by_organization(self, organization_id: int) -> list[Restaurant]:
        data = await self.client.get(f"/restaurants/organization/{organization_id}")
        return unwrap_list(data, "restaurants", Restaurant)

    async def get(self, restaurant_id: int) -> Restaurant:
        return unwrap_one(await self.client.get(f"/restaurants/{restaurant_id}"), Restaurant, "restaurant")

    async def create(self, form: RestaurantForm) -> Restaurant:
        data = await self.client.post("/restaurants", json=form.to_payload())
        return unwrap_one(data, Restaurant, "restaurant")

    async def update(self, restaurant_id: int, form: RestaurantForm) -> Restaurant:
        data = await self.client.put(f"/restaurants/{restaurant_id}", json=form.to_payload())
        return unwrap_one(data, Restaurant, "restaurant")

    async def delete(self, restaurant_id: int) -> None:
        await self.client.delete(f"/restaurants/{restaurant_id}")

    async def update_working_hours(self, restaurant_id: int, hours: list[WorkingHourForm]) -> None:
        """Replace working hours; closed days are simply omitted."""
        payload = [hour.to_payload() for hour in hours if not hour.is_closed]
        await self.client.put(
            f"/restaurants/{restaurant_id}/working-hours", json={"working_hours": payload}
        )


class TablesApi(Resource):

    async def list_by_restaurant(self, restaurant_id: int) -> list[Table]:
        data = await self.client.get(f"/tables/restaurant/{restaurant_id}")
        return unwrap_list(data, "tables", Table)

    async def get(self, table_id: int) -> Table:
        return unwrap_one(await self.client.get(f"/tables/{table_id}"), Table, "table")

    async def create(self, form: TableForm) -> Table:
        return unwrap_one(await self.client.post("/tables", json=form.to_payload()), Table, "table")

    async def update(self, table_id: int, form: TableForm) -> Table:
        data = await self.client.put(f"/tables/{table_id}", json=form.to_payload())
        return unwrap_one(data, Table, "table")

    async def delete(self, table_id: int) -> None:
        await self.client.delete(f"/tables/{table_id}")
