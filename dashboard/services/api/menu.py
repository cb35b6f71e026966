"""
Menu category and dish endpoints.
"""

from typing import Any, Optional

from dashboard.schemas import CategoryForm, Dish, DishForm, DishGroup, MenuCategory
from dashboard.services.api.client import Resource, unwrap_list, unwrap_one


class CategoriesApi(Resource):

    async def list_by_restaurant(self, restaurant_id: int) -> list[MenuCategory]:
        data = await self.client.get(f"/categories/restaurant/{restaurant_id}")
        categories = unwrap_list(data, "categories", MenuCategory)
        return sorted(categories, key=lambda c: c.sort_order)

    async def get(self, category_id: int) -> MenuCategory:
        return unwrap_one(await self.client.get(f"/categories/{category_id}"), MenuCategory, "category")

    async def create(self, form: CategoryForm) -> MenuCategory:
        data = await self.client.post("/categories", json=form.to_payload())
        return unwrap_one(data, MenuCategory, "category")

    async def update(self, category_id: int, changes: dict[str, Any]) -> MenuCategory:
        data = await self.client.patch(f"/categories/{category_id}", json=changes)
        return unwrap_one(data, MenuCategory, "category")

    async def update_sort_order(self, order: list[dict[str, int]]) -> None:
        """Persist ``[{"id", "sort_order"}, ...]`` in one call."""
        await self.client.put("/categories/sort-order", json={"categories": order})

    async def delete(self, category_id: int) -> None:
        await self.client.delete(f"/categories/{category_id}")


class DishesApi(Resource):

    async def list_by_restaurant(self, restaurant_id: int) -> list[Dish]:
        data = await self.client.get(f"/dishes/restaurant/{restaurant_id}")
        return unwrap_list(data, "dishes", Dish)

    async def list_grouped_by_category(self, restaurant_id: int) -> list[DishGroup]:
        data = await self.client.get(f"/dishes/category/{restaurant_id}")
        return unwrap_list(data, "categories", DishGroup)

    async def get(self, dish_id: int) -> Dish:
        return unwrap_one(await self.client.get(f"/dishes/{dish_id}"), Dish, "dish")

    async def create(self, form: DishForm) -> Dish:
        return unwrap_one(await self.client.post("/dishes", json=form.to_payload()), Dish, "dish")

    async def update(self, dish_id: int, form: DishForm) -> Dish:
        data = await self.client.put(f"/dishes/{dish_id}", json=form.to_payload())
        return unwrap_one(data, Dish, "dish")

    async def delete(self, dish_id: int) -> None:
        await self.client.delete(f"/dishes/{dish_id}")

    async def get_dish_of_day(self, restaurant_id: int) -> Optional[Dish]:
        data = await self.client.get(f"/dishes/dish-of-day/{restaurant_id}")
        if not data:
            return None
        return unwrap_one(data, Dish, "dish")

    async def set_dish_of_day(self, dish_id: int) -> None:
        await self.client.post(f"/dishes/dish-of-day/{dish_id}")
