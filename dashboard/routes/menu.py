"""
Menu routes.
Categories (with drag-and-drop ordering), dishes and the dish of the day.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from dashboard.core.exceptions import ApiValidationError
from dashboard.dependencies import DashboardContext, require_restaurant
from dashboard.schemas import (
    CategoryForm,
    Dish,
    DishForm,
    DishGroup,
    MenuCategory,
    ReorderForm,
    ToastResponse,
)
from dashboard.services.ordering import move_item, sequential_sort_order, sort_categories

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/menu", tags=["Menu"])


async def load_categories(ctx: DashboardContext, restaurant_id: int) -> list[MenuCategory]:
    return await ctx.query.fetch(
        ("categories", restaurant_id),
        lambda: ctx.api.categories.list_by_restaurant(restaurant_id),
        response_type=list[MenuCategory],
    )


async def load_dishes(ctx: DashboardContext, restaurant_id: int) -> list[Dish]:
    return await ctx.query.fetch(
        ("dishes", restaurant_id),
        lambda: ctx.api.dishes.list_by_restaurant(restaurant_id),
        response_type=list[Dish],
    )


# =============================================================================
# CATEGORIES
# =============================================================================

@router.get("/categories", response_model=list[MenuCategory])
async def list_categories(ctx: DashboardContext = Depends(require_restaurant)) -> list[MenuCategory]:
    return sort_categories(await load_categories(ctx, ctx.session.restaurant_id))


@router.post("/categories", response_model=ToastResponse)
async def create_category(form: CategoryForm, ctx: DashboardContext = Depends(require_restaurant)) -> ToastResponse:
    restaurant_id = ctx.session.restaurant_id
    if form.restaurant_id is None:
        form.restaurant_id = restaurant_id
    if form.sort_order is None:
        form.sort_order = len(await load_categories(ctx, restaurant_id)) + 1
    category = await ctx.api.categories.create(form)
    await ctx.query.invalidate(("categories",))
    return ctx.toast("category.created", category)


@router.patch("/categories/{category_id}", response_model=ToastResponse)
async def update_category(
    category_id: int,
    form: CategoryForm,
    ctx: DashboardContext = Depends(require_restaurant),
) -> ToastResponse:
    category = await ctx.api.categories.update(category_id, form.to_payload())
    await ctx.query.invalidate(("categories",))
    return ctx.toast("category.updated", category)


@router.delete("/categories/{category_id}", response_model=ToastResponse)
async def delete_category(category_id: int, ctx: DashboardContext = Depends(require_restaurant)) -> ToastResponse:
    await ctx.api.categories.delete(category_id)
    await ctx.query.invalidate_many(("categories",), ("dishes",), ("dish_groups",))
    return ctx.toast("category.deleted")


@router.post("/categories/reorder", response_model=ToastResponse)
async def reorder_categories(form: ReorderForm, ctx: DashboardContext = Depends(require_restaurant)) -> ToastResponse:
    """Move one category and persist the resulting 1..n order in one call."""
    categories = sort_categories(await load_categories(ctx, ctx.session.restaurant_id))
    try:
        reordered = move_item(categories, form.from_index, form.to_index)
    except IndexError as exc:
        raise ApiValidationError(str(exc), status_code=422) from exc
    order = sequential_sort_order(reordered)
    await ctx.api.categories.update_sort_order(order)
    await ctx.query.invalidate_many(("categories",), ("dish_groups",))
    return ctx.toast("category.reordered", order)


# =============================================================================
# DISHES
# =============================================================================

@router.get("/dishes", response_model=list[Dish])
async def list_dishes(
    category_id: Optional[int] = Query(None),
    ctx: DashboardContext = Depends(require_restaurant),
) -> list[Dish]:
    dishes = await load_dishes(ctx, ctx.session.restaurant_id)
    if category_id is not None:
        dishes = [d for d in dishes if d.menu_category and d.menu_category.id == category_id]
    return dishes


@router.get("/dishes/grouped", response_model=list[DishGroup])
async def list_dishes_grouped(ctx: DashboardContext = Depends(require_restaurant)) -> list[DishGroup]:
    restaurant_id = ctx.session.restaurant_id
    return await ctx.query.fetch(
        ("dish_groups", restaurant_id),
        lambda: ctx.api.dishes.list_grouped_by_category(restaurant_id),
        response_type=list[DishGroup],
    )


@router.get("/dishes/{dish_id}", response_model=Dish)
async def get_dish(dish_id: int, ctx: DashboardContext = Depends(require_restaurant)) -> Dish:
    return await ctx.api.dishes.get(dish_id)


@router.post("/dishes", response_model=ToastResponse)
async def create_dish(form: DishForm, ctx: DashboardContext = Depends(require_restaurant)) -> ToastResponse:
    if form.restaurant_id is None:
        form.restaurant_id = ctx.session.restaurant_id
    dish = await ctx.api.dishes.create(form)
    logger.info(f"Dish {dish.id} '{dish.name}' created")
    await ctx.query.invalidate_many(("dishes",), ("dish_groups",))
    return ctx.toast("dish.created", dish)


@router.put("/dishes/{dish_id}", response_model=ToastResponse)
async def update_dish(
    dish_id: int,
    form: DishForm,
    ctx: DashboardContext = Depends(require_restaurant),
) -> ToastResponse:
    if form.restaurant_id is None:
        form.restaurant_id = ctx.session.restaurant_id
    dish = await ctx.api.dishes.update(dish_id, form)
    await ctx.query.invalidate_many(("dishes",), ("dish_groups",), ("dish_of_day",))
    return ctx.toast("dish.updated", dish)


@router.delete("/dishes/{dish_id}", response_model=ToastResponse)
async def delete_dish(dish_id: int, ctx: DashboardContext = Depends(require_restaurant)) -> ToastResponse:
    await ctx.api.dishes.delete(dish_id)
    await ctx.query.invalidate_many(("dishes",), ("dish_groups",), ("dish_of_day",))
    return ctx.toast("dish.deleted")


# =============================================================================
# DISH OF THE DAY
# =============================================================================

@router.get("/dish-of-day", response_model=Optional[Dish])
async def get_dish_of_day(ctx: DashboardContext = Depends(require_restaurant)) -> Optional[Dish]:
    restaurant_id = ctx.session.restaurant_id
    return await ctx.query.fetch(
        ("dish_of_day", restaurant_id),
        lambda: ctx.api.dishes.get_dish_of_day(restaurant_id),
        response_type=Optional[Dish],
    )


@router.post("/dish-of-day/{dish_id}", response_model=ToastResponse)
async def set_dish_of_day(dish_id: int, ctx: DashboardContext = Depends(require_restaurant)) -> ToastResponse:
    await ctx.api.dishes.set_dish_of_day(dish_id)
    await ctx.query.invalidate(("dish_of_day",))
    return ctx.toast("dish.of_day_set")
