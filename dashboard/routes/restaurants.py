"""
Restaurant routes.
Restaurant list/selection, restaurant CRUD and working hours.
"""

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from dashboard.dependencies import DashboardContext, require_auth
from dashboard.schemas import Restaurant, RestaurantForm, ToastResponse, WorkingHourForm
from dashboard.services.auth import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/restaurants", tags=["Restaurants"])


class RestaurantChoice(BaseModel):
    restaurant_id: int


async def _refresh_restaurants(ctx: DashboardContext) -> list[Restaurant]:
    await ctx.query.invalidate(("restaurants",))
    restaurants = await AuthService(ctx.api).load_restaurants(ctx.session)
    await ctx.save()
    return restaurants


@router.get("", response_model=list[Restaurant])
async def list_restaurants(ctx: DashboardContext = Depends(require_auth)) -> list[Restaurant]:
    """Restaurants of the signed-in organization (all of them for admins without one)."""
    org = ctx.session.organization

    async def load() -> list[Restaurant]:
        if org:
            return await ctx.api.restaurants.list_by_organization(org.id)
        return await ctx.api.restaurants.list_all()

    restaurants = await ctx.query.fetch(
        ("restaurants", org.id if org else "all"), load, response_type=list[Restaurant]
    )
    ctx.session.set_restaurants(restaurants)
    await ctx.save()
    return restaurants


@router.post("/select", response_model=ToastResponse)
async def select_restaurant(
    choice: RestaurantChoice,
    ctx: DashboardContext = Depends(require_auth),
) -> ToastResponse:
    restaurant = next((r for r in ctx.session.restaurants if r.id == choice.restaurant_id), None)
    if restaurant is None:
        restaurant = await ctx.api.restaurants.get(choice.restaurant_id)
    ctx.session.set_selected_restaurant(restaurant)
    await ctx.save()
    return ToastResponse(success=True, data=restaurant)


@router.get("/{restaurant_id}", response_model=Restaurant)
async def get_restaurant(restaurant_id: int, ctx: DashboardContext = Depends(require_auth)) -> Restaurant:
    return await ctx.query.fetch(
        ("restaurant", restaurant_id),
        lambda: ctx.api.restaurants.get(restaurant_id),
        response_type=Restaurant,
    )


@router.post("", response_model=ToastResponse)
async def create_restaurant(
    form: RestaurantForm,
    ctx: DashboardContext = Depends(require_auth),
) -> ToastResponse:
    if form.organization_id is None and ctx.session.organization:
        form.organization_id = ctx.session.organization.id
    restaurant = await ctx.api.restaurants.create(form)
    logger.info(f"Restaurant {restaurant.id} '{restaurant.name}' created")
    await _refresh_restaurants(ctx)
    return ctx.toast("restaurant.created", restaurant)


@router.put("/{restaurant_id}", response_model=ToastResponse)
async def update_restaurant(
    restaurant_id: int,
    form: RestaurantForm,
    ctx: DashboardContext = Depends(require_auth),
) -> ToastResponse:
    restaurant = await ctx.api.restaurants.update(restaurant_id, form)
    await ctx.query.invalidate(("restaurant", restaurant_id))
    await _refresh_restaurants(ctx)
    return ctx.toast("restaurant.updated", restaurant)


@router.delete("/{restaurant_id}", response_model=ToastResponse)
async def delete_restaurant(restaurant_id: int, ctx: DashboardContext = Depends(require_auth)) -> ToastResponse:
    await ctx.api.restaurants.delete(restaurant_id)
    logger.info(f"Restaurant {restaurant_id} deleted")
    await ctx.query.invalidate(("restaurant", restaurant_id))
    await _refresh_restaurants(ctx)
    return ctx.toast("restaurant.deleted")


@router.put("/{restaurant_id}/working-hours", response_model=ToastResponse)
async def update_working_hours(
    restaurant_id: int,
    hours: list[WorkingHourForm],
    ctx: DashboardContext = Depends(require_auth),
) -> ToastResponse:
    """Replace the weekly schedule; closed days are not sent."""
    await ctx.api.restaurants.update_working_hours(restaurant_id, hours)
    await ctx.query.invalidate(("restaurant", restaurant_id))
    await _refresh_restaurants(ctx)
    return ctx.toast("restaurant.hours_updated")
