"""
Storefront — Menu and category routes

GET /menu and GET /categories are the public catalog; everything under
/admin needs manage_menu.
"""
from fastapi import APIRouter, Depends, Query, status

from storefront.api.deps import require_feature
from storefront.core.errors import NotFound
from storefront.core.permissions import Feature
from storefront.db.menu_ops import (
    create_category,
    create_menu_item,
    delete_menu_item,
    get_menu_item,
    list_categories,
    list_menu_items,
    toggle_availability,
    update_menu_item,
)
from storefront.db.store import RedisStore, get_store
from storefront.models.menu import Category, MenuItem
from storefront.models.user import Actor
from storefront.schemas.menu import (
    AvailabilityRequest,
    CategoryCreateRequest,
    CategoryListResponse,
    MenuItemCreateRequest,
    MenuItemUpdateRequest,
    MenuListResponse,
)

router = APIRouter(tags=["menu"])
manage_menu = require_feature(Feature.MANAGE_MENU)


# ── Public catalog ──────────────────────────────────────────
@router.get("/menu", response_model=MenuListResponse)
async def public_menu(
    category: str | None = Query(None, description="Category slug"),
    store: RedisStore = Depends(get_store),
):
    return MenuListResponse(items=await list_menu_items(store, category, available_only=True))


@router.get("/categories", response_model=CategoryListResponse)
async def public_categories(store: RedisStore = Depends(get_store)):
    return CategoryListResponse(categories=await list_categories(store))


# ── Admin ───────────────────────────────────────────────────
@router.get("/admin/menu", response_model=MenuListResponse)
async def admin_menu(
    category: str | None = Query(None),
    _: Actor = Depends(manage_menu),
    store: RedisStore = Depends(get_store),
):
    return MenuListResponse(items=await list_menu_items(store, category))


@router.get("/admin/menu/{slug}", response_model=MenuItem)
async def admin_menu_item(slug: str, _: Actor = Depends(manage_menu), store: RedisStore = Depends(get_store)):
    item = await get_menu_item(store, slug)
    if item is None:
        raise NotFound("Menu item not found", slug=slug)
    return item


@router.post("/admin/menu", response_model=MenuItem, status_code=status.HTTP_201_CREATED)
async def create_item(
    payload: MenuItemCreateRequest,
    _: Actor = Depends(manage_menu),
    store: RedisStore = Depends(get_store),
):
    return await create_menu_item(
        store,
        name=payload.name,
        description=payload.description,
        category=payload.category,
        category_slug=payload.category_slug,
        price=payload.price,
        is_available=payload.is_available,
        image_key=payload.image_key,
        ingredients=[i.to_ingredient() for i in payload.ingredients],
    )


@router.put("/admin/menu/{slug}", response_model=MenuItem)
async def update_item(
    slug: str,
    payload: MenuItemUpdateRequest,
    _: Actor = Depends(manage_menu),
    store: RedisStore = Depends(get_store),
):
    fields = payload.model_dump(exclude={"ingredients"})
    if payload.ingredients is not None:
        fields["ingredients"] = [i.to_ingredient() for i in payload.ingredients]
    return await update_menu_item(store, slug, **fields)


@router.patch("/admin/menu/{slug}/availability", response_model=MenuItem)
async def set_availability(
    slug: str,
    payload: AvailabilityRequest,
    _: Actor = Depends(manage_menu),
    store: RedisStore = Depends(get_store),
):
    return await toggle_availability(store, slug, payload.is_available)


@router.delete("/admin/menu/{slug}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(slug: str, _: Actor = Depends(manage_menu), store: RedisStore = Depends(get_store)):
    await delete_menu_item(store, slug)


@router.post("/admin/categories", response_model=Category, status_code=status.HTTP_201_CREATED)
async def create_category_route(
    payload: CategoryCreateRequest,
    _: Actor = Depends(manage_menu),
    store: RedisStore = Depends(get_store),
):
    return await create_category(store, payload.name, payload.sort_order)
