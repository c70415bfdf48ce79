"""
Storefront — Staff user management routes
"""
from fastapi import APIRouter, Depends, status

from storefront.api.deps import require_feature
from storefront.core.permissions import Feature
from storefront.db.store import RedisStore, get_store
from storefront.db.user_ops import create_user, delete_user, list_users, update_user
from storefront.models.user import Actor
from storefront.schemas.user import UserCreateRequest, UserListResponse, UserResponse, UserUpdateRequest

router = APIRouter(prefix="/admin/users", tags=["users"])
manage_users = require_feature(Feature.MANAGE_USERS)


@router.get("", response_model=UserListResponse)
async def users(_: Actor = Depends(manage_users), store: RedisStore = Depends(get_store)):
    return UserListResponse(users=await list_users(store))


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create(
    payload: UserCreateRequest,
    _: Actor = Depends(manage_users),
    store: RedisStore = Depends(get_store),
):
    user = await create_user(store, payload.username, payload.password, payload.role, payload.name)
    return UserResponse(user=user)


@router.put("/{username}", response_model=UserResponse)
async def update(
    username: str,
    payload: UserUpdateRequest,
    actor: Actor = Depends(manage_users),
    store: RedisStore = Depends(get_store),
):
    user = await update_user(store, username, actor, **payload.model_dump())
    return UserResponse(user=user)


@router.delete("/{username}", status_code=status.HTTP_204_NO_CONTENT)
async def delete(username: str, actor: Actor = Depends(manage_users), store: RedisStore = Depends(get_store)):
    await delete_user(store, username, actor)
