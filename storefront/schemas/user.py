"""
Storefront — User management schemas
"""
from pydantic import BaseModel, Field

from storefront.models.user import SafeUser, UserRole


class UserCreateRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=6, max_length=128)
    role: UserRole
    name: str = Field(..., min_length=1, max_length=120)


class UserUpdateRequest(BaseModel):
    role: UserRole | None = None
    name: str | None = Field(None, min_length=1, max_length=120)
    active: bool | None = None
    password: str | None = Field(None, max_length=128)


class UserResponse(BaseModel):
    user: SafeUser


class UserListResponse(BaseModel):
    users: list[SafeUser]
