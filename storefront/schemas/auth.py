"""
Storefront — Auth schemas
"""
from pydantic import BaseModel, Field

from storefront.models.user import UserRole


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=64, examples=["cashier1"])
    password: str = Field(..., min_length=1, max_length=128)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds


class MeResponse(BaseModel):
    username: str
    role: UserRole
    name: str
    features: list[str]
    tabs: list[str]
