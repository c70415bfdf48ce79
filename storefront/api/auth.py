"""
Storefront — Staff auth routes
"""
from fastapi import APIRouter, Depends, HTTPException, status

from storefront.api.deps import get_actor
from storefront.core.config import get_settings
from storefront.core.permissions import granted_features, visible_tabs
from storefront.core.security import create_access_token
from storefront.db.store import RedisStore, get_store
from storefront.db.user_ops import authenticate
from storefront.models.user import Actor
from storefront.schemas.auth import LoginRequest, MeResponse, TokenResponse

settings = get_settings()
router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
async def login(payload: LoginRequest, store: RedisStore = Depends(get_store)):
    """Validate staff credentials and issue an access token."""
    user = await authenticate(store, payload.username, payload.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token_data = {"sub": user.username, "role": user.role.value, "name": user.name}
    return TokenResponse(
        access_token=create_access_token(token_data),
        expires_in=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


@router.get("/me", response_model=MeResponse)
async def me(actor: Actor = Depends(get_actor)):
    return MeResponse(
        username=actor.username,
        role=actor.role,
        name=actor.name,
        features=[f.value for f in granted_features(actor.role)],
        tabs=visible_tabs(actor.role),
    )
