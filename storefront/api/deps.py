"""
Storefront — Route dependencies
"""
from fastapi import Depends, HTTPException, Request, status

from storefront.core.errors import Forbidden
from storefront.core.permissions import Feature, has_permission
from storefront.models.user import Actor, UserRole


def get_actor(request: Request) -> Actor:
    """The staff member behind the request, from claims set by JWTAuthMiddleware."""
    claims = getattr(request.state, "user", None)
    if not claims:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated.")
    try:
        role = UserRole(claims.get("role"))
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Token carries an unknown role."
        ) from None
    return Actor(username=claims["sub"], role=role, name=claims.get("name", ""))


def require_feature(feature: Feature):
    """Dependency factory: the actor, if their role grants ``feature``."""

    def dependency(actor: Actor = Depends(get_actor)) -> Actor:
        if not has_permission(actor.role, feature):
            raise Forbidden(
                f'Role "{actor.role.value}" does not have the {feature.value} permission.',
                role=actor.role.value,
                feature=feature.value,
            )
        return actor

    return dependency
