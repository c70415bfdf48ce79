"""
Storefront — JWT Authentication Middleware
Validates the Bearer token on staff routes; returns 401 on failure.
"""
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from jose import JWTError
from starlette.middleware.base import BaseHTTPMiddleware

from storefront.core.security import decode_token

# Everything else (storefront, health, metrics, login) is public.
PROTECTED_PREFIXES = ("/admin", "/auth/me")


class JWTAuthMiddleware(BaseHTTPMiddleware):
    """
    Validates the JWT on protected paths and attaches the decoded claims to
    request.state.user. Which staff member may do what is decided later by
    the route dependencies and the permission tables.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.method == "OPTIONS":
            return await call_next(request)

        if not request.url.path.startswith(PROTECTED_PREFIXES):
            return await call_next(request)

        auth_header = request.headers.get("Authorization", "")
        if not auth_header.startswith("Bearer "):
            return JSONResponse(
                status_code=401,
                content={"detail": "Missing or invalid Authorization header. Expected: Bearer <token>"},
                headers={"WWW-Authenticate": "Bearer"},
            )

        token = auth_header.split(" ", 1)[1]
        try:
            claims = decode_token(token)
        except JWTError as exc:
            return JSONResponse(
                status_code=401,
                content={"detail": f"Invalid or expired JWT: {str(exc)}"},
                headers={"WWW-Authenticate": "Bearer"},
            )
        if claims.get("type") != "access" or not claims.get("sub"):
            return JSONResponse(
                status_code=401,
                content={"detail": "Invalid token claims."},
                headers={"WWW-Authenticate": "Bearer"},
            )

        request.state.user = claims
        return await call_next(request)
