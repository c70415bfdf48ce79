"""
Storefront — Domain error taxonomy

Every failure the core can explain carries a machine-readable ``code`` and
the structured detail the dashboard needs to render a specific message.
``storefront.main`` maps ``status_code`` onto the HTTP response; anything
that is not a StorefrontError (e.g. a Redis connection error) propagates
untouched and becomes a generic 500.
"""
from typing import Any


class StorefrontError(Exception):
    status_code: int = 500
    code: str = "error"

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_payload(self) -> dict[str, Any]:
        return {"detail": self.message, "code": self.code, **self.extra}


class NotFound(StorefrontError):
    status_code = 404
    code = "not_found"


class ValidationFailed(StorefrontError):
    status_code = 400
    code = "validation_failed"


class InvalidStatus(StorefrontError):
    status_code = 400
    code = "invalid_status"


class InvalidTransition(StorefrontError):
    status_code = 400
    code = "invalid_transition"

    def __init__(self, from_status: str, to_status: str, message: str | None = None):
        super().__init__(
            message or f'Cannot move from "{from_status}" to "{to_status}". Status can only move forward.',
            from_status=from_status,
            to_status=to_status,
        )


class Forbidden(StorefrontError):
    status_code = 403
    code = "forbidden"


class Conflict(StorefrontError):
    status_code = 409
    code = "conflict"


class ConcurrentUpdate(Conflict):
    code = "concurrent_update"


class ItemsUnavailable(Conflict):
    code = "items_unavailable"

    def __init__(self, items: list[str]):
        super().__init__(
            f"The following items are unavailable: {', '.join(items)}",
            unavailable_items=items,
        )


class InsufficientStock(StorefrontError):
    status_code = 409
    code = "insufficient_stock"

    def __init__(self, shortfalls: list):
        self.shortfalls = shortfalls
        names = ", ".join(s.name for s in shortfalls)
        super().__init__(
            f"Insufficient stock for: {names}",
            insufficient_items=[s.model_dump(mode="json") for s in shortfalls],
        )
