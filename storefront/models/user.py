"""
Storefront — Staff user records

[CONFIG DATA] — accounts persist; roles are a closed set.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum as PyEnum

from pydantic import BaseModel


class UserRole(str, PyEnum):
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    CASHIER = "cashier"
    CHEF = "chef"


class SafeUser(BaseModel):
    username: str
    role: UserRole
    name: str
    active: bool = True
    created_at: datetime
    updated_at: datetime


class User(SafeUser):
    password_hash: str

    def safe(self) -> SafeUser:
        return SafeUser.model_validate(self.model_dump(exclude={"password_hash"}))

    def __repr__(self) -> str:
        return f"<User username={self.username} role={self.role.value}>"


@dataclass(frozen=True)
class Actor:
    """The authenticated staff member behind a request."""

    username: str
    role: UserRole
    name: str = ""
