"""
Storefront — Staff user records
"""
import logging

from storefront.core.config import Settings, get_settings
from storefront.core.errors import Conflict, NotFound, ValidationFailed
from storefront.core.security import hash_password, verify_password
from storefront.db.store import USER, ConditionalCheckFailed, IndexKey, RedisStore, entity_key
from storefront.models import utc_now
from storefront.models.user import Actor, SafeUser, User, UserRole

logger = logging.getLogger(__name__)

USERS_PARTITION = "USERS"
MIN_PASSWORD_LENGTH = 6


def user_key(username: str) -> str:
    return entity_key(USER, username)


def _index(role: UserRole, username: str) -> IndexKey:
    return IndexKey(USERS_PARTITION, f"ROLE#{role.value}#{username}")


def _check_password(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationFailed(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


async def get_user(store: RedisStore, username: str) -> User | None:
    record = await store.get(user_key(username))
    return User.model_validate(record) if record else None


async def list_users(store: RedisStore) -> list[SafeUser]:
    return [User.model_validate(r).safe() for r in await store.query(USERS_PARTITION)]


async def create_user(
    store: RedisStore, username: str, password: str, role: UserRole, name: str
) -> SafeUser:
    if not username.strip():
        raise ValidationFailed("Username is required")
    _check_password(password)
    now = utc_now()
    user = User(
        username=username,
        password_hash=hash_password(password),
        role=role,
        name=name,
        active=True,
        created_at=now,
        updated_at=now,
    )
    try:
        await store.put_if_absent(user_key(username), user.model_dump(), _index(role, username))
    except ConditionalCheckFailed:
        raise Conflict("A user with this username already exists", username=username)
    logger.info("Created user %s (%s)", username, role.value)
    return user.safe()


async def update_user(
    store: RedisStore,
    username: str,
    actor: Actor,
    role: UserRole | None = None,
    name: str | None = None,
    active: bool | None = None,
    password: str | None = None,
) -> SafeUser:
    if actor.username == username and role is not None and role != actor.role:
        raise ValidationFailed("Cannot change your own role")

    changes: dict = {}
    if role is not None:
        changes["role"] = role
    if name is not None:
        changes["name"] = name
    if active is not None:
        changes["active"] = active
    if password:
        _check_password(password)
        changes["password_hash"] = hash_password(password)
    if not changes:
        raise ValidationFailed("No fields to update")
    changes["updated_at"] = utc_now()

    try:
        record = await store.update_if_exists(
            user_key(username), changes, _index(role, username) if role is not None else None
        )
    except ConditionalCheckFailed:
        raise NotFound("User not found", username=username)
    logger.info("Updated user %s (%s)", username, ", ".join(k for k in changes if k != "updated_at"))
    return User.model_validate(record).safe()


async def delete_user(store: RedisStore, username: str, actor: Actor) -> None:
    if actor.username == username:
        raise ValidationFailed("Cannot delete your own account")
    try:
        await store.delete_if_exists(user_key(username))
    except ConditionalCheckFailed:
        raise NotFound("User not found", username=username)
    logger.info("Deleted user %s", username)


async def authenticate(store: RedisStore, username: str, password: str) -> User | None:
    """The user if the credentials match an active account, else None."""
    user = await get_user(store, username)
    if user is None or not user.active:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


async def ensure_default_super_admin(store: RedisStore, settings: Settings | None = None) -> bool:
    """
    Create the configured super admin if that username is still free.

    Safe to call on every startup and from several processes at once: the
    write is conditional, so only one of them creates the account.
    Returns True when this call created it.
    """
    settings = settings or get_settings()
    if not settings.ADMIN_USERNAME or not settings.ADMIN_PASSWORD:
        logger.warning("ADMIN_USERNAME / ADMIN_PASSWORD not set, no default super admin seeded")
        return False
    try:
        await create_user(
            store,
            settings.ADMIN_USERNAME,
            settings.ADMIN_PASSWORD,
            UserRole.SUPER_ADMIN,
            settings.ADMIN_DISPLAY_NAME,
        )
    except Conflict:
        return False
    logger.info("Seeded default super admin %s", settings.ADMIN_USERNAME)
    return True
