"""
Staff accounts: seeding, login, rate limiting and user management.
"""
import asyncio

import pytest

from storefront.core.config import Settings
from storefront.core.errors import Conflict, NotFound, ValidationFailed
from storefront.db.user_ops import (
    authenticate,
    create_user,
    delete_user,
    ensure_default_super_admin,
    list_users,
    update_user,
)
from storefront.models.user import UserRole
from tests.conftest import ADMIN, SUPER_ADMIN, auth_headers

SEED = Settings(ADMIN_USERNAME="owner", ADMIN_PASSWORD="changeme", ADMIN_DISPLAY_NAME="Owner")


# ─── Seeding ───────────────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_seed_is_idempotent_under_concurrency(store):
    created = await asyncio.gather(*(ensure_default_super_admin(store, SEED) for _ in range(3)))
    assert sorted(created) == [False, False, True]

    [user] = await list_users(store)
    assert (user.username, user.role, user.name) == ("owner", UserRole.SUPER_ADMIN, "Owner")
    assert await ensure_default_super_admin(store, SEED) is False


@pytest.mark.asyncio
async def test_seed_skipped_without_credentials(store):
    assert await ensure_default_super_admin(store, Settings(ADMIN_USERNAME="", ADMIN_PASSWORD="")) is False
    assert await list_users(store) == []


# ─── Records ───────────────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_create_and_authenticate(store):
    user = await create_user(store, "carl", "secret1", UserRole.CASHIER, "Carl")
    assert not hasattr(user, "password_hash")

    assert (await authenticate(store, "carl", "secret1")).role == UserRole.CASHIER
    assert await authenticate(store, "carl", "wrong") is None
    assert await authenticate(store, "nobody", "secret1") is None

    with pytest.raises(Conflict):
        await create_user(store, "carl", "another", UserRole.CHEF, "Other Carl")
    with pytest.raises(ValidationFailed):
        await create_user(store, "dee", "short", UserRole.CHEF, "Dee")


@pytest.mark.asyncio
async def test_deactivated_user_cannot_sign_in(store):
    await create_user(store, "carl", "secret1", UserRole.CASHIER, "Carl")
    await update_user(store, "carl", SUPER_ADMIN, active=False)
    assert await authenticate(store, "carl", "secret1") is None


@pytest.mark.asyncio
async def test_update_rules(store):
    await create_user(store, "root", "secret1", UserRole.SUPER_ADMIN, "Root")
    await create_user(store, "carl", "secret1", UserRole.CASHIER, "Carl")

    with pytest.raises(ValidationFailed):
        await update_user(store, "root", SUPER_ADMIN, role=UserRole.ADMIN)
    renamed = await update_user(store, "root", SUPER_ADMIN, name="Root User")
    assert renamed.name == "Root User"

    promoted = await update_user(store, "carl", SUPER_ADMIN, role=UserRole.ADMIN, password="newpass1")
    assert promoted.role == UserRole.ADMIN
    assert await authenticate(store, "carl", "newpass1") is not None

    with pytest.raises(NotFound):
        await update_user(store, "ghost", SUPER_ADMIN, name="Ghost")
    with pytest.raises(ValidationFailed):
        await update_user(store, "carl", SUPER_ADMIN)


@pytest.mark.asyncio
async def test_delete_rules(store):
    await create_user(store, "root", "secret1", UserRole.SUPER_ADMIN, "Root")
    await create_user(store, "carl", "secret1", UserRole.CASHIER, "Carl")

    with pytest.raises(ValidationFailed):
        await delete_user(store, "root", SUPER_ADMIN)
    await delete_user(store, "carl", SUPER_ADMIN)
    assert [u.username for u in await list_users(store)] == ["root"]
    with pytest.raises(NotFound):
        await delete_user(store, "carl", SUPER_ADMIN)


# ─── HTTP ──────────────────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_login_and_me(client, store):
    await create_user(store, "chen", "secret1", UserRole.CHEF, "Chen")

    r = await client.post("/auth/login", json={"username": "chen", "password": "secret1"})
    assert r.status_code == 200, r.text
    token = r.json()["access_token"]

    r = await client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    assert r.json()["role"] == "chef"
    assert r.json()["tabs"] == ["orders"]

    r = await client.post("/auth/login", json={"username": "chen", "password": "nope"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_login_is_rate_limited_per_username(client):
    statuses = [
        (await client.post("/auth/login", json={"username": "mallory", "password": "guess"})).status_code
        for _ in range(6)
    ]
    assert statuses[:5] == [401] * 5
    assert statuses[5] == 429

    r = await client.post("/auth/login", json={"username": "someone-else", "password": "guess"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_user_management_is_super_admin_only(client, store):
    r = await client.get("/admin/users", headers=auth_headers(ADMIN))
    assert r.status_code == 403

    headers = auth_headers(SUPER_ADMIN)
    r = await client.post(
        "/admin/users",
        json={"username": "chen", "password": "secret1", "role": "chef", "name": "Chen"},
        headers=headers,
    )
    assert r.status_code == 201
    assert "password_hash" not in r.json()["user"]

    r = await client.put("/admin/users/chen", json={"active": False}, headers=headers)
    assert r.json()["user"]["active"] is False

    r = await client.delete("/admin/users/root", headers=headers)
    assert r.status_code == 400

    r = await client.delete("/admin/users/chen", headers=headers)
    assert r.status_code == 204
