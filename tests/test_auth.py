"""
Auth endpoint tests: registration, login, and the bearer-token gate.
"""
import pytest
from httpx import AsyncClient

from conftest import auth_header, register_user


# ---------------------------------------------------------------------------
# Register
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_register_returns_user_and_token(async_client: AsyncClient):
    resp = await async_client.post("/auth/register", json={
        "username": "alice",
        "email": "alice@example.com",
        "password": "wonderland",
        "bio": "Curious.",
    })
    assert resp.status_code == 201
    body = resp.json()
    assert body["token"]
    user = body["user"]
    assert user["username"] == "alice"
    assert user["email"] == "alice@example.com"
    assert user["bio"] == "Curious."
    assert user["following"] == []
    assert "id" in user
    assert "created_at" in user


@pytest.mark.asyncio
async def test_register_never_exposes_password(async_client: AsyncClient):
    resp = await async_client.post("/auth/register", json={
        "username": "secretive",
        "email": "secretive@example.com",
        "password": "plaintext-password",
    })
    assert resp.status_code == 201
    user = resp.json()["user"]
    assert "password" not in user
    assert "password_hash" not in user
    assert "plaintext-password" not in resp.text


@pytest.mark.asyncio
async def test_register_bio_defaults_to_empty(async_client: AsyncClient):
    body = await register_user(async_client, "nobio")
    assert body["user"]["bio"] == ""


@pytest.mark.asyncio
async def test_register_normalises_email(async_client: AsyncClient):
    resp = await async_client.post("/auth/register", json={
        "username": "shouty",
        "email": "  Shouty@Example.COM ",
        "password": "pw",
    })
    assert resp.status_code == 201
    assert resp.json()["user"]["email"] == "shouty@example.com"


@pytest.mark.asyncio
async def test_register_duplicate_email_any_case_fails(async_client: AsyncClient):
    await register_user(async_client, "first")
    resp = await async_client.post("/auth/register", json={
        "username": "second",
        "email": "FIRST@example.com",
        "password": "pw",
    })
    assert resp.status_code == 400
    assert resp.json() == {"error": "Registration failed"}


@pytest.mark.asyncio
async def test_register_duplicate_username_fails(async_client: AsyncClient):
    await register_user(async_client, "taken")
    resp = await async_client.post("/auth/register", json={
        "username": "taken",
        "email": "other@example.com",
        "password": "pw",
    })
    assert resp.status_code == 400
    assert resp.json() == {"error": "Registration failed"}


@pytest.mark.asyncio
async def test_register_missing_fields_is_generic_400(async_client: AsyncClient):
    resp = await async_client.post("/auth/register", json={"username": "incomplete"})
    assert resp.status_code == 400
    # No field names leak into the response.
    assert resp.json() == {"error": "Validation failed"}


@pytest.mark.asyncio
async def test_register_blank_username_rejected(async_client: AsyncClient):
    resp = await async_client.post("/auth/register", json={
        "username": "   ",
        "email": "blank@example.com",
        "password": "pw",
    })
    assert resp.status_code == 400


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_login_success(async_client: AsyncClient):
    registered = await register_user(async_client, "bob", password="hunter22")
    resp = await async_client.post("/auth/login", json={
        "email": "bob@example.com",
        "password": "hunter22",
    })
    assert resp.status_code == 200
    body = resp.json()
    assert body["user"]["id"] == registered["user"]["id"]
    assert body["token"]


@pytest.mark.asyncio
async def test_login_email_is_case_insensitive(async_client: AsyncClient):
    await register_user(async_client, "carol", password="pw-carol")
    resp = await async_client.post("/auth/login", json={
        "email": "CAROL@Example.com",
        "password": "pw-carol",
    })
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_login_wrong_password_and_unknown_email_look_identical(async_client: AsyncClient):
    await register_user(async_client, "dave", password="right")

    wrong_password = await async_client.post("/auth/login", json={
        "email": "dave@example.com",
        "password": "wrong",
    })
    unknown_email = await async_client.post("/auth/login", json={
        "email": "nobody@example.com",
        "password": "wrong",
    })
    assert wrong_password.status_code == 401
    assert unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json() == {"error": "Invalid credentials"}


@pytest.mark.asyncio
async def test_login_missing_password_is_400(async_client: AsyncClient):
    resp = await async_client.post("/auth/login", json={"email": "x@example.com"})
    assert resp.status_code == 400


# ---------------------------------------------------------------------------
# Bearer token gate
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_mutation_without_token_is_401(async_client: AsyncClient):
    resp = await async_client.post("/posts", json={"title": "t", "content": "c"})
    assert resp.status_code == 401
    assert resp.json() == {"error": "Please authenticate"}


@pytest.mark.asyncio
async def test_mutation_with_non_bearer_scheme_is_401(async_client: AsyncClient):
    body = await register_user(async_client, "basic")
    resp = await async_client.post(
        "/posts",
        json={"title": "t", "content": "c"},
        headers={"Authorization": f"Basic {body['token']}"},
    )
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_tampered_token_is_401(async_client: AsyncClient):
    body = await register_user(async_client, "eve")
    token = body["token"]
    # Flip one character of the signature segment.
    head, payload, signature = token.split(".")
    flipped = ("A" if signature[0] != "A" else "B") + signature[1:]
    tampered = ".".join([head, payload, flipped])

    resp = await async_client.post(
        "/posts", json={"title": "t", "content": "c"}, headers=auth_header(tampered)
    )
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_garbage_token_is_401(async_client: AsyncClient):
    resp = await async_client.post(
        "/posts", json={"title": "t", "content": "c"}, headers=auth_header("not-a-jwt")
    )
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_token_authenticates_its_own_user_only(async_client: AsyncClient):
    alice = await register_user(async_client, "alice2")
    bob = await register_user(async_client, "bob2")

    resp = await async_client.post(
        "/posts", json={"title": "Mine", "content": "c"}, headers=auth_header(alice["token"])
    )
    assert resp.status_code == 201
    post = resp.json()
    assert post["author"]["id"] == alice["user"]["id"]
    assert post["author"]["id"] != bob["user"]["id"]
