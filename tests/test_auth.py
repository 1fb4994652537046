# tests/test_auth.py
from conftest import TEST_PASSWORD
from sqlalchemy import select

from unknown_items.core.security import create_refresh_token, decode_token
from unknown_items.models.user import Profile, User
from unknown_items.services import auth_service
from unknown_items.services.auth_service import get_or_create_oauth_user


def _register_payload(**overrides) -> dict:
    payload = {
        "username": "fox_mulder",
        "email": "fox@example.com",
        "password": "trustno1",
        "confirmPassword": "trustno1",
    }
    payload.update(overrides)
    return payload


async def test_register_creates_user_and_profile(client, db_session) -> None:
    res = await client.post("/api/auth/register", json=_register_payload())
    assert res.status_code == 201
    data = res.json()
    assert data["message"] == "User created successfully"
    assert data["user"]["username"] == "fox_mulder"
    assert data["user"]["email"] == "fox@example.com"
    assert data["user"]["profile"]["displayName"] == "fox_mulder"

    result = await db_session.execute(select(Profile).join(User).where(User.username == "fox_mulder"))
    assert result.scalar_one().display_name == "fox_mulder"


async def test_register_rejects_mismatched_passwords(client) -> None:
    res = await client.post("/api/auth/register", json=_register_payload(confirmPassword="different"))
    assert res.status_code == 400
    body = res.json()
    assert body["error"] == "Invalid input"
    assert any("Passwords do not match" in d["msg"] for d in body["details"])


async def test_register_rejects_bad_username(client) -> None:
    res = await client.post("/api/auth/register", json=_register_payload(username="no spaces!"))
    assert res.status_code == 400


async def test_register_reports_email_and_username_collisions(client, user) -> None:
    res = await client.post("/api/auth/register", json=_register_payload(email=user.email))
    assert res.status_code == 400
    assert res.json()["error"] == "A user with this email already exists"

    res = await client.post("/api/auth/register", json=_register_payload(username=user.username))
    assert res.status_code == 400
    assert res.json()["error"] == "This username is already taken"


async def test_register_race_reports_collision(client, db_session, user, monkeypatch) -> None:
    # The pre-check passes, then the insert hits the row a concurrent registration wrote
    real_check = auth_service.find_registration_conflict
    checks: list[str] = []

    async def check_after_race(db, email, username):
        checks.append(email)
        if len(checks) == 1:
            return None
        return await real_check(db, email, username)

    monkeypatch.setattr(auth_service, "find_registration_conflict", check_after_race)

    email = user.email
    res = await client.post("/api/auth/register", json=_register_payload(email=email))
    assert res.status_code == 400
    assert res.json()["error"] == "A user with this email already exists"
    assert len(checks) == 2

    users = (await db_session.execute(select(User).where(User.email == email))).scalars().all()
    assert len(users) == 1


async def test_login_and_me(client, user) -> None:
    res = await client.post("/api/auth/login", json={"email": user.email, "password": TEST_PASSWORD})
    assert res.status_code == 200
    tokens = res.json()
    assert tokens["tokenType"] == "bearer"
    assert decode_token(tokens["accessToken"])["type"] == "access"

    res = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {tokens['accessToken']}"})
    assert res.status_code == 200
    assert res.json()["username"] == user.username


async def test_login_wrong_password(client, user) -> None:
    res = await client.post("/api/auth/login", json={"email": user.email, "password": "wrong-password"})
    assert res.status_code == 401
    assert res.json() == {"error": "Invalid email or password"}


async def test_me_requires_token(client) -> None:
    res = await client.get("/api/auth/me")
    assert res.status_code == 401
    assert res.json() == {"error": "Unauthorized"}


async def test_refresh_token_rotates_pair(client, user) -> None:
    res = await client.post("/api/auth/refresh", json={"refreshToken": create_refresh_token(user.id)})
    assert res.status_code == 200
    assert res.json()["user"]["id"] == str(user.id)


async def test_refresh_rejects_access_token(client, user_headers) -> None:
    access = user_headers["Authorization"].split(" ", 1)[1]
    res = await client.post("/api/auth/refresh", json={"refreshToken": access})
    assert res.status_code == 401


async def test_oauth_user_reuses_existing_account(db_session, user) -> None:
    found = await get_or_create_oauth_user(db_session, user.email, name="Someone")
    assert found.id == user.id


async def test_oauth_user_gets_unique_username(db_session, user) -> None:
    # Local part collides with the existing "mulder" account
    created = await get_or_create_oauth_user(db_session, "mulder@fbi.gov", name="Fox", image="http://img/x.png")
    await db_session.commit()
    assert created.username.startswith("mulder_")
    assert len(created.username) == len("mulder_") + 4
    assert created.email_verified is not None
    assert created.password_hash is None
    assert created.profile.display_name == "Fox"


async def test_oauth_only_user_cannot_log_in_with_password(client, db_session) -> None:
    await get_or_create_oauth_user(db_session, "cigarette@example.com")
    await db_session.commit()
    res = await client.post("/api/auth/login", json={"email": "cigarette@example.com", "password": "anything"})
    assert res.status_code == 401
