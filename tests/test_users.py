# tests/test_users.py
from unknown_items.models.engagement import Follow


async def test_profile_page_public_view(client, db_session, user, other_user, make_post) -> None:
    published = await make_post(user)
    await make_post(user, published=False)
    db_session.add(Follow(follower_id=other_user.id, following_id=user.id))
    await db_session.commit()

    res = await client.get(f"/api/users/{user.username}")
    assert res.status_code == 200
    data = res.json()
    assert data["username"] == user.username
    assert data["profile"]["displayName"] == "Mulder"
    assert data["postsCount"] == 1
    assert [p["id"] for p in data["posts"]] == [str(published.id)]
    assert data["followersCount"] == 1
    assert data["followingCount"] == 0
    assert data["isFollowing"] is False
    assert data["isOwnProfile"] is False
    assert "email" not in data


async def test_profile_page_as_follower(client, db_session, user, other_user, other_headers) -> None:
    db_session.add(Follow(follower_id=other_user.id, following_id=user.id))
    await db_session.commit()

    res = await client.get(f"/api/users/{user.username}", headers=other_headers)
    assert res.json()["isFollowing"] is True


async def test_own_profile_includes_unpublished_posts(client, user, user_headers, make_post) -> None:
    await make_post(user)
    draft = await make_post(user, published=False)

    res = await client.get(f"/api/users/{user.username}", headers=user_headers)
    data = res.json()
    assert data["isOwnProfile"] is True
    assert data["postsCount"] == 2
    assert data["posts"][0]["id"] == str(draft.id)
    assert data["posts"][0]["published"] is False


async def test_profile_page_unknown_user(client) -> None:
    res = await client.get("/api/users/nobody_here")
    assert res.status_code == 404
    assert res.json() == {"error": "User not found"}


async def test_update_own_profile(client, user, user_headers) -> None:
    res = await client.patch(
        "/api/users/me/profile",
        json={
            "displayName": "Fox Mulder",
            "bio": "The truth is out there.",
            "website": "https://example.com",
            "interests": ["ufos", "cryptids"],
        },
        headers=user_headers,
    )
    assert res.status_code == 200
    profile = res.json()["profile"]
    assert profile["displayName"] == "Fox Mulder"
    assert profile["bio"] == "The truth is out there."
    assert profile["website"].startswith("https://example.com")
    assert profile["interests"] == ["ufos", "cryptids"]

    res = await client.get(f"/api/users/{user.username}")
    assert res.json()["profile"]["displayName"] == "Fox Mulder"


async def test_update_profile_allows_clearing_website(client, user_headers) -> None:
    res = await client.patch("/api/users/me/profile", json={"website": ""}, headers=user_headers)
    assert res.status_code == 200
    assert res.json()["profile"]["website"] == ""


async def test_update_profile_validation(client, user_headers) -> None:
    res = await client.patch("/api/users/me/profile", json={"website": "not a url"}, headers=user_headers)
    assert res.status_code == 400

    res = await client.patch("/api/users/me/profile", json={"bio": "x" * 501}, headers=user_headers)
    assert res.status_code == 400

    res = await client.patch(
        "/api/users/me/profile", json={"interests": [f"topic{i}" for i in range(11)]}, headers=user_headers
    )
    assert res.status_code == 400


async def test_update_profile_requires_auth(client) -> None:
    res = await client.patch("/api/users/me/profile", json={"bio": "anon"})
    assert res.status_code == 401
