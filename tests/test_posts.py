# tests/test_posts.py
from uuid import uuid4

from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select

from unknown_items.db.session import get_db
from unknown_items.main import app
from unknown_items.models.comment import Comment
from unknown_items.models.engagement import Like
from unknown_items.models.enums import MediaType, UserRole
from unknown_items.models.post import Media, Post, PostTag, Tag
from unknown_items.services import post_service


def _post_payload(**overrides) -> dict:
    payload = {
        "title": "Lights over Phoenix",
        "content": "A V-shaped formation of lights crossed the sky.",
        "category": "UNIDENTIFIED_OBJECTS",
    }
    payload.update(overrides)
    return payload


async def test_create_post_success(client, user, user_headers) -> None:
    res = await client.post("/api/posts", json=_post_payload(tags=["UFO", "Arizona"]), headers=user_headers)
    assert res.status_code == 201
    data = res.json()
    assert data["title"] == "Lights over Phoenix"
    assert data["authorId"] == str(user.id)
    assert data["author"]["username"] == user.username
    assert data["mysteryStatus"] == "UNSOLVED"
    assert data["contentType"] == "TEXT"
    assert data["likesCount"] == 0
    assert data["isLiked"] is False
    assert sorted(t["slug"] for t in data["tags"]) == ["arizona", "ufo"]


async def test_create_post_requires_auth(client) -> None:
    res = await client.post("/api/posts", json=_post_payload())
    assert res.status_code == 401


async def test_create_post_validates_input(client, user_headers) -> None:
    res = await client.post("/api/posts", json=_post_payload(title=""), headers=user_headers)
    assert res.status_code == 400
    body = res.json()
    assert body["error"] == "Invalid input"
    assert body["details"]

    res = await client.post("/api/posts", json=_post_payload(category="GHOSTS"), headers=user_headers)
    assert res.status_code == 400


async def test_tag_upsert_shares_slug_across_posts(client, db_session, user_headers) -> None:
    await client.post("/api/posts", json=_post_payload(tags=["UFO", "ufo"]), headers=user_headers)
    await client.post("/api/posts", json=_post_payload(title="Second", tags=["ufo", "UFO"]), headers=user_headers)

    tags = (await db_session.execute(select(Tag).execution_options(populate_existing=True))).scalars().all()
    assert len(tags) == 1
    assert tags[0].slug == "ufo"
    assert tags[0].name == "UFO"
    assert tags[0].usage_count == 2


async def test_tag_created_concurrently_is_reused(client, db_session, user_headers, monkeypatch) -> None:
    db_session.add(Tag(name="ufo", slug="ufo", usage_count=1))
    await db_session.commit()

    # The first lookup misses, as if another request inserted the slug right after it
    real_find_tag = post_service.find_tag
    lookups: list[str] = []

    async def find_tag_after_race(db, slug):
        lookups.append(slug)
        if len(lookups) == 1:
            return None
        return await real_find_tag(db, slug)

    monkeypatch.setattr(post_service, "find_tag", find_tag_after_race)

    res = await client.post("/api/posts", json=_post_payload(tags=["UFO"]), headers=user_headers)
    assert res.status_code == 201
    assert [t["slug"] for t in res.json()["tags"]] == ["ufo"]
    assert lookups == ["ufo", "ufo"]

    rows = (await db_session.execute(select(Tag.slug, Tag.usage_count))).all()
    assert [tuple(row) for row in rows] == [("ufo", 2)]


async def test_duplicate_tag_names_link_once(client, db_session, user_headers) -> None:
    res = await client.post(
        "/api/posts", json=_post_payload(tags=["Deep Sea", "deep   sea", "DEEP SEA"]), headers=user_headers
    )
    assert res.status_code == 201
    assert [t["slug"] for t in res.json()["tags"]] == ["deep-sea"]
    links = (await db_session.execute(select(func.count()).select_from(PostTag))).scalar()
    assert links == 1


async def test_create_post_claims_own_unattached_media(client, db_session, user, other_user, user_headers) -> None:
    mine = Media(uploader_id=user.id, url="http://test/uploads/a.jpg", type=MediaType.IMAGE)
    theirs = Media(uploader_id=other_user.id, url="http://test/uploads/b.jpg", type=MediaType.IMAGE)
    db_session.add_all([mine, theirs])
    await db_session.commit()

    res = await client.post(
        "/api/posts",
        json=_post_payload(mediaIds=[str(mine.id), str(theirs.id), str(uuid4())]),
        headers=user_headers,
    )
    assert res.status_code == 201
    data = res.json()
    assert [m["id"] for m in data["media"]] == [str(mine.id)]

    result = await db_session.execute(select(Media.post_id).where(Media.id == theirs.id))
    assert result.scalar_one() is None


async def test_failed_create_rolls_back_post_and_media_claim(db_session, user, user_headers, monkeypatch) -> None:
    media = Media(uploader_id=user.id, url="http://test/uploads/a.jpg", type=MediaType.IMAGE)
    db_session.add(media)
    await db_session.commit()
    # The rollback below expires every loaded object
    media_id = media.id

    async def _get_db_with_rollback():
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    async def failing_attach_tags(db, post, names):
        raise RuntimeError("tag store unavailable")

    monkeypatch.setitem(app.dependency_overrides, get_db, _get_db_with_rollback)
    monkeypatch.setattr(post_service, "attach_tags", failing_attach_tags)

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        res = await client.post(
            "/api/posts",
            json=_post_payload(tags=["UFO"], mediaIds=[str(media_id)]),
            headers=user_headers,
        )
    assert res.status_code == 500
    assert res.json() == {"error": "Internal server error"}

    posts = (await db_session.execute(select(func.count()).select_from(Post))).scalar()
    assert posts == 0
    result = await db_session.execute(select(Media.post_id).where(Media.id == media_id))
    assert result.scalar_one() is None


async def test_get_post_increments_views(client, user, make_post) -> None:
    post = await make_post(user, views_count=3)
    res = await client.get(f"/api/posts/{post.id}")
    assert res.status_code == 200
    assert res.json()["viewsCount"] == 4
    assert res.json()["tags"] == []

    res = await client.get(f"/api/posts/{post.id}")
    assert res.json()["viewsCount"] == 5


async def test_get_missing_post(client) -> None:
    res = await client.get(f"/api/posts/{uuid4()}")
    assert res.status_code == 404
    assert res.json() == {"error": "Post not found"}


async def test_get_post_with_bad_id(client) -> None:
    res = await client.get("/api/posts/not-a-uuid")
    assert res.status_code == 400


async def test_owner_can_update_post(client, user, user_headers, make_post) -> None:
    post = await make_post(user)
    res = await client.patch(
        f"/api/posts/{post.id}",
        json={"mysteryStatus": "SOLVED", "title": "Solved: it was a weather balloon"},
        headers=user_headers,
    )
    assert res.status_code == 200
    data = res.json()
    assert data["mysteryStatus"] == "SOLVED"
    assert data["title"] == "Solved: it was a weather balloon"
    assert data["content"] == post.content


async def test_non_owner_cannot_update_or_delete(client, user, other_headers, make_post) -> None:
    post = await make_post(user)
    res = await client.patch(f"/api/posts/{post.id}", json={"title": "Hijacked"}, headers=other_headers)
    assert res.status_code == 403
    assert res.json() == {"error": "Forbidden"}

    res = await client.delete(f"/api/posts/{post.id}", headers=other_headers)
    assert res.status_code == 403

    res = await client.get(f"/api/posts/{post.id}")
    assert res.status_code == 200
    assert res.json()["title"] == post.title


async def test_admin_can_delete_any_post(client, user, admin_headers, make_post) -> None:
    post = await make_post(user)
    res = await client.delete(f"/api/posts/{post.id}", headers=admin_headers)
    assert res.status_code == 200
    assert res.json() == {"message": "Post deleted successfully"}


async def test_admin_rights_follow_the_stored_role(client, db_session, user, admin_user, admin_headers, make_post) -> None:
    post = await make_post(user)
    admin_user.role = UserRole.USER
    await db_session.commit()

    # Same token, issued while the account was still an admin
    res = await client.delete(f"/api/posts/{post.id}", headers=admin_headers)
    assert res.status_code == 403


async def test_delete_post_cascades(client, db_session, user, other_user, user_headers, make_post) -> None:
    post = await make_post(user)
    root = Comment(post_id=post.id, author_id=other_user.id, content="First!")
    db_session.add(root)
    await db_session.flush()
    db_session.add_all(
        [
            Comment(post_id=post.id, author_id=user.id, parent_id=root.id, content="Welcome"),
            Like(user_id=other_user.id, post_id=post.id),
        ]
    )
    await db_session.commit()

    res = await client.delete(f"/api/posts/{post.id}", headers=user_headers)
    assert res.status_code == 200

    assert (await db_session.execute(select(func.count()).select_from(Post))).scalar() == 0
    assert (await db_session.execute(select(func.count()).select_from(Comment))).scalar() == 0
    assert (await db_session.execute(select(func.count()).select_from(Like))).scalar() == 0

    res = await client.get(f"/api/posts/{post.id}")
    assert res.status_code == 404


async def test_delete_missing_post(client, user_headers) -> None:
    res = await client.delete(f"/api/posts/{uuid4()}", headers=user_headers)
    assert res.status_code == 404
