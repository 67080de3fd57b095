"""
Blog API — Like Endpoint & Uniqueness Tests
=============================================

What we test:
    ✅ Liking twice: second attempt fails, count grows by exactly one
    ✅ Unlike, and unlike when not liked (404)
    ✅ The unique constraint itself rejects a duplicate row
"""

import pytest

from app.exceptions import AlreadyExistsError
from app.models.like import Like
from app.models.post import Post
from app.models.user import User
from app.repositories.base import translate_storage_errors
from app.repositories.likes import LikeRepository

API = "/api/v1"


class TestLikeEndpoints:
    @pytest.mark.asyncio
    async def test_double_like_rejected(self, client, register_user):
        _, alice = await register_user("a@x.com")
        _, bob = await register_user("b@x.com")
        post = (await client.post(f"{API}/posts", json={"title": "T"}, headers=alice)).json()
        url = f"{API}/posts/{post['id']}/likes"

        before = (await client.get(url, headers=bob)).json()["likes_count"]

        first = await client.post(url, headers=bob)
        assert first.status_code == 201
        assert first.json()["likes_count"] == before + 1

        second = await client.post(url, headers=bob)
        assert second.status_code == 400
        assert second.json()["error"] == "already_exists"

        after = (await client.get(url, headers=bob)).json()
        assert after == {"post_id": post["id"], "likes_count": before + 1}

    @pytest.mark.asyncio
    async def test_likes_from_different_users(self, client, register_user):
        _, alice = await register_user("a@x.com")
        _, bob = await register_user("b@x.com")
        post = (await client.post(f"{API}/posts", json={"title": "T"}, headers=alice)).json()
        url = f"{API}/posts/{post['id']}/likes"

        await client.post(url, headers=alice)
        await client.post(url, headers=bob)
        assert (await client.get(url, headers=alice)).json()["likes_count"] == 2

    @pytest.mark.asyncio
    async def test_unlike(self, client, register_user):
        _, alice = await register_user("a@x.com")
        post = (await client.post(f"{API}/posts", json={"title": "T"}, headers=alice)).json()
        url = f"{API}/posts/{post['id']}/likes"

        not_liked = await client.delete(url, headers=alice)
        assert not_liked.status_code == 404

        await client.post(url, headers=alice)
        response = await client.delete(url, headers=alice)
        assert response.status_code == 200
        assert response.json()["likes_count"] == 0

    @pytest.mark.asyncio
    async def test_like_missing_post(self, client, register_user):
        _, alice = await register_user("a@x.com")
        response = await client.post(f"{API}/posts/31337/likes", headers=alice)
        assert response.status_code == 404


class TestLikeConstraint:
    @pytest.mark.asyncio
    async def test_duplicate_row_becomes_already_exists(self, db_session):
        user = User(username="alice", email="a@x.com", password_hash="x")
        db_session.add(user)
        await db_session.flush()
        post = Post(user_id=user.id, title="T", content="", slug="t")
        db_session.add(post)
        await db_session.flush()

        repo = LikeRepository(db_session)
        await repo.add(Like(user_id=user.id, post_id=post.id))

        # Skips the service's pre-check, as two concurrent requests would.
        with pytest.raises(AlreadyExistsError):
            with translate_storage_errors("like_post", resource="like"):
                await repo.add(Like(user_id=user.id, post_id=post.id))
