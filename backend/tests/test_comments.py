"""
Blog API — Comment Endpoint Tests
===================================
"""

import pytest

API = "/api/v1"


@pytest.fixture
def post_for(client):
    async def _create(headers, title="Post"):
        response = await client.post(f"{API}/posts", json={"title": title}, headers=headers)
        assert response.status_code == 201
        return response.json()

    return _create


class TestComments:
    @pytest.mark.asyncio
    async def test_create_and_list_oldest_first(self, client, register_user, post_for):
        user, headers = await register_user("a@x.com")
        post = await post_for(headers)
        url = f"{API}/posts/{post['id']}/comments"

        for text in ("first", "second", "third"):
            response = await client.post(url, json={"content": text}, headers=headers)
            assert response.status_code == 201
            assert response.json()["user_id"] == user["id"]

        response = await client.get(url, params={"page_size": 2}, headers=headers)
        body = response.json()
        assert body["total_count"] == 3
        assert [c["content"] for c in body["items"]] == ["first", "second"]
        assert body["items"][0]["author"]["username"] == user["username"]

    @pytest.mark.asyncio
    async def test_author_filter(self, client, register_user, post_for):
        _, alice = await register_user("a@x.com")
        bob_user, bob = await register_user("b@x.com")
        post = await post_for(alice)
        url = f"{API}/posts/{post['id']}/comments"
        await client.post(url, json={"content": "from alice"}, headers=alice)
        await client.post(url, json={"content": "from bob"}, headers=bob)

        response = await client.get(url, params={"author_id": bob_user["id"]}, headers=alice)
        assert [c["content"] for c in response.json()["items"]] == ["from bob"]

    @pytest.mark.asyncio
    async def test_blank_comment_rejected(self, client, register_user, post_for):
        _, headers = await register_user("a@x.com")
        post = await post_for(headers)
        response = await client.post(
            f"{API}/posts/{post['id']}/comments", json={"content": "   "}, headers=headers
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_comment_on_missing_post(self, client, register_user):
        _, headers = await register_user("a@x.com")
        response = await client.post(
            f"{API}/posts/777/comments", json={"content": "hello"}, headers=headers
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_only_owner_edits_or_deletes(self, client, register_user, post_for):
        _, alice = await register_user("a@x.com")
        _, bob = await register_user("b@x.com")
        post = await post_for(alice)
        url = f"{API}/posts/{post['id']}/comments"
        comment = (await client.post(url, json={"content": "mine"}, headers=bob)).json()
        comment_url = f"{url}/{comment['id']}"

        # The post owner does not own the comment.
        assert (await client.put(comment_url, json={"content": "x"}, headers=alice)).status_code == 403
        assert (await client.delete(comment_url, headers=alice)).status_code == 403

        edited = await client.put(comment_url, json={"content": "edited"}, headers=bob)
        assert edited.status_code == 200
        assert edited.json()["content"] == "edited"

        deleted = await client.delete(comment_url, headers=bob)
        assert deleted.status_code == 200
        assert (await client.get(url, headers=bob)).json()["total_count"] == 0

    @pytest.mark.asyncio
    async def test_comment_under_wrong_post_is_404(self, client, register_user, post_for):
        _, headers = await register_user("a@x.com")
        first = await post_for(headers, "First")
        second = await post_for(headers, "Second")
        comment = (
            await client.post(
                f"{API}/posts/{first['id']}/comments", json={"content": "hi"}, headers=headers
            )
        ).json()

        response = await client.put(
            f"{API}/posts/{second['id']}/comments/{comment['id']}",
            json={"content": "moved"},
            headers=headers,
        )
        assert response.status_code == 404
