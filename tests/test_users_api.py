"""
Blogwrite Backend — User Endpoint Tests
========================================

What:  Public profiles, profile update, the requester's post list and stats.
How:   httpx AsyncClient against a per-test app on SQLite.
"""

from uuid import uuid4

import pytest


async def create_post(client, headers, **fields):
    payload = {"title": "Hello", "content": "World"}
    payload.update(fields)
    response = await client.post("/api/blogs", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["blog"]


class TestProfile:

    @pytest.mark.asyncio
    async def test_public_profile_lists_published_only(self, test_client, register_user):
        alice_user, alice = await register_user("alice")
        _, bob = await register_user("bob")
        published = await create_post(test_client, alice, title="public", published=True)
        await create_post(test_client, alice, title="draft")
        await test_client.post(f"/api/blogs/{published['id']}/like", headers=bob)

        response = await test_client.get(f"/api/users/profile/{alice_user['id']}")
        assert response.status_code == 200
        body = response.json()
        assert body["user"]["username"] == "alice"
        assert "passwordHash" not in body["user"]
        assert len(body["blogs"]) == 1
        item = body["blogs"][0]
        assert item["title"] == "public"
        assert item["likes"] == 1
        assert item["views"] == 0
        assert set(item) == {"id", "title", "createdAt", "views", "likes"}

    @pytest.mark.asyncio
    async def test_profile_caps_at_ten(self, test_client, register_user):
        alice_user, alice = await register_user("alice")
        for i in range(12):
            await create_post(test_client, alice, title=f"p{i}", published=True)

        body = (await test_client.get(f"/api/users/profile/{alice_user['id']}")).json()
        assert len(body["blogs"]) == 10
        assert body["blogs"][0]["title"] == "p11"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("user_id", [str(uuid4()), "not-a-uuid"])
    async def test_missing_profile(self, test_client, user_id):
        response = await test_client.get(f"/api/users/profile/{user_id}")
        assert response.status_code == 404
        assert response.json()["message"] == "User not found"


class TestProfileUpdate:

    @pytest.mark.asyncio
    async def test_update(self, test_client, register_user):
        _, headers = await register_user("alice")
        response = await test_client.put(
            "/api/users/profile",
            json={"bio": "Hi there", "avatar": "https://example.com/me.png"},
            headers=headers,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Profile updated successfully"
        assert body["user"]["bio"] == "Hi there"
        assert body["user"]["avatar"] == "https://example.com/me.png"
        assert body["user"]["username"] == "alice"

    @pytest.mark.asyncio
    async def test_avatar_stored_as_sent(self, test_client, register_user):
        """A bare-host URL keeps its exact spelling, with no trailing slash added."""
        _, headers = await register_user("alice")
        response = await test_client.put(
            "/api/users/profile", json={"avatar": "https://example.com"}, headers=headers
        )
        assert response.status_code == 200
        assert response.json()["user"]["avatar"] == "https://example.com"

        me = (await test_client.get("/api/auth/me", headers=headers)).json()
        assert me["user"]["avatar"] == "https://example.com"

    @pytest.mark.asyncio
    async def test_rename(self, test_client, register_user):
        _, headers = await register_user("alice")
        response = await test_client.put(
            "/api/users/profile", json={"username": "alice_2"}, headers=headers
        )
        assert response.status_code == 200
        me = (await test_client.get("/api/auth/me", headers=headers)).json()
        assert me["user"]["username"] == "alice_2"

    @pytest.mark.asyncio
    async def test_keep_own_username(self, test_client, register_user):
        _, headers = await register_user("alice")
        response = await test_client.put(
            "/api/users/profile", json={"username": "alice"}, headers=headers
        )
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_username_taken(self, test_client, register_user):
        await register_user("alice")
        _, bob = await register_user("bob")
        response = await test_client.put(
            "/api/users/profile", json={"username": "alice"}, headers=bob
        )
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "conflict"
        assert body["message"] == "Username already taken"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            {"bio": "x" * 501},
            {"avatar": "not a url"},
            {"avatar": "ftp://example.com/me.png"},
            {"avatar": "https://example.com/" + "a" * 2048},
            {"username": "a"},
            {"bio": None},
        ],
    )
    async def test_invalid_update(self, test_client, register_user, payload):
        _, headers = await register_user("alice")
        response = await test_client.put("/api/users/profile", json=payload, headers=headers)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_requires_auth(self, test_client):
        response = await test_client.put("/api/users/profile", json={"bio": "x"})
        assert response.status_code == 401


class TestMyBlogs:

    @pytest.mark.asyncio
    async def test_includes_drafts_and_content(self, test_client, register_user):
        _, alice = await register_user("alice")
        _, bob = await register_user("bob")
        await create_post(test_client, alice, title="pub", published=True)
        await create_post(test_client, alice, title="draft")
        await create_post(test_client, bob, title="other", published=True)

        body = (await test_client.get("/api/users/my-blogs", headers=alice)).json()
        assert [b["title"] for b in body["blogs"]] == ["draft", "pub"]
        assert all(b["content"] == "World" for b in body["blogs"])
        assert body["pagination"]["totalBlogs"] == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "raw,expected",
        [("true", ["pub"]), ("false", ["draft"]), ("yes", ["draft"])],
    )
    async def test_published_filter(self, test_client, register_user, raw, expected):
        """Only the literal "true" selects published posts."""
        _, alice = await register_user("alice")
        await create_post(test_client, alice, title="pub", published=True)
        await create_post(test_client, alice, title="draft")

        body = (
            await test_client.get(
                "/api/users/my-blogs", params={"published": raw}, headers=alice
            )
        ).json()
        assert [b["title"] for b in body["blogs"]] == expected

    @pytest.mark.asyncio
    async def test_pagination(self, test_client, register_user):
        _, alice = await register_user("alice")
        for i in range(3):
            await create_post(test_client, alice, title=f"p{i}")

        body = (
            await test_client.get(
                "/api/users/my-blogs", params={"page": 2, "limit": 2}, headers=alice
            )
        ).json()
        assert [b["title"] for b in body["blogs"]] == ["p0"]
        assert body["pagination"]["totalPages"] == 2
        assert body["pagination"]["hasPrev"] is True

    @pytest.mark.asyncio
    async def test_page_upper_bound(self, test_client, register_user):
        _, alice = await register_user("alice")
        response = await test_client.get(
            "/api/users/my-blogs", params={"page": 10**17}, headers=alice
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_requires_auth(self, test_client):
        response = await test_client.get("/api/users/my-blogs")
        assert response.status_code == 401


class TestStats:

    @pytest.mark.asyncio
    async def test_empty(self, test_client, register_user):
        _, alice = await register_user("alice")
        body = (await test_client.get("/api/users/stats", headers=alice)).json()
        assert body == {
            "totalBlogs": 0,
            "publishedBlogs": 0,
            "draftBlogs": 0,
            "totalViews": 0,
            "totalLikes": 0,
        }

    @pytest.mark.asyncio
    async def test_counts(self, test_client, register_user):
        _, alice = await register_user("alice")
        _, bob = await register_user("bob")
        pub = await create_post(test_client, alice, published=True)
        draft = await create_post(test_client, alice)
        other = await create_post(test_client, bob, published=True)

        for _ in range(3):
            await test_client.get(f"/api/blogs/{pub['id']}")
        await test_client.get(f"/api/blogs/{draft['id']}")
        await test_client.get(f"/api/blogs/{other['id']}")
        await test_client.post(f"/api/blogs/{pub['id']}/like", headers=alice)
        await test_client.post(f"/api/blogs/{pub['id']}/like", headers=bob)
        await test_client.post(f"/api/blogs/{draft['id']}/like", headers=bob)
        await test_client.post(f"/api/blogs/{other['id']}/like", headers=alice)

        body = (await test_client.get("/api/users/stats", headers=alice)).json()
        assert body == {
            "totalBlogs": 2,
            "publishedBlogs": 1,
            "draftBlogs": 1,
            "totalViews": 4,
            "totalLikes": 3,
        }
