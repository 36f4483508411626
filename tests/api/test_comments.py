"""
Tests for comment endpoints.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from videotube.models import Comment, Like, User

pytestmark = pytest.mark.integration

API = "/api/v1/comments"


class TestCommentFeed:
    """Test GET /comments/{video_id}."""

    @pytest.mark.asyncio
    async def test_newest_first_with_owner(
        self, client: AsyncClient, alice: User, bob: User, alice_headers: dict, make_video, make_comment
    ):
        video = await make_video(alice)
        first = await make_comment(video, alice, "first!")
        second = await make_comment(video, bob, "second")

        response = await client.get(f"{API}/{video.id}", headers=alice_headers)

        assert response.status_code == 200
        page = response.json()["data"]
        assert page["totalDocs"] == 2
        assert [doc["id"] for doc in page["docs"]] == [second.id, first.id]
        assert page["docs"][0]["owner"]["username"] == "bob"
        assert page["docs"][0]["videoId"] == video.id

    @pytest.mark.asyncio
    async def test_paginated(self, client: AsyncClient, alice: User, alice_headers: dict, make_video, make_comment):
        video = await make_video(alice)
        for index in range(3):
            await make_comment(video, alice, f"comment {index}")

        page = (await client.get(f"{API}/{video.id}", headers=alice_headers, params={"limit": 2, "page": 2})).json()["data"]

        assert page["totalPages"] == 2
        assert len(page["docs"]) == 1
        assert page["docs"][0]["content"] == "comment 0"

    @pytest.mark.asyncio
    async def test_only_comments_of_that_video(
        self, client: AsyncClient, alice: User, alice_headers: dict, make_video, make_comment
    ):
        video = await make_video(alice, "One")
        other = await make_video(alice, "Two")
        await make_comment(other, alice, "elsewhere")

        page = (await client.get(f"{API}/{video.id}", headers=alice_headers)).json()["data"]

        assert page["totalDocs"] == 0
        assert page["docs"] == []

    @pytest.mark.asyncio
    async def test_unknown_video_yields_empty_page(self, client: AsyncClient, alice_headers: dict):
        response = await client.get(f"{API}/4242", headers=alice_headers)

        assert response.status_code == 200
        assert response.json()["data"]["totalPages"] == 0


class TestCommentChanges:

    @pytest.mark.asyncio
    async def test_add_comment(self, client: AsyncClient, alice: User, bob: User, bob_headers: dict, make_video):
        video = await make_video(alice)

        response = await client.post(f"{API}/{video.id}", headers=bob_headers, json={"content": "  Great video  "})

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["content"] == "Great video"
        assert data["ownerId"] == bob.id
        assert data["owner"]["username"] == "bob"
        assert response.json()["message"] == "Comment added successfully"

    @pytest.mark.asyncio
    async def test_blank_content(self, client: AsyncClient, alice: User, alice_headers: dict, make_video):
        video = await make_video(alice)

        response = await client.post(f"{API}/{video.id}", headers=alice_headers, json={"content": "   "})

        assert response.status_code == 400
        assert response.json()["message"] == "Content is required"

    @pytest.mark.asyncio
    async def test_missing_content_field(self, client: AsyncClient, alice: User, alice_headers: dict, make_video):
        video = await make_video(alice)

        response = await client.post(f"{API}/{video.id}", headers=alice_headers, json={})

        assert response.status_code == 400
        assert response.json()["message"] == "content is required"

    @pytest.mark.asyncio
    async def test_comment_on_missing_video(self, client: AsyncClient, alice_headers: dict):
        response = await client.post(f"{API}/999", headers=alice_headers, json={"content": "hello?"})

        assert response.status_code == 404
        assert response.json()["message"] == "Video not found"

    @pytest.mark.asyncio
    async def test_update_own_comment(
        self, client: AsyncClient, alice: User, bob: User, bob_headers: dict, make_video, make_comment
    ):
        comment = await make_comment(await make_video(alice), bob, "typo")

        response = await client.patch(f"{API}/c/{comment.id}", headers=bob_headers, json={"content": "fixed"})

        assert response.status_code == 200
        assert response.json()["data"]["content"] == "fixed"

    @pytest.mark.asyncio
    async def test_video_owner_cannot_edit_others_comment(
        self, client: AsyncClient, alice: User, bob: User, alice_headers: dict, make_video, make_comment
    ):
        comment = await make_comment(await make_video(alice), bob)

        response = await client.patch(f"{API}/c/{comment.id}", headers=alice_headers, json={"content": "censored"})

        assert response.status_code == 403
        assert response.json()["message"] == "You are not allowed to modify this comment"

    @pytest.mark.asyncio
    async def test_delete_comment_removes_its_likes(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        alice: User,
        bob: User,
        alice_headers: dict,
        bob_headers: dict,
        make_video,
        make_comment,
    ):
        comment = await make_comment(await make_video(alice), bob)
        await client.post(f"/api/v1/likes/toggle/c/{comment.id}", headers=alice_headers)

        response = await client.delete(f"{API}/c/{comment.id}", headers=bob_headers)

        assert response.status_code == 200
        assert (await db_session.execute(select(func.count(Comment.id)))).scalar_one() == 0
        assert (await db_session.execute(select(func.count(Like.id)))).scalar_one() == 0

    @pytest.mark.asyncio
    async def test_delete_missing_comment(self, client: AsyncClient, alice_headers: dict):
        response = await client.delete(f"{API}/c/31337", headers=alice_headers)

        assert response.status_code == 403
