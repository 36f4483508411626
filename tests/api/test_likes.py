"""
Tests for like toggles and like feeds.
"""

import pytest
from httpx import AsyncClient

from videotube.models import User

pytestmark = pytest.mark.integration

API = "/api/v1/likes"


class TestLikeToggles:

    @pytest.mark.asyncio
    async def test_toggle_video_like_twice_restores_state(
        self, client: AsyncClient, alice: User, bob: User, bob_headers: dict, make_video
    ):
        video = await make_video(alice)

        liked = await client.post(f"{API}/toggle/v/{video.id}", headers=bob_headers)
        assert liked.status_code == 200
        body = liked.json()
        assert body["message"] == "Liked successfully"
        assert body["data"]["liked"] is True
        assert body["data"]["like"]["targetType"] == "video"
        assert body["data"]["like"]["targetId"] == video.id
        assert body["data"]["like"]["likedById"] == bob.id

        count = await client.get(f"{API}/video/{video.id}", headers=bob_headers)
        assert count.json()["data"] == {"likesCount": 1}

        unliked = await client.post(f"{API}/toggle/v/{video.id}", headers=bob_headers)
        assert unliked.json()["message"] == "Like removed successfully"
        assert unliked.json()["data"] == {"liked": False, "like": None}

        count = await client.get(f"{API}/video/{video.id}", headers=bob_headers)
        assert count.json()["data"] == {"likesCount": 0}

    @pytest.mark.asyncio
    async def test_likes_from_different_users_are_counted(
        self, client: AsyncClient, alice: User, alice_headers: dict, bob_headers: dict, make_video
    ):
        video = await make_video(alice)

        await client.post(f"{API}/toggle/v/{video.id}", headers=alice_headers)
        await client.post(f"{API}/toggle/v/{video.id}", headers=bob_headers)

        count = await client.get(f"{API}/video/{video.id}", headers=alice_headers)
        assert count.json()["data"]["likesCount"] == 2

    @pytest.mark.asyncio
    async def test_comment_and_tweet_likes(
        self, client: AsyncClient, alice: User, bob_headers: dict, make_video, make_comment, make_tweet
    ):
        comment = await make_comment(await make_video(alice), alice)
        tweet = await make_tweet(alice)

        on_comment = await client.post(f"{API}/toggle/c/{comment.id}", headers=bob_headers)
        on_tweet = await client.post(f"{API}/toggle/t/{tweet.id}", headers=bob_headers)

        assert on_comment.json()["data"]["like"]["targetType"] == "comment"
        assert on_tweet.json()["data"]["like"]["targetType"] == "tweet"

    @pytest.mark.asyncio
    async def test_same_id_different_targets_are_independent(
        self, client: AsyncClient, alice: User, bob_headers: dict, make_video, make_tweet
    ):
        video = await make_video(alice)
        tweet = await make_tweet(alice)
        assert video.id == tweet.id

        await client.post(f"{API}/toggle/v/{video.id}", headers=bob_headers)
        response = await client.post(f"{API}/toggle/t/{tweet.id}", headers=bob_headers)

        assert response.json()["data"]["liked"] is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "path,message",
        [
            ("v", "Video not found"),
            ("c", "Comment not found"),
            ("t", "Tweet not found"),
        ],
    )
    async def test_missing_target(self, client: AsyncClient, alice_headers: dict, path: str, message: str):
        response = await client.post(f"{API}/toggle/{path}/777", headers=alice_headers)

        assert response.status_code == 404
        assert response.json()["message"] == message

    @pytest.mark.asyncio
    async def test_cannot_like_someone_elses_private_video(
        self, client: AsyncClient, alice: User, bob_headers: dict, make_video
    ):
        video = await make_video(alice, is_public=False)

        response = await client.post(f"{API}/toggle/v/{video.id}", headers=bob_headers)

        assert response.status_code == 404


class TestLikedVideos:

    @pytest.mark.asyncio
    async def test_most_recent_like_first(
        self, client: AsyncClient, alice: User, bob_headers: dict, make_video
    ):
        older = await make_video(alice, "Older")
        newer = await make_video(alice, "Newer")

        await client.post(f"{API}/toggle/v/{newer.id}", headers=bob_headers)
        await client.post(f"{API}/toggle/v/{older.id}", headers=bob_headers)

        response = await client.get(f"{API}/videos", headers=bob_headers)

        videos = response.json()["data"]
        assert [video["title"] for video in videos] == ["Older", "Newer"]
        assert videos[0]["owner"]["username"] == "alice"

    @pytest.mark.asyncio
    async def test_unliked_videos_drop_out(self, client: AsyncClient, alice: User, bob_headers: dict, make_video):
        video = await make_video(alice)

        await client.post(f"{API}/toggle/v/{video.id}", headers=bob_headers)
        await client.post(f"{API}/toggle/v/{video.id}", headers=bob_headers)

        response = await client.get(f"{API}/videos", headers=bob_headers)
        assert response.json()["data"] == []

    @pytest.mark.asyncio
    async def test_count_for_missing_video(self, client: AsyncClient, alice_headers: dict):
        response = await client.get(f"{API}/video/55", headers=alice_headers)

        assert response.status_code == 404
