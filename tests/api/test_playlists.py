"""
Tests for playlist endpoints and playlist membership.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from videotube.models import PlaylistVideo, User

pytestmark = pytest.mark.integration

API = "/api/v1/playlist"


# ================================
# Playlists
# ================================

class TestPlaylists:

    @pytest.mark.asyncio
    async def test_create_playlist(self, client: AsyncClient, alice: User, alice_headers: dict):
        response = await client.post(API, headers=alice_headers, json={"name": " Road trip ", "description": "songs"})

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["name"] == "Road trip"
        assert data["description"] == "songs"
        assert data["ownerId"] == alice.id

    @pytest.mark.asyncio
    async def test_create_requires_name(self, client: AsyncClient, alice_headers: dict):
        response = await client.post(API, headers=alice_headers, json={"name": "  "})

        assert response.status_code == 400
        assert response.json()["message"] == "Name is required"

    @pytest.mark.asyncio
    async def test_user_playlists_with_counts(
        self, client: AsyncClient, alice: User, bob_headers: dict, make_playlist, make_video, db_session
    ):
        first = await make_playlist(alice, "First")
        second = await make_playlist(alice, "Second")
        public = await make_video(alice, "Public")
        private = await make_video(alice, "Private", is_public=False)
        db_session.add_all([
            PlaylistVideo(playlist_id=first.id, video_id=public.id),
            PlaylistVideo(playlist_id=first.id, video_id=private.id),
        ])
        await db_session.commit()

        response = await client.get(f"{API}/user/{alice.id}", headers=bob_headers)

        playlists = response.json()["data"]
        assert [(item["id"], item["totalVideos"]) for item in playlists] == [(first.id, 1), (second.id, 0)]

    @pytest.mark.asyncio
    async def test_playlist_detail(self, client: AsyncClient, alice: User, alice_headers: dict, make_playlist):
        playlist = await make_playlist(alice, "Empty", "nothing yet")

        response = await client.get(f"{API}/{playlist.id}", headers=alice_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["name"] == "Empty"
        assert data["totalVideos"] == 0
        assert data["videos"] == []

    @pytest.mark.asyncio
    async def test_missing_playlist(self, client: AsyncClient, alice_headers: dict):
        response = await client.get(f"{API}/12345", headers=alice_headers)

        assert response.status_code == 404
        assert response.json()["message"] == "Playlist not found"

    @pytest.mark.asyncio
    async def test_update_playlist(self, client: AsyncClient, alice: User, alice_headers: dict, make_playlist):
        playlist = await make_playlist(alice, "Old")

        response = await client.patch(f"{API}/{playlist.id}", headers=alice_headers, json={"description": "updated"})

        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Old"
        assert response.json()["data"]["description"] == "updated"

    @pytest.mark.asyncio
    async def test_update_requires_a_field(self, client: AsyncClient, alice: User, alice_headers: dict, make_playlist):
        playlist = await make_playlist(alice)

        response = await client.patch(f"{API}/{playlist.id}", headers=alice_headers, json={})

        assert response.status_code == 400
        assert response.json()["message"] == "Name or description is required"

    @pytest.mark.asyncio
    async def test_delete_playlist_keeps_videos(
        self, client: AsyncClient, alice: User, alice_headers: dict, make_playlist, make_video, db_session
    ):
        playlist = await make_playlist(alice)
        video = await make_video(alice)
        await client.patch(f"{API}/add/{video.id}/{playlist.id}", headers=alice_headers)

        response = await client.delete(f"{API}/{playlist.id}", headers=alice_headers)

        assert response.status_code == 200
        assert (await db_session.execute(select(func.count(PlaylistVideo.id)))).scalar_one() == 0
        assert (await client.get(f"/api/v1/videos/{video.id}", headers=alice_headers)).status_code == 200

    @pytest.mark.asyncio
    async def test_delete_someone_elses_playlist(self, client: AsyncClient, alice: User, bob_headers: dict, make_playlist):
        playlist = await make_playlist(alice)

        response = await client.delete(f"{API}/{playlist.id}", headers=bob_headers)

        assert response.status_code == 403
        assert response.json()["message"] == "You are not allowed to modify this playlist"


# ================================
# Membership
# ================================

class TestPlaylistMembership:

    @pytest.mark.asyncio
    async def test_add_then_add_again_conflicts(
        self, client: AsyncClient, alice: User, bob: User, alice_headers: dict, make_playlist, make_video
    ):
        playlist = await make_playlist(alice)
        video = await make_video(bob, "Bob's clip")

        added = await client.patch(f"{API}/add/{video.id}/{playlist.id}", headers=alice_headers)
        assert added.status_code == 200
        data = added.json()["data"]
        assert data["totalVideos"] == 1
        assert data["videos"][0]["id"] == video.id
        assert data["videos"][0]["owner"]["username"] == "bob"

        again = await client.patch(f"{API}/add/{video.id}/{playlist.id}", headers=alice_headers)
        assert again.status_code == 409
        assert again.json()["message"] == "Video already exists in playlist"

    @pytest.mark.asyncio
    async def test_videos_keep_insertion_order(
        self, client: AsyncClient, alice: User, alice_headers: dict, make_playlist, make_video
    ):
        playlist = await make_playlist(alice)
        videos = [await make_video(alice, title) for title in ("A", "B", "C")]

        for video in (videos[2], videos[0], videos[1]):
            await client.patch(f"{API}/add/{video.id}/{playlist.id}", headers=alice_headers)

        detail = (await client.get(f"{API}/{playlist.id}", headers=alice_headers)).json()["data"]
        assert [video["title"] for video in detail["videos"]] == ["C", "A", "B"]

    @pytest.mark.asyncio
    async def test_remove_then_remove_again(
        self, client: AsyncClient, alice: User, alice_headers: dict, make_playlist, make_video
    ):
        playlist = await make_playlist(alice)
        video = await make_video(alice)
        await client.patch(f"{API}/add/{video.id}/{playlist.id}", headers=alice_headers)

        removed = await client.patch(f"{API}/remove/{video.id}/{playlist.id}", headers=alice_headers)
        assert removed.status_code == 200
        assert removed.json()["data"]["videos"] == []

        again = await client.patch(f"{API}/remove/{video.id}/{playlist.id}", headers=alice_headers)
        assert again.status_code == 404
        assert again.json()["message"] == "Video not found in playlist"

    @pytest.mark.asyncio
    async def test_only_owner_can_add(
        self, client: AsyncClient, alice: User, bob_headers: dict, make_playlist, make_video
    ):
        playlist = await make_playlist(alice)
        video = await make_video(alice)

        response = await client.patch(f"{API}/add/{video.id}/{playlist.id}", headers=bob_headers)

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_add_missing_video(self, client: AsyncClient, alice: User, alice_headers: dict, make_playlist):
        playlist = await make_playlist(alice)

        response = await client.patch(f"{API}/add/999/{playlist.id}", headers=alice_headers)

        assert response.status_code == 404
        assert response.json()["message"] == "Video not found"

    @pytest.mark.asyncio
    async def test_deleted_video_leaves_playlist(
        self, client: AsyncClient, alice: User, alice_headers: dict, make_playlist, make_video
    ):
        playlist = await make_playlist(alice)
        video = await make_video(alice)
        await client.patch(f"{API}/add/{video.id}/{playlist.id}", headers=alice_headers)

        await client.delete(f"/api/v1/videos/{video.id}", headers=alice_headers)

        detail = (await client.get(f"{API}/{playlist.id}", headers=alice_headers)).json()["data"]
        assert detail["totalVideos"] == 0
