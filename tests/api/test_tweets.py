"""
Tests for tweet endpoints.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from videotube.models import Like, Tweet, User

pytestmark = pytest.mark.integration

API = "/api/v1/tweets"


class TestTweets:

    @pytest.mark.asyncio
    async def test_create_tweet(self, client: AsyncClient, alice: User, alice_headers: dict):
        response = await client.post(API, headers=alice_headers, json={"content": "New video tomorrow"})

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["content"] == "New video tomorrow"
        assert data["ownerId"] == alice.id

    @pytest.mark.asyncio
    async def test_blank_tweet(self, client: AsyncClient, alice_headers: dict):
        response = await client.post(API, headers=alice_headers, json={"content": ""})

        assert response.status_code == 400
        assert response.json()["message"] == "Content is required"

    @pytest.mark.asyncio
    async def test_user_tweets_newest_first(
        self, client: AsyncClient, alice: User, bob: User, bob_headers: dict, make_tweet
    ):
        first = await make_tweet(alice, "one")
        second = await make_tweet(alice, "two")
        await make_tweet(bob, "not alice")

        response = await client.get(f"{API}/user/{alice.id}", headers=bob_headers)

        assert response.status_code == 200
        assert [tweet["id"] for tweet in response.json()["data"]] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_tweets_of_unknown_user(self, client: AsyncClient, alice_headers: dict):
        response = await client.get(f"{API}/user/404", headers=alice_headers)

        assert response.status_code == 404
        assert response.json()["message"] == "User not found"

    @pytest.mark.asyncio
    async def test_update_tweet(self, client: AsyncClient, alice: User, alice_headers: dict, make_tweet):
        tweet = await make_tweet(alice, "draft")

        response = await client.patch(f"{API}/{tweet.id}", headers=alice_headers, json={"content": "final"})

        assert response.status_code == 200
        assert response.json()["data"]["content"] == "final"

    @pytest.mark.asyncio
    async def test_update_someone_elses_tweet(self, client: AsyncClient, alice: User, bob_headers: dict, make_tweet):
        tweet = await make_tweet(alice)

        response = await client.patch(f"{API}/{tweet.id}", headers=bob_headers, json={"content": "hijack"})

        assert response.status_code == 403
        assert response.json()["message"] == "You are not allowed to modify this tweet"

    @pytest.mark.asyncio
    async def test_delete_tweet_and_its_likes(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        alice: User,
        alice_headers: dict,
        bob_headers: dict,
        make_tweet,
    ):
        tweet = await make_tweet(alice)
        await client.post(f"/api/v1/likes/toggle/t/{tweet.id}", headers=bob_headers)

        response = await client.delete(f"{API}/{tweet.id}", headers=alice_headers)

        assert response.status_code == 200
        assert (await db_session.execute(select(func.count(Tweet.id)))).scalar_one() == 0
        assert (await db_session.execute(select(func.count(Like.id)))).scalar_one() == 0
