"""
Tweet endpoints: short text posts on a user's channel.
"""

from fastapi import APIRouter, status

from videotube.api.deps import Aggregations
from videotube.core.auth import CurrentUser
from videotube.core.logging import get_logger
from videotube.db.deps import DBSession
from videotube.models.content import Tweet
from videotube.models.relationships import LikeTarget
from videotube.schemas.common import ERROR_RESPONSES, ApiResponse, ok
from videotube.schemas.videos import TweetBody, TweetOut
from videotube.services.ownership import owned_or_forbidden
from videotube.services.toggles import delete_likes_for
from videotube.services.validation import require_text

logger = get_logger(__name__)

router = APIRouter(prefix="/tweets", tags=["tweets"], responses=ERROR_RESPONSES)


@router.post("", response_model=ApiResponse[TweetOut], status_code=status.HTTP_201_CREATED)
async def create_tweet(payload: TweetBody, current_user: CurrentUser, db: DBSession):
    tweet = Tweet(content=require_text(payload.content, "Content is required"), owner_id=current_user.id)
    db.add(tweet)
    await db.commit()
    await db.refresh(tweet)

    logger.info("tweet_created", tweet_id=tweet.id, owner_id=current_user.id)
    return ok(TweetOut.model_validate(tweet), "Tweet created successfully", status.HTTP_201_CREATED)


@router.get("/user/{user_id}", response_model=ApiResponse[list[TweetOut]])
async def get_user_tweets(user_id: int, current_user: CurrentUser, aggregations: Aggregations):
    """A user's tweets, newest first (404 for an unknown user)."""
    tweets = await aggregations.user_tweets(user_id)
    return ok(tweets, "Tweets fetched successfully")


@router.patch("/{tweet_id}", response_model=ApiResponse[TweetOut])
async def update_tweet(tweet_id: int, payload: TweetBody, current_user: CurrentUser, db: DBSession):
    tweet = await owned_or_forbidden(db, Tweet, tweet_id, current_user.id, "tweet", "tweetId")
    tweet.content = require_text(payload.content, "Content is required")
    await db.commit()
    await db.refresh(tweet)
    return ok(TweetOut.model_validate(tweet), "Tweet updated successfully")


@router.delete("/{tweet_id}", response_model=ApiResponse[dict])
async def delete_tweet(tweet_id: int, current_user: CurrentUser, db: DBSession):
    tweet = await owned_or_forbidden(db, Tweet, tweet_id, current_user.id, "tweet", "tweetId")
    await delete_likes_for(db, LikeTarget.TWEET, [tweet.id])
    await db.delete(tweet)
    await db.commit()

    logger.info("tweet_deleted", tweet_id=tweet.id)
    return ok({}, "Tweet deleted successfully")
