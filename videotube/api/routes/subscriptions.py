"""
Subscription endpoints.

Every user is also a channel. Subscribing is a toggle, and the two list
endpoints read the relationship from either side.
"""

from fastapi import APIRouter

from videotube.api.deps import Aggregations
from videotube.core.auth import CurrentUser
from videotube.db.deps import DBSession
from videotube.schemas.common import ERROR_RESPONSES, ApiResponse, ok
from videotube.schemas.engagement import SubscriptionToggleResult
from videotube.schemas.users import UserPublic
from videotube.services.toggles import toggle_subscription

router = APIRouter(prefix="/subscriptions", tags=["subscriptions"], responses=ERROR_RESPONSES)


@router.post("/c/{channel_id}", response_model=ApiResponse[SubscriptionToggleResult])
async def toggle_channel_subscription(channel_id: int, current_user: CurrentUser, db: DBSession):
    """
    Subscribe to a channel, or unsubscribe when already subscribed.

    Raises:
        400: subscribing to one's own channel
        404: unknown channel
    """
    result = await toggle_subscription(db, channel_id, current_user.id)
    message = "Subscribed successfully" if result.subscribed else "Unsubscribed successfully"
    return ok(result, message)


@router.get("/c/{channel_id}", response_model=ApiResponse[list[UserPublic]])
async def get_channel_subscribers(channel_id: int, current_user: CurrentUser, aggregations: Aggregations):
    subscribers = await aggregations.subscribers(channel_id)
    return ok(subscribers, "Subscribers fetched successfully")


@router.get("/u/{subscriber_id}", response_model=ApiResponse[list[UserPublic]])
async def get_subscribed_channels(subscriber_id: int, current_user: CurrentUser, aggregations: Aggregations):
    channels = await aggregations.subscribed_channels(subscriber_id)
    return ok(channels, "Subscribed channels fetched successfully")
