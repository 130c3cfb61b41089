from ridehail.pubsub.channels import (
    ALL_CHANNELS,
    CHANNEL_FLEET_UPDATES,
    CHANNEL_LOCATION_UPDATES,
    CHANNEL_RIDE_UPDATES,
)
from ridehail.pubsub.feed import ChangeFeed, FeedReader, Subscription

__all__ = [
    "ALL_CHANNELS",
    "CHANNEL_FLEET_UPDATES",
    "CHANNEL_LOCATION_UPDATES",
    "CHANNEL_RIDE_UPDATES",
    "ChangeFeed",
    "FeedReader",
    "Subscription",
]
