"""Change feed channel names."""

CHANNEL_FLEET_UPDATES = "fleet-updates"
CHANNEL_RIDE_UPDATES = "ride-updates"
CHANNEL_LOCATION_UPDATES = "location-updates"

ALL_CHANNELS = [
    CHANNEL_FLEET_UPDATES,
    CHANNEL_RIDE_UPDATES,
    CHANNEL_LOCATION_UPDATES,
]
