"""Rider location source consumed by the booking layer."""

import logging
from typing import Protocol

from ridehail.geo.coordinate import Coordinate, is_valid_coordinate
from ridehail.pubsub.channels import CHANNEL_LOCATION_UPDATES
from ridehail.pubsub.feed import ChangeFeed

logger = logging.getLogger(__name__)

DEFAULT_LOCATION = Coordinate(51.4816, -3.1791)


class LocationProvider(Protocol):
    @property
    def current_location(self) -> Coordinate: ...

    @property
    def changes(self) -> ChangeFeed[Coordinate]: ...

    def start_updating(self) -> None: ...

    def stop_updating(self) -> None: ...


class StaticLocationProvider:
    """Location provider fed by explicit fixes, e.g. from a device bridge or tests."""

    def __init__(self, initial: Coordinate = DEFAULT_LOCATION) -> None:
        self._changes: ChangeFeed[Coordinate] = ChangeFeed(
            CHANNEL_LOCATION_UPDATES, Coordinate(*initial)
        )
        self._updating = False

    @property
    def current_location(self) -> Coordinate:
        return self._changes.value

    @property
    def changes(self) -> ChangeFeed[Coordinate]:
        return self._changes

    @property
    def is_updating(self) -> bool:
        return self._updating

    def start_updating(self) -> None:
        self._updating = True

    def stop_updating(self) -> None:
        self._updating = False

    def update_location(self, coordinate: Coordinate) -> bool:
        """Publish a new fix. Invalid or out-of-session fixes are dropped."""
        if not self._updating:
            logger.debug("Dropping location fix %s: updates are stopped", coordinate)
            return False
        if not is_valid_coordinate(coordinate):
            logger.warning("Dropping invalid location fix %s", coordinate)
            return False
        self._changes.publish(Coordinate(*coordinate))
        return True
