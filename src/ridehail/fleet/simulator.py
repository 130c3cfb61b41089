import logging
import random
from collections.abc import Generator, Iterable
from math import inf
from typing import Any

import simpy

from ridehail.driver import Driver, DriverStatus
from ridehail.fleet.spawn import generate_fleet
from ridehail.geo.coordinate import Coordinate
from ridehail.geo.distance import destination, distance_m
from ridehail.pubsub.channels import CHANNEL_FLEET_UPDATES
from ridehail.pubsub.feed import ChangeFeed
from ridehail.settings import FleetSettings

logger = logging.getLogger(__name__)


class FleetSimulator:
    """Owns the live driver fleet and moves available drivers on a fixed tick.

    Available drivers dead-reckon along a private heading that occasionally
    wobbles. A driver that ends a tick outside the confinement radius keeps
    that position but turns around for the next tick, which keeps the fleet
    roughly in place without clamping. Busy and offline drivers never move.

    All mutation happens inside steps of the shared SimPy environment, so no
    locking is needed. Every mutation publishes a full fleet snapshot on
    ``changes``.
    """

    def __init__(
        self,
        env: simpy.Environment,
        settings: FleetSettings | None = None,
        rng: random.Random | None = None,
        drivers: Iterable[Driver] | None = None,
    ) -> None:
        self._env = env
        self.settings = settings or FleetSettings()
        self._rng = rng or random.Random()
        self._drivers: dict[str, Driver] = {}
        self._headings: dict[str, float] = {}
        self._process: simpy.Process | None = None
        self._tick_count = 0

        initial = generate_fleet(self.settings, self._rng) if drivers is None else drivers
        for driver in initial:
            self._drivers[driver.driver_id] = driver.model_copy()
            self._headings[driver.driver_id] = self._random_heading()

        self.changes: ChangeFeed[list[Driver]] = ChangeFeed(
            CHANNEL_FLEET_UPDATES, self.snapshot()
        )

    @property
    def is_running(self) -> bool:
        return self._process is not None and self._process.is_alive

    @property
    def tick_count(self) -> int:
        return self._tick_count

    @property
    def travel_distance_m(self) -> float:
        """Distance an available driver covers in one tick."""
        return self.settings.driver_speed_mps * self.settings.tick_interval_seconds

    @property
    def drivers(self) -> list[Driver]:
        return self.snapshot()

    def snapshot(self) -> list[Driver]:
        """Copies of every driver in insertion order."""
        return [driver.model_copy() for driver in self._drivers.values()]

    def get_driver(self, driver_id: str) -> Driver | None:
        driver = self._drivers.get(driver_id)
        return driver.model_copy() if driver is not None else None

    def heading(self, driver_id: str) -> float | None:
        return self._headings.get(driver_id)

    def start(self) -> None:
        """Start the movement tick. Restarts cleanly if already running."""
        if self.is_running:
            self.stop()
        self._process = self._env.process(self._run())
        logger.info(
            "Fleet simulation started: %d drivers, tick every %.2fs",
            len(self._drivers),
            self.settings.tick_interval_seconds,
        )

    def stop(self) -> None:
        process, self._process = self._process, None
        if process is None or not process.is_alive:
            return
        # A tick stopping itself (e.g. from a subscriber) exits on its next wake-up
        if process is not self._env.active_process:
            process.interrupt("fleet stopped")
        logger.info("Fleet simulation stopped after %d ticks", self._tick_count)

    def _run(self) -> Generator[simpy.Event, Any, None]:
        this_process = self._env.active_process
        try:
            while True:
                yield self._env.timeout(self.settings.tick_interval_seconds)
                if self._process is not this_process:
                    return
                self.tick()
        except simpy.Interrupt:
            logger.debug("Fleet tick process interrupted at t=%.2f", self._env.now)

    def tick(self) -> None:
        """Advance every available driver by one tick and publish once."""
        settings = self.settings
        center = settings.center
        travel = self.travel_distance_m
        moved = 0

        for driver_id, driver in self._drivers.items():
            if driver.status != DriverStatus.AVAILABLE:
                continue

            heading = self._headings.get(driver_id)
            if heading is None:
                heading = self._random_heading()

            if self._rng.random() < settings.direction_change_probability:
                delta = self._rng.uniform(
                    -settings.max_heading_change_deg, settings.max_heading_change_deg
                )
                heading = (heading + delta) % 360.0

            new_location = destination(driver.location, travel, heading)

            # Outside the radius: keep this move, head back next tick
            if distance_m(new_location, center) > settings.spawn_radius_m:
                heading = (heading + 180.0) % 360.0

            driver.location = new_location
            self._headings[driver_id] = heading
            moved += 1

        self._tick_count += 1
        logger.debug("Tick %d moved %d drivers", self._tick_count, moved)
        self._publish()

    def add_driver(self, driver: Driver) -> None:
        """Add a driver, replacing any existing driver with the same id in place."""
        self._drivers[driver.driver_id] = driver.model_copy()
        self._headings.setdefault(driver.driver_id, self._random_heading())
        logger.debug("Driver %s added (%s)", driver.driver_id, driver.status.value)
        self._publish()

    def remove_driver(self, driver_id: str) -> None:
        if self._drivers.pop(driver_id, None) is None:
            logger.debug("Ignoring removal of unknown driver %s", driver_id)
            return
        self._headings.pop(driver_id, None)
        self._publish()

    def set_status(self, driver_id: str, status: DriverStatus) -> bool:
        """Change a driver's status. Unknown ids are ignored and return False."""
        driver = self._drivers.get(driver_id)
        if driver is None:
            logger.warning("Cannot set status %s on unknown driver %s", status.value, driver_id)
            return False
        driver.status = status
        self._publish()
        return True

    def nearest_available(self, to: Coordinate) -> Driver | None:
        """Closest available driver to ``to``, or None when nobody is free.

        Linear scan; the first driver found at the minimum distance wins.
        """
        nearest: Driver | None = None
        nearest_distance = inf
        for driver in self._drivers.values():
            if driver.status != DriverStatus.AVAILABLE:
                continue
            candidate_distance = distance_m(driver.location, to)
            if candidate_distance < nearest_distance:
                nearest = driver
                nearest_distance = candidate_distance
        return nearest.model_copy() if nearest is not None else None

    def available_count(self) -> int:
        return sum(1 for driver in self._drivers.values() if driver.is_available)

    def _random_heading(self) -> float:
        return self._rng.uniform(0.0, 360.0) % 360.0

    def _publish(self) -> None:
        self.changes.publish(self.snapshot())
