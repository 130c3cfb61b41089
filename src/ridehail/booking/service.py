"""Ride booking orchestrator.

Owns the single current ``RideRequest`` and runs the matching protocol as a
SimPy process::

    request_ride -> SEARCHING --(search window)--> nearest available driver
                 --(assignment delay)--> ASSIGNED (driver marked busy)

Cancellation is cooperative. Every external write (new request, cancel,
manual assignment) bumps a generation counter, and the matching process
re-checks it after each wait. A stale process returns without touching
state, so a cancel always wins over a late assignment.
"""

import logging
from collections.abc import Generator
from decimal import Decimal
from typing import Any

import simpy

from ridehail.clock import SimClock
from ridehail.core.exceptions import (
    BookingInProgressError,
    InvalidLocationError,
    InvalidTransitionError,
    NoDriversAvailableError,
)
from ridehail.driver import Driver, DriverStatus
from ridehail.fleet.simulator import FleetSimulator
from ridehail.geo.coordinate import Coordinate, is_valid_coordinate
from ridehail.geo.distance import distance_m
from ridehail.pubsub.channels import CHANNEL_RIDE_UPDATES
from ridehail.pubsub.feed import ChangeFeed
from ridehail.ride import TERMINAL_STATES, RideRequest, RideState
from ridehail.settings import BookingSettings
from ridehail.sim_logging import log_ride_context

logger = logging.getLogger(__name__)

# States only reachable through request/cancel/assign, never advance_ride
_ORCHESTRATED_STATES = frozenset(
    {RideState.IDLE, RideState.SEARCHING, RideState.ASSIGNED, RideState.CANCELLED}
)


class BookingService:
    """Turns a rider's request into an assigned driver with a pickup ETA."""

    def __init__(
        self,
        env: simpy.Environment,
        fleet: FleetSimulator,
        settings: BookingSettings | None = None,
        clock: SimClock | None = None,
        driver_speed_mps: float | None = None,
    ) -> None:
        self._env = env
        self._fleet = fleet
        self.settings = settings or BookingSettings()
        self._clock = clock or SimClock(env)
        self._driver_speed_mps = driver_speed_mps or fleet.settings.driver_speed_mps
        self._current: RideRequest | None = None
        self._generation = 0

        self.changes: ChangeFeed[RideRequest | None] = ChangeFeed(CHANNEL_RIDE_UPDATES, None)

    @property
    def current_ride(self) -> RideRequest | None:
        return self._current.model_copy(deep=True) if self._current is not None else None

    @property
    def generation(self) -> int:
        return self._generation

    def request_ride(
        self,
        pickup: Coordinate,
        pickup_address: str,
        dropoff: Coordinate,
        dropoff_address: str,
        estimated_fare: Decimal,
    ) -> simpy.Process:
        """Create a ride and start matching it.

        Raises:
            BookingInProgressError: the current ride is still active.
            InvalidLocationError: pickup or dropoff is out of range.

        Returns:
            The matching process. It succeeds with the assigned ride, or with
            the ride as left by a cancel/manual assignment that superseded
            it, and fails with NoDriversAvailableError when nobody is free.
            Failures are defused so an unobserved process never crashes the
            environment.
        """
        current = self._current
        if current is not None and current.state.is_active:
            raise BookingInProgressError(
                details={"ride_id": current.ride_id, "state": current.state.value}
            )

        if not (is_valid_coordinate(pickup) and is_valid_coordinate(dropoff)):
            raise InvalidLocationError(
                details={"pickup": tuple(pickup), "dropoff": tuple(dropoff)}
            )

        ride = RideRequest(
            pickup_location=Coordinate(*pickup),
            pickup_address=pickup_address,
            dropoff_location=Coordinate(*dropoff),
            dropoff_address=dropoff_address,
            state=RideState.SEARCHING,
            estimated_fare=estimated_fare,
            requested_at=self._clock.now(),
        )
        self._generation += 1
        generation = self._generation
        # Subscribers may cancel during this publish; the match then starts stale
        self._set_current(ride)

        with log_ride_context(ride.ride_id):
            logger.info(
                "Ride requested from %s to %s, fare %s",
                ride.pickup_address,
                ride.dropoff_address,
                ride.estimated_fare,
            )

        process = self._env.process(self._match(ride, generation))
        process.defused = True
        process.callbacks.append(self._log_match_outcome)
        return process

    def cancel_ride(self) -> simpy.Process | None:
        """Cancel the current ride, then clear it after the grace delay.

        Returns the clearing process, or None when there is no current ride.
        """
        current = self._current
        if current is None:
            return None

        self._generation += 1
        with log_ride_context(current.ride_id):
            if current.state.is_active:
                ride = current.model_copy(deep=True)
                if ride.assigned_driver is not None:
                    self._fleet.set_status(ride.assigned_driver.driver_id, DriverStatus.AVAILABLE)
                ride.transition_to(RideState.CANCELLED)
                self._set_current(ride)
                logger.info("Ride cancelled")
            else:
                logger.debug("Dismissing ride already in state %s", current.state.value)

        return self._env.process(self._clear_after_grace(self._generation))

    def assign_driver(self, driver: Driver, ride_id: str) -> bool:
        """Attach ``driver`` to the current ride out of band.

        A no-op returning False when ``ride_id`` is not the current ride, the
        ride has already ended, or the driver is not part of the fleet.
        """
        current = self._current
        if current is None or current.ride_id != ride_id:
            logger.debug("Ignoring assignment for ride %s: not the current ride", ride_id)
            return False
        if current.state in TERMINAL_STATES:
            logger.debug("Ignoring assignment for ride %s in state %s", ride_id, current.state.value)
            return False

        with log_ride_context(ride_id, driver_id=driver.driver_id):
            live = self._fleet.get_driver(driver.driver_id)
            if live is None:
                logger.warning("Cannot assign driver %s: not in the fleet", driver.driver_id)
                return False

            self._generation += 1
            ride = current.model_copy(deep=True)
            previous = ride.assigned_driver
            if previous is not None and previous.driver_id != live.driver_id:
                self._fleet.set_status(previous.driver_id, DriverStatus.AVAILABLE)

            self._commit_assignment(ride, live, force=True)
            logger.info("Driver %s manually assigned", live.name)
        return True

    def advance_ride(self, new_state: RideState) -> RideRequest:
        """Move the current ride along en route -> arrived -> in progress -> completed.

        Completion stamps ``completed_at`` and returns the driver to the
        available pool.

        Raises:
            InvalidTransitionError: no current ride, or the move is not allowed.
        """
        current = self._current
        if current is None:
            raise InvalidTransitionError("No current ride to advance")
        if new_state in _ORCHESTRATED_STATES:
            raise InvalidTransitionError(
                f"State {new_state.value} is set by request, assignment or cancellation",
                details={"ride_id": current.ride_id},
            )

        ride = current.model_copy(deep=True)
        ride.transition_to(new_state)

        with log_ride_context(ride.ride_id):
            if new_state == RideState.COMPLETED:
                ride.completed_at = self._clock.now()
                if ride.assigned_driver is not None:
                    self._fleet.set_status(ride.assigned_driver.driver_id, DriverStatus.AVAILABLE)
            self._set_current(ride)
            logger.info("Ride advanced to %s", new_state.value)
        return ride.model_copy(deep=True)

    def _match(self, ride: RideRequest, generation: int) -> Generator[simpy.Event, Any, RideRequest]:
        yield self._env.timeout(self.settings.search_window_seconds)
        if self._is_stale(generation):
            return self._superseded(ride)

        with log_ride_context(ride.ride_id):
            candidate = self._find_driver(ride)
            logger.info("Offering ride to driver %s", candidate.driver_id)

        yield self._env.timeout(self.settings.assignment_delay_seconds)
        if self._is_stale(generation):
            return self._superseded(ride)

        with log_ride_context(ride.ride_id, driver_id=candidate.driver_id):
            live = self._fleet.get_driver(candidate.driver_id)
            if live is None or not live.is_available:
                logger.info("Driver %s no longer available, searching again", candidate.driver_id)
                live = self._find_driver(ride)

            assert self._current is not None
            assigned = self._commit_assignment(self._current.model_copy(deep=True), live)
            logger.info("Driver %s assigned, ETA %.0fs", live.name, assigned.assigned_driver.eta_seconds)
            return assigned

    def _find_driver(self, ride: RideRequest) -> Driver:
        driver = self._fleet.nearest_available(ride.pickup_location)
        if driver is not None:
            return driver

        cancelled = ride.model_copy(deep=True)
        cancelled.transition_to(RideState.CANCELLED)
        self._set_current(cancelled)
        raise NoDriversAvailableError(details={"ride_id": ride.ride_id})

    def _commit_assignment(
        self, ride: RideRequest, driver: Driver, force: bool = False
    ) -> RideRequest:
        eta = distance_m(ride.pickup_location, driver.location) / self._driver_speed_mps
        if force:
            ride.state = RideState.ASSIGNED
        else:
            ride.transition_to(RideState.ASSIGNED)
        ride.assigned_driver = driver.model_copy(update={"eta_seconds": eta})
        ride.accepted_at = self._clock.now()
        self._fleet.set_status(driver.driver_id, DriverStatus.BUSY)
        self._set_current(ride)
        return ride.model_copy(deep=True)

    def _clear_after_grace(self, generation: int) -> Generator[simpy.Event, Any, None]:
        yield self._env.timeout(self.settings.cancellation_grace_seconds)
        # A newer request during the grace period owns the feed now
        if not self._is_stale(generation):
            self._set_current(None)

    def _is_stale(self, generation: int) -> bool:
        return generation != self._generation

    def _superseded(self, ride: RideRequest) -> RideRequest:
        current = self._current
        if current is not None and current.ride_id == ride.ride_id:
            return current.model_copy(deep=True)
        return ride.model_copy(update={"state": RideState.CANCELLED})

    def _set_current(self, ride: RideRequest | None) -> None:
        self._current = ride
        self.changes.publish(ride.model_copy(deep=True) if ride is not None else None)

    def _log_match_outcome(self, process: simpy.Process) -> None:
        if not process.ok:
            logger.warning("Ride matching failed: %s", process.value)
