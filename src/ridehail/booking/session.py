"""Headless booking session: the state a rider-facing screen binds to."""

import logging
import random
from collections.abc import Generator
from decimal import Decimal
from math import ceil
from typing import Any

import simpy

from ridehail.booking.service import BookingService
from ridehail.core.exceptions import BookingError
from ridehail.driver import VehicleType
from ridehail.fare import FareCalculator
from ridehail.fleet.spawn import LANDMARKS
from ridehail.geo.coordinate import Coordinate
from ridehail.geo.distance import random_point
from ridehail.location import LocationProvider
from ridehail.ride import RideRequest, RideState
from ridehail.settings import BookingSettings

logger = logging.getLogger(__name__)


class BookingSession:
    """Mirrors the booking service feed into flat, display-ready fields.

    Destinations are landmark names without geocoding, so the dropoff point
    for a quote or request is sampled near the rider's location.
    """

    def __init__(
        self,
        env: simpy.Environment,
        booking: BookingService,
        fare_calculator: FareCalculator,
        location: LocationProvider,
        settings: BookingSettings | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._env = env
        self._booking = booking
        self._fare_calculator = fare_calculator
        self._location = location
        self.settings = settings or booking.settings
        self._rng = rng or random.Random()

        self.booking_state = RideState.IDLE
        self.pickup_address = "Your location"
        self.dropoff_address = ""
        self.dropoff_location: Coordinate | None = None
        self.estimated_fare = Decimal("0")
        self.current_ride: RideRequest | None = None
        self.error_message: str | None = None
        self.is_loading = False

        self._subscription = booking.changes.subscribe(self._on_ride_changed)
        if LANDMARKS:
            self.update_destination(LANDMARKS[0])

    @property
    def can_request_ride(self) -> bool:
        return self.booking_state == RideState.IDLE and bool(self.dropoff_address)

    @property
    def can_cancel_ride(self) -> bool:
        return self.current_ride is not None and self.current_ride.state.can_cancel

    @property
    def assigned_driver_name(self) -> str | None:
        if self.current_ride is None or self.current_ride.assigned_driver is None:
            return None
        return self.current_ride.assigned_driver.name

    @property
    def assigned_driver_eta_text(self) -> str | None:
        if self.current_ride is None or self.current_ride.assigned_driver is None:
            return None
        eta = self.current_ride.assigned_driver.eta_seconds
        if eta is None:
            return None
        return f"{ceil(eta / 60)} min"

    def update_destination(self, address: str) -> None:
        self.dropoff_address = address
        self.calculate_fare()

    def calculate_fare(self) -> Decimal:
        """Quote a sedan fare to a dropoff sampled near the rider."""
        pickup = self._location.current_location
        self.dropoff_location = random_point(
            pickup, self.settings.dropoff_estimate_radius_m, self._rng
        )
        self.estimated_fare = self._fare_calculator.price(
            pickup, self.dropoff_location, VehicleType.SEDAN
        )
        return self.estimated_fare

    def request_ride(self) -> Generator[simpy.Event, Any, RideRequest | None]:
        """SimPy process body; run with ``env.process(session.request_ride())``."""
        if not self.can_request_ride:
            self.error_message = "Please select a destination first"
            return None

        self.is_loading = True
        self.error_message = None
        pickup = self._location.current_location
        dropoff = self.dropoff_location or pickup

        try:
            matching = self._booking.request_ride(
                pickup,
                self.pickup_address,
                dropoff,
                self.dropoff_address,
                self.estimated_fare,
            )
            ride: RideRequest = yield matching
        except BookingError as e:
            logger.info("Ride request failed: %s", e.message)
            self.error_message = e.message
            self.booking_state = RideState.IDLE
            return None
        finally:
            self.is_loading = False

        # current_ride and booking_state follow the feed; a superseded
        # result must not overwrite them
        return ride

    def cancel_ride(self) -> Generator[simpy.Event, Any, None]:
        """SimPy process body; waits for the service to clear the ride."""
        if not self.can_cancel_ride:
            return

        self.is_loading = True
        clearing = self._booking.cancel_ride()
        if clearing is not None:
            yield clearing

        # The clear arrives through the feed; a newer ride made during the
        # grace delay is left in place
        self.error_message = None
        self.is_loading = False

    def reset(self) -> None:
        self.booking_state = RideState.IDLE
        self.current_ride = None
        self.error_message = None
        self.is_loading = False
        if LANDMARKS:
            self.update_destination(LANDMARKS[0])

    def close(self) -> None:
        self._subscription.cancel()

    def _on_ride_changed(self, ride: RideRequest | None) -> None:
        self.current_ride = ride
        self.booking_state = ride.state if ride is not None else RideState.IDLE
