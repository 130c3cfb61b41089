import random
from datetime import UTC, datetime

import pytest
import simpy

from ridehail.booking import BookingService
from ridehail.clock import SimClock
from ridehail.driver import Driver, DriverStatus, VehicleType
from ridehail.fleet import FleetSimulator
from ridehail.geo.coordinate import Coordinate
from ridehail.settings import BookingSettings, FleetSettings

CARDIFF = Coordinate(51.4816, -3.1791)
SIMULATION_START = datetime(2025, 3, 1, 9, 0, 0, tzinfo=UTC)


@pytest.fixture
def env() -> simpy.Environment:
    return simpy.Environment()


@pytest.fixture
def rng() -> random.Random:
    """Seeded generator for deterministic fleets."""
    return random.Random(42)


@pytest.fixture
def clock(env) -> SimClock:
    return SimClock(env, SIMULATION_START)


@pytest.fixture
def fleet_settings() -> FleetSettings:
    return FleetSettings()


@pytest.fixture
def booking_settings() -> BookingSettings:
    return BookingSettings()


@pytest.fixture
def make_driver():
    """Factory for drivers at a given offset (in degrees) from the center."""

    def _make(
        driver_id: str,
        dlat: float = 0.0,
        dlon: float = 0.0,
        status: DriverStatus = DriverStatus.AVAILABLE,
        vehicle_type: VehicleType = VehicleType.SEDAN,
    ) -> Driver:
        return Driver(
            driver_id=driver_id,
            location=Coordinate(CARDIFF.latitude + dlat, CARDIFF.longitude + dlon),
            status=status,
            name=f"Driver {driver_id}",
            vehicle_type=vehicle_type,
            rating=4.8,
        )

    return _make


@pytest.fixture
def empty_fleet(env, fleet_settings, rng) -> FleetSimulator:
    return FleetSimulator(env, fleet_settings, rng=rng, drivers=[])


@pytest.fixture
def fleet(env, fleet_settings, rng, make_driver) -> FleetSimulator:
    """Three drivers north of the center: near, far and busy."""
    return FleetSimulator(
        env,
        fleet_settings,
        rng=rng,
        drivers=[
            make_driver("near", dlat=0.005),
            make_driver("far", dlat=0.02),
            make_driver("busy", dlat=0.001, status=DriverStatus.BUSY),
        ],
    )


@pytest.fixture
def booking(env, fleet, booking_settings, clock) -> BookingService:
    return BookingService(env, fleet, booking_settings, clock=clock)
