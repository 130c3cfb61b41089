"""
Ride-hailing simulation - demo entry point

Spawns a fleet around the configured center, books one ride for a landmark
destination and drives it through the full lifecycle while the fleet keeps
moving. Runs in simulated time by default, or paced to the wall clock with
``--realtime``.
"""

import argparse
import logging
import random
import sys
from collections.abc import Generator
from typing import Any

import simpy

from ridehail.booking import BookingService, BookingSession
from ridehail.clock import SimClock
from ridehail.driver import Driver
from ridehail.fare import FareCalculator
from ridehail.fleet import LANDMARKS, FleetSimulator
from ridehail.geo.distance import distance_m
from ridehail.location import StaticLocationProvider
from ridehail.ride import RideRequest, RideState
from ridehail.settings import Settings, get_settings
from ridehail.sim_logging import setup_logging

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a ride-hailing booking demo")
    parser.add_argument("--realtime", action="store_true", help="Pace the simulation to the wall clock")
    parser.add_argument("--seed", type=int, default=None, help="Random seed (overrides SIM_SEED)")
    parser.add_argument(
        "--duration",
        type=float,
        default=600.0,
        help="Simulated seconds to run before stopping (default: 600)",
    )
    parser.add_argument(
        "--destination",
        choices=LANDMARKS,
        default=LANDMARKS[0],
        help="Landmark to book a ride to",
    )
    return parser.parse_args(argv)


def create_environment(settings: Settings, realtime: bool) -> simpy.Environment:
    if realtime:
        return simpy.RealtimeEnvironment(
            factor=settings.simulation.realtime_factor, strict=False
        )
    return simpy.Environment()


def ride_lifecycle(
    env: simpy.Environment,
    session: BookingSession,
    booking: BookingService,
    speed_mps: float,
) -> Generator[simpy.Event, Any, None]:
    ride: RideRequest | None = yield env.process(session.request_ride())
    if ride is None or ride.state != RideState.ASSIGNED:
        logger.warning("No ride booked: %s", session.error_message or "superseded")
        return

    logger.info(
        "%s is on the way, arriving in %s",
        session.assigned_driver_name,
        session.assigned_driver_eta_text,
    )
    booking.advance_ride(RideState.DRIVER_EN_ROUTE)
    yield env.timeout(ride.assigned_driver.eta_seconds or 0.0)
    booking.advance_ride(RideState.ARRIVED)
    booking.advance_ride(RideState.IN_PROGRESS)

    trip_seconds = distance_m(ride.pickup_location, ride.dropoff_location) / speed_mps
    yield env.timeout(trip_seconds)
    completed = booking.advance_ride(RideState.COMPLETED)
    logger.info(
        "Ride completed in %.0fs for %s",
        completed.duration_seconds or 0.0,
        completed.estimated_fare,
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point - wires the engine and runs the demo."""
    args = parse_args(argv)
    settings = get_settings()

    setup_logging(
        level=settings.simulation.log_level,
        json_output=settings.simulation.log_format == "json",
    )

    seed = args.seed if args.seed is not None else settings.simulation.seed
    rng = random.Random(seed)
    env = create_environment(settings, args.realtime)
    clock = SimClock(env)

    fleet = FleetSimulator(env, settings.fleet, rng=rng)
    booking = BookingService(env, fleet, settings.booking, clock=clock)
    location = StaticLocationProvider(settings.fleet.center)
    session = BookingSession(
        env,
        booking,
        FareCalculator(settings.fare),
        location,
        settings.booking,
        rng=rng,
    )
    session.update_destination(args.destination)

    def log_fleet(drivers: list[Driver]) -> None:
        available = sum(1 for driver in drivers if driver.is_available)
        logger.debug("Fleet update: %d/%d drivers available", available, len(drivers))

    def log_ride(ride: RideRequest | None) -> None:
        if ride is not None:
            logger.info("Ride %s: %s", ride.ride_id, ride.state.display_text)

    fleet.changes.subscribe(log_fleet)
    booking.changes.subscribe(log_ride)

    location.start_updating()
    fleet.start()
    logger.info(
        "Quoted %s to %s (seed=%s, realtime=%s)",
        session.estimated_fare,
        session.dropoff_address,
        seed,
        args.realtime,
    )

    demo = env.process(ride_lifecycle(env, session, booking, settings.fleet.driver_speed_mps))
    try:
        env.run(until=env.any_of([demo, env.timeout(args.duration)]))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    finally:
        fleet.stop()
        location.stop_updating()
        session.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
