"""Initial fleet generation and sample data pools."""

import random

from ridehail.driver import Driver, DriverStatus, VehicleType
from ridehail.geo.distance import random_point
from ridehail.settings import FleetSettings

DRIVER_NAMES = [
    "James Wilson",
    "Sarah Thompson",
    "Michael Brown",
    "Emma Davies",
    "David Evans",
    "Sophie Williams",
    "Robert Jones",
    "Emily Taylor",
    "Daniel Smith",
    "Oliver Jackson",
]

LANDMARKS = [
    "Cardiff Central Station",
    "Cardiff Castle",
    "Principality Stadium",
    "Cardiff Bay",
    "St David's Shopping Centre",
    "Cardiff University",
    "Llandaff Cathedral",
    "Cardiff City Hall",
]


def generate_driver(settings: FleetSettings, rng: random.Random) -> Driver:
    """Create one driver somewhere inside the spawn radius.

    Busy with probability ``busy_probability`` so the fleet starts with
    some realistic unavailability.
    """
    status = DriverStatus.BUSY if rng.random() < settings.busy_probability else DriverStatus.AVAILABLE
    return Driver(
        location=random_point(settings.center, settings.spawn_radius_m, rng),
        status=status,
        name=rng.choice(DRIVER_NAMES),
        vehicle_type=rng.choice(list(VehicleType)),
        rating=rng.uniform(4.0, 5.0),
    )


def generate_fleet(settings: FleetSettings, rng: random.Random | None = None) -> list[Driver]:
    rng = rng or random.Random()
    return [generate_driver(settings, rng) for _ in range(settings.driver_count)]
