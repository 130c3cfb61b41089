from ridehail.fleet.simulator import FleetSimulator
from ridehail.fleet.spawn import DRIVER_NAMES, LANDMARKS, generate_driver, generate_fleet

__all__ = [
    "DRIVER_NAMES",
    "LANDMARKS",
    "FleetSimulator",
    "generate_driver",
    "generate_fleet",
]
