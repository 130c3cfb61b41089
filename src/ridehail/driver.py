"""Driver model and its status/vehicle enumerations."""

from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field

from ridehail.geo.coordinate import Coordinate


class DriverStatus(str, Enum):
    AVAILABLE = "available"
    BUSY = "busy"
    OFFLINE = "offline"

    @property
    def display_text(self) -> str:
        return self.value.capitalize()


class VehicleType(str, Enum):
    """Vehicle categories; each has a fare multiplier in FareSettings."""

    SEDAN = "sedan"
    SUV = "suv"
    LUXURY = "luxury"
    ELECTRIC = "electric"

    @property
    def display_name(self) -> str:
        if self is VehicleType.SUV:
            return "SUV"
        return self.value.capitalize()


class Driver(BaseModel):
    """A fleet driver.

    Records are owned by the FleetSimulator. Everything handed out to other
    components (snapshots, nearest-driver results, ride assignments) is a
    copy, so holding one never observes later fleet movement.
    """

    driver_id: str = Field(default_factory=lambda: str(uuid4()))
    location: Coordinate
    status: DriverStatus = DriverStatus.AVAILABLE
    name: str
    vehicle_type: VehicleType = VehicleType.SEDAN
    rating: float = Field(default=4.5, ge=0.0, le=5.0)
    # Seconds until pickup; only set on copies attached to a ride
    eta_seconds: float | None = None

    @property
    def is_available(self) -> bool:
        return self.status == DriverStatus.AVAILABLE
