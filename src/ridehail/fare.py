from decimal import ROUND_HALF_UP, Decimal

from pydantic import BaseModel, Field

from ridehail.core.exceptions import InvalidLocationError
from ridehail.driver import VehicleType
from ridehail.geo.coordinate import Coordinate, is_valid_coordinate
from ridehail.geo.distance import distance_m
from ridehail.settings import FareSettings

CENTS = Decimal("0.01")
_METERS_PER_KM = Decimal(1000)


class FareBreakdown(BaseModel):
    """Detailed breakdown of fare components."""

    distance_km: Decimal = Field(ge=0)
    base_fare: Decimal = Field(ge=0)
    distance_charge: Decimal = Field(ge=0)
    vehicle_multiplier: Decimal = Field(gt=0)
    subtotal: Decimal = Field(ge=0)
    minimum_applied: bool
    total_fare: Decimal = Field(ge=0)


class FareCalculator:
    """Calculates ride fares from straight-line trip distance and vehicle type."""

    def __init__(self, settings: FareSettings | None = None) -> None:
        self.settings = settings or FareSettings()

    def calculate_distance_m(self, pickup: Coordinate, dropoff: Coordinate) -> float:
        return distance_m(pickup, dropoff)

    def calculate(
        self, pickup: Coordinate, dropoff: Coordinate, vehicle_type: VehicleType
    ) -> FareBreakdown:
        """
        Calculate fare for a trip.

        fare = (base + km * per_km) * vehicle multiplier, floored at the
        minimum fare and rounded half-up to cents. The float distance enters
        Decimal through its shortest repr so the result is reproducible.
        """
        if not (is_valid_coordinate(pickup) and is_valid_coordinate(dropoff)):
            raise InvalidLocationError(
                details={"pickup": tuple(pickup), "dropoff": tuple(dropoff)}
            )

        settings = self.settings
        distance_km = Decimal(repr(self.calculate_distance_m(pickup, dropoff))) / _METERS_PER_KM
        distance_charge = distance_km * settings.per_km_rate
        multiplier = settings.multiplier_for(vehicle_type)

        subtotal = (settings.base_fare + distance_charge) * multiplier
        minimum_applied = subtotal < settings.minimum_fare
        total = settings.minimum_fare if minimum_applied else subtotal

        return FareBreakdown(
            distance_km=distance_km,
            base_fare=settings.base_fare,
            distance_charge=distance_charge,
            vehicle_multiplier=multiplier,
            subtotal=subtotal,
            minimum_applied=minimum_applied,
            total_fare=total.quantize(CENTS, rounding=ROUND_HALF_UP),
        )

    def price(self, pickup: Coordinate, dropoff: Coordinate, vehicle_type: VehicleType) -> Decimal:
        """Final fare in currency units with exactly two decimal places."""
        return self.calculate(pickup, dropoff, vehicle_type).total_fare
