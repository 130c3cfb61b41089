from decimal import Decimal
from typing import TYPE_CHECKING, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ridehail.geo.coordinate import Coordinate

if TYPE_CHECKING:
    from ridehail.driver import VehicleType


class SimulationSettings(BaseSettings):
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["text", "json"] = "text"
    seed: int | None = Field(
        default=None,
        description="Seed for the shared random generator; unset means nondeterministic",
    )
    realtime_factor: float = Field(
        default=1.0,
        gt=0.0,
        le=60.0,
        description="Wall-clock seconds per simulated second when running in real time",
    )

    model_config = SettingsConfigDict(env_prefix="SIM_")


class FleetSettings(BaseSettings):
    """Driver movement and initial fleet generation."""

    tick_interval_seconds: float = Field(default=1.5, gt=0.0, le=60.0)
    driver_speed_mps: float = Field(
        default=15.0,
        gt=0.0,
        le=60.0,
        description="Cruising speed of available drivers, also used for pickup ETA",
    )
    spawn_radius_m: float = Field(
        default=3000.0,
        gt=0.0,
        le=50_000.0,
        description="Spawn radius and soft confinement radius around the center",
    )
    direction_change_probability: float = Field(default=0.1, ge=0.0, le=1.0)
    max_heading_change_deg: float = Field(default=45.0, ge=0.0, le=180.0)
    driver_count: int = Field(default=8, ge=0, le=1000)
    busy_probability: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Probability that a spawned driver starts busy",
    )
    center_latitude: float = Field(default=51.4816, ge=-90.0, le=90.0)
    center_longitude: float = Field(default=-3.1791, ge=-180.0, le=180.0)

    model_config = SettingsConfigDict(env_prefix="FLEET_")

    @property
    def center(self) -> Coordinate:
        return Coordinate(self.center_latitude, self.center_longitude)


class BookingSettings(BaseSettings):
    """Timing of the ride matching protocol."""

    search_window_seconds: float = Field(default=3.0, ge=0.0, le=300.0)
    assignment_delay_seconds: float = Field(default=2.0, ge=0.0, le=300.0)
    cancellation_grace_seconds: float = Field(
        default=0.5,
        ge=0.0,
        le=60.0,
        description="Delay before a cancelled ride is cleared from the ride feed",
    )
    dropoff_estimate_radius_m: float = Field(
        default=5000.0,
        gt=0.0,
        description="Radius used to pick a dropoff point when quoting a landmark destination",
    )

    model_config = SettingsConfigDict(env_prefix="BOOKING_")


class FareSettings(BaseSettings):
    """Fare constants. Decimal throughout so quoted prices are exact."""

    base_fare: Decimal = Field(default=Decimal("2.50"), ge=0)
    per_km_rate: Decimal = Field(default=Decimal("1.20"), ge=0)
    minimum_fare: Decimal = Field(default=Decimal("5.00"), ge=0)
    sedan_multiplier: Decimal = Field(default=Decimal("1.0"), gt=0)
    suv_multiplier: Decimal = Field(default=Decimal("1.3"), gt=0)
    luxury_multiplier: Decimal = Field(default=Decimal("1.8"), gt=0)
    electric_multiplier: Decimal = Field(default=Decimal("1.1"), gt=0)

    model_config = SettingsConfigDict(env_prefix="FARE_")

    def multiplier_for(self, vehicle_type: "VehicleType") -> Decimal:
        multiplier: Decimal = getattr(self, f"{vehicle_type.value}_multiplier")
        return multiplier


class Settings(BaseSettings):
    simulation: SimulationSettings = Field(default_factory=SimulationSettings)
    fleet: FleetSettings = Field(default_factory=FleetSettings)
    booking: BookingSettings = Field(default_factory=BookingSettings)
    fare: FareSettings = Field(default_factory=FareSettings)

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        case_sensitive=False,
    )


def get_settings() -> Settings:
    """Load and validate settings from environment variables."""
    return Settings()
