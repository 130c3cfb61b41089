"""Ride request state machine and model."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field

from ridehail.core.exceptions import InvalidTransitionError
from ridehail.driver import Driver
from ridehail.geo.coordinate import Coordinate


class RideState(str, Enum):
    """Ride lifecycle states."""

    IDLE = "idle"
    SEARCHING = "searching"
    ASSIGNED = "assigned"
    DRIVER_EN_ROUTE = "driver_en_route"
    ARRIVED = "arrived"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def display_text(self) -> str:
        return _DISPLAY_TEXT[self]

    @property
    def can_cancel(self) -> bool:
        return self in {RideState.SEARCHING, RideState.ASSIGNED, RideState.DRIVER_EN_ROUTE}

    @property
    def is_active(self) -> bool:
        return self in ACTIVE_STATES


_DISPLAY_TEXT: dict[RideState, str] = {
    RideState.IDLE: "Ready to book",
    RideState.SEARCHING: "Searching for drivers...",
    RideState.ASSIGNED: "Driver assigned",
    RideState.DRIVER_EN_ROUTE: "Driver en route",
    RideState.ARRIVED: "Driver arrived",
    RideState.IN_PROGRESS: "Ride in progress",
    RideState.COMPLETED: "Ride completed",
    RideState.CANCELLED: "Ride cancelled",
}

ACTIVE_STATES = frozenset(
    {
        RideState.SEARCHING,
        RideState.ASSIGNED,
        RideState.DRIVER_EN_ROUTE,
        RideState.ARRIVED,
        RideState.IN_PROGRESS,
    }
)

TERMINAL_STATES = frozenset({RideState.COMPLETED, RideState.CANCELLED})

VALID_TRANSITIONS: dict[RideState, set[RideState]] = {
    RideState.IDLE: {RideState.SEARCHING},
    RideState.SEARCHING: {RideState.ASSIGNED, RideState.CANCELLED},
    RideState.ASSIGNED: {RideState.DRIVER_EN_ROUTE, RideState.CANCELLED},
    RideState.DRIVER_EN_ROUTE: {RideState.ARRIVED, RideState.CANCELLED},
    RideState.ARRIVED: {RideState.IN_PROGRESS, RideState.CANCELLED},
    RideState.IN_PROGRESS: {RideState.COMPLETED, RideState.CANCELLED},
    RideState.COMPLETED: set(),
    RideState.CANCELLED: set(),
}


class RideRequest(BaseModel):
    """A rider's request and its progress through the lifecycle."""

    ride_id: str = Field(default_factory=lambda: str(uuid4()))
    pickup_location: Coordinate
    pickup_address: str
    dropoff_location: Coordinate
    dropoff_address: str
    state: RideState = Field(default=RideState.SEARCHING)
    estimated_fare: Decimal
    assigned_driver: Driver | None = None
    requested_at: datetime
    accepted_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def duration_seconds(self) -> float | None:
        if self.completed_at is None:
            return None
        return (self.completed_at - self.requested_at).total_seconds()

    def transition_to(self, new_state: RideState) -> None:
        """Transition to a new state with validation."""
        if self.state in TERMINAL_STATES:
            raise InvalidTransitionError(
                f"Cannot transition from terminal state {self.state.value}",
                details={"ride_id": self.ride_id, "target": new_state.value},
            )

        if new_state not in VALID_TRANSITIONS[self.state]:
            raise InvalidTransitionError(
                f"Invalid transition from {self.state.value} to {new_state.value}",
                details={"ride_id": self.ride_id, "target": new_state.value},
            )

        self.state = new_state
