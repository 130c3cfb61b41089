"""Standardized exception hierarchy for the ride-hailing engine."""

from typing import Any


class SimulationError(Exception):
    """Base exception for all simulation errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class TransientError(SimulationError):
    """Errors that may succeed on retry."""

    pass


class PermanentError(SimulationError):
    """Errors that will not succeed on retry."""

    pass


class ValidationError(PermanentError):
    """Invalid input or data format."""

    pass


class StateError(PermanentError):
    """Invalid state transition."""

    pass


class InvalidTransitionError(StateError):
    """Ride lifecycle transition not allowed from the current state."""

    pass


class BookingError(SimulationError):
    """Base for errors surfaced by the booking orchestrator.

    All booking errors are recoverable: the caller may fix its input,
    cancel the current ride, or simply retry with a new request.
    """

    default_message = "Booking failed"

    def __init__(self, message: str | None = None, details: dict[str, Any] | None = None):
        super().__init__(message or self.default_message, details)


class InvalidLocationError(BookingError, ValidationError):
    """Pickup or dropoff coordinate is out of range."""

    default_message = "Invalid pickup or dropoff location"


class BookingInProgressError(BookingError, StateError):
    """A ride is already active for this rider."""

    default_message = "A ride is already in progress"


class NoDriversAvailableError(BookingError, TransientError):
    """No available driver was found when the search window closed."""

    default_message = "No drivers are currently available in your area"
