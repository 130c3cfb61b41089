"""Ride-hailing marketplace simulation: fleet movement, booking and fares."""

__version__ = "0.1.0"
