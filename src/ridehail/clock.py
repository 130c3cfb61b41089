"""Simulated wall clock on top of a SimPy environment."""

from datetime import UTC, datetime, timedelta

import simpy


class SimClock:
    """Converts SimPy ``env.now`` seconds to timestamps."""

    def __init__(self, env: simpy.Environment, start_time: datetime | None = None):
        self._env = env
        self._start_time = (start_time or datetime.now(UTC)).astimezone(UTC)

    @property
    def start_time(self) -> datetime:
        return self._start_time

    def now(self) -> datetime:
        """Current simulated time; sub-second precision is kept."""
        return self.to_datetime(self._env.now)

    def to_datetime(self, simulated_seconds: float) -> datetime:
        return self._start_time + timedelta(seconds=simulated_seconds)

    def to_seconds(self, dt: datetime) -> float:
        return (dt.astimezone(UTC) - self._start_time).total_seconds()

    def format_timestamp(self, dt: datetime | None = None) -> str:
        """Format datetime as ISO 8601 UTC string."""
        if dt is None:
            dt = self.now()
        return dt.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
