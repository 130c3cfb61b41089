"""In-process change feeds with replay-latest semantics.

A ``ChangeFeed`` caches the last published value and fans every new value
out to its subscribers. New subscribers receive the cached value
immediately, so a consumer never has to wait for the next change to learn
the current state.

Callback subscribers run synchronously inside ``publish``. Consumers that
poll instead use a ``FeedReader``, a bounded buffer that drops the oldest
entries when the consumer falls behind, so a slow reader never stalls the
publisher.
"""

import logging
from collections import deque
from collections.abc import Callable
from itertools import count
from typing import Generic, TypeVar

from ridehail.pubsub.channels import ALL_CHANNELS

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Subscription:
    """Handle returned by ``ChangeFeed.subscribe``; cancel to stop delivery."""

    def __init__(self, feed: "ChangeFeed", token: int) -> None:
        self._feed = feed
        self._token = token

    @property
    def active(self) -> bool:
        return self._feed._has_subscriber(self._token)

    def cancel(self) -> None:
        self._feed._unsubscribe(self._token)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.cancel()


class FeedReader(Generic[T]):
    """Drop-oldest buffer of feed values for polling consumers."""

    def __init__(self, maxlen: int) -> None:
        self._buffer: deque[T] = deque(maxlen=maxlen)
        self.dropped = 0
        self.subscription: Subscription | None = None

    def _push(self, value: T) -> None:
        if self._buffer.maxlen is not None and len(self._buffer) == self._buffer.maxlen:
            self.dropped += 1
        self._buffer.append(value)

    def __len__(self) -> int:
        return len(self._buffer)

    def drain(self) -> list[T]:
        """Return and remove every buffered value, oldest first."""
        values = list(self._buffer)
        self._buffer.clear()
        return values

    def latest(self) -> T | None:
        """Most recent buffered value without consuming it."""
        return self._buffer[-1] if self._buffer else None

    def close(self) -> None:
        if self.subscription is not None:
            self.subscription.cancel()


class ChangeFeed(Generic[T]):
    """Last-value cache plus fan-out list of subscriber callbacks."""

    def __init__(self, channel: str, initial: T) -> None:
        if channel not in ALL_CHANNELS:
            raise ValueError(
                f"Channel '{channel}' is not a valid channel. Valid channels: {ALL_CHANNELS}"
            )
        self.channel = channel
        self._value = initial
        self._subscribers: dict[int, Callable[[T], None]] = {}
        self._tokens = count()
        self._publish_count = 0
        self._pending: deque[T] = deque()
        self._delivering = False

    @property
    def value(self) -> T:
        return self._value

    @property
    def publish_count(self) -> int:
        return self._publish_count

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self, value: T) -> None:
        """Cache ``value`` and deliver it to every subscriber.

        A publish made from inside a callback is queued and delivered after
        the running fan-out, so every subscriber sees values in publish order
        and ends on the cached value.
        """
        self._value = value
        self._publish_count += 1
        self._pending.append(value)
        if self._delivering:
            return

        self._delivering = True
        try:
            while self._pending:
                pending = self._pending.popleft()
                # Copy so callbacks may subscribe or cancel while being notified
                for token, callback in list(self._subscribers.items()):
                    if token in self._subscribers:
                        self._deliver(callback, pending)
        finally:
            self._delivering = False

    def subscribe(self, callback: Callable[[T], None]) -> Subscription:
        """Register ``callback`` and replay the current value to it."""
        token = next(self._tokens)
        self._subscribers[token] = callback
        self._deliver(callback, self._value)
        return Subscription(self, token)

    def reader(self, maxlen: int = 64) -> FeedReader[T]:
        """Subscribe a bounded drop-oldest buffer, primed with the current value."""
        if maxlen < 1:
            raise ValueError("Reader buffer must hold at least one value")
        reader: FeedReader[T] = FeedReader(maxlen)
        reader.subscription = self.subscribe(reader._push)
        return reader

    def _deliver(self, callback: Callable[[T], None], value: T) -> None:
        try:
            callback(value)
        except Exception:
            logger.exception("Subscriber on channel %s failed", self.channel)

    def _unsubscribe(self, token: int) -> None:
        self._subscribers.pop(token, None)

    def _has_subscriber(self, token: int) -> bool:
        return token in self._subscribers
