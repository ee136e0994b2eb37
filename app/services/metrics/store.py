"""MetricsStore - In-memory TVL time series for a single protocol.

The store owns the bounded history buffer and the ``latest`` pointer. It is
constructed explicitly at startup and handed to the scheduler, the GraphQL
gateway and the websocket endpoint; nothing reaches it as module state.
"""

import random
import threading
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Deque, List, Optional, Tuple

from app.core.logging_config import get_logger
from .generator import TvlGenerator

logger = get_logger(__name__)

DEFAULT_PROTOCOL_ID = "llamaflow"
DEFAULT_CAPACITY = 1000
DEFAULT_SEED_POINTS = 25
DEFAULT_WINDOW_HOURS = 24


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_millis(ts: datetime) -> datetime:
    """Truncate a datetime to millisecond resolution."""
    return ts.replace(microsecond=(ts.microsecond // 1000) * 1000)


def format_timestamp(ts: datetime) -> str:
    """ISO-8601 in UTC with milliseconds and a ``Z`` suffix."""
    return ts.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.") + f"{ts.microsecond // 1000:03d}Z"


@dataclass(frozen=True)
class MetricSample:
    """One point of the TVL time series."""
    protocol_id: str
    tvl: float
    volume_24h: float
    fees_24h: float
    timestamp: datetime


class MetricsStore:
    """Bounded, single-writer TVL history with a latest pointer.

    Writes (``seed``/``mutate``) and read snapshots run under one lock, so a
    reader sees the buffer either before or after a mutation, never halfway
    through append + evict + update-latest.

    Args:
        protocol_id: The only protocol identifier reads will answer for.
        capacity: Maximum number of retained records (FIFO eviction).
        seed_points: Number of hourly records synthesized by ``seed()``.
        rng: Random source; pass a seeded ``random.Random`` for determinism.
        clock: Zero-arg callable returning the current aware UTC datetime.
        generator: Series formulas.
    """

    def __init__(
        self,
        protocol_id: str = DEFAULT_PROTOCOL_ID,
        capacity: int = DEFAULT_CAPACITY,
        seed_points: int = DEFAULT_SEED_POINTS,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
        generator: Optional[TvlGenerator] = None,
    ):
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        if seed_points < 0:
            raise ValueError(f"seed_points must be non-negative, got {seed_points}")

        self._protocol_id = protocol_id
        self._capacity = capacity
        self._seed_points = seed_points
        self._rng = rng if rng is not None else random.Random()
        self._clock = clock or utc_now
        self._generator = generator or TvlGenerator()

        self._history: Deque[MetricSample] = deque(maxlen=capacity)
        self._latest: Optional[MetricSample] = None
        self._lock = threading.Lock()

    @property
    def protocol_id(self) -> str:
        return self._protocol_id

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        with self._lock:
            return len(self._history)

    def records(self) -> Tuple[MetricSample, ...]:
        """Copy of the full buffer, oldest first."""
        with self._lock:
            return tuple(self._history)

    def _now(self) -> datetime:
        return to_millis(self._clock())

    def _append(self, sample: MetricSample) -> None:
        # Caller holds the lock. deque(maxlen) evicts the oldest entry.
        self._history.append(sample)
        self._latest = sample
        assert len(self._history) <= self._capacity
        assert self._history[-1] is self._latest

    def seed(self) -> int:
        """Backfill hourly records ending now. No-op once data exists.

        Returns:
            Number of records inserted.
        """
        with self._lock:
            if self._history:
                return 0

            now = self._now()
            for hours_ago in range(self._seed_points - 1, -1, -1):
                tvl, volume, fees = self._generator.seed_values(hours_ago, self._rng)
                self._append(MetricSample(
                    protocol_id=self._protocol_id,
                    tvl=tvl,
                    volume_24h=volume,
                    fees_24h=fees,
                    timestamp=now - timedelta(hours=hours_ago),
                ))
            inserted = len(self._history)

        logger.info(f"Seeded {inserted} records for protocol '{self._protocol_id}'")
        return inserted

    def mutate(self) -> MetricSample:
        """Append one random-walk record and return it."""
        with self._lock:
            previous = self._latest
            tvl, volume, fees = self._generator.next_values(
                previous.tvl if previous is not None else None, self._rng
            )
            timestamp = self._now()
            if previous is not None and timestamp < previous.timestamp:
                timestamp = previous.timestamp

            sample = MetricSample(
                protocol_id=self._protocol_id,
                tvl=tvl,
                volume_24h=volume,
                fees_24h=fees,
                timestamp=timestamp,
            )
            self._append(sample)
            return sample

    def read_latest(self, protocol_id: str) -> Optional[MetricSample]:
        if protocol_id != self._protocol_id:
            return None
        with self._lock:
            return self._latest

    def read_history(self, protocol_id: str, hours: float = DEFAULT_WINDOW_HOURS) -> List[MetricSample]:
        """Records no older than ``hours`` hours, oldest first.

        A window reaching past the representable date range is unbounded:
        every record for a positive ``hours``, none for a negative one.
        """
        if protocol_id != self._protocol_id:
            return []
        try:
            cutoff = self._now() - timedelta(hours=hours)
        except OverflowError:
            if hours < 0:
                return []
            return list(self.records())
        with self._lock:
            return [sample for sample in self._history if sample.timestamp >= cutoff]
